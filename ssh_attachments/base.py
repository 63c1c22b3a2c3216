"""
Attachment storage abstraction.

A record-attachment subsystem picks one storage backend per attachment type.
Every backend answers the same four questions for a record: where does the
file live, under which URL is it served, how is a pending change persisted,
and how is the file removed again.
"""

from abc import ABC, abstractmethod
from typing import Optional


class AttachmentStorage(ABC):
    """Abstract base class for attachment storage backends.

    Example:
        ```python
        storage = SSHAttachmentStorage(load_config("ssh_attachments.yaml"))

        photo = Attachment(id=5, filename="cat.jpg", type_name="photo",
                           temp_path="/tmp/upload-1", storage=storage)
        photo.save()
        photo.public_filename()   # 'http://asset1.example.com/media/photos/0000/0005/cat.jpg'
        ```
    """

    @abstractmethod
    def full_path(self, record, thumbnail: Optional[str] = None) -> str:
        """Get the full storage path of a record's file.

        Args:
            record: Attachment record
            thumbnail: Optional thumbnail name (e.g. "thumb")

        Returns:
            Full path of the file; pure, no I/O
        """
        pass

    @abstractmethod
    def public_url(self, record, thumbnail: Optional[str] = None) -> str:
        """Get the public URL a record's file is served under."""
        pass

    @abstractmethod
    def persist(self, record) -> bool:
        """Persist a pending upload or rename.

        Returns:
            True if the pending change was written

        Raises:
            AttachmentStorageError: If the change could not be written. The
                stored state must then be treated as indeterminate.
        """
        pass

    @abstractmethod
    def destroy_remote(self, record) -> bool:
        """Remove a record's file from storage.

        Returns:
            True if the file was removed
        """
        pass

    @abstractmethod
    def current_data(self, record, thumbnail: Optional[str] = None) -> bytes:
        """Read the stored content of a record's file (or one of its thumbnails)."""
        pass

    def assign_filename(self, record, value: Optional[str]):
        """Store a new filename on the record.

        Backends that need to track renames override this.
        """
        record.write_filename(value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
