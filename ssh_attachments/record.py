"""In-memory handle of a record owning an attachment."""

from pathlib import Path
from typing import Any, Optional, Union

from .lifecycle import sanitize_filename


class Attachment:
    """
    Attachment record as seen by a storage backend.

    The host application maps its own model onto these fields. Assigning
    ``filename`` goes through the bound storage so that renames of an
    already stored file are tracked until the next save().

    Args:
        id: Record identifier (int, str or uuid.UUID), None before insert
        filename: Current filename
        type_name: Logical type name, selects the storage options
        parent_id: Identifier of the parent record (thumbnails)
        thumbnail_type: Logical type of this record's thumbnails
        temp_path: Local file holding a pending payload
        storage: Storage backend the record is persisted with
    """

    def __init__(
        self,
        id: Any = None,
        filename: Optional[str] = None,
        type_name: str = "attachment",
        parent_id: Any = None,
        thumbnail_type: Optional[str] = None,
        temp_path: Optional[Union[str, Path]] = None,
        storage=None,
    ):
        self.id = id
        self.type_name = type_name
        self.parent_id = parent_id
        self.thumbnail_type = thumbnail_type
        self.temp_path = temp_path
        self.storage = storage
        self.pending_rename_from: Optional[str] = None
        self._filename = sanitize_filename(filename)

    @property
    def filename(self) -> Optional[str]:
        return self._filename

    @filename.setter
    def filename(self, value: Optional[str]):
        if self.storage is not None:
            self.storage.assign_filename(self, value)
        else:
            self.write_filename(value)

    def write_filename(self, value: Optional[str]):
        """Store a filename without rename tracking."""
        self._filename = sanitize_filename(value)

    def save_attachment(self) -> bool:
        """True if a new payload is waiting to be stored."""
        return self.temp_path is not None

    def _require_storage(self):
        if self.storage is None:
            raise RuntimeError(f"{self!r} is not bound to a storage backend")
        return self.storage

    def full_filename(self, thumbnail: Optional[str] = None) -> str:
        return self._require_storage().full_path(self, thumbnail)

    def public_filename(self, thumbnail: Optional[str] = None) -> str:
        return self._require_storage().public_url(self, thumbnail)

    def current_data(self, thumbnail: Optional[str] = None) -> bytes:
        return self._require_storage().current_data(self, thumbnail)

    def save(self) -> bool:
        return self._require_storage().persist(self)

    def destroy(self) -> bool:
        return self._require_storage().destroy_remote(self)

    def __repr__(self) -> str:
        return (
            f"Attachment(type_name={self.type_name}, id={self.id!r}, "
            f"filename={self._filename!r})"
        )
