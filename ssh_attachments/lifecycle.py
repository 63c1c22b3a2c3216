"""
Filename lifecycle of an attachment.

States per in-memory record:

    Clean          record.pending_rename_from is None
    RenamePending  record.pending_rename_from holds the full path computed
                   before the filename was reassigned

assign() moves Clean -> RenamePending; apply() always ends in Clean, also
when the remote command fails.
"""

import logging
import re
from typing import Optional

from .escaping import shell_command

logger = logging.getLogger(__name__)

_PATH_PREFIX = re.compile(r"^.*[\\/]")
_UNSAFE_FILENAME_CHAR = re.compile(r"[^A-Za-z0-9.\-_]")
_EXTENSION = re.compile(r"\.\w+$")


def sanitize_filename(value: Optional[str]) -> Optional[str]:
    """
    Reduce a user supplied filename to a safe basename.

    Example:
        >>> sanitize_filename("/home/me/My Photo (1).jpg")
        'My_Photo__1_.jpg'
    """
    if value is None:
        return None

    name = _PATH_PREFIX.sub("", str(value).strip())
    name = _UNSAFE_FILENAME_CHAR.sub("_", name)

    # "." and ".." would address a directory
    if name and not name.strip("."):
        name = name.replace(".", "_")

    return name


def thumbnail_name_for(filename: Optional[str], thumbnail: Optional[str] = None) -> Optional[str]:
    """
    Filename of a thumbnail derived from the original filename.

    Example:
        >>> thumbnail_name_for("cat.jpg", "thumb")
        'cat_thumb.jpg'
    """
    if not thumbnail or filename is None:
        return filename

    match = _EXTENSION.search(filename)
    if match:
        return f"{filename[:match.start()]}_{thumbnail}{match.group()}"
    return f"{filename}_{thumbnail}"


class FilenameLifecycle:
    """
    Keeps the remote file in step with filename changes.

    Args:
        storage: Backend providing full_path() and a transport
    """

    def __init__(self, storage):
        self.storage = storage

    def assign(self, record, value: Optional[str]):
        """
        Reassign a record's filename, remembering where its file lives now.

        The old path is only captured once: a second reassignment before the
        record is saved keeps the path of the file that actually exists.
        """
        if record.filename is not None and record.pending_rename_from is None:
            record.pending_rename_from = self.storage.full_path(record)
        record.write_filename(value)

    def apply(self, record) -> bool:
        """
        Bring the remote file in line with a pending filename change.

        With a new payload pending the old file is removed if present
        (the upload will create the new one); otherwise the file is moved to
        its new path.

        Returns:
            True if a remote command was issued

        Raises:
            AttachmentStorageError: If the remote command failed
        """
        old_path = record.pending_rename_from
        if old_path is None:
            return False

        try:
            new_path = self.storage.full_path(record)
            if old_path == new_path:
                return False

            with self.storage.transport.open() as session:
                if record.save_attachment():
                    session.execute(shell_command("rm", "-f", old_path))
                    logger.info(f"Removed replaced file: {old_path}")
                else:
                    session.execute(shell_command("mv", old_path, new_path))
                    logger.info(f"Renamed {old_path} -> {new_path}")
            return True

        finally:
            record.pending_rename_from = None
