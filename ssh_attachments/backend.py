"""
Attachment storage on a remote host over SSH.

Layout of a stored file:

    <directory>/<path_prefix>/<partitioned id...>/<filename>
    /srv/media/photos/0000/0005/cat.jpg

Every operation that touches the remote host opens its own session and
closes it before returning. Nothing is retried: a raised error means the
remote state is indeterminate and may need manual reconciliation.
"""

import logging
import posixpath
from typing import List, Optional
from urllib.parse import quote

from .base import AttachmentStorage
from .config import AttachmentOptions, RemoteConfig
from .cycler import AssetHostCycler, default_cycler
from .escaping import shell_command, shell_escape
from .lifecycle import FilenameLifecycle, thumbnail_name_for
from .partition import attachment_path_id, partition_id
from .transport import RemoteTransport, SSHTransport

logger = logging.getLogger(__name__)

URL_PLACEHOLDER = "%d"

# Parent and grandparent of the file; matches the two-level integer partitioning
CLEANUP_DEPTH = 2


def join_remote_path(root: str, *parts: Optional[str]) -> str:
    """Join path parts below root, skipping empty parts and doubled separators."""
    segments = [part.strip("/") for part in parts if part and part.strip("/")]
    if not segments:
        return root
    return "/".join([root.rstrip("/")] + segments)


class SSHAttachmentStorage(AttachmentStorage):
    """
    Store attachments on a remote host reachable over SSH.

    Example:
        ```python
        config = load_config("ssh_attachments.yaml", "production")
        storage = SSHAttachmentStorage(config)

        photo = Attachment(id=5, filename="cat.jpg", type_name="photo",
                           temp_path="/tmp/upload-1", storage=storage)
        storage.persist(photo)       # mkdir -p, upload, chmod
        photo.filename = "dog.jpg"
        storage.persist(photo)       # mv .../cat.jpg .../dog.jpg
        storage.destroy_remote(photo)
        ```

    Args:
        config: Remote configuration
        transport: Session factory (default: SSHTransport built from config)
        cycler: Asset host cycler for public URLs (default: process-wide one)
    """

    def __init__(
        self,
        config: RemoteConfig,
        transport: Optional[RemoteTransport] = None,
        cycler: Optional[AssetHostCycler] = None,
    ):
        self.config = config
        self.transport = transport or SSHTransport(config.host, config.user, config.options)
        self.cycler = cycler or default_cycler
        self.lifecycle = FilenameLifecycle(self)

        logger.debug(f"SSHAttachmentStorage initialized: {config.user}@{config.host}:{config.directory}")

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def options_for(self, record) -> AttachmentOptions:
        return self.config.options_for(record.type_name)

    def _prefix_options(self, record, thumbnail: Optional[str]) -> AttachmentOptions:
        if not thumbnail:
            return self.options_for(record)
        thumbnail_type = record.thumbnail_type or self.options_for(record).thumbnail_type
        return self.config.options_for(thumbnail_type or record.type_name)

    def partitioned_id(self, record) -> List[str]:
        options = self.options_for(record)
        return partition_id(
            attachment_path_id(record),
            partition=options.partition,
            uuid_primary_key=options.uuid_primary_key,
        )

    def full_path(self, record, thumbnail: Optional[str] = None) -> str:
        return join_remote_path(
            self.config.directory,
            self._prefix_options(record, thumbnail).path_prefix,
            *self.partitioned_id(record),
            thumbnail_name_for(record.filename, thumbnail),
        )

    def _url_base(self) -> str:
        host_index = self.cycler.next()
        if URL_PLACEHOLDER in self.config.url:
            return self.config.url.replace(URL_PLACEHOLDER, str(host_index), 1)
        return self.config.url

    def public_url(self, record, thumbnail: Optional[str] = None) -> str:
        prefix = self._prefix_options(record, thumbnail).path_prefix
        parts = [self._url_base().rstrip("/")]
        parts.extend(quote(segment, safe="") for segment in prefix.split("/"))
        parts.extend(quote(segment, safe="") for segment in self.partitioned_id(record))
        parts.append(quote(thumbnail_name_for(record.filename, thumbnail) or "", safe=""))
        return "/".join(part for part in parts if part)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def assign_filename(self, record, value: Optional[str]):
        self.lifecycle.assign(record, value)

    def before_update(self, record) -> bool:
        """Hook to run before the record's stored state is updated."""
        return self.lifecycle.apply(record)

    def after_save(self, record) -> bool:
        """Hook to run after the record was saved; uploads a pending payload."""
        try:
            if not record.save_attachment():
                return False
            self._upload(record)
            return True
        finally:
            record.pending_rename_from = None

    def after_destroy(self, record) -> bool:
        """Hook to run after the record was destroyed."""
        return self.destroy_remote(record)

    def persist(self, record) -> bool:
        """
        Write a pending rename and/or payload to the remote host.

        Raises:
            TransportError: If no session could be opened
            RemoteCommandError: If a remote command failed
        """
        self.before_update(record)
        self.after_save(record)
        return True

    def _upload(self, record):
        path = self.full_path(record)
        chmod = self.options_for(record).chmod

        with self.transport.open() as session:
            session.execute(shell_command("mkdir", "-p", posixpath.dirname(path)))
            session.upload(record.temp_path, path)
            session.execute(shell_command("chmod", chmod, path))

        record.temp_path = None
        logger.info(f"Stored {record!r} at {path}")

    def _cleanup_dirs(self, path: str) -> List[str]:
        """Directories above the file that may be removed when empty."""
        root = self.config.directory.rstrip("/") + "/"
        dirs = []
        directory = path
        for _ in range(CLEANUP_DEPTH):
            directory = posixpath.dirname(directory)
            if not directory.startswith(root):
                break
            dirs.append(directory)
        return dirs

    def destroy_remote(self, record) -> bool:
        """
        Delete the file, then its parent and grandparent if they are empty.

        Failing to remove a directory (not empty, already gone) is expected
        and does not fail the operation.
        """
        path = self.full_path(record)

        with self.transport.open() as session:
            session.execute(shell_command("rm", path))
            for directory in self._cleanup_dirs(path):
                session.execute(
                    f"find {shell_escape(directory)} -maxdepth 0 -empty -exec rm -r {{}} \\;",
                    check=False,
                )

        logger.info(f"Deleted {path}")
        return True

    def current_data(self, record, thumbnail: Optional[str] = None) -> bytes:
        with self.transport.open() as session:
            return session.download(self.full_path(record, thumbnail))

    def __repr__(self) -> str:
        return (
            f"SSHAttachmentStorage(target={self.config.user}@{self.config.host}, "
            f"directory={self.config.directory})"
        )
