"""
SSH attachment storage - keep record attachments on a remote host.

Provides a storage backend that stores the binary attachments of host
application records on a remote machine over SSH:
- Deterministic partitioned remote paths (partition)
- Shell-safe remote commands (escaping)
- Filename rename tracking between assignment and save (lifecycle)
- Public URLs spread over asset hosts (cycler)

Usage:
    from ssh_attachments import Attachment, SSHAttachmentStorage, load_config

    storage = SSHAttachmentStorage(load_config("ssh_attachments.yaml"))
    photo = Attachment(id=5, filename="cat.jpg", type_name="photo",
                       temp_path="/tmp/upload-1", storage=storage)
    photo.save()
    print(photo.public_filename())
"""

__version__ = "0.1.0"

from .base import AttachmentStorage
from .backend import SSHAttachmentStorage, join_remote_path
from .config import AttachmentOptions, RemoteConfig, load_config
from .cycler import AssetHostCycler, default_cycler
from .escaping import shell_command, shell_escape
from .exceptions import (
    AttachmentStorageError,
    ConfigurationError,
    RemoteCommandError,
    TransportError,
)
from .lifecycle import FilenameLifecycle, sanitize_filename, thumbnail_name_for
from .partition import attachment_path_id, partition_id
from .record import Attachment
from .transport import RemoteSession, RemoteTransport, SSHSession, SSHTransport

__all__ = [
    "AttachmentStorage",
    "SSHAttachmentStorage",
    "join_remote_path",
    "AttachmentOptions",
    "RemoteConfig",
    "load_config",
    "AssetHostCycler",
    "default_cycler",
    "shell_command",
    "shell_escape",
    "AttachmentStorageError",
    "ConfigurationError",
    "RemoteCommandError",
    "TransportError",
    "FilenameLifecycle",
    "sanitize_filename",
    "thumbnail_name_for",
    "attachment_path_id",
    "partition_id",
    "Attachment",
    "RemoteSession",
    "RemoteTransport",
    "SSHSession",
    "SSHTransport",
]
