"""Pytest configuration and fixtures for ssh_attachments tests."""

import posixpath
import shlex
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from ssh_attachments import (
    AssetHostCycler,
    Attachment,
    RemoteCommandError,
    RemoteConfig,
    RemoteSession,
    RemoteTransport,
    SSHAttachmentStorage,
    TransportError,
)

ROOT = "/srv/media"


class FakeRemoteHost:
    """In-memory remote filesystem that understands the commands the backend sends.

    Commands are split with shlex, so every path goes through POSIX quote
    removal exactly as a remote shell would do it.
    """

    def __init__(self, root: str = ROOT):
        self.files: Dict[str, bytes] = {}
        self.dirs = set()
        self.modes: Dict[str, str] = {}
        self.commands: List[str] = []
        self.checked: List[bool] = []
        self.uploads: List[str] = []
        self.fail_on: Dict[str, Tuple[int, str]] = {}
        self.fail_open = False
        self.sessions_opened = 0
        self.sessions_closed = 0
        self.make_dirs(root)

    def make_dirs(self, path: str):
        while path not in ("", "/"):
            self.dirs.add(path)
            path = posixpath.dirname(path)

    def add_file(self, path: str, content: bytes = b"data"):
        self.make_dirs(posixpath.dirname(path))
        self.files[path] = content

    def is_empty(self, directory: str) -> bool:
        prefix = directory + "/"
        return not any(p.startswith(prefix) for p in list(self.files) + list(self.dirs))

    def run(self, command: str, check: bool = True) -> str:
        self.commands.append(command)
        self.checked.append(check)

        program, *args = shlex.split(command)
        if program in self.fail_on:
            status, stderr = self.fail_on[program]
        else:
            status, stderr = getattr(self, f"_{program}")(*args)

        if check and status != 0:
            raise RemoteCommandError(command, status, stderr)
        return ""

    def _mkdir(self, flag, path):
        assert flag == "-p"
        self.make_dirs(path)
        return 0, ""

    def _rm(self, *args):
        path = args[-1]
        if path not in self.files:
            if args[0] == "-f":
                return 0, ""
            return 1, f"rm: cannot remove '{path}': No such file or directory"
        del self.files[path]
        self.modes.pop(path, None)
        return 0, ""

    def _mv(self, source, dest):
        if source not in self.files:
            return 1, f"mv: cannot stat '{source}': No such file or directory"
        if posixpath.dirname(dest) not in self.dirs:
            return 1, f"mv: cannot move '{source}' to '{dest}': No such file or directory"
        self.files[dest] = self.files.pop(source)
        return 0, ""

    def _chmod(self, mode, path):
        if path not in self.files:
            return 1, f"chmod: cannot access '{path}': No such file or directory"
        self.modes[path] = mode
        return 0, ""

    def _find(self, directory, *expression):
        assert list(expression) == ["-maxdepth", "0", "-empty", "-exec", "rm", "-r", "{}", ";"]
        if directory in self.dirs and self.is_empty(directory):
            self.dirs.discard(directory)
        return 0, ""

    def upload(self, source, remote_path: str):
        if posixpath.dirname(remote_path) not in self.dirs:
            raise FileNotFoundError(remote_path)
        if not isinstance(source, (bytes, bytearray)):
            source = Path(source).read_bytes()
        self.uploads.append(remote_path)
        self.files[remote_path] = bytes(source)

    def download(self, remote_path: str) -> bytes:
        if remote_path not in self.files:
            raise FileNotFoundError(remote_path)
        return self.files[remote_path]


class FakeSession(RemoteSession):
    def __init__(self, host: FakeRemoteHost):
        self.host = host

    def execute(self, command: str, check: bool = True) -> str:
        return self.host.run(command, check)

    def upload(self, source, remote_path: str):
        self.host.upload(source, remote_path)

    def download(self, remote_path: str) -> bytes:
        return self.host.download(remote_path)

    def close(self):
        self.host.sessions_closed += 1


class FakeTransport(RemoteTransport):
    def __init__(self, host: FakeRemoteHost):
        self.host = host

    def open(self) -> FakeSession:
        if self.host.fail_open:
            raise TransportError("Failed to connect to deploy@media.example.com: refused")
        self.host.sessions_opened += 1
        return FakeSession(self.host)


@pytest.fixture
def remote() -> FakeRemoteHost:
    """Empty remote host with the storage root in place."""
    return FakeRemoteHost()


@pytest.fixture
def config_dict() -> dict:
    return {
        "host": "media.example.com",
        "user": "deploy",
        "directory": ROOT,
        "url": "http://asset%d.example.com/media",
        "types": {
            "photo": {
                "path_prefix": "photos",
                "thumbnail_type": "photo_thumbnail",
            },
            "photo_thumbnail": {"path_prefix": "photos/thumbnails"},
            "document": {"path_prefix": "documents", "uuid_primary_key": True, "chmod": "0600"},
            "flat": {"path_prefix": "flat", "partition": False},
        },
    }


@pytest.fixture
def config(config_dict) -> RemoteConfig:
    return RemoteConfig.from_dict(config_dict)


@pytest.fixture
def cycler() -> AssetHostCycler:
    return AssetHostCycler()


@pytest.fixture
def storage(config, remote, cycler) -> SSHAttachmentStorage:
    return SSHAttachmentStorage(config, transport=FakeTransport(remote), cycler=cycler)


@pytest.fixture
def payload(tmp_path) -> Path:
    """Local temp file holding an upload."""
    path = tmp_path / "upload.bin"
    path.write_bytes(b"\x89PNG fake image content")
    return path


@pytest.fixture
def make_photo(storage):
    def _make(id=5, filename="cat.jpg", temp_path: Optional[Path] = None, **kwargs):
        return Attachment(
            id=id,
            filename=filename,
            type_name=kwargs.pop("type_name", "photo"),
            temp_path=temp_path,
            storage=storage,
            **kwargs,
        )
    return _make


@pytest.fixture
def stored_photo(make_photo, remote):
    """Photo 5 whose file already exists remotely."""
    photo = make_photo()
    remote.add_file(photo.full_filename(), b"stored")
    return photo
