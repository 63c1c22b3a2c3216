"""
Remote shell and file transfer primitives.

Architecture:
    RemoteTransport (ABC) - opens sessions to one host
    └── SSHTransport      - paramiko SSH + SFTP

    RemoteSession (ABC)   - execute / upload / download, closed on exit
    └── SSHSession

The contract is a plain sequence of remote commands. There is no
transaction spanning several commands: if the second of two commands fails,
the effect of the first one stays on the remote host. Callers that need
reconciliation must build it on top of this layer.
"""

import io
import logging
import socket
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

import paramiko

from .exceptions import RemoteCommandError, TransportError

logger = logging.getLogger(__name__)


class RemoteSession(ABC):
    """One open session on the remote host."""

    @abstractmethod
    def execute(self, command: str, check: bool = True) -> str:
        """
        Run a shell command on the remote host.

        Args:
            command: Complete command line (arguments already escaped)
            check: Raise on non-zero exit status

        Returns:
            Standard output of the command

        Raises:
            RemoteCommandError: If check=True and the command failed
        """
        pass

    @abstractmethod
    def upload(self, source: Union[bytes, str, Path], remote_path: str):
        """
        Transfer a payload to the remote host.

        Args:
            source: Payload bytes or path to a local file
            remote_path: Destination path on the remote host
        """
        pass

    @abstractmethod
    def download(self, remote_path: str) -> bytes:
        """Read a remote file and return its content."""
        pass

    @abstractmethod
    def close(self):
        """Release the session."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class RemoteTransport(ABC):
    """Factory of sessions to a single configured host."""

    @abstractmethod
    def open(self) -> RemoteSession:
        """
        Open a new session.

        Raises:
            TransportError: If the host cannot be reached or authentication fails
        """
        pass


class SSHSession(RemoteSession):
    """Session backed by a connected paramiko.SSHClient."""

    def __init__(self, client: "paramiko.SSHClient", target: str):
        self._ssh_client = client
        self._sftp_client = None
        self.target = target

    def _sftp(self):
        if self._sftp_client is None:
            self._sftp_client = self._ssh_client.open_sftp()
        return self._sftp_client

    def execute(self, command: str, check: bool = True) -> str:
        logger.debug(f"[{self.target}] $ {command}")
        _, stdout, stderr = self._ssh_client.exec_command(command)
        output = stdout.read().decode("utf-8", errors="replace")
        errors = stderr.read().decode("utf-8", errors="replace")
        exit_status = stdout.channel.recv_exit_status()

        if check and exit_status != 0:
            raise RemoteCommandError(command, exit_status, errors.strip())

        return output

    def upload(self, source: Union[bytes, str, Path], remote_path: str):
        if isinstance(source, (bytes, bytearray)):
            logger.debug(f"[{self.target}] upload {len(source):,} bytes -> {remote_path}")
            self._sftp().putfo(io.BytesIO(source), remote_path)
        else:
            logger.debug(f"[{self.target}] upload {source} -> {remote_path}")
            self._sftp().put(str(source), remote_path)

    def download(self, remote_path: str) -> bytes:
        buffer = io.BytesIO()
        self._sftp().getfo(remote_path, buffer)
        content = buffer.getvalue()
        logger.debug(f"[{self.target}] downloaded {len(content):,} bytes from {remote_path}")
        return content

    def close(self):
        if self._sftp_client:
            try:
                self._sftp_client.close()
            except Exception as e:
                logger.debug(f"Ignoring error closing SFTP channel: {e}")
            self._sftp_client = None

        if self._ssh_client:
            try:
                self._ssh_client.close()
            except Exception as e:
                logger.debug(f"Ignoring error closing SSH connection: {e}")
            self._ssh_client = None


class SSHTransport(RemoteTransport):
    """
    Open sessions with paramiko.

    Example:
        >>> transport = SSHTransport("media.example.com", "deploy", {"port": 2222})
        >>> with transport.open() as session:
        ...     session.execute("mkdir -p /srv/media/photos")

    Args:
        host: Remote hostname or IP
        user: SSH username
        options: Extra keyword arguments for paramiko.SSHClient.connect()
                 (port, password, key_filename, timeout, ...)
    """

    def __init__(self, host: str, user: str, options: Optional[Dict[str, Any]] = None):
        self.host = host
        self.user = user
        self.options = dict(options or {})

    def _connect_kwargs(self) -> Dict[str, Any]:
        connect_kwargs = {
            'hostname': self.host,
            'username': self.user,
            'look_for_keys': True,  # Try SSH agent and default keys
        }
        connect_kwargs.update(self.options)

        key_filename = connect_kwargs.get('key_filename')
        if isinstance(key_filename, str):
            connect_kwargs['key_filename'] = str(Path(key_filename).expanduser())

        return connect_kwargs

    def open(self) -> SSHSession:
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        try:
            client.connect(**self._connect_kwargs())
        except (paramiko.SSHException, socket.error) as e:
            logger.error(f"Failed to connect to {self.user}@{self.host}: {e}")
            client.close()
            raise TransportError(f"Failed to connect to {self.user}@{self.host}: {e}") from e

        return SSHSession(client, f"{self.user}@{self.host}")

    def __repr__(self) -> str:
        return f"SSHTransport(target={self.user}@{self.host})"
