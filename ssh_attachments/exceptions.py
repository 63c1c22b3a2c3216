"""Custom exceptions for ssh_attachments."""


class AttachmentStorageError(Exception):
    """Base exception for attachment storage errors."""
    pass


class ConfigurationError(AttachmentStorageError):
    """Exception raised when the remote configuration is missing or malformed."""
    pass


class TransportError(AttachmentStorageError):
    """Exception raised when a session to the remote host cannot be opened."""
    pass


class RemoteCommandError(AttachmentStorageError):
    """Exception raised when a remote command exits with a non-zero status."""

    def __init__(self, command: str, exit_status: int, stderr: str = ""):
        self.command = command
        self.exit_status = exit_status
        self.stderr = stderr
        super().__init__(
            f"Remote command failed: {command}\n"
            f"Return code: {exit_status}\n"
            f"Stderr: {stderr}"
        )
