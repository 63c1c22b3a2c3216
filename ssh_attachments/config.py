"""
Configuration management for SSH attachment storage.

YAML configuration keyed by environment, one section per environment:

    production:
      host: media.example.com
      user: deploy
      directory: /srv/media
      url: http://asset%d.example.com/media
      options:
        port: 22
        key_filename: ~/.ssh/media_rsa
      types:
        photo:
          path_prefix: photos
          chmod: "0640"
          thumbnail_type: photo_thumbnail
"""

import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .exceptions import ConfigurationError

ENVIRONMENT_VARIABLE = "SSH_ATTACHMENTS_ENV"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_CHMOD = "0644"


@dataclass(frozen=True)
class AttachmentOptions:
    """Per-type storage options."""

    path_prefix: str = ""
    partition: bool = True
    uuid_primary_key: bool = False
    chmod: str = DEFAULT_CHMOD
    thumbnail_type: Optional[str] = None

    @classmethod
    def from_dict(cls, type_name: str, data: Optional[Dict[str, Any]]) -> 'AttachmentOptions':
        data = dict(data or {})
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(
                f"Unknown option(s) for type '{type_name}': {', '.join(sorted(unknown))}"
            )
        data.setdefault("path_prefix", type_name)
        # YAML reads an unquoted 0644 as 420 and 644 as 644; neither is recoverable
        if "chmod" in data and not isinstance(data["chmod"], str):
            raise ConfigurationError(
                f"chmod for type '{type_name}' must be a quoted string such as \"0644\", "
                f"got {data['chmod']!r}"
            )
        return cls(**data)


@dataclass(frozen=True)
class RemoteConfig:
    """
    Connection and layout settings shared by every backend of a host.

    ``options`` and ``types`` are read-only mappings once constructed.
    """

    host: str
    user: str
    directory: str
    url: str = ""
    options: Mapping[str, Any] = field(default_factory=dict)
    types: Mapping[str, AttachmentOptions] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))
        object.__setattr__(self, "types", MappingProxyType(dict(self.types)))

    def options_for(self, type_name: str) -> AttachmentOptions:
        """Options for a logical type, defaulting the prefix to the type name."""
        if type_name in self.types:
            return self.types[type_name]
        return AttachmentOptions(path_prefix=type_name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "host": self.host,
            "user": self.user,
            "directory": self.directory,
            "url": self.url,
            "options": dict(self.options),
            "types": {name: asdict(options) for name, options in self.types.items()},
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'RemoteConfig':
        """
        Create from dictionary.

        Raises:
            ConfigurationError: If required keys are missing or malformed
        """
        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Remote configuration must be a mapping, got: {type(config_dict).__name__}"
            )

        missing = [key for key in ("host", "user", "directory") if not config_dict.get(key)]
        if missing:
            raise ConfigurationError(
                f"Remote configuration is missing required key(s): {', '.join(missing)}"
            )

        options = config_dict.get("options") or {}
        if not isinstance(options, dict):
            raise ConfigurationError("'options' must be a mapping of SSH connection options")

        types = config_dict.get("types") or {}
        if not isinstance(types, dict):
            raise ConfigurationError("'types' must be a mapping of type name to options")

        unknown = set(config_dict) - {"host", "user", "directory", "url", "options", "types"}
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration key(s): {', '.join(sorted(unknown))}"
            )

        return cls(
            host=str(config_dict["host"]),
            user=str(config_dict["user"]),
            directory=str(config_dict["directory"]),
            url=str(config_dict.get("url") or ""),
            options=dict(options),
            types={
                str(name): AttachmentOptions.from_dict(str(name), data)
                for name, data in types.items()
            },
        )


def load_config(
    path: Union[str, Path],
    environment: Optional[str] = None,
) -> RemoteConfig:
    """
    Load the remote configuration for one environment from a YAML file.

    ``${VAR}`` references in the file are expanded from the process
    environment before parsing, so credentials can stay out of the file.

    Args:
        path: Path to YAML config file
        environment: Section to load (default: $SSH_ATTACHMENTS_ENV or "development")

    Returns:
        RemoteConfig instance

    Raises:
        ConfigurationError: If the file, the section, or required keys are missing
    """
    path = Path(path).expanduser()
    environment = environment or os.getenv(ENVIRONMENT_VARIABLE, DEFAULT_ENVIRONMENT)

    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        raw = os.path.expandvars(path.read_text(encoding="utf-8"))
        document = yaml.safe_load(raw)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}") from e

    if not isinstance(document, dict) or environment not in document:
        raise ConfigurationError(
            f"No '{environment}' section in config file: {path}"
        )

    return RemoteConfig.from_dict(document[environment])


EXAMPLE_CONFIG_YAML = """# SSH attachment storage configuration
# Save as: ssh_attachments.yaml
# ${VAR} references are expanded from the environment.

development:
  host: localhost
  user: ${USER}
  directory: /tmp/attachments
  url: http://localhost:8000/attachments

production:
  host: media.example.com
  user: deploy
  # Remote root directory; partitioned paths are created below it
  directory: /srv/media
  # %d is replaced with 1-4 to spread requests over asset hosts
  url: http://asset%d.example.com/media
  # Passed to paramiko.SSHClient.connect()
  options:
    port: 22
    key_filename: ~/.ssh/media_rsa
    timeout: 10
  types:
    photo:
      path_prefix: photos
      chmod: "0644"
      thumbnail_type: photo_thumbnail
    photo_thumbnail:
      path_prefix: photos/thumbnails
    document:
      path_prefix: documents
      uuid_primary_key: true
"""


def create_example_config(path: Union[str, Path] = "ssh_attachments.yaml"):
    """
    Create an example configuration file.

    Args:
        path: Where to save the example config (default: ssh_attachments.yaml)
    """
    path = Path(path)
    if path.exists():
        raise FileExistsError(f"Config file already exists: {path}")

    path.write_text(EXAMPLE_CONFIG_YAML, encoding="utf-8")
    return path
