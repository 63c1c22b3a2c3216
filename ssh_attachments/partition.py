"""
Directory partitioning for attachment identifiers.

Attachments are spread over a fixed-depth directory tree derived from the
record identifier so that no single remote directory grows without bound:

    5                       -> 0000/0005
    "a1b2...(32 hex)"       -> a1b2...(16)/...(16)      (uuid_primary_key)
    "some-slug"             -> sha512 hex in 4 x 32 chars
"""

import hashlib
import numbers
import uuid
from typing import Any, List

SEGMENT_WIDTH = 4
UUID_SEGMENT_WIDTH = 16
HASH_SEGMENT_WIDTH = 32
MISSING_SEGMENT = "-"


def attachment_path_id(record) -> Any:
    """Identifier used for partitioning: parent id, own id, or 0.

    Thumbnails carry their parent's id so they land in the same directory.
    """
    if record.parent_id is not None:
        return record.parent_id
    if record.id is not None:
        return record.id
    return 0


def _chunks(value: str, width: int) -> List[str]:
    return [value[i:i + width] for i in range(0, len(value), width)]


def partition_id(
    identifier: Any,
    partition: bool = True,
    uuid_primary_key: bool = False,
) -> List[str]:
    """
    Partition an identifier into a list of path segments.

    Args:
        identifier: Integer, string or UUID identifier. Only int values are
            zero-padded; digit strings such as "42" are hashed like any string.
        partition: If False, no partitioning is done at all
        uuid_primary_key: Identifier is a 128-bit UUID in hex format

    Returns:
        List of path segments (never containing '/')

    Examples:
        >>> partition_id(5)
        ['0000', '0005']
        >>> partition_id(123456789012)
        ['1234', '5678', '9012']
        >>> partition_id(5, partition=False)
        []
    """
    if not partition:
        return []

    if uuid_primary_key:
        if isinstance(identifier, uuid.UUID):
            path_id = identifier.hex
        else:
            path_id = str(identifier)
        return [
            path_id[:UUID_SEGMENT_WIDTH] or MISSING_SEGMENT,
            path_id[UUID_SEGMENT_WIDTH:] or MISSING_SEGMENT,
        ]

    if isinstance(identifier, numbers.Integral) and not isinstance(identifier, bool):
        return _chunks("%08d" % identifier, SEGMENT_WIDTH)

    digest = hashlib.sha512(str(identifier).encode("utf-8")).hexdigest()
    return _chunks(digest, HASH_SEGMENT_WIDTH)
