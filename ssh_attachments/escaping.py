"""
Shell escaping for remote commands.

Every path spliced into a remote command line goes through shell_escape():
identifiers and filenames are partly user supplied.
"""

import re
from typing import Any

# Anything outside this set gets a backslash. Newlines are handled separately
# because backslash-newline is a line continuation in POSIX shells.
_UNSAFE_CHAR = re.compile(r"(?=[^a-zA-Z0-9_./\-\x7f-\U0010ffff\n])")


def shell_escape(value: Any) -> str:
    """
    Escape a value so it is read back verbatim as a single shell word.

    Args:
        value: Value to escape (converted with str())

    Returns:
        Escaped text safe to interpolate into a POSIX shell command

    Example:
        >>> shell_escape("my file.jpg")
        'my\\\\ file.jpg'
        >>> shell_escape("")
        "''"
    """
    text = _UNSAFE_CHAR.sub("\\\\", str(value))
    text = text.replace("\n", "'\n'")
    if not text:
        return "''"
    return text


def shell_command(*words: Any) -> str:
    """Join a command name and its arguments, escaping every argument.

    Example:
        >>> shell_command("mv", "/srv/a b", "/srv/c")
        'mv /srv/a\\\\ b /srv/c'
    """
    program, *args = words
    return " ".join([str(program)] + [shell_escape(arg) for arg in args])
