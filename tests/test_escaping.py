"""Tests for shell escaping of remote command arguments."""

import shlex
import shutil
import subprocess

import pytest

from ssh_attachments import shell_command, shell_escape

HOSTILE_VALUES = [
    "plain.jpg",
    "/srv/media/photos/0000/0005/cat.jpg",
    "my file.jpg",
    "it's.jpg",
    'say "hi".txt',
    "$(rm -rf /)",
    "`id`",
    "a;b|c&d>e<f",
    "glob*?[x].png",
    "~root",
    "#not-a-comment",
    "back\\slash",
    "tab\there",
    "line\nbreak",
    "\n",
    "trailing\n",
    "\n\nleading",
    "ünïcödé €.pdf",
    "-rf",
    "",
]


class TestShellEscape:
    """Test shell_escape()."""

    def test_safe_path_unchanged(self):
        """Test paths made of safe characters are left alone."""
        assert shell_escape("/srv/media/photos/0000/0005/cat-1_a.jpg") == "/srv/media/photos/0000/0005/cat-1_a.jpg"

    def test_space_is_backslashed(self):
        assert shell_escape("my file.jpg") == "my\\ file.jpg"

    def test_quote_is_backslashed(self):
        assert shell_escape("it's") == "it\\'s"

    def test_newline_is_quoted(self):
        """Test newlines are wrapped in single quotes, not backslashed."""
        assert shell_escape("a\nb") == "a'\n'b"

    def test_empty_string(self):
        """Test empty string renders as an empty quoted word."""
        assert shell_escape("") == "''"

    def test_non_ascii_untouched(self):
        assert shell_escape("ünï") == "ünï"

    def test_non_string_values(self):
        assert shell_escape(5) == "5"

    @pytest.mark.parametrize("value", HOSTILE_VALUES)
    def test_quote_removal_round_trip(self, value):
        """Test POSIX quote removal gives back exactly the original value."""
        assert shlex.split(shell_escape(value)) == [value]

    @pytest.mark.parametrize("value", HOSTILE_VALUES)
    def test_command_sees_single_argument(self, value):
        """Test escaped value stays a single word inside a command line."""
        assert shlex.split(f"rm {shell_escape(value)} /other") == ["rm", value, "/other"]

    @pytest.mark.skipif(shutil.which("sh") is None, reason="needs a POSIX shell")
    @pytest.mark.parametrize("value", HOSTILE_VALUES)
    def test_real_shell_round_trip(self, value):
        """Test a real shell receives the value verbatim."""
        result = subprocess.run(
            ["sh", "-c", f"printf '%s' {shell_escape(value)}"],
            capture_output=True,
        )
        assert result.returncode == 0
        assert result.stdout.decode("utf-8") == value


class TestShellCommand:
    """Test shell_command()."""

    def test_program_not_escaped_arguments_escaped(self):
        assert shell_command("mv", "/a b", "/c") == "mv /a\\ b /c"

    def test_flags_pass_through(self):
        assert shell_command("mkdir", "-p", "/srv/media/x") == "mkdir -p /srv/media/x"
