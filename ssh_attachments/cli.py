"""Command-line interface for SSH attachment storage."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from ssh_attachments import __version__
from ssh_attachments.backend import SSHAttachmentStorage
from ssh_attachments.config import load_config
from ssh_attachments.exceptions import AttachmentStorageError
from ssh_attachments.logging_config import setup_logging
from ssh_attachments.record import Attachment

logger = logging.getLogger(__name__)


def parse_identifier(value: Optional[str]) -> Any:
    """Digits-only identifiers are integers, everything else stays a string."""
    if value is not None and value.isdigit():
        return int(value)
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ssh-attachments',
        description='Inspect attachments stored on a remote host over SSH',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Remote path of photo 5
  ssh-attachments --config ssh_attachments.yaml path photo 5 cat.jpg

  # Public URL of its thumbnail
  ssh-attachments --config ssh_attachments.yaml url photo 5 cat.jpg --thumbnail thumb

  # Download the stored file
  ssh-attachments --config ssh_attachments.yaml --env production fetch photo 5 cat.jpg -o cat.jpg
        """
    )

    parser.add_argument('--config', required=True, help='YAML configuration file')
    parser.add_argument('--env', default=None, help='Configuration section (default: $SSH_ATTACHMENTS_ENV or development)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log remote commands')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    parser.add_argument('command', choices=['path', 'url', 'fetch'], help='What to do')
    parser.add_argument('type_name', help='Logical attachment type')
    parser.add_argument('id', help='Record identifier')
    parser.add_argument('filename', help='Stored filename')
    parser.add_argument('--thumbnail', default=None, help='Thumbnail name (e.g. thumb)')
    parser.add_argument('--parent-id', default=None, help='Parent record identifier')
    parser.add_argument('-o', '--output', default=None, help='Output file for fetch (default: stdout)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        storage = SSHAttachmentStorage(load_config(args.config, args.env))
        record = Attachment(
            id=parse_identifier(args.id),
            filename=args.filename,
            type_name=args.type_name,
            parent_id=parse_identifier(args.parent_id),
            storage=storage,
        )

        if args.command == 'path':
            print(storage.full_path(record, args.thumbnail))
        elif args.command == 'url':
            print(storage.public_url(record, args.thumbnail))
        else:
            content = storage.current_data(record, args.thumbnail)
            if args.output:
                Path(args.output).write_bytes(content)
                logger.info(f"Wrote {len(content):,} bytes to {args.output}")
            else:
                sys.stdout.buffer.write(content)

    except AttachmentStorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
