"""
Logging configuration for ssh_attachments.

Every module logs through ``logging.getLogger(__name__)``; this helper wires
the ``ssh_attachments`` logger to stderr and, optionally, a file. Remote
commands are logged at DEBUG, completed uploads, renames and deletes at INFO.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "ssh_attachments"

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d %(message)s"


def setup_logging(
    log_file: Optional[Union[str, Path]] = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Route the package's log records to stderr and an optional log file.

    Calling it again replaces (and closes) the handlers of an earlier call.

    Args:
        log_file: Path to log file (if None, only console logging)
        console_level: Logging level for stderr
        file_level: Logging level for the log file

    Returns:
        The ``ssh_attachments`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Handlers filter

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

        logger.debug(f"Logging to file: {log_file}")

    return logger
