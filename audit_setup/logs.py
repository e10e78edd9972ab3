"""
Logging setup for audit-setup sessions.

Console output goes through rich; every record is also appended to the log file
(audit_log_setup.log by default) so a session leaves a full trail on disk.

Usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Processing table '%s'...", name)
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_installed: list[logging.Handler] = []


def configure_logging(log_file: str | None = None, log_level: str = "INFO") -> None:
    """
    Configure the root logger. Safe to call more than once; handlers from an earlier call are replaced.

    Args:
        log_file: Path appended to for every record. None disables the file handler.
        log_level: Minimum level for both handlers.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    # stderr so --dry-run output on stdout can be piped to the mysql client
    console_handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console_handler)
    _installed.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(file_handler)
        _installed.append(file_handler)

    # SQL echo only when explicitly debugging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if level <= logging.DEBUG else logging.WARNING)
