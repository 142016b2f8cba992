"""
DeServer Client Logging Configuration

Rotating file log plus a quiet console handler, so a host application's
stderr only sees warnings from the sync agent. Every record carries the
player name the agent registered under, which keeps the logs of several
clients on one machine apart.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "deserver_client"

# Transport libraries log each request at INFO; the poll loop makes that constant noise
_CHATTY_LOGGERS = ("httpx", "httpcore")


class IdentityFilter(logging.Filter):
    """Stamps `record.player` with the bound player name."""

    def __init__(self, player: str = "-"):
        super().__init__()
        self.player = player

    def filter(self, record: logging.LogRecord) -> bool:
        record.player = self.player
        return True


_identity = IdentityFilter()


def bind_identity(player_name: str) -> None:
    """Tag subsequent log records with the player this agent runs as."""
    _identity.player = player_name or "-"


def setup_logging(
    log_file: Path | None = None,
    level: str = "INFO",
    log_to_file: bool = True,
) -> logging.Logger:
    """
    Configure logging for the sync agent.

    Args:
        log_file: Path to log file. If None, file logging disabled.
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to write logs to file

    Returns:
        Root logger for deserver_client
    """
    logger = logging.getLogger(ROOT_LOGGER)
    resolved = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(resolved)

    # Handlers are rebuilt on every call
    logger.handlers.clear()

    file_formatter = logging.Formatter(
        "%(asctime)s | %(player)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_formatter = logging.Formatter("[DeServer] %(levelname)s: %(message)s")

    # 10MB per file, keep 3 backups
    if log_to_file and log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        file_handler.addFilter(_identity)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(console_formatter)
    console_handler.addFilter(_identity)
    logger.addHandler(console_handler)

    logger.propagate = False

    transport_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Dotted component name, e.g. "sync.client"

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
