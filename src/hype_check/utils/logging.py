"""Colored single-line logging shared by the CLI, API and detector.

Everything logs through the one ``hype_check`` logger; its level comes from
``settings.log_level`` and can be overridden at runtime with ``set_level``.
"""

import logging
import sys
from datetime import datetime

GREEN = "\x1b[32m"
RED = "\x1b[31m"
YELLOW = "\x1b[33m"
DIM = "\x1b[2m"
BOLD = "\x1b[1m"
RESET = "\x1b[0m"

ROOT_LOGGER = "hype_check"


class HypeCheckFormatter(logging.Formatter):
    # (color, tag) per level; INFO lines carry no tag
    LEVEL_STYLES = {
        logging.DEBUG: (DIM, "debug"),
        logging.INFO: ("", ""),
        logging.WARNING: (YELLOW, "warn"),
        logging.ERROR: (RED, "error"),
        logging.CRITICAL: (RED + BOLD, "fatal"),
    }

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        color, tag = self.LEVEL_STYLES.get(record.levelno, ("", record.levelname.lower()))
        prefix = f"{color}{tag}{RESET} " if tag else ""
        line = f"{DIM}[{ts}]{RESET} {prefix}{color}{record.getMessage()}{RESET}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def set_level(level: str) -> None:
    logging.getLogger(ROOT_LOGGER).setLevel(_level(level))


def get_logger() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    if not logger.handlers:
        from hype_check.config import settings

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(HypeCheckFormatter())
        logger.addHandler(handler)
        logger.setLevel(_level(settings.log_level))
    return logger
