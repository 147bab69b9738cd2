"""Colored stderr logging for the Time Capsule CLI."""

import logging
import re
import sys

RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
TAG_COLOR = "\033[1;96m"

# Leading component tag such as "[STORE]" or "[CLI]"
TAG_PATTERN = re.compile(r"^\[[A-Z]+\]")


class ColoredFormatter(logging.Formatter):
    """Colors the level name and the leading component tag of each line."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        level = f"{LEVEL_COLORS.get(record.levelno, '')}{record.levelname:<7}{RESET}"
        message = TAG_PATTERN.sub(lambda m: f"{TAG_COLOR}{m.group(0)}{RESET}", record.message)
        return f"{self.formatTime(record, self.datefmt)} {level} {message}"


def setup_colored_logging(verbose: bool = False) -> None:
    """Send log output to stderr, keeping stdout for decrypted content.

    Args:
        verbose: If True, log at DEBUG. Otherwise WARNING.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColoredFormatter(datefmt="%H:%M:%S"))

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
