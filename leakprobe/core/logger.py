"""
Colored console logging shared by every component.
Use set_verbose() for debug output and set_silent() to keep only errors.
"""

import logging
import sys

from colorama import init, Fore, Style

init(autoreset=True)

LOGGER_NAME = "leakprobe"

LEVEL_COLORS = {
    logging.DEBUG: Fore.CYAN,
    logging.INFO: Fore.GREEN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}

LEVEL_TAGS = {
    logging.DEBUG: "[*]",
    logging.INFO: "[+]",
    logging.WARNING: "[!]",
    logging.ERROR: "[-]",
    logging.CRITICAL: "[-]",
}


class ColoredFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno, Fore.WHITE)
        tag = LEVEL_TAGS.get(record.levelno, "[ ]")
        message = super().format(record)
        return f"{color}{tag} {message}{Style.RESET_ALL}"


def _build_logger() -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColoredFormatter("%(message)s"))
        log.addHandler(handler)
    log.setLevel(logging.INFO)
    log.propagate = False
    return log


logger = _build_logger()


def set_verbose(verbose: bool = True):
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def set_silent(silent: bool = True):
    logger.setLevel(logging.ERROR if silent else logging.INFO)
