"""Logging setup for the command line tools"""
import logging
import sys
from pathlib import Path
from typing import Optional

NOISY_LIBRARIES = ('urllib3', 'requests', 'fuzzywuzzy', 'gspread', 'google.auth')


class ProductionFilter(logging.Filter):
    """Keep the console to warnings about our own work"""

    def filter(self, record):
        if record.levelno <= logging.DEBUG:
            return False

        if record.name.startswith(NOISY_LIBRARIES):
            return record.levelno >= logging.ERROR

        # Per-request client chatter only matters when it fails
        if record.name.startswith('src.sleeper'):
            return record.levelno >= logging.ERROR

        return True


def setup_logging(debug: bool = False, log_file: Optional[Path] = None):
    """
    Configure the root logger

    Args:
        debug: Show everything on the console
        log_file: Also write full DEBUG output to this file
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    if not debug:
        console_handler.addFilter(ProductionFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        root_logger.addHandler(file_handler)

    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
