import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    log_filename: str = "benchmark.log",
    max_bytes: int = 5000000,
    backup_count: int = 5,
) -> logging.Logger:
    """Set up the root logger.

    Console output goes to stderr so stdout only carries the report. A
    rotating log file is added when log_dir is given.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    # File handler with log rotation
    if log_dir:
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, log_filename),
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root
