"""Configure the application's audit log using the standard library.

Everything logged under the ``storedb`` logger is appended to a plain text
file in a relative log directory. ERROR records are also mirrored to stderr
so problems are visible on the console immediately.
"""

import logging
import os
import sys

LOGGER_NAME = "storedb"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(log_dir: str = "logs", log_file: str = "storedb.log",
                      level: int | str = logging.INFO) -> str:
    """Attach file and stderr handlers to the ``storedb`` logger.

    Args:
        log_dir: Directory where the log file is written. Created if it does
            not exist.
        log_file: Name of the log file inside ``log_dir``.
        level: Minimum level written to the file.

    Returns:
        The path of the log file.
    """
    os.makedirs(log_dir, exist_ok=True)
    path = os.path.join(log_dir, log_file)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    # Drop handlers from a previous configuration
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    console_handler.setLevel(logging.ERROR)
    logger.addHandler(console_handler)

    return path
