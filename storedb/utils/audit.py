import logging
import os
from datetime import datetime

from storedb.config import settings

logger = logging.getLogger("storedb.audit")


def write_log(user_id, action, detail, level=logging.INFO):
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    logger.log(level, "[User %s] %s - %s at %s", user_id, action, detail, ts)


def log_exception(message, exc):
    logger.error("%s: %s", message, exc, exc_info=exc)


def read_log_contents(path=None):
    path = path or os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
