# storedb/cli.py
import logging
import sys

from dotenv import load_dotenv

from storedb.utils.logging_config import configure_logging
from storedb.utils.workers import WorkerPool

logger = logging.getLogger(__name__)


def main() -> None:
    load_dotenv()

    # Settings are read after .env is loaded
    from storedb.config import settings
    from storedb.utils.audit import log_exception

    # An unwritable log directory, a missing driver or an unreachable
    # database at startup is fatal
    try:
        configure_logging(settings.LOG_DIR, settings.LOG_FILE, settings.LOG_LEVEL)
        logger.info("Application started")
        from storedb import database
        database.init_db()
        from storedb.console import interactive_cli
    except Exception as e:
        log_exception("Startup failed", e)
        print(f"Could not start the store database: {e}", file=sys.stderr)
        sys.exit(1)

    pool = WorkerPool(settings.WORKER_POOL_SIZE)
    try:
        interactive_cli(pool=pool)
    except (KeyboardInterrupt, EOFError):
        print("\nInterrupted by user. Exiting.")
    finally:
        pool.shutdown()
        logger.info("Application stopped")


if __name__ == "__main__":
    main()
