# file: pollution_client/main.py

import asyncio
import logging
import os
import sys

from pollution_client.config import LOG_LEVEL, load_config
from pollution_client.errors import PollutionClientError
from pollution_client.scheduler import run_polling

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def configure_logging() -> None:
    level = os.getenv(LOG_LEVEL, "INFO").upper()
    if level not in logging.getLevelNamesMapping():
        level = "INFO"
    logging.basicConfig(level = level, format = LOG_FORMAT)


def main() -> None:
    """Load configuration, then poll until the failure budget is spent or a write fails."""
    configure_logging()
    try:
        config = load_config()
        asyncio.run(run_polling(config))
    except PollutionClientError as e:
        logging.critical(f"[{e.error_code}] {e}")
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        logging.info("Interrupted, stopping poller")
        sys.exit(130)


if __name__ == "__main__" :
    main()
