from __future__ import annotations

import logging
import os


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
QUIET_LOGGERS = ("httpx", "httpcore", "openai")



def configure_logging(level_name: str | None = None) -> None:
    level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Client request logs can reveal endpoint details and answer text.
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
