# storefront/utils/logging.py
import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def get_logger(name: str) -> logging.Logger:
    global _configured
    if not _configured:
        logging.basicConfig(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            format=LOG_FORMAT,
        )
        _configured = True
    return logging.getLogger(name)
