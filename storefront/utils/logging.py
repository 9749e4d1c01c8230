# storefront/utils/logging.py
import logging
import sys
from typing import Optional

from storefront.utils.settings import LOG_LEVEL, LOG_FORMAT


def setup_logging(level: Optional[str] = None, format_string: Optional[str] = None) -> None:
    numeric_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(format_string or LOG_FORMAT))
    root_logger.addHandler(stream_handler)

    # chatty libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
