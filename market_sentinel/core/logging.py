import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from market_sentinel.utils.logging_redaction import install_redaction_filter

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

NOISY_LOGGERS = ("httpx", "apscheduler", "sqlalchemy.engine", "telegram.ext", "yfinance")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 10_485_760,
    backup_count: int = 5,
) -> None:
    """
    Configure centralized application logging.
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        )

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    install_redaction_filter()

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
