# app/utils/logging.py
import logging

from app.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
_configured = False


def configure_logging(level: str = LOG_LEVEL) -> None:
    global _configured
    if _configured:
        return
    logging.basicConfig(level=level.upper(), format=_FORMAT)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
