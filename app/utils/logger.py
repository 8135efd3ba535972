"""Logging configuration and structured log events"""

import logging
import sys
from typing import Any

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = None) -> None:
    """Configure root logging once for the whole application"""
    level = (level or settings.LOG_LEVEL).upper()

    root = logging.getLogger()
    if not any(getattr(h, "_docqa", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._docqa = True
        root.addHandler(handler)
    root.setLevel(level)

    # Silence noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def _format_value(value: Any) -> str:
    text = str(value)
    if " " in text or "=" in text:
        return repr(text)
    return text


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    """
    Emit a structured log event

    Renders as ``event key=value ...`` for plain handlers and attaches the
    raw fields on the record (``record.event``, ``record.fields``) for
    JSON/structured handlers.

    Args:
        logger: Logger to emit on
        event: Dotted event name, e.g. ``embedding.batch``
        level: Logging level
        **fields: Event attributes
    """
    if not logger.isEnabledFor(level):
        return
    rendered = " ".join(f"{key}={_format_value(value)}" for key, value in fields.items())
    message = f"{event} {rendered}" if rendered else event
    logger.log(level, message, extra={"event": event, "fields": fields})
