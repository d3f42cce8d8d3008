"""
Logging configuration and the structured event sink.
"""

import json
import logging
import sys
from typing import Any, Optional

logger = logging.getLogger("healthscope.events")

HANDLER_NAME = "healthscope.console"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # idempotent: repeated startups must not stack handlers
    if any(h.get_name() == HANDLER_NAME for h in root_logger.handlers):
        return

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(HANDLER_NAME)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.set_name(HANDLER_NAME + ".file")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def _dump(payload: Any) -> str:
    try:
        return json.dumps(payload, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(payload)


def log_event(
    message: str, payload: Optional[Any] = None, level: int = logging.INFO
) -> None:
    """
    Emit a message plus an optional structured payload.

    Fire-and-forget: a failing handler or an unserializable payload never
    reaches the caller.
    """
    try:
        if payload is None:
            logger.log(level, message)
        else:
            logger.log(level, "%s %s", message, _dump(payload))
    except Exception:
        pass
