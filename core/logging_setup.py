"""Logging configuration.

Every module logs through ``logging.getLogger(__name__)``. setup_logging()
installs one stderr handler on the root logger whose records carry the
current request id (set by RequestContextMiddleware).
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

request_id_context: ContextVar[str] = ContextVar("request_id", default="-")


def get_request_id() -> str:
    return request_id_context.get()


class RequestIdFilter(logging.Filter):
    """Attach the current request id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Configure the root logger. Call this ONCE, early in the app lifespan.

    Re-running replaces the handler instead of stacking duplicates.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        if getattr(h, "_task_tracker", False):
            root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(request_id)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(fmt)
    handler.addFilter(RequestIdFilter())
    handler._task_tracker = True
    root.addHandler(handler)

    logging.captureWarnings(True)
    # Access lines come from RequestContextMiddleware instead.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
