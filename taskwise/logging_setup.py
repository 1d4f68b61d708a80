"""Logging for the ``taskwise`` logger tree.

A filter stamps ``request_id`` and ``path`` on every record so lines emitted
from handlers, the API client and enrichment threads can be correlated.
"""

from __future__ import annotations

import logging

from flask import g, has_request_context, request

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s %(path)s] %(message)s"


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = getattr(g, "request_id", "-")
            record.path = request.path
        else:
            record.request_id = "-"
            record.path = "-"
        return True


def configure_logging(level: str = "INFO") -> logging.Logger:
    log = logging.getLogger("taskwise")
    # Avoid duplicate attachment when several apps are created (tests)
    if not any(isinstance(h, logging.StreamHandler) and getattr(h, "_taskwise", False) for h in log.handlers):
        h = logging.StreamHandler()
        h._taskwise = True  # type: ignore[attr-defined]
        h.addFilter(RequestContextFilter())
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(h)
    log.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    return log


__all__ = ["configure_logging", "RequestContextFilter", "LOG_FORMAT"]
