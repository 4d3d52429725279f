"""
structlog wiring for the saju client.

Every module logs through `get_logger(__name__)` with keyword context; the
rendered line is one JSON object per event. Korean field values are kept
readable (no ASCII escaping) and credentials never reach the output.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory

SENSITIVE_KEYS = frozenset({"token", "authorization", "password"})
REDACTED = "***"
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(log_level: str = "INFO") -> None:
    """Route structlog through stdlib logging on stdout at `log_level`."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # httpx logs every request at INFO; log_api_call already covers that
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def redact_secrets(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace bearer tokens and passwords passed as log context."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_api_call(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """One line per backend round trip; 4xx/5xx answers are logged as warnings."""
    log = get_logger("saju_client.http")
    fields = {
        "event_type": "api_call",
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 1),
    }
    if status_code >= 400:
        log.warning("Fortune API call failed", **fields)
    else:
        log.info("Fortune API call completed", **fields)
