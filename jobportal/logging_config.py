"""
Logging setup for the job portal API.

Every record passes through two filters before it is formatted:

- ``RequestIdFilter`` stamps the correlation id the request middleware
  placed in ``request_id_var`` (``-`` outside a request).
- ``SecretRedactionFilter`` masks ``extra=`` fields that can carry
  verification codes, reset tokens, reset links or passwords.

Production emits one JSON object per line; other environments use a
compact single-line text format.

    from jobportal.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Login succeeded", extra={"account_id": str(account.id)})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, Tuple

# Set by RequestIdMiddleware for the lifetime of one request
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

REDACTED = "[REDACTED]"

SECRET_FIELDS = frozenset((
    "code",
    "token",
    "password",
    "new_password",
    "reset_url",
    "secret",
    "smtp_password",
))

# LogRecord attributes that are not caller-supplied extras
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "request_id",
}

_TEXT_FORMAT = "%(asctime)s %(levelname)-5s %(name)s [%(request_id)s] %(message)s"


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def extra_fields(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    """Yield the fields a caller attached with ``extra=``."""
    for key, value in record.__dict__.items():
        if key not in _RECORD_ATTRS and value is not None:
            yield key, value


class RequestIdFilter(logging.Filter):
    """Attach the current request id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"  # type: ignore[attr-defined]
        return True


class SecretRedactionFilter(logging.Filter):
    """Replace secret-bearing extras with a fixed marker. Never drops a record."""

    def __init__(self, fields: frozenset = SECRET_FIELDS):
        super().__init__()
        self.fields = fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key in self.fields:
            if getattr(record, key, None) is not None:
                setattr(record, key, REDACTED)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extras included as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            payload["request_id"] = request_id
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for key, value in extra_fields(record):
            payload[key] = value

        return json.dumps(payload, default=str)


def _install_record_factory() -> None:
    # caplog and other handlers that bypass ours still format %(request_id)s
    previous = logging.getLogRecordFactory()
    if getattr(previous, "_jobportal", False):
        return

    def factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = previous(*args, **kwargs)
        if not hasattr(record, "request_id"):
            record.request_id = "-"  # type: ignore[attr-defined]
        return record

    factory._jobportal = True  # type: ignore[attr-defined]
    logging.setLogRecordFactory(factory)


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install the root handler. Safe to call more than once.

    Args:
        log_level: Level name; unknown names fall back to INFO
        environment: "production" selects JSON output
        debug: Forces DEBUG regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)
    _install_record_factory()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SecretRedactionFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
