"""
Logging Configuration

Plain-text logs in development, one JSON object per line in production.

Every record emitted while a request is being handled carries that
request's id, so a quote generation or a failed login can be traced back
to the X-Request-ID the client saw.

PRODUCTION NOTE: Security events (failed logins, cross-organization access
attempts, invitation misuse) are tagged with security_event=True so they
can be routed to a separate sink by the log shipper.
"""
from contextvars import ContextVar, Token
import logging
import sys
from typing import Any, Dict, Optional
import json

from fencemark.utils.clock import utcnow

# Extra attributes copied into JSON records when present
CONTEXT_FIELDS = (
    "organization_id",
    "user_id",
    "request_id",
    "path",
    "method",
    "status_code",
    "security_event",
    "event_type",
)

_current_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def bind_request_id(request_id: str) -> Token:
    """Attach a request id to log records for the rest of this context."""
    return _current_request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _current_request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _current_request_id.get()


class RequestContextFilter(logging.Filter):
    """Stamps the current request id on records that do not set one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            request_id = _current_request_id.get()
            if request_id is not None:
                record.request_id = request_id
        return True


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure the root logger. Call once, before the app is created.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit JSON lines instead of text
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_security_event(event_type: str, details: Dict[str, Any], logger: logging.Logger) -> None:
    """
    Log a security-relevant event at WARNING.

    Event types:
    - failed_login: Failed authentication attempt
    - cross_organization_access: Caller targeted another organization
    - invalid_invitation: Unknown or reused invitation token
    - privilege_escalation: Attempted role change beyond caller's rights
    - token_revoked: A revoked token was presented
    - account_deleted: A user deleted their account
    """
    logger.warning(
        f"SECURITY EVENT: {event_type}",
        extra={"security_event": True, "event_type": event_type, **details}
    )
