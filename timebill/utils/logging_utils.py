"""Structured logging utilities with context support."""

import functools
import logging
import threading
import uuid
from typing import Any, Callable, Dict, Optional

# Thread-local storage for log context
_thread_local = threading.local()

REDACTED = "***REDACTED***"

# Field name fragments whose values never reach the logs
SENSITIVE_FIELDS = {
    "password",
    "token",
    "secret",
    "cookie",
    "session",
    "authorization",
    "api_key",
}


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for one CLI invocation."""
    return str(uuid.uuid4())


def get_log_context() -> Dict[str, Any]:
    """
    Get a copy of the fields currently attached to log records.

    Returns:
        Dictionary of context fields (empty outside any LogContext)
    """
    return dict(getattr(_thread_local, "context", {}))


class LogContext:
    """
    Context manager for adding structured fields to log records.

    Fields are stored in thread-local storage and copied onto every record
    emitted within the scope by ``_ContextFilter``. Nested contexts merge,
    and the outer fields are restored on exit.

    Example:
        with LogContext(workspace_id="ws-1", invoice_number="ACME-202403-001"):
            logger.info("Marking invoice paid")
            # Record carries workspace_id and invoice_number
    """

    def __init__(self, **kwargs):
        self.fields = kwargs
        self.previous_context: Optional[Dict[str, Any]] = None

    def __enter__(self):
        if not hasattr(_thread_local, "context"):
            _thread_local.context = {}

        self.previous_context = _thread_local.context.copy()
        _thread_local.context.update(self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _thread_local.context = self.previous_context or {}


class _ContextFilter(logging.Filter):
    """Logging filter that adds context fields to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in getattr(_thread_local, "context", {}).items():
            setattr(record, key, value)
        return True


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in SENSITIVE_FIELDS)


def sanitize_sensitive_data(data: Any) -> Any:
    """
    Redact sensitive values before a payload is logged.

    Dictionaries are processed recursively, including dictionaries inside
    lists. A key is sensitive when it contains one of ``SENSITIVE_FIELDS``
    (case-insensitive), so ``sessionCookie`` and ``X-Auth-Token`` are
    both caught.

    Args:
        data: Payload to sanitize (non-container values pass through)

    Returns:
        A sanitized copy; the input is not modified

    Example:
        >>> sanitize_sensitive_data({"workspaceId": "ws-1", "Cookie": "session=abc"})
        {'workspaceId': 'ws-1', 'Cookie': '***REDACTED***'}
    """
    if isinstance(data, list):
        return [sanitize_sensitive_data(item) for item in data]
    if not isinstance(data, dict):
        return data

    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(key, str) and _is_sensitive(key):
            sanitized[key] = REDACTED if value is not None else None
        else:
            sanitized[key] = sanitize_sensitive_data(value)
    return sanitized


def log_function_call(
    func: Optional[Callable] = None, *, include_args: bool = False, level: str = "DEBUG"
) -> Callable:
    """
    Decorator to log function entry, exit and exceptions.

    Args:
        func: Function to decorate (when used without arguments)
        include_args: Whether to include function arguments in logs
        level: Log level to use for entry and exit

    Returns:
        Decorated function

    Example:
        @log_function_call
        def generate_invoice_number(self, workspace_id):
            ...

        @log_function_call(include_args=True, level="INFO")
        def mark_credited(self, project_id, credited_date):
            ...
    """

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(f.__module__)
            log_level = getattr(logging, level.upper())

            if include_args:
                args_repr = [repr(a) for a in args]
                kwargs_repr = [f"{k}={v!r}" for k, v in kwargs.items()]
                signature = ", ".join(args_repr + kwargs_repr)
                logger.log(log_level, f"Entering {f.__qualname__} with args: {signature}")
            else:
                logger.log(log_level, f"Entering {f.__qualname__}")

            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Exception in {f.__qualname__}: {type(e).__name__}: {e}",
                    exc_info=True,
                )
                raise

            logger.log(log_level, f"Exiting {f.__qualname__}")
            return result

        return wrapper

    if func is None:
        return decorator
    return decorator(func)
