"""
Structured Logging for the Enterprise Registry

JSON structured logs with correlation IDs, OpenTelemetry trace context,
registry-specific fields and masking of database credentials.
"""

import inspect
import json
import logging
import re
import sys
import time
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from functools import wraps
from typing import Any

from opentelemetry import trace

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Registry fields carried on records and grouped under "registry" in JSON output
REGISTRY_FIELDS = ("entity_number", "operation_type", "duration_ms", "status")

_CONTEXT_FIELDS = ("correlation_id", "trace_id", "span_id")

# Attributes of a bare LogRecord; anything else on a record came from `extra`
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


def _trace_ids() -> tuple[str | None, str | None]:
    span = trace.get_current_span()
    if not span.is_recording():
        return None, None

    context = span.get_span_context()
    return (
        format(context.trace_id, "032x") if context.trace_id else None,
        format(context.span_id, "016x") if context.span_id else None,
    )


@dataclass
class SensitiveDataConfig:
    """What counts as a credential in log output."""

    # Regular expressions matched against key names, case-insensitively
    credential_patterns: list[str] = field(
        default_factory=lambda: [
            "password",
            "passwd",
            "secret",
            "api[_-]?key",
            "access[_-]?token",
            "authorization",
        ]
    )
    mask_replacement: str = "***MASKED***"

    # Dropped from extra fields rather than masked
    excluded_fields: set[str] = field(
        default_factory=lambda: {"password", "passwd", "private_key", "token"}
    )


class RegistryLogRecord(logging.LogRecord):
    """
    Log record carrying correlation and tracing fields.

    Registry fields (REGISTRY_FIELDS) are not preset here: they arrive through
    `extra`, which the logging module refuses to apply over existing attributes.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.correlation_id = correlation_id_var.get()
        self.trace_id, self.span_id = _trace_ids()


class SensitiveDataMasker:
    """
    Masks database credentials in log messages and extra fields.

    Handles the password part of postgresql:// URLs and `key=value` /
    `key: value` pairs, which covers libpq conninfo strings.
    """

    _URL_PASSWORD = re.compile(r"(?P<prefix>postgres(?:ql)?://[^:/@\s]+:)[^@\s]+@")

    def __init__(self, config: SensitiveDataConfig) -> None:
        self.config = config
        keys = "|".join(f"(?:{pattern})" for pattern in config.credential_patterns)
        self._key = re.compile(keys, re.IGNORECASE)
        self._pair = re.compile(
            rf'(?P<key>"?(?:{keys})"?)(?P<sep>\s*[=:]\s*)(?P<value>"[^"]*"|\S+)', re.IGNORECASE
        )

    def _mask_pair(self, match: re.Match[str]) -> str:
        value = self.config.mask_replacement
        if match.group("value").startswith('"'):
            value = f'"{value}"'
        return f"{match.group('key')}{match.group('sep')}{value}"

    def mask_message(self, message: str) -> str:
        masked = self._URL_PASSWORD.sub(rf"\g<prefix>{self.config.mask_replacement}@", message)
        return self._pair.sub(self._mask_pair, masked)

    def mask_extra_fields(self, extra: dict[str, Any]) -> dict[str, Any]:
        """Drop excluded keys, mask credential keys and scrub string values."""
        masked: dict[str, Any] = {}
        for key, value in extra.items():
            if key.lower() in self.config.excluded_fields:
                continue
            if self._key.search(key):
                masked[key] = self.config.mask_replacement
            elif isinstance(value, str):
                masked[key] = self.mask_message(value)
            elif isinstance(value, dict):
                masked[key] = self.mask_extra_fields(value)
            else:
                masked[key] = value
        return masked


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


class RegistryJSONFormatter(logging.Formatter):
    """
    JSON formatter for structured registry logs.

    Output keys: timestamp, level, logger, message, module, function, line,
    the correlation/trace ids when known, a "registry" object with the
    registry fields, "exception" for exc_info and "extra" for anything else
    passed through `extra`.
    """

    def __init__(
        self,
        sensitive_data_config: SensitiveDataConfig | None = None,
        include_extra: bool = True,
        sort_keys: bool = True,
    ):
        super().__init__()
        self.include_extra = include_extra
        self.sort_keys = sort_keys
        self.masker = SensitiveDataMasker(sensitive_data_config or SensitiveDataConfig())

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self.masker.mask_message(record.getMessage()),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        entry.update(
            (key, value) for key in _CONTEXT_FIELDS if (value := getattr(record, key, None))
        )

        registry = {
            key: value for key in REGISTRY_FIELDS if (value := getattr(record, key, None)) is not None
        }
        if registry:
            entry["registry"] = registry

        if record.exc_info:
            error_type, error, _ = record.exc_info
            entry["exception"] = {
                "type": error_type.__name__ if error_type else None,
                "message": str(error) if error else None,
                "traceback": self.formatException(record.exc_info),
            }

        if self.include_extra:
            skipped = _RECORD_ATTRIBUTES.union(_CONTEXT_FIELDS, REGISTRY_FIELDS)
            extra = {
                key: value
                for key, value in vars(record).items()
                if key not in skipped and not key.startswith("_")
            }
            if extra:
                entry["extra"] = self.masker.mask_extra_fields(extra)

        return json.dumps(entry, sort_keys=self.sort_keys, default=_json_default)


class RegistryContextFilter(logging.Filter):
    """Adds correlation and trace fields to records created by other factories."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id_var.get()
        if not hasattr(record, "trace_id"):
            record.trace_id, record.span_id = _trace_ids()
        return True


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str, None, None]:
    """Bind a correlation id (generated when omitted) for the enclosed block."""
    correlation_id = correlation_id or generate_correlation_id()
    token = correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        correlation_id_var.reset(token)


def log_repository_operation(operation_type: str, level: int = logging.DEBUG) -> Any:
    """
    Decorator for logging repository operations.

    Logs the duration and outcome of each call at `level`, failures at ERROR.
    Errors are re-raised unchanged.

    Args:
        operation_type: Name recorded in the operation_type field
        level: Level of the success record
    """

    def decorator(func: Any) -> Any:
        logger = logging.getLogger(func.__module__)

        def report(started: float, error: Exception | None = None) -> None:
            fields: dict[str, Any] = {
                "operation_type": operation_type,
                "duration_ms": (time.perf_counter() - started) * 1000,
                "status": "success" if error is None else "error",
            }
            if error is None:
                logger.log(level, f"Repository operation {operation_type} completed", extra=fields)
                return
            fields["error_type"] = type(error).__name__
            logger.error(f"Repository operation {operation_type} failed: {error}", extra=fields)

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    report(started, e)
                    raise
                report(started)
                return result

            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                report(started, e)
                raise
            report(started)
            return result

        return sync_wrapper

    return decorator


def mask_sensitive_data(
    data: str | dict[str, Any], config: SensitiveDataConfig | None = None
) -> str | dict[str, Any]:
    """Mask credentials in a message or a dict of fields."""
    masker = SensitiveDataMasker(config or SensitiveDataConfig())
    if isinstance(data, str):
        return masker.mask_message(data)
    return masker.mask_extra_fields(data)


def setup_structured_logging(
    level: str = "INFO",
    format_type: str = "json",
    sensitive_data_config: SensitiveDataConfig | None = None,
    log_file: str | None = None,
) -> None:
    """
    Replace the root handlers with registry handlers.

    Args:
        level: Logging level name
        format_type: 'json' or 'text'
        sensitive_data_config: Masking configuration for JSON output
        log_file: Also write to this file when set
    """
    formatter: logging.Formatter
    if format_type == "json":
        formatter = RegistryJSONFormatter(sensitive_data_config)
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    context_filter = RegistryContextFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    logging.setLogRecordFactory(RegistryLogRecord)
    logging.getLogger(__name__).info(f"Structured logging configured ({format_type}, {level.upper()})")
