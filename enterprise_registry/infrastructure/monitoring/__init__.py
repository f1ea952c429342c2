"""
Infrastructure Monitoring Module

Structured logging with correlation IDs and OpenTelemetry trace context for
the registry.
"""

from .logging import (
    correlation_context,
    get_correlation_id,
    log_repository_operation,
    mask_sensitive_data,
    setup_structured_logging,
)

__all__ = [
    "correlation_context",
    "get_correlation_id",
    "log_repository_operation",
    "mask_sensitive_data",
    "setup_structured_logging",
]
