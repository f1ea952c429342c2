"""
Resilience Infrastructure Package

Backoff calculation for start-up connection establishment.
"""

from .retry import ExponentialBackoff, RetryConfig, is_retryable_exception

__all__ = ["ExponentialBackoff", "RetryConfig", "is_retryable_exception"]
