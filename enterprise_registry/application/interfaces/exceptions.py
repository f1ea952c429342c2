"""
Repository Exception Definitions

Defines exceptions that repositories may raise.
"Not found" is never an exception here: repositories return None, False or an
empty list for it so callers can map it to their own not-found signal.
"""

# Standard library imports
from typing import Any


class RepositoryError(Exception):
    """Base exception for repository operations."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ValidationError(RepositoryError):
    """Raised when a required field is missing or malformed."""

    def __init__(self, entity_type: str, field: str, value: Any, message: str) -> None:
        super().__init__(f"{entity_type}.{field} validation failed: {message}")
        self.entity_type = entity_type
        self.field = field
        self.value = value


class IntegrityError(RepositoryError):
    """Raised when database integrity constraint is violated."""

    def __init__(self, constraint: str, message: str | None = None) -> None:
        msg = f"Integrity constraint '{constraint}' violated"
        if message:
            msg += f": {message}"
        super().__init__(msg)
        self.constraint = constraint


class TransactionError(RepositoryError):
    """Raised when a transaction cannot be started or completed."""

    pass


class ConnectionError(RepositoryError):
    """Raised when database connection fails."""

    def __init__(self, message: str = "Database connection failed") -> None:
        super().__init__(message)


class AuthenticationError(ConnectionError):
    """Raised when the database rejects the configured credentials."""

    def __init__(self, sqlstate: str | None, message: str) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


class TimeoutError(RepositoryError):
    """Raised when repository operation times out."""

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        super().__init__(f"Operation '{operation}' timed out after {timeout_seconds} seconds")
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class FactoryError(Exception):
    """Raised when factory cannot create an instance."""

    def __init__(self, factory_type: str, message: str) -> None:
        super().__init__(f"{factory_type} factory error: {message}")
        self.factory_type = factory_type
