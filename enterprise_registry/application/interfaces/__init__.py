"""
Application Interfaces - Repository Contracts

This module defines the interface contracts that the infrastructure layer
must implement.
"""

from .exceptions import (
    AuthenticationError,
    ConnectionError,
    FactoryError,
    IntegrityError,
    RepositoryError,
    TimeoutError,
    TransactionError,
    ValidationError,
)
from .repositories import IEnterpriseRepository, IEstablishmentRepository

__all__ = [
    "AuthenticationError",
    "ConnectionError",
    "FactoryError",
    "IEnterpriseRepository",
    "IEstablishmentRepository",
    "IntegrityError",
    "RepositoryError",
    "TimeoutError",
    "TransactionError",
    "ValidationError",
]
