"""
Repository Infrastructure Module

This module provides concrete PostgreSQL implementations of the repository interfaces.
Implements the infrastructure layer for data access using the Repository pattern.
"""

from .enterprise_queries import EnterpriseSearch
from .enterprise_repository import PostgreSQLEnterpriseRepository
from .establishment_repository import PostgreSQLEstablishmentRepository
from .procedures import CascadeDelete, CascadeStep, UpdateElseInsert, UpsertOutcome

__all__ = [
    "CascadeDelete",
    "CascadeStep",
    "EnterpriseSearch",
    "PostgreSQLEnterpriseRepository",
    "PostgreSQLEstablishmentRepository",
    "UpdateElseInsert",
    "UpsertOutcome",
]
