"""
Database Infrastructure Module

This module provides PostgreSQL database access for the enterprise registry.
Implements the infrastructure layer for data persistence using psycopg3.
"""

from .adapter import PostgreSQLAdapter
from .connection import DatabaseConfig, DatabaseConnection
from .query_builder import QueryBuilder, QueryBuilderError, QueryResult, SecurityError
from .schema import apply_schema

__all__ = [
    "PostgreSQLAdapter",
    "DatabaseConnection",
    "DatabaseConfig",
    "QueryBuilder",
    "QueryBuilderError",
    "QueryResult",
    "SecurityError",
    "apply_schema",
]
