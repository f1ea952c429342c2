"""
PostgreSQL Database Adapter

Provides async database operations using psycopg3 for the registry.
Handles connection acquisition, query execution, transactions and the mapping
of driver errors onto the repository error taxonomy.

Queries use server-side numbered placeholders ($1, $2, ...) so that a single
bound value can be referenced several times in one statement.
"""

# Standard library imports
import builtins
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

# Third-party imports
import psycopg
from psycopg import AsyncConnection, AsyncRawCursor
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool, PoolTimeout

# Local imports
from enterprise_registry.application.interfaces.exceptions import (
    ConnectionError,
    IntegrityError,
    RepositoryError,
    TimeoutError,
    TransactionError,
)

logger = logging.getLogger(__name__)


class PostgreSQLAdapter:
    """
    PostgreSQL database adapter using psycopg3.

    An adapter built on the pool checks out one connection per call. An adapter
    yielded by transaction() is bound to a single connection and runs every call
    inside that transaction.
    """

    def __init__(self, pool: AsyncConnectionPool, connection: AsyncConnection | None = None) -> None:
        """
        Initialize adapter with connection pool.

        Args:
            pool: psycopg3 async connection pool
            connection: Connection to pin every call to (transaction scope)
        """
        self._pool = pool
        self._connection = connection

    @property
    def pool(self) -> AsyncConnectionPool:
        """Get the connection pool."""
        return self._pool

    @property
    def has_active_transaction(self) -> bool:
        """Check if this adapter is bound to a transaction."""
        return self._connection is not None

    @asynccontextmanager
    async def acquire_connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """
        Acquire a database connection from the pool.

        Yields:
            Database connection

        Raises:
            ConnectionError: If connection cannot be acquired
            TimeoutError: If the pool stays exhausted for its whole timeout
        """
        if self._connection is not None:
            yield self._connection
            return

        # Only failures to check a connection out are translated here
        acquired = False
        try:
            async with self._pool.connection() as connection:
                acquired = True
                yield connection
        except PoolTimeout as e:
            if acquired:
                raise
            logger.error(f"Connection acquisition timed out: {e}")
            raise TimeoutError("acquire_connection", self._pool.timeout) from e
        except psycopg.OperationalError as e:
            if acquired:
                raise
            logger.error(f"Failed to acquire connection: {e}")
            raise ConnectionError(f"Failed to acquire database connection: {e}") from e

    @asynccontextmanager
    async def _cursor(self, operation: str, query: str) -> AsyncGenerator[AsyncRawCursor, None]:
        """Open a dict-row cursor and translate driver errors."""
        try:
            async with self.acquire_connection() as conn:
                async with AsyncRawCursor(conn, row_factory=dict_row) as cur:
                    yield cur
        except psycopg.IntegrityError as e:
            constraint = getattr(e.diag, "constraint_name", None) or "unknown"
            logger.error(f"Integrity constraint violated: {e} | Query: {query[:100]}...")
            raise IntegrityError(constraint, str(e)) from e
        except psycopg.OperationalError as e:
            logger.error(f"{operation} failed: {e} | Query: {query[:100]}...")
            raise RepositoryError(f"{operation} failed: {e}", e) from e
        except builtins.TimeoutError as e:
            logger.error(f"{operation} timed out: {query[:100]}...")
            raise TimeoutError(operation, self._pool.timeout) from e
        except psycopg.Error as e:
            logger.error(f"{operation} rejected: {e} | Query: {query[:100]}...")
            raise RepositoryError(f"{operation} failed: {e}", e) from e

    async def execute_query(self, query: str, *args: Any) -> int:
        """
        Execute a SQL statement that doesn't return data.

        Args:
            query: SQL query string
            *args: Query parameters, bound to $1..$n

        Returns:
            Number of rows affected

        Raises:
            IntegrityError: If a constraint rejects the statement
            RepositoryError: If query execution fails
        """
        async with self._cursor("execute_query", query) as cur:
            await cur.execute(query, args)
            rowcount = cur.rowcount
            logger.debug(f"Query executed: {query[:100]}... | Rows: {rowcount}")
            return rowcount

    async def fetch_one(self, query: str, *args: Any) -> dict[str, Any] | None:
        """
        Fetch a single record from the database.

        Args:
            query: SQL query string
            *args: Query parameters

        Returns:
            Record if found, None otherwise
        """
        async with self._cursor("fetch_one", query) as cur:
            await cur.execute(query, args)
            result = await cur.fetchone()
            logger.debug(f"Fetch one query: {query[:100]}... | Found: {result is not None}")
            return result

    async def fetch_all(self, query: str, *args: Any) -> list[dict[str, Any]]:
        """
        Fetch all records from the database.

        Args:
            query: SQL query string
            *args: Query parameters

        Returns:
            List of records
        """
        async with self._cursor("fetch_all", query) as cur:
            await cur.execute(query, args)
            result = await cur.fetchall()
            logger.debug(f"Fetch all query: {query[:100]}... | Count: {len(result)}")
            return result

    async def fetch_values(self, query: str, *args: Any) -> list[Any]:
        """
        Fetch values from a single column.

        Args:
            query: SQL query string that returns single column
            *args: Query parameters

        Returns:
            List of values from first column
        """
        records = await self.fetch_all(query, *args)
        if not records:
            return []

        first_key = next(iter(records[0]))
        return [record[first_key] for record in records]

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator["PostgreSQLAdapter", None]:
        """
        Run a block of statements in one transaction.

        Commits when the block exits cleanly and rolls back when it raises.
        Nested use on a bound adapter opens a savepoint.

        Yields:
            Adapter bound to the transaction's connection

        Raises:
            TransactionError: If the transaction cannot be started or committed
        """
        async with self.acquire_connection() as conn:
            bound = self if self._connection is conn else PostgreSQLAdapter(self._pool, conn)
            try:
                # Statements in the block surface translated errors, so a raw
                # OperationalError here comes from BEGIN/COMMIT itself
                async with conn.transaction():
                    yield bound
            except psycopg.OperationalError as e:
                logger.error(f"Transaction failed: {e}")
                raise TransactionError(f"Transaction failed: {e}", e) from e
            logger.debug("Transaction committed")

    async def health_check(self) -> bool:
        """
        Perform a health check on the database connection.

        Returns:
            True if database is healthy, False otherwise
        """
        try:
            await self.fetch_one("SELECT 1 AS ok")
            return True
        except RepositoryError as e:
            logger.error(f"Health check failed: {e}")
            return False

    def get_connection_info(self) -> dict[str, Any]:
        """
        Get information about the connection pool.

        Returns:
            Dictionary with connection pool statistics
        """
        return {
            "max_size": self._pool.max_size,
            "min_size": self._pool.min_size,
            "pool_status": "active" if not self._pool.closed else "closed",
        }

    def __str__(self) -> str:
        """String representation of the adapter."""
        pool_info = f"Pool(max_size={self._pool.max_size})"
        tx_info = "with active transaction" if self.has_active_transaction else "no transaction"
        return f"PostgreSQLAdapter({pool_info}, {tx_info})"
