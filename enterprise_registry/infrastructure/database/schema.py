"""
Registry Schema

DDL for the four registry tables. Relationships between tables are logical
only: there are no foreign keys and no ON DELETE cascades, so consistency is
kept by the repositories and the procedures they run.

apply_schema() is meant for development databases and integration tests; a
production registry is loaded by its own import tooling.
"""

# Standard library imports
import logging

# Local imports
from enterprise_registry.infrastructure.database.adapter import PostgreSQLAdapter

logger = logging.getLogger(__name__)

REGISTRY_TABLES = ("enterprise", "establishment", "denomination", "address")

# Table names are constants - not user input
SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS enterprise (
        enterprisenumber TEXT PRIMARY KEY,
        status TEXT,
        juridicalsituation TEXT,
        typeofenterprise TEXT,
        juridicalform TEXT,
        juridicalformcac TEXT,
        startdate DATE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS establishment (
        establishmentnumber TEXT PRIMARY KEY,
        enterprisenumber TEXT,
        startdate DATE
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_establishment_enterprisenumber
    ON establishment(enterprisenumber)
    """,
    """
    CREATE TABLE IF NOT EXISTS denomination (
        entitynumber TEXT NOT NULL,
        language TEXT NOT NULL,
        typeofdenomination TEXT NOT NULL,
        denomination TEXT,
        PRIMARY KEY (entitynumber, language, typeofdenomination)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS address (
        entitynumber TEXT NOT NULL,
        typeofaddress TEXT NOT NULL,
        countrynl TEXT,
        countryfr TEXT,
        zipcode TEXT,
        municipalitynl TEXT,
        municipalityfr TEXT,
        streetnl TEXT,
        streetfr TEXT,
        housenumber TEXT,
        box TEXT,
        extraaddressinfo TEXT,
        datestrikingoff DATE,
        PRIMARY KEY (entitynumber, typeofaddress)
    )
    """,
)


async def apply_schema(adapter: PostgreSQLAdapter) -> None:
    """
    Create the registry tables if they don't exist.

    Args:
        adapter: Database adapter for executing the DDL

    Raises:
        RepositoryError: If a statement fails
    """
    async with adapter.transaction() as tx:
        for statement in SCHEMA_STATEMENTS:
            await tx.execute_query(statement)

    logger.info(f"Registry schema applied ({len(REGISTRY_TABLES)} tables)")


async def truncate_registry(adapter: PostgreSQLAdapter) -> None:
    """Remove every row from the registry tables. Used by integration tests."""
    await adapter.execute_query(f"TRUNCATE {', '.join(REGISTRY_TABLES)}")
    logger.info("Registry tables truncated")
