"""
PostgreSQL Enterprise Repository Implementation

Concrete implementation of IEnterpriseRepository using PostgreSQL database.
Reads go through the enterprise query builders; writes go through the
consistency procedures so the enterprise, denomination, address and
establishment tables stay coherent without database-enforced relationships.
"""

# Standard library imports
import logging
from collections.abc import Mapping
from typing import Any

# Local imports
from enterprise_registry.application.interfaces.repositories import IEnterpriseRepository
from enterprise_registry.domain.entities import Address, CreateResult, Enterprise, Establishment
from enterprise_registry.domain.projections import DENOMINATION_LANGUAGE_FR, DENOMINATION_TYPE_MAIN
from enterprise_registry.infrastructure.database.adapter import PostgreSQLAdapter
from enterprise_registry.infrastructure.monitoring.logging import log_repository_operation
from enterprise_registry.infrastructure.repositories.enterprise_queries import (
    EnterpriseSearch,
    build_count_query,
    build_detail_query,
    build_list_query,
    build_partial_update,
    normalize_search_term,
)
from enterprise_registry.infrastructure.repositories.establishment_repository import (
    PostgreSQLEstablishmentRepository,
    require_key,
)
from enterprise_registry.infrastructure.repositories.procedures import (
    ENTERPRISE_CASCADE,
    insert_enterprise_if_absent,
    upsert_main_denomination,
    upsert_registered_address,
)

logger = logging.getLogger(__name__)

# Updatable enterprise columns and their SQL types
ENTERPRISE_UPDATABLE = {
    "status": "text",
    "juridicalsituation": "text",
    "typeofenterprise": "text",
    "juridicalform": "text",
    "juridicalformcac": "text",
    "startdate": "date",
}

UPDATE_MAIN_DENOMINATION = """
UPDATE denomination
SET denomination = $2::text
WHERE entitynumber = $1::text
  AND language = $3::text
  AND typeofdenomination = $4::text
"""

LIST_TABLES = """
SELECT table_name
FROM information_schema.tables
WHERE table_schema = $1
ORDER BY table_name
"""


class PostgreSQLEnterpriseRepository(IEnterpriseRepository):
    """
    PostgreSQL implementation of IEnterpriseRepository.

    Provides search, retrieval and write operations on enterprise aggregates.
    Missing enterprises are reported as None, False or an empty list; store
    errors propagate as raised by the adapter.
    """

    def __init__(
        self,
        adapter: PostgreSQLAdapter,
        establishments: PostgreSQLEstablishmentRepository | None = None,
        schema: str = "public",
    ) -> None:
        """
        Initialize repository with database adapter.

        Args:
            adapter: PostgreSQL database adapter
            establishments: Establishment repository, built on the adapter if omitted
            schema: Schema inspected by list_tables
        """
        self.adapter = adapter
        self.establishments = establishments or PostgreSQLEstablishmentRepository(adapter)
        self.schema = schema

    @log_repository_operation("list_enterprises")
    async def list_enterprises(
        self, take: Any = None, skip: Any = None, search_term: str | None = None
    ) -> list[Enterprise]:
        """
        List enterprises ordered by enterprise number.

        Args:
            take: Page size, defaults to 50 when absent or non-numeric
            skip: Offset, defaults to 0 when absent or non-numeric
            search_term: Optional case-insensitive partial match on number or name

        Returns:
            One page of enterprises with their name
        """
        search = EnterpriseSearch.from_params(take, skip, search_term)
        query = build_list_query(search)

        records = await self.adapter.fetch_all(query.sql, *query.parameters)
        return [self._map_record_to_enterprise(record) for record in records]

    @log_repository_operation("count_enterprises")
    async def count_enterprises(self, search_term: str | None = None) -> int:
        query = build_count_query(normalize_search_term(search_term))
        record = await self.adapter.fetch_one(query.sql, *query.parameters)
        if record is None:
            return 0
        return record["total"] or 0

    @log_repository_operation("get_enterprise")
    async def get_enterprise_by_id(self, enterprise_number: str) -> Enterprise | None:
        """
        Retrieve an enterprise with its name, registered address and establishments.

        Args:
            enterprise_number: The enterprise number

        Returns:
            The enterprise if found, None otherwise
        """
        query = build_detail_query(enterprise_number)
        record = await self.adapter.fetch_one(query.sql, *query.parameters)

        if record is None:
            return None

        enterprise = self._map_record_to_enterprise(record)
        enterprise.address = Address(
            street_fr=record["streetfr"],
            zip_code=record["zipcode"],
            municipality_fr=record["municipalityfr"],
        )
        enterprise.establishments = await self.establishments.list_by_enterprise(enterprise_number)
        return enterprise

    async def list_establishments_by_enterprise(self, enterprise_number: str) -> list[Establishment]:
        """List the establishments of an enterprise, empty when none or missing."""
        return await self.establishments.list_by_enterprise(enterprise_number)

    @log_repository_operation("list_tables")
    async def list_tables(self) -> list[str]:
        """
        List the table names of the configured schema.

        Returns:
            Table names in alphabetical order
        """
        return await self.adapter.fetch_values(LIST_TABLES, self.schema)

    @log_repository_operation("create_enterprise")
    async def create_enterprise(self, payload: Mapping[str, Any]) -> CreateResult:
        """
        Create an enterprise unless one with the same number already exists.

        An existing enterprise keeps its attributes. When the payload carries
        `name`, the main denomination is written either way.

        Args:
            payload: enterprisenumber (required), attributes and optional name

        Returns:
            The current enterprise and whether this call created it

        Raises:
            ValidationError: If enterprisenumber is missing or blank
        """
        enterprise_number = require_key("Enterprise", "enterprisenumber", payload)

        async with self.adapter.transaction() as tx:
            created = await insert_enterprise_if_absent(tx, enterprise_number, payload)
            if "name" in payload:
                await upsert_main_denomination(tx, enterprise_number, payload["name"])

        if created:
            logger.info(f"Created enterprise {enterprise_number}")
        else:
            logger.info(f"Enterprise {enterprise_number} already exists, left unchanged")

        enterprise = await self.get_enterprise_by_id(enterprise_number)
        return CreateResult(enterprise=enterprise, created=created)

    @log_repository_operation("update_enterprise")
    async def update_enterprise(
        self, enterprise_number: str, payload: Mapping[str, Any]
    ) -> Enterprise | None:
        """
        Update the fields present in the payload.

        A present key set to None clears the column. `name` updates an
        existing main denomination only; it never creates one.

        Returns:
            The refreshed enterprise, None if it does not exist
        """
        query = build_partial_update(
            "enterprise", "enterprisenumber", enterprise_number, payload, ENTERPRISE_UPDATABLE
        )
        if query is not None:
            updated = await self.adapter.execute_query(query.sql, *query.parameters)
            logger.debug(f"Updated enterprise {enterprise_number}: {updated} row(s)")

        if "name" in payload:
            renamed = await self.adapter.execute_query(
                UPDATE_MAIN_DENOMINATION,
                enterprise_number,
                payload["name"],
                DENOMINATION_LANGUAGE_FR,
                DENOMINATION_TYPE_MAIN,
            )
            if not renamed:
                logger.warning(
                    f"Enterprise {enterprise_number} has no main denomination, name not updated"
                )

        return await self.get_enterprise_by_id(enterprise_number)

    @log_repository_operation("delete_enterprise")
    async def delete_enterprise(self, enterprise_number: str) -> bool:
        """
        Delete an enterprise with its establishments, addresses and denominations.

        Returns:
            True if the enterprise row existed and was removed
        """
        deleted = await ENTERPRISE_CASCADE.execute(self.adapter, enterprise_number)
        removed = deleted[ENTERPRISE_CASCADE.root.table] > 0
        if removed:
            logger.info(f"Deleted enterprise {enterprise_number}: {deleted}")
        return removed

    @log_repository_operation("upsert_enterprise_address")
    async def upsert_enterprise_address(
        self, enterprise_number: str, payload: Mapping[str, Any]
    ) -> Enterprise | None:
        """
        Set the registered office address of an enterprise.

        Address fields absent from the payload are written as NULL. The
        statements themselves require the enterprise row, so nothing is
        written for an unknown enterprise.

        Returns:
            The refreshed enterprise, None if it does not exist
        """
        outcome = await upsert_registered_address(self.adapter, enterprise_number, payload)
        logger.debug(f"Registered address of {enterprise_number}: {outcome.value}")

        return await self.get_enterprise_by_id(enterprise_number)

    def _map_record_to_enterprise(self, record: dict[str, Any]) -> Enterprise:
        """Map database record to Enterprise entity."""
        return Enterprise(
            enterprise_number=record["enterprisenumber"],
            status=record["status"],
            juridical_situation=record["juridicalsituation"],
            type_of_enterprise=record["typeofenterprise"],
            juridical_form=record["juridicalform"],
            juridical_form_cac=record["juridicalformcac"],
            start_date=record["startdate"],
            name=record["name"],
        )
