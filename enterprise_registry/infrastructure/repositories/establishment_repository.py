"""
PostgreSQL Establishment Repository Implementation

Concrete implementation of IEstablishmentRepository using PostgreSQL database.
"""

# Standard library imports
import logging
from collections.abc import Mapping
from typing import Any

# Local imports
from enterprise_registry.application.interfaces.exceptions import ValidationError
from enterprise_registry.application.interfaces.repositories import IEstablishmentRepository
from enterprise_registry.domain.entities import Establishment
from enterprise_registry.infrastructure.database.adapter import PostgreSQLAdapter
from enterprise_registry.infrastructure.monitoring.logging import log_repository_operation
from enterprise_registry.infrastructure.repositories.enterprise_queries import (
    build_partial_update,
    formatted_date,
)

logger = logging.getLogger(__name__)

# Updatable columns and their SQL types
ESTABLISHMENT_UPDATABLE = {"startdate": "date", "enterprisenumber": "text"}

_SELECT_ESTABLISHMENT = f"""
SELECT
    establishmentnumber,
    {formatted_date("startdate")} AS startdate,
    enterprisenumber
FROM establishment
"""

SELECT_BY_ID = _SELECT_ESTABLISHMENT + "WHERE establishmentnumber = $1"

SELECT_BY_ENTERPRISE = (
    _SELECT_ESTABLISHMENT + "WHERE enterprisenumber = $1 ORDER BY establishmentnumber ASC"
)

INSERT_ESTABLISHMENT = """
INSERT INTO establishment (establishmentnumber, enterprisenumber, startdate)
VALUES ($1::text, $2::text, $3::date)
"""

DELETE_ESTABLISHMENT = "DELETE FROM establishment WHERE establishmentnumber = $1"


def require_key(entity_type: str, field: str, payload: Mapping[str, Any]) -> str:
    """
    Return a required natural key from a payload.

    Raises:
        ValidationError: If the key is missing, not a string or blank
    """
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(entity_type, field, value, "a non-empty string is required")
    return value


class PostgreSQLEstablishmentRepository(IEstablishmentRepository):
    """
    PostgreSQL implementation of IEstablishmentRepository.

    Establishments reference their enterprise logically; nothing checks that
    the enterprise exists.
    """

    def __init__(self, adapter: PostgreSQLAdapter) -> None:
        """
        Initialize repository with database adapter.

        Args:
            adapter: PostgreSQL database adapter
        """
        self.adapter = adapter

    @log_repository_operation("list_establishments")
    async def list_by_enterprise(self, enterprise_number: str) -> list[Establishment]:
        """
        List the establishments of an enterprise.

        Args:
            enterprise_number: Owning enterprise number

        Returns:
            Establishments ordered by establishment number
        """
        records = await self.adapter.fetch_all(SELECT_BY_ENTERPRISE, enterprise_number)
        return [self._map_record_to_establishment(record) for record in records]

    @log_repository_operation("get_establishment")
    async def get_establishment_by_id(self, establishment_number: str) -> Establishment | None:
        record = await self.adapter.fetch_one(SELECT_BY_ID, establishment_number)
        if record is None:
            return None
        return self._map_record_to_establishment(record)

    @log_repository_operation("create_establishment")
    async def create_establishment(self, payload: Mapping[str, Any]) -> Establishment | None:
        """
        Insert a new establishment.

        The insert is unconditional: an existing establishment number is
        reported by the store, not skipped.

        Args:
            payload: establishmentnumber (required), enterprisenumber, startdate

        Returns:
            The stored establishment, None if a concurrent delete removed it
            before it could be read back

        Raises:
            ValidationError: If establishmentnumber is missing or blank
            IntegrityError: If the establishment number already exists
        """
        establishment_number = require_key("Establishment", "establishmentnumber", payload)

        await self.adapter.execute_query(
            INSERT_ESTABLISHMENT,
            establishment_number,
            payload.get("enterprisenumber"),
            payload.get("startdate"),
        )
        logger.info(f"Created establishment {establishment_number}")

        created = await self.get_establishment_by_id(establishment_number)
        if created is None:
            logger.warning(f"Establishment {establishment_number} vanished after insert")
        return created

    @log_repository_operation("update_establishment")
    async def update_establishment(
        self, establishment_number: str, payload: Mapping[str, Any]
    ) -> Establishment | None:
        """
        Update startdate and/or enterprisenumber when present in the payload.

        With neither key present this is a plain read.

        Returns:
            The refreshed establishment, None if it does not exist
        """
        query = build_partial_update(
            "establishment",
            "establishmentnumber",
            establishment_number,
            payload,
            ESTABLISHMENT_UPDATABLE,
        )
        if query is not None:
            updated = await self.adapter.execute_query(query.sql, *query.parameters)
            logger.debug(f"Updated establishment {establishment_number}: {updated} row(s)")

        return await self.get_establishment_by_id(establishment_number)

    @log_repository_operation("delete_establishment")
    async def delete_establishment(self, establishment_number: str) -> bool:
        """
        Delete an establishment.

        Returns:
            True if a row was deleted, False if not found
        """
        deleted = await self.adapter.execute_query(DELETE_ESTABLISHMENT, establishment_number)
        if deleted:
            logger.info(f"Deleted establishment {establishment_number}")
        return deleted > 0

    def _map_record_to_establishment(self, record: dict[str, Any]) -> Establishment:
        """Map database record to Establishment entity."""
        return Establishment(
            establishment_number=record["establishmentnumber"],
            enterprise_number=record["enterprisenumber"],
            start_date=record["startdate"],
        )
