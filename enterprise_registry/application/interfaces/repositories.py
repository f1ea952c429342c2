"""
Repository Interface Definitions

Defines the contracts that infrastructure repositories must implement.
Payloads are plain mappings keyed by column name: a key's presence, not its
value, decides whether a partial update touches that column.
"""

# Standard library imports
from abc import abstractmethod
from collections.abc import Mapping
from typing import Any, Protocol

# Local imports
from enterprise_registry.domain.entities import CreateResult, Enterprise, Establishment


class IEstablishmentRepository(Protocol):
    """
    Establishment repository interface.

    Defines operations for persisting and retrieving Establishment entities.
    """

    @abstractmethod
    async def list_by_enterprise(self, enterprise_number: str) -> list[Establishment]:
        """
        List the establishments of an enterprise.

        Args:
            enterprise_number: Owning enterprise number

        Returns:
            Establishments ordered by establishment number, empty if none
        """
        ...

    @abstractmethod
    async def get_establishment_by_id(self, establishment_number: str) -> Establishment | None:
        """
        Retrieve an establishment by its number.

        Returns:
            The establishment if found, None otherwise
        """
        ...

    @abstractmethod
    async def create_establishment(self, payload: Mapping[str, Any]) -> Establishment | None:
        """
        Insert a new establishment.

        Args:
            payload: Must carry a non-empty `establishmentnumber`

        Returns:
            The stored establishment, None if it was deleted before the read-back

        Raises:
            ValidationError: If the establishment number is missing
            IntegrityError: If the establishment number already exists
        """
        ...

    @abstractmethod
    async def update_establishment(
        self, establishment_number: str, payload: Mapping[str, Any]
    ) -> Establishment | None:
        """
        Update the fields present in the payload.

        Returns:
            The refreshed establishment, None if it does not exist
        """
        ...

    @abstractmethod
    async def delete_establishment(self, establishment_number: str) -> bool:
        """
        Delete an establishment.

        Returns:
            True if a row was deleted, False if not found
        """
        ...


class IEnterpriseRepository(Protocol):
    """
    Enterprise repository interface.

    Defines search, retrieval and write operations for Enterprise aggregates
    (enterprise row, main denomination, registered address, establishments).
    """

    @abstractmethod
    async def list_enterprises(
        self, take: Any = None, skip: Any = None, search_term: str | None = None
    ) -> list[Enterprise]:
        """
        List enterprises ordered by enterprise number.

        Args:
            take: Page size, defaults to 50 when absent or non-numeric
            skip: Offset, defaults to 0 when absent or non-numeric
            search_term: Optional partial match on number or name

        Returns:
            One page of enterprises with their name
        """
        ...

    @abstractmethod
    async def count_enterprises(self, search_term: str | None = None) -> int:
        """Count enterprises matching the same predicate as list_enterprises."""
        ...

    @abstractmethod
    async def get_enterprise_by_id(self, enterprise_number: str) -> Enterprise | None:
        """
        Retrieve an enterprise with its name, address and establishments.

        Returns:
            The enterprise if found, None otherwise
        """
        ...

    @abstractmethod
    async def list_establishments_by_enterprise(self, enterprise_number: str) -> list[Establishment]:
        """List the establishments of an enterprise, empty when none."""
        ...

    @abstractmethod
    async def list_tables(self) -> list[str]:
        """List table names of the registry schema (diagnostics)."""
        ...

    @abstractmethod
    async def create_enterprise(self, payload: Mapping[str, Any]) -> CreateResult:
        """
        Create an enterprise unless it already exists.

        Returns:
            The current enterprise and whether this call created it

        Raises:
            ValidationError: If the enterprise number is missing
        """
        ...

    @abstractmethod
    async def update_enterprise(
        self, enterprise_number: str, payload: Mapping[str, Any]
    ) -> Enterprise | None:
        """
        Update the fields present in the payload.

        Returns:
            The refreshed enterprise, None if it does not exist
        """
        ...

    @abstractmethod
    async def delete_enterprise(self, enterprise_number: str) -> bool:
        """
        Delete an enterprise and its dependent rows.

        Returns:
            True if the enterprise row existed and was removed
        """
        ...

    @abstractmethod
    async def upsert_enterprise_address(
        self, enterprise_number: str, payload: Mapping[str, Any]
    ) -> Enterprise | None:
        """
        Set the registered office address of an enterprise.

        Returns:
            The refreshed enterprise, None if it does not exist
        """
        ...
