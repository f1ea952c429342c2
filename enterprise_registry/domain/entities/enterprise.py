"""
Enterprise Entity - A registered business entity with its name and registered office
"""

# Standard library imports
from dataclasses import dataclass
from typing import Any

from enterprise_registry.domain.entities.establishment import Establishment


@dataclass
class Address:
    """Registered office address (the REGO projection of the address table)."""

    street_fr: str | None = None
    zip_code: str | None = None
    municipality_fr: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "streetfr": self.street_fr,
            "zipcode": self.zip_code,
            "municipalityfr": self.municipality_fr,
        }


@dataclass
class Enterprise:
    """
    Enterprise entity identified by its enterprise number.

    `name` comes from the main French denomination. `address` and
    `establishments` are only loaded by detail reads; they stay None on
    listing results and are then left out of the wire record.
    """

    enterprise_number: str
    status: str | None = None
    juridical_situation: str | None = None
    type_of_enterprise: str | None = None
    juridical_form: str | None = None
    juridical_form_cac: str | None = None
    start_date: str | None = None  # YYYY-MM-DD
    name: str | None = None

    address: Address | None = None
    establishments: list[Establishment] | None = None

    def __post_init__(self) -> None:
        """Validate enterprise after initialization"""
        if not self.enterprise_number:
            raise ValueError("Enterprise number cannot be empty")

    @property
    def is_detailed(self) -> bool:
        """Whether the address and establishments have been loaded."""
        return self.establishments is not None

    def to_dict(self) -> dict[str, Any]:
        """
        Render the JSON-serializable wire record.

        Keys follow the column names of the underlying tables.
        """
        record: dict[str, Any] = {
            "enterprisenumber": self.enterprise_number,
            "status": self.status,
            "juridicalsituation": self.juridical_situation,
            "typeofenterprise": self.type_of_enterprise,
            "juridicalform": self.juridical_form,
            "juridicalformcac": self.juridical_form_cac,
            "startdate": self.start_date,
            "name": self.name,
        }

        if self.address is not None:
            record.update(self.address.to_dict())

        if self.establishments is not None:
            record["establishments"] = [e.to_dict() for e in self.establishments]

        return record

    def __str__(self) -> str:
        """String representation"""
        return f"Enterprise({self.enterprise_number}: {self.name or '<unnamed>'})"


@dataclass(frozen=True)
class CreateResult:
    """Outcome of an insert-if-absent creation."""

    enterprise: Enterprise | None
    created: bool
