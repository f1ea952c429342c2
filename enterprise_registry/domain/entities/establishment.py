"""
Establishment Entity - A physical operating location of an enterprise
"""

# Standard library imports
from dataclasses import dataclass
from typing import Any


@dataclass
class Establishment:
    """
    Establishment entity identified by its establishment number.

    The owning enterprise is a logical reference only; the store does not
    enforce it.
    """

    establishment_number: str
    enterprise_number: str | None = None
    start_date: str | None = None  # YYYY-MM-DD

    def __post_init__(self) -> None:
        """Validate establishment after initialization"""
        if not self.establishment_number:
            raise ValueError("Establishment number cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        """Render the wire record."""
        return {
            "establishmentnumber": self.establishment_number,
            "startdate": self.start_date,
            "enterprisenumber": self.enterprise_number,
        }

    def __str__(self) -> str:
        """String representation"""
        return f"Establishment({self.establishment_number} of {self.enterprise_number})"
