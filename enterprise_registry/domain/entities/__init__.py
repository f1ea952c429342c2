"""Domain entities of the registry."""

from .enterprise import Address, CreateResult, Enterprise
from .establishment import Establishment

__all__ = ["Address", "CreateResult", "Enterprise", "Establishment"]
