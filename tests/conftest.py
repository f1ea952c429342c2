"""Global pytest configuration and fixtures."""

# Standard library imports
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

# Load test environment variables
from dotenv import load_dotenv

test_env_path = Path(__file__).parent.parent / ".env.test"
if test_env_path.exists():
    load_dotenv(test_env_path, override=True)

# Third-party imports
import pytest

# Local imports
from enterprise_registry.infrastructure.database.adapter import PostgreSQLAdapter


def make_mock_adapter() -> AsyncMock:
    """
    Mock PostgreSQLAdapter whose transaction() yields the mock itself.

    Every statement, inside a transaction or not, is recorded on the same
    execute_query / fetch_* mocks so tests can assert on the full sequence.
    """
    adapter = AsyncMock(spec=PostgreSQLAdapter)
    adapter.execute_query.return_value = 1
    adapter.fetch_one.return_value = None
    adapter.fetch_all.return_value = []
    adapter.fetch_values.return_value = []

    @asynccontextmanager
    async def transaction():
        yield adapter

    adapter.transaction = transaction
    return adapter


@pytest.fixture
def mock_adapter() -> AsyncMock:
    """Provides mock database adapter."""
    return make_mock_adapter()


@pytest.fixture
def enterprise_record() -> dict[str, Any]:
    """Enterprise detail row as returned by the detail query."""
    return {
        "enterprisenumber": "0200.065.765",
        "status": "AC",
        "juridicalsituation": "000",
        "typeofenterprise": "2",
        "juridicalform": "416",
        "juridicalformcac": None,
        "startdate": "1960-08-09",
        "name": "Intergemeentelijke Vereniging Veneco",
        "streetfr": "Rue de la Loi",
        "zipcode": "1000",
        "municipalityfr": "Bruxelles",
    }


@pytest.fixture
def establishment_record() -> dict[str, Any]:
    """Establishment row as returned by the establishment queries."""
    return {
        "establishmentnumber": "2.000.000.339",
        "startdate": "1976-07-01",
        "enterprisenumber": "0200.065.765",
    }
