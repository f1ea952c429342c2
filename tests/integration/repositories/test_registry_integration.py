"""
Integration tests for the registry repositories against a real PostgreSQL.

Set TEST_DATABASE_URL (e.g. in .env.test) to run them; every test starts
from an empty registry.
"""

# Standard library imports
import os

# Third-party imports
import pytest

# Local imports
from enterprise_registry.infrastructure.database import (
    DatabaseConfig,
    DatabaseConnection,
    PostgreSQLAdapter,
    apply_schema,
)
from enterprise_registry.infrastructure.database.schema import truncate_registry
from enterprise_registry.infrastructure.repositories import (
    PostgreSQLEnterpriseRepository,
    PostgreSQLEstablishmentRepository,
)

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not os.getenv("TEST_DATABASE_URL"), reason="TEST_DATABASE_URL not set"),
]


@pytest.fixture
async def adapter():
    connection = DatabaseConnection(DatabaseConfig.from_url(os.environ["TEST_DATABASE_URL"]))
    pool = await connection.connect()
    adapter = PostgreSQLAdapter(pool)
    await apply_schema(adapter)
    await truncate_registry(adapter)
    try:
        yield adapter
    finally:
        await connection.disconnect()


@pytest.fixture
def establishments(adapter):
    return PostgreSQLEstablishmentRepository(adapter)


@pytest.fixture
def enterprises(adapter, establishments):
    return PostgreSQLEnterpriseRepository(adapter, establishments=establishments)


async def seed(enterprises, count: int) -> list[str]:
    numbers = [f"0200.000.{i:03d}" for i in range(count)]
    for i, number in enumerate(numbers):
        await enterprises.create_enterprise(
            {"enterprisenumber": number, "status": "AC", "name": f"Company {i}"}
        )
    return numbers


@pytest.mark.integration
class TestEnterpriseLifecycle:
    """Create, read, update and delete against the real store."""

    async def test_create_then_get(self, enterprises):
        result = await enterprises.create_enterprise(
            {
                "enterprisenumber": "0200.065.765",
                "status": "AC",
                "startdate": "1960-08-09",
                "name": "Veneco",
            }
        )

        assert result.created
        enterprise = await enterprises.get_enterprise_by_id("0200.065.765")
        assert enterprise.name == "Veneco"
        assert enterprise.start_date == "1960-08-09"
        assert enterprise.establishments == []
        assert enterprise.address.street_fr is None

    async def test_create_existing_keeps_first_attributes(self, enterprises):
        await enterprises.create_enterprise({"enterprisenumber": "0200.065.765", "status": "AC"})

        result = await enterprises.create_enterprise(
            {"enterprisenumber": "0200.065.765", "status": "ST", "name": "Renamed"}
        )

        assert not result.created
        assert result.enterprise.status == "AC"
        assert result.enterprise.name == "Renamed"

    async def test_partial_update(self, enterprises):
        await enterprises.create_enterprise(
            {"enterprisenumber": "0200.065.765", "status": "AC", "juridicalform": "014"}
        )

        updated = await enterprises.update_enterprise("0200.065.765", {"status": "ST"})

        assert updated.status == "ST"
        assert updated.juridical_form == "014"

    async def test_empty_update_changes_nothing(self, enterprises):
        await enterprises.create_enterprise({"enterprisenumber": "0200.065.765", "status": "AC"})

        unchanged = await enterprises.update_enterprise("0200.065.765", {})

        assert unchanged.status == "AC"

    async def test_update_missing_enterprise(self, enterprises):
        assert await enterprises.update_enterprise("0999.999.999", {"status": "ST"}) is None

    async def test_delete_cascades(self, adapter, enterprises, establishments):
        await enterprises.create_enterprise({"enterprisenumber": "0200.065.765", "name": "Veneco"})
        await enterprises.upsert_enterprise_address("0200.065.765", {"streetfr": "Rue de la Loi"})
        await establishments.create_establishment(
            {"establishmentnumber": "2.000.000.339", "enterprisenumber": "0200.065.765"}
        )

        assert await enterprises.delete_enterprise("0200.065.765")

        assert await enterprises.get_enterprise_by_id("0200.065.765") is None
        assert await establishments.list_by_enterprise("0200.065.765") == []
        assert await establishments.get_establishment_by_id("2.000.000.339") is None
        assert (
            await adapter.fetch_all("SELECT * FROM address WHERE entitynumber = $1", "0200.065.765")
            == []
        )
        assert not await enterprises.delete_enterprise("0200.065.765")

        await enterprises.create_enterprise({"enterprisenumber": "0200.065.765"})
        recreated = await enterprises.get_enterprise_by_id("0200.065.765")
        assert recreated.name is None
        assert recreated.address.street_fr is None


@pytest.mark.integration
class TestEnterpriseSearch:
    """Paging and search against the real store."""

    async def test_consecutive_pages_match_one_larger_page(self, enterprises):
        await seed(enterprises, 5)

        first = await enterprises.list_enterprises(take=2, skip=0)
        second = await enterprises.list_enterprises(take=2, skip=2)
        whole = await enterprises.list_enterprises(take=4, skip=0)

        assert len(first) == len(second) == 2
        assert [e.enterprise_number for e in first + second] == [
            e.enterprise_number for e in whole
        ]

    async def test_listing_is_ordered(self, enterprises):
        numbers = await seed(enterprises, 3)

        listed = await enterprises.list_enterprises()

        assert [e.enterprise_number for e in listed] == numbers

    async def test_count_matches_unbounded_listing(self, enterprises):
        await seed(enterprises, 12)

        listed = await enterprises.list_enterprises(take=100, search_term="company 1")

        assert await enterprises.count_enterprises("company 1") == len(listed) == 3

    async def test_search_by_number_fragment(self, enterprises):
        await seed(enterprises, 3)

        listed = await enterprises.list_enterprises(search_term="000.002")

        assert [e.enterprise_number for e in listed] == ["0200.000.002"]


@pytest.mark.integration
class TestRegisteredAddress:
    """Registered office address maintenance."""

    async def test_repeated_upserts_keep_one_address(self, adapter, enterprises):
        await enterprises.create_enterprise({"enterprisenumber": "0200.065.765"})

        await enterprises.upsert_enterprise_address(
            "0200.065.765", {"streetfr": "Rue de la Loi", "zipcode": "1000"}
        )
        enterprise = await enterprises.upsert_enterprise_address(
            "0200.065.765", {"streetfr": "Wetstraat", "municipalityfr": "Bruxelles"}
        )

        rows = await adapter.fetch_all(
            "SELECT * FROM address WHERE entitynumber = $1 AND typeofaddress = $2",
            "0200.065.765",
            "REGO",
        )
        assert len(rows) == 1
        assert enterprise.address.street_fr == "Wetstraat"
        assert enterprise.address.zip_code is None
        assert enterprise.address.municipality_fr == "Bruxelles"

    async def test_unknown_enterprise_writes_nothing(self, adapter, enterprises):
        result = await enterprises.upsert_enterprise_address("0999.999.999", {"streetfr": "x"})

        assert result is None
        assert await adapter.fetch_all("SELECT * FROM address") == []
