"""
Consistency Procedures

The registry tables carry no foreign keys, no cascades and no unique
constraint the store could use for a native upsert. These procedures keep the
tables consistent instead:

- insert-if-absent: one conditional INSERT ... SELECT ... WHERE NOT EXISTS
- update-else-insert: an UPDATE on a fixed key projection, followed by a
  guarded INSERT when nothing was updated
- cascading delete: dependents first, the enterprise last

Address writes also require the owning enterprise inside the statements
themselves, so an enterprise deleted concurrently never gains an orphan row.

Under READ COMMITTED two callers may both see a key as absent. Where the store
has a primary key the loser fails with an IntegrityError; where it has none a
duplicate can appear. The guarded INSERT narrows that window but cannot close it.
"""

# Standard library imports
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

# Local imports
from enterprise_registry.domain.projections import (
    ADDRESS_TYPE_REGISTERED_OFFICE,
    DENOMINATION_LANGUAGE_FR,
    DENOMINATION_TYPE_MAIN,
)
from enterprise_registry.infrastructure.database.adapter import PostgreSQLAdapter

logger = logging.getLogger(__name__)

ENTERPRISE_FIELDS = (
    "status",
    "juridicalsituation",
    "typeofenterprise",
    "juridicalform",
    "juridicalformcac",
    "startdate",
)

ADDRESS_FIELDS = ("streetfr", "zipcode", "municipalityfr")

INSERT_ENTERPRISE_IF_ABSENT = """
INSERT INTO enterprise (
    enterprisenumber, status, juridicalsituation, typeofenterprise,
    juridicalform, juridicalformcac, startdate
)
SELECT
    $1::text, $2::text, $3::text, $4::text,
    $5::text, $6::text, $7::date
WHERE NOT EXISTS (
    SELECT 1 FROM enterprise WHERE enterprisenumber = $1::text
)
"""


async def insert_enterprise_if_absent(
    adapter: PostgreSQLAdapter, enterprise_number: str, values: Mapping[str, Any]
) -> bool:
    """
    Insert the enterprise row unless one already exists.

    Args:
        adapter: Database adapter (or a transaction-bound one)
        enterprise_number: Natural key of the enterprise
        values: Attribute values; absent keys are written as NULL

    Returns:
        True if a row was inserted, False if the enterprise already existed
    """
    inserted = await adapter.execute_query(
        INSERT_ENTERPRISE_IF_ABSENT,
        enterprise_number,
        *(values.get(column) for column in ENTERPRISE_FIELDS),
    )
    logger.debug(f"Insert-if-absent for enterprise {enterprise_number}: inserted={inserted > 0}")
    return inserted > 0


class UpsertOutcome(Enum):
    """How an update-else-insert ended."""

    UPDATED = "updated"
    INSERTED = "inserted"
    SKIPPED = "skipped"  # guarded insert wrote nothing


@dataclass(frozen=True)
class UpdateElseInsert:
    """
    Update-else-insert on a fixed key projection.

    Both statements receive the same arguments and must each reference all
    of them; the insert must be guarded by NOT EXISTS on the same key. Extra
    guards shared by both statements (such as an owner row that must exist)
    make the procedure end SKIPPED when they fail.
    """

    name: str
    update_sql: str
    insert_sql: str

    async def execute(self, adapter: PostgreSQLAdapter, *args: Any) -> UpsertOutcome:
        """
        Run the procedure in one transaction.

        Args:
            adapter: Database adapter
            *args: Statement arguments, bound to $1..$n in both statements

        Returns:
            The outcome of the procedure
        """
        async with adapter.transaction() as tx:
            updated = await tx.execute_query(self.update_sql, *args)
            if updated > 0:
                outcome = UpsertOutcome.UPDATED
            else:
                inserted = await tx.execute_query(self.insert_sql, *args)
                outcome = UpsertOutcome.INSERTED if inserted > 0 else UpsertOutcome.SKIPPED

        if outcome is UpsertOutcome.SKIPPED:
            logger.warning(f"{self.name}: guarded insert wrote nothing")
        else:
            logger.debug(f"{self.name}: {outcome.value}")
        return outcome


# $1 entitynumber, $2 denomination, $3 language, $4 typeofdenomination
MAIN_DENOMINATION_UPSERT = UpdateElseInsert(
    name="main denomination upsert",
    update_sql="""
    UPDATE denomination
    SET denomination = $2::text
    WHERE entitynumber = $1::text
      AND language = $3::text
      AND typeofdenomination = $4::text
    """,
    insert_sql="""
    INSERT INTO denomination (entitynumber, language, typeofdenomination, denomination)
    SELECT $1::text, $3::text, $4::text, $2::text
    WHERE NOT EXISTS (
        SELECT 1
        FROM denomination
        WHERE entitynumber = $1::text
          AND language = $3::text
          AND typeofdenomination = $4::text
    )
    """,
)

# $1 entitynumber, $2 typeofaddress, $3 streetfr, $4 zipcode, $5 municipalityfr
REGISTERED_ADDRESS_UPSERT = UpdateElseInsert(
    name="registered address upsert",
    update_sql="""
    UPDATE address
    SET streetfr = $3::text,
        zipcode = $4::text,
        municipalityfr = $5::text
    WHERE entitynumber = $1::text
      AND typeofaddress = $2::text
      AND EXISTS (SELECT 1 FROM enterprise WHERE enterprisenumber = $1::text)
    """,
    insert_sql="""
    INSERT INTO address (
        entitynumber, typeofaddress, countrynl, countryfr, zipcode,
        municipalitynl, municipalityfr, streetnl, streetfr,
        housenumber, box, extraaddressinfo, datestrikingoff
    )
    SELECT
        $1::text, $2::text, NULL, NULL, $4::text,
        NULL, $5::text, NULL, $3::text,
        NULL, NULL, NULL, NULL::date
    WHERE NOT EXISTS (
        SELECT 1 FROM address WHERE entitynumber = $1::text AND typeofaddress = $2::text
    )
      AND EXISTS (SELECT 1 FROM enterprise WHERE enterprisenumber = $1::text)
    """,
)


async def upsert_main_denomination(
    adapter: PostgreSQLAdapter, enterprise_number: str, name: str | None
) -> UpsertOutcome:
    """Write the main French name of an enterprise."""
    return await MAIN_DENOMINATION_UPSERT.execute(
        adapter, enterprise_number, name, DENOMINATION_LANGUAGE_FR, DENOMINATION_TYPE_MAIN
    )


async def upsert_registered_address(
    adapter: PostgreSQLAdapter, enterprise_number: str, values: Mapping[str, Any]
) -> UpsertOutcome:
    """Write the registered office address; absent keys are written as NULL."""
    return await REGISTERED_ADDRESS_UPSERT.execute(
        adapter,
        enterprise_number,
        ADDRESS_TYPE_REGISTERED_OFFICE,
        *(values.get(column) for column in ADDRESS_FIELDS),
    )


@dataclass(frozen=True)
class CascadeStep:
    """Delete the rows of one table that reference the deleted key."""

    table: str
    key_column: str

    @property
    def sql(self) -> str:
        # Table and column names are constants - not user input
        return f"DELETE FROM {self.table} WHERE {self.key_column} = $1"


class CascadeDelete:
    """
    Ordered multi-table delete.

    Steps run in list order inside one transaction, so a failing step rolls
    back the ones before it. The last step deletes the root row.
    """

    def __init__(self, steps: list[CascadeStep]) -> None:
        if not steps:
            raise ValueError("A cascade needs at least one step")
        self.steps = list(steps)

    @property
    def root(self) -> CascadeStep:
        return self.steps[-1]

    async def execute(self, adapter: PostgreSQLAdapter, key: str) -> dict[str, int]:
        """
        Delete everything attached to key, then the root row.

        Returns:
            Rows deleted per table
        """
        deleted: dict[str, int] = {}
        async with adapter.transaction() as tx:
            for step in self.steps:
                deleted[step.table] = await tx.execute_query(step.sql, key)

        logger.debug(f"Cascade delete of {key}: {deleted}")
        return deleted


ENTERPRISE_CASCADE = CascadeDelete(
    [
        CascadeStep("establishment", "enterprisenumber"),
        CascadeStep("address", "entitynumber"),
        CascadeStep("denomination", "entitynumber"),
        CascadeStep("enterprise", "enterprisenumber"),
    ]
)
