"""
Enterprise Queries

Builds the listing, counting and detail queries for enterprises on top of the
generic QueryBuilder, and coerces the caller's paging options.

Every enterprise read joins the main French denomination; the detail read
also joins the registered office address. The fixed projections are bound as
parameters like any other value.
"""

# Standard library imports
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Local imports
from enterprise_registry.domain.projections import (
    ADDRESS_TYPE_REGISTERED_OFFICE,
    DATE_FORMAT_SQL,
    DENOMINATION_LANGUAGE_FR,
    DENOMINATION_TYPE_MAIN,
)
from enterprise_registry.infrastructure.database.query_builder import QueryBuilder, QueryResult

DEFAULT_TAKE = 50
DEFAULT_SKIP = 0

ENTERPRISE_COLUMNS = [
    "e.enterprisenumber",
    "e.status",
    "e.juridicalsituation",
    "e.typeofenterprise",
    "e.juridicalform",
    "e.juridicalformcac",
]

ADDRESS_COLUMNS = ["a.streetfr", "a.zipcode", "a.municipalityfr"]

_DENOMINATION_JOIN = (
    "d.entitynumber = e.enterprisenumber AND d.language = {0} AND d.typeofdenomination = {1}"
)
_ADDRESS_JOIN = "a.entitynumber = e.enterprisenumber AND a.typeofaddress = {0}"
_SEARCH_CONDITION = "(e.enterprisenumber ILIKE {0} OR d.denomination ILIKE {0})"


def formatted_date(column: str) -> str:
    """SQL expression rendering a date column as YYYY-MM-DD."""
    return f"to_char({column}, '{DATE_FORMAT_SQL}')"


def coerce_int(value: Any, default: int) -> int:
    """
    Coerce a paging option to an integer.

    Absent or non-numeric input yields the default, as does a fractional
    number. Numeric input, including zero and negative values, is returned
    as-is; numeric strings such as "2.0" are read the same way as the
    number they spell.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if not isinstance(value, float):
        text = str(value).strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            return default
    return int(value) if value.is_integer() else default


@dataclass(frozen=True)
class EnterpriseSearch:
    """Paging and search options for enterprise listings."""

    take: int = DEFAULT_TAKE
    skip: int = DEFAULT_SKIP
    search_term: str | None = None

    @classmethod
    def from_params(cls, take: Any = None, skip: Any = None, q: Any = None) -> "EnterpriseSearch":
        """Build options from raw request parameters."""
        return cls(
            take=coerce_int(take, DEFAULT_TAKE),
            skip=coerce_int(skip, DEFAULT_SKIP),
            search_term=normalize_search_term(q),
        )

    @property
    def pattern(self) -> str | None:
        """ILIKE pattern for the search term, None when there is no term."""
        return search_pattern(self.search_term)


def normalize_search_term(q: Any) -> str | None:
    """Return the term unchanged, or None when absent or blank after trimming."""
    if q is None:
        return None
    term = str(q)
    return term if term.strip() else None


def search_pattern(search_term: str | None) -> str | None:
    """Wrap the raw term in wildcards for a partial match."""
    term = normalize_search_term(search_term)
    if term is None:
        return None
    return f"%{term}%"


def _enterprise_base(builder: QueryBuilder) -> QueryBuilder:
    return builder.from_table("enterprise", "e").join(
        "denomination",
        _DENOMINATION_JOIN,
        [DENOMINATION_LANGUAGE_FR, DENOMINATION_TYPE_MAIN],
        join_type="LEFT",
        alias="d",
    )


def _apply_search(builder: QueryBuilder, search_term: str | None) -> QueryBuilder:
    pattern = search_pattern(search_term)
    if pattern is not None:
        builder.where(_SEARCH_CONDITION, [pattern])
    return builder


def build_list_query(search: EnterpriseSearch) -> QueryResult:
    """
    Build the enterprise listing query.

    Args:
        search: Paging and search options

    Returns:
        Query ordered by enterprise number with LIMIT and OFFSET bound last
    """
    builder = (
        QueryBuilder()
        .select(ENTERPRISE_COLUMNS)
        .select_expression(formatted_date("e.startdate"), "startdate")
        .select_expression("d.denomination", "name")
    )
    _enterprise_base(builder)
    _apply_search(builder, search.search_term)

    return builder.order_by("e.enterprisenumber").limit(search.take).offset(search.skip).build()


def build_count_query(search_term: str | None = None) -> QueryResult:
    """Build the count query matching build_list_query, without paging."""
    builder = QueryBuilder().select_expression("COUNT(*)::int", "total")
    _enterprise_base(builder)
    _apply_search(builder, search_term)
    return builder.build()


def build_detail_query(enterprise_number: str) -> QueryResult:
    """Build the single-enterprise query with name and registered office."""
    builder = (
        QueryBuilder()
        .select(ENTERPRISE_COLUMNS)
        .select_expression(formatted_date("e.startdate"), "startdate")
        .select_expression("d.denomination", "name")
        .select(ADDRESS_COLUMNS)
    )
    _enterprise_base(builder)
    builder.join(
        "address",
        _ADDRESS_JOIN,
        [ADDRESS_TYPE_REGISTERED_OFFICE],
        join_type="LEFT",
        alias="a",
    )
    return builder.where("e.enterprisenumber = {0}", [enterprise_number]).build()


def build_partial_update(
    table: str,
    key_column: str,
    key: str,
    payload: Mapping[str, Any],
    columns: Mapping[str, str],
) -> QueryResult | None:
    """
    Build an UPDATE touching only the columns present in the payload.

    A present key with a None value clears the column; an absent key leaves
    it untouched.

    Args:
        table: Table to update
        key_column: Natural key column
        key: Natural key value
        payload: Caller payload keyed by column name
        columns: Updatable columns mapped to their SQL cast type

    Returns:
        The query, or None when the payload names no updatable column
    """
    present = [column for column in columns if column in payload]
    if not present:
        return None

    assignments = [f"{column} = {{{i}}}::{columns[column]}" for i, column in enumerate(present)]
    return (
        QueryBuilder()
        .update(table)
        .set(assignments, [payload[column] for column in present])
        .where(f"{key_column} = {{0}}::text", [key])
        .build()
    )
