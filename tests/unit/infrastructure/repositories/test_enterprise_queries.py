"""
Unit tests for the enterprise query builders and paging coercion.
"""

import pytest

from enterprise_registry.infrastructure.repositories.enterprise_queries import (
    DEFAULT_SKIP,
    DEFAULT_TAKE,
    EnterpriseSearch,
    build_count_query,
    build_detail_query,
    build_list_query,
    build_partial_update,
    coerce_int,
    search_pattern,
)


@pytest.mark.unit
class TestPagingCoercion:
    """Test take/skip/q coercion."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, 7),
            ("abc", 7),
            ("", 7),
            (True, 7),
            (12.5, 7),
            ("25", 25),
            (" 25 ", 25),
            (25, 25),
            (25.0, 25),
            (0, 0),
            (-5, -5),
            ("-5", -5),
            ("2.0", 2),
            (" 3.0 ", 3),
            ("2.5", 7),
            ("nan", 7),
            ("inf", 7),
            (float("nan"), 7),
        ],
    )
    def test_coerce_int(self, value, expected):
        assert coerce_int(value, 7) == expected

    def test_defaults(self):
        search = EnterpriseSearch.from_params()

        assert search.take == DEFAULT_TAKE == 50
        assert search.skip == DEFAULT_SKIP == 0
        assert search.search_term is None
        assert search.pattern is None

    def test_blank_term_is_absent(self):
        assert EnterpriseSearch.from_params(q="   ").search_term is None

    def test_term_is_not_trimmed_inside_pattern(self):
        search = EnterpriseSearch.from_params(q=" acme ")

        assert search.search_term == " acme "
        assert search.pattern == "% acme %"

    def test_search_pattern(self):
        assert search_pattern("veneco") == "%veneco%"
        assert search_pattern("") is None
        assert search_pattern(None) is None


@pytest.mark.unit
class TestListQuery:
    """Test the listing query."""

    def test_list_without_search(self):
        query = build_list_query(EnterpriseSearch(take=10, skip=20))

        assert "FROM enterprise e LEFT JOIN denomination d" in query.sql
        assert "d.language = $1 AND d.typeofdenomination = $2" in query.sql
        assert "WHERE" not in query.sql
        assert query.sql.endswith("ORDER BY e.enterprisenumber ASC LIMIT $3 OFFSET $4")
        assert query.parameters == ["2", "001", 10, 20]

    def test_list_with_search_shares_one_placeholder(self):
        query = build_list_query(EnterpriseSearch(take=5, skip=0, search_term="acme"))

        assert "(e.enterprisenumber ILIKE $3 OR d.denomination ILIKE $3)" in query.sql
        assert query.sql.endswith("LIMIT $4 OFFSET $5")
        assert query.parameters == ["2", "001", "%acme%", 5, 0]

    def test_consecutive_pages_differ_only_in_paging(self):
        first = build_list_query(EnterpriseSearch(take=2, skip=0))
        second = build_list_query(EnterpriseSearch(take=2, skip=2))
        whole = build_list_query(EnterpriseSearch(take=4, skip=0))

        assert first.sql == second.sql == whole.sql
        assert "ORDER BY e.enterprisenumber ASC" in whole.sql
        assert first.parameters[:-2] == second.parameters[:-2] == whole.parameters[:-2]
        assert [first.parameters[-2:], second.parameters[-2:]] == [[2, 0], [2, 2]]

    def test_list_selects_formatted_date_and_name(self):
        query = build_list_query(EnterpriseSearch())

        assert "to_char(e.startdate, 'YYYY-MM-DD') AS startdate" in query.sql
        assert "d.denomination AS name" in query.sql


@pytest.mark.unit
class TestCountQuery:
    """Test the count query."""

    def test_count_without_search(self):
        query = build_count_query()

        assert query.sql.startswith("SELECT COUNT(*)::int AS total FROM enterprise e")
        assert "LIMIT" not in query.sql
        assert "ORDER BY" not in query.sql
        assert query.parameters == ["2", "001"]

    def test_count_uses_same_predicate_as_list(self):
        count = build_count_query("acme")
        listing = build_list_query(EnterpriseSearch(search_term="acme"))

        predicate = "(e.enterprisenumber ILIKE $3 OR d.denomination ILIKE $3)"
        assert predicate in count.sql
        assert predicate in listing.sql
        assert count.parameters == listing.parameters[:3]


@pytest.mark.unit
class TestDetailQuery:
    """Test the detail query."""

    def test_detail_joins_name_and_registered_address(self):
        query = build_detail_query("0200.065.765")

        assert "LEFT JOIN address a ON a.entitynumber = e.enterprisenumber" in query.sql
        assert "a.typeofaddress = $3" in query.sql
        assert "a.streetfr, a.zipcode, a.municipalityfr" in query.sql
        assert query.sql.endswith("WHERE (e.enterprisenumber = $4)")
        assert query.parameters == ["2", "001", "REGO", "0200.065.765"]


@pytest.mark.unit
class TestPartialUpdate:
    """Test present-keys update composition."""

    COLUMNS = {"status": "text", "startdate": "date"}

    def test_only_present_keys_are_set(self):
        query = build_partial_update(
            "enterprise", "enterprisenumber", "0200.065.765", {"startdate": "2020-01-01"}, self.COLUMNS
        )

        assert query.sql == (
            "UPDATE enterprise SET startdate = $1::date WHERE (enterprisenumber = $2::text)"
        )
        assert query.parameters == ["2020-01-01", "0200.065.765"]

    def test_explicit_none_clears_column(self):
        query = build_partial_update(
            "enterprise", "enterprisenumber", "x", {"status": None}, self.COLUMNS
        )

        assert "status = $1::text" in query.sql
        assert query.parameters == [None, "x"]

    def test_unknown_keys_only_yields_none(self):
        query = build_partial_update(
            "enterprise", "enterprisenumber", "x", {"name": "Acme", "bogus": 1}, self.COLUMNS
        )

        assert query is None

    def test_column_order_follows_column_map(self):
        query = build_partial_update(
            "enterprise", "enterprisenumber", "x", {"startdate": None, "status": "AC"}, self.COLUMNS
        )

        assert "SET status = $1::text, startdate = $2::date" in query.sql
        assert query.parameters == ["AC", None, "x"]
