"""
Type-safe SQL Query Builder - Secure parameterized query construction.

This module builds SELECT and UPDATE statements with automatic
parameterization. Values are never concatenated into SQL text; identifiers are
validated against a strict pattern.

Clause fragments reference their own values with positional fields ({0}, {1},
...). The builder renumbers them to PostgreSQL placeholders ($1, $2, ...) when
the statement is built, walking the clauses in the order they appear in the
final SQL, so placeholder numbers always increase from left to right. A field
used twice in one fragment binds its value once and reuses the placeholder.

Usage Examples:
    # SELECT query
    query = (QueryBuilder()
        .select(['e.enterprisenumber', 'e.status'])
        .from_table('enterprise', 'e')
        .join('denomination', 'd.entitynumber = e.enterprisenumber AND d.language = {0}',
              ['2'], join_type='LEFT', alias='d')
        .where('(e.enterprisenumber ILIKE {0} OR d.denomination ILIKE {0})', ['%acme%'])
        .order_by('e.enterprisenumber')
        .limit(10)
        .build())
    # -> ... d.language = $1 ... ILIKE $2 OR d.denomination ILIKE $2 ... LIMIT $3

    # UPDATE query
    query = (QueryBuilder()
        .update('enterprise')
        .set(['status = {0}::text'], ['AC'])
        .where('enterprisenumber = {0}::text', ['0123.456.789'])
        .build())
"""

import logging
import re
from enum import Enum
from string import Formatter
from typing import Any

logger = logging.getLogger(__name__)

_IDENTIFIER = r"[a-zA-Z_][a-zA-Z0-9_]*"
_IDENTIFIER_PATTERN = re.compile(rf"^{_IDENTIFIER}$")
_QUALIFIED_PATTERN = re.compile(rf"^{_IDENTIFIER}(\.{_IDENTIFIER})?$")

_RESERVED_WORDS = {"SELECT", "INSERT", "UPDATE", "DELETE", "DROP", "CREATE", "ALTER"}


class QueryType(Enum):
    """Enumeration of supported query types."""

    SELECT = "SELECT"
    UPDATE = "UPDATE"


class QueryBuilderError(Exception):
    """Raised when query building fails due to validation or structure errors."""

    pass


class SecurityError(QueryBuilderError):
    """Raised when query building fails due to security validation."""

    pass


class QueryResult:
    """
    Result of query building containing the SQL and parameters.

    This class encapsulates the final SQL query and its parameters,
    ensuring they can only be used together safely.
    """

    def __init__(self, sql: str, parameters: list[Any]):
        self.sql = sql
        self.parameters = parameters
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after creation."""
        if hasattr(self, "_frozen") and self._frozen and name != "_frozen":
            raise AttributeError("QueryResult is immutable after creation")
        super().__setattr__(name, value)

    def __iter__(self):
        """Allow `sql, parameters = result` unpacking."""
        yield self.sql
        yield self.parameters

    def __str__(self) -> str:
        return f"QueryResult(sql={self.sql!r}, parameters={self.parameters!r})"

    def __repr__(self) -> str:
        return self.__str__()


class _Fragment:
    """A clause template together with the values its fields refer to."""

    __slots__ = ("template", "parameters")

    def __init__(self, template: str, parameters: list[Any]) -> None:
        self.template = template
        self.parameters = parameters


def _field_order(template: str) -> list[int]:
    """Return positional field indexes in order of first appearance."""
    seen: list[int] = []
    for _, field_name, format_spec, conversion in Formatter().parse(template):
        if field_name is None:
            continue
        if not field_name.isdigit() or format_spec or conversion:
            raise QueryBuilderError(
                f"Only bare positional fields like {{0}} are allowed, got {{{field_name}}}"
            )
        index = int(field_name)
        if index not in seen:
            seen.append(index)
    return seen


def _make_fragment(template: str, parameters: list[Any] | None, context: str) -> _Fragment:
    """
    Validate a clause template against its parameters.

    Every parameter must be referenced, and fields must first appear in
    ascending order so renumbering preserves left-to-right order.
    """
    parameters = list(parameters or [])
    order = _field_order(template)

    if sorted(order) != list(range(len(parameters))):
        raise QueryBuilderError(
            f"{context} parameter count mismatch: fields {sorted(order)}, "
            f"{len(parameters)} parameters"
        )
    if order != sorted(order):
        raise QueryBuilderError(f"{context} fields must first appear in ascending order")

    return _Fragment(template, parameters)


class QueryBuilder:
    """
    Type-safe SQL query builder with automatic parameterization.

    This class builds SQL queries while enforcing:
    - All data values are parameterized automatically
    - SQL identifiers (tables, columns, aliases) are validated
    - Placeholders are numbered in left-to-right order of appearance
    """

    def __init__(self):
        """Initialize a new query builder."""
        self._query_type: QueryType | None = None
        self._select_columns: list[str] = []
        self._from_table: str | None = None
        self._join_clauses: list[_Fragment] = []
        self._where_clauses: list[_Fragment] = []
        self._order_by_clauses: list[str] = []
        self._limit: _Fragment | None = None
        self._offset: _Fragment | None = None

        # UPDATE specific
        self._update_table: str | None = None
        self._set_clauses: list[_Fragment] = []

    def _validate_identifier(self, identifier: str, context: str = "identifier") -> str:
        """
        Validate a bare SQL identifier (table name, alias).

        Raises:
            SecurityError: If identifier is invalid
        """
        if not isinstance(identifier, str) or not _IDENTIFIER_PATTERN.match(identifier):
            raise SecurityError(f"Invalid SQL {context}: {identifier!r}")
        if identifier.upper() in _RESERVED_WORDS:
            raise SecurityError(f"Reserved SQL word used as {context}: {identifier}")
        return identifier

    def _validate_column(self, column: str, context: str = "column") -> str:
        """Validate a column reference, optionally qualified by a table alias."""
        if not isinstance(column, str) or not _QUALIFIED_PATTERN.match(column):
            raise SecurityError(f"Invalid SQL {context}: {column!r}")
        return column

    def _require(self, query_type: QueryType) -> None:
        if self._query_type is not None and self._query_type != query_type:
            raise QueryBuilderError(
                f"Cannot mix {query_type.value} with {self._query_type.value}"
            )
        self._query_type = query_type

    def select(self, columns: list[str] | str) -> "QueryBuilder":
        """
        Add SELECT columns to the query.

        Args:
            columns: Column references to select (list or single string)

        Returns:
            Self for method chaining

        Raises:
            SecurityError: If column names are invalid
            QueryBuilderError: If query structure is invalid
        """
        self._require(QueryType.SELECT)

        if isinstance(columns, str):
            columns = [columns]

        for column in columns:
            if column.strip() == "*":
                self._select_columns.append("*")
            else:
                self._select_columns.append(self._validate_column(column))

        return self

    def select_expression(self, expression: str, alias: str) -> "QueryBuilder":
        """
        Add a computed SELECT column.

        The expression is trusted SQL written by the caller (never user input);
        only the alias is validated.

        Args:
            expression: SQL expression, e.g. "to_char(e.startdate, 'YYYY-MM-DD')"
            alias: Output column name

        Returns:
            Self for method chaining
        """
        self._require(QueryType.SELECT)

        if not expression.strip() or ";" in expression:
            raise SecurityError(f"Invalid SELECT expression: {expression!r}")

        validated_alias = self._validate_identifier(alias, "alias")
        self._select_columns.append(f"{expression} AS {validated_alias}")
        return self

    def from_table(self, table: str, alias: str | None = None) -> "QueryBuilder":
        """
        Set the FROM table for SELECT queries.

        Args:
            table: Table name
            alias: Optional table alias

        Returns:
            Self for method chaining
        """
        validated_table = self._validate_identifier(table, "table")

        if alias:
            validated_alias = self._validate_identifier(alias, "alias")
            self._from_table = f"{validated_table} {validated_alias}"
        else:
            self._from_table = validated_table

        return self

    def join(
        self,
        table: str,
        on_condition: str,
        parameters: list[Any] | None = None,
        join_type: str = "INNER",
        alias: str | None = None,
    ) -> "QueryBuilder":
        """
        Add JOIN clause with optional parameters.

        Args:
            table: Table to join
            on_condition: JOIN condition with positional fields ({0}, {1}, ...)
            parameters: Values for the condition's fields
            join_type: Type of join (INNER, LEFT, RIGHT, FULL)
            alias: Optional table alias

        Returns:
            Self for method chaining
        """
        validated_table = self._validate_identifier(table, "join table")
        if alias:
            validated_table = f"{validated_table} {self._validate_identifier(alias, 'alias')}"

        allowed_joins = {"INNER", "LEFT", "RIGHT", "FULL"}
        if join_type.upper() not in allowed_joins:
            raise QueryBuilderError(f"Invalid join type: {join_type}")

        fragment = _make_fragment(on_condition, parameters, "JOIN")
        fragment.template = f"{join_type.upper()} JOIN {validated_table} ON {on_condition}"
        self._join_clauses.append(fragment)

        return self

    def where(self, condition: str, parameters: list[Any] | None = None) -> "QueryBuilder":
        """
        Add WHERE condition with parameters.

        Conditions added by repeated calls are combined with AND.

        Args:
            condition: WHERE condition with positional fields ({0}, {1}, ...)
            parameters: List of parameter values

        Returns:
            Self for method chaining

        Example:
            .where("(e.enterprisenumber ILIKE {0} OR d.denomination ILIKE {0})", ["%acme%"])
        """
        if not condition.strip():
            raise QueryBuilderError("WHERE condition cannot be empty")

        self._where_clauses.append(_make_fragment(condition, parameters, "WHERE"))
        return self

    def order_by(self, column: str, direction: str = "ASC") -> "QueryBuilder":
        """
        Add ORDER BY clause.

        Args:
            column: Column name to order by
            direction: Sort direction (ASC or DESC)

        Returns:
            Self for method chaining
        """
        validated_column = self._validate_column(column, "order by column")

        if direction.upper() not in ["ASC", "DESC"]:
            raise QueryBuilderError(f"Invalid sort direction: {direction}")

        self._order_by_clauses.append(f"{validated_column} {direction.upper()}")

        return self

    def limit(self, count: int) -> "QueryBuilder":
        """
        Add LIMIT clause, bound as a parameter.

        The value is passed to the store as-is; its meaning for zero or
        negative counts is the store's.
        """
        if not isinstance(count, int) or isinstance(count, bool):
            raise QueryBuilderError("LIMIT count must be an integer")

        self._limit = _Fragment("LIMIT {0}", [count])
        return self

    def offset(self, count: int) -> "QueryBuilder":
        """Add OFFSET clause, bound as a parameter."""
        if not isinstance(count, int) or isinstance(count, bool):
            raise QueryBuilderError("OFFSET count must be an integer")

        self._offset = _Fragment("OFFSET {0}", [count])
        return self

    def update(self, table: str) -> "QueryBuilder":
        """
        Start an UPDATE query.

        Args:
            table: Table to update

        Returns:
            Self for method chaining
        """
        self._require(QueryType.UPDATE)
        self._update_table = self._validate_identifier(table, "update table")

        return self

    def set(self, assignments: list[str], parameters: list[Any]) -> "QueryBuilder":
        """
        Add SET clause for UPDATE.

        Args:
            assignments: Column assignments (e.g., ["status = {0}::text", "startdate = {1}::date"])
            parameters: Parameter values

        Returns:
            Self for method chaining
        """
        if self._query_type != QueryType.UPDATE:
            raise QueryBuilderError("SET can only be used with UPDATE")

        for assignment in assignments:
            column = assignment.split("=", 1)[0].strip()
            self._validate_column(column, "set column")

        self._set_clauses.append(_make_fragment(", ".join(assignments), parameters, "SET"))
        return self

    def build(self) -> QueryResult:
        """
        Build the final SQL query with parameters.

        Returns:
            QueryResult containing SQL and parameters

        Raises:
            QueryBuilderError: If query structure is invalid
        """
        if self._query_type is None:
            raise QueryBuilderError("No query type specified")

        if self._query_type == QueryType.SELECT:
            return self._build_select()
        elif self._query_type == QueryType.UPDATE:
            return self._build_update()
        else:
            raise QueryBuilderError(f"Unsupported query type: {self._query_type}")

    @staticmethod
    def _render(fragment: _Fragment, bound: list[Any]) -> str:
        """Append a fragment's values and return its text with $n placeholders."""
        base = len(bound)
        bound.extend(fragment.parameters)
        placeholders = [f"${base + i + 1}" for i in range(len(fragment.parameters))]
        return fragment.template.format(*placeholders)

    def _render_where(self, bound: list[Any]) -> str | None:
        if not self._where_clauses:
            return None
        return "WHERE " + " AND ".join(
            f"({self._render(clause, bound)})" for clause in self._where_clauses
        )

    def _build_select(self) -> QueryResult:
        """Build SELECT query."""
        if not self._select_columns:
            raise QueryBuilderError("SELECT query must have columns")
        if not self._from_table:
            raise QueryBuilderError("SELECT query must have FROM table")

        bound: list[Any] = []

        sql_parts = ["SELECT " + ", ".join(self._select_columns)]
        sql_parts.append(f"FROM {self._from_table}")
        sql_parts.extend(self._render(join, bound) for join in self._join_clauses)

        where = self._render_where(bound)
        if where:
            sql_parts.append(where)

        if self._order_by_clauses:
            sql_parts.append("ORDER BY " + ", ".join(self._order_by_clauses))

        if self._limit is not None:
            sql_parts.append(self._render(self._limit, bound))

        if self._offset is not None:
            sql_parts.append(self._render(self._offset, bound))

        sql = " ".join(sql_parts)
        logger.debug(f"Built SELECT: {sql} | Parameters: {len(bound)}")
        return QueryResult(sql, bound)

    def _build_update(self) -> QueryResult:
        """Build UPDATE query."""
        if not self._update_table:
            raise QueryBuilderError("UPDATE query must have table")
        if not self._set_clauses:
            raise QueryBuilderError("UPDATE query must have SET clauses")
        if not self._where_clauses:
            raise QueryBuilderError("UPDATE query without WHERE clause is not allowed")

        bound: list[Any] = []

        sql_parts = [f"UPDATE {self._update_table}"]
        sql_parts.append("SET " + ", ".join(self._render(clause, bound) for clause in self._set_clauses))
        sql_parts.append(self._render_where(bound))

        sql = " ".join(sql_parts)
        logger.debug(f"Built UPDATE: {sql} | Parameters: {len(bound)}")
        return QueryResult(sql, bound)
