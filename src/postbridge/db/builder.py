"""
Postbridge - Query Builder.

Fluent, Supabase-style builder bound to one resource. Chained calls only
accumulate state; the single HTTP request fires when the builder is
awaited or a terminal accessor (execute, single, maybe_single) runs.

Usage:
    result = await (
        client.from_("subscribers")
        .select("id, full_name", count="exact")
        .eq("is_active", True)
        .order("subscribed_at", ascending=False)
        .range(0, 24)
    )
    if result.error:
        ...

A builder is meant to be executed once. Awaiting it again sends a
second, identical request.
"""

import re
from typing import Any, Generator, Iterable

import httpx

from postbridge.db import filters
from postbridge.db.executor import build_request, send
from postbridge.db.filters import Operator
from postbridge.db.models import (
    COUNT_MODES,
    CountMode,
    Payload,
    PostgrestError,
    QueryResult,
    SingleResult,
)
from postbridge.db.request_context import HeaderProvider, no_headers
from postbridge.db.state import QueryState

# The select list may not contain spaces after commas
_COMMA_WHITESPACE = re.compile(r",\s+")

NO_ROWS_MESSAGE = "No rows found"


class QueryBuilder:
    """Chainable query against a single resource."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        resource: str,
        headers: HeaderProvider = no_headers,
    ):
        self._http = http
        self._headers = headers
        self.state = QueryState(resource=resource)

    def __repr__(self) -> str:
        return f"<QueryBuilder {self.state.intent.value} {self.state.resource}>"

    # =========================================================================
    # Projection and mutations
    # =========================================================================

    def select(
        self,
        columns: str = "*",
        *,
        count: CountMode | None = None,
        head: bool = False,
    ) -> "QueryBuilder":
        """
        Set the projection.

        Args:
            columns: Field list, e.g. "id, name, pages(*)"
            count: Ask the server to count matching rows
            head: Send HEAD and return only the count
        """
        if count is not None and count not in COUNT_MODES:
            raise ValueError(f"count must be one of {COUNT_MODES}, got {count!r}")
        self.state.select = _COMMA_WHITESPACE.sub(",", columns)
        if count:
            self.state.count = count
        if head:
            self.state.head = True
        return self

    def insert(self, payload: Payload) -> "QueryBuilder":
        self.state.insert = payload
        return self

    def update(self, payload: Payload) -> "QueryBuilder":
        self.state.update = payload
        return self

    def delete(self) -> "QueryBuilder":
        self.state.delete = True
        return self

    # =========================================================================
    # Filters
    # =========================================================================

    def add_filter(self, key: str, value: str) -> "QueryBuilder":
        """Append an already-encoded filter (column or or/and key, wire value)."""
        self.state.filters.append((key, value))
        return self

    def filter(self, column: str, operator: str, value: Any) -> "QueryBuilder":
        """
        Append a filter by operator tag ("eq", "in", "not.eq", ...).

        A string operand is sent as written, so it must already be in wire
        form: filter("id", "in", "(1,2)"). Lists and other values are
        encoded for the operator.
        """
        if operator.startswith("not."):
            return self.not_(column, operator[len("not."):], value)
        if isinstance(value, str):
            return self.add_filter(column, f"{Operator(operator).value}.{value}")
        return self.add_filter(column, filters.encode_filter(operator, value))

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        return self.add_filter(column, filters.encode_filter(Operator.EQ, value))

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        return self.add_filter(column, filters.encode_filter(Operator.NEQ, value))

    def gt(self, column: str, value: Any) -> "QueryBuilder":
        return self.add_filter(column, filters.encode_filter(Operator.GT, value))

    def gte(self, column: str, value: Any) -> "QueryBuilder":
        return self.add_filter(column, filters.encode_filter(Operator.GTE, value))

    def lt(self, column: str, value: Any) -> "QueryBuilder":
        return self.add_filter(column, filters.encode_filter(Operator.LT, value))

    def lte(self, column: str, value: Any) -> "QueryBuilder":
        return self.add_filter(column, filters.encode_filter(Operator.LTE, value))

    def in_(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        """Set membership. Values must not contain commas or parentheses."""
        return self.add_filter(column, filters.encode_filter(Operator.IN, values))

    def is_(self, column: str, value: Any) -> "QueryBuilder":
        """Null/boolean test: is_("deleted_at", None) -> is.null"""
        return self.add_filter(column, filters.encode_filter(Operator.IS, value))

    def like(self, column: str, pattern: str) -> "QueryBuilder":
        return self.add_filter(column, filters.encode_filter(Operator.LIKE, pattern))

    def ilike(self, column: str, pattern: str) -> "QueryBuilder":
        return self.add_filter(column, filters.encode_filter(Operator.ILIKE, pattern))

    def contains(self, column: str, value: Any) -> "QueryBuilder":
        """Array/JSON column contains value (cs)."""
        return self.add_filter(column, filters.encode_filter(Operator.CONTAINS, value))

    def contained_by(self, column: str, value: Any) -> "QueryBuilder":
        """Array/JSON column is contained by value (cd)."""
        return self.add_filter(column, filters.encode_filter(Operator.CONTAINED_BY, value))

    def not_(self, column: str, operator: str, value: Any) -> "QueryBuilder":
        return self.add_filter(column, filters.negate(operator, value))

    def or_(self, expression: str) -> "QueryBuilder":
        """Raw OR group: or_("status.eq.sent,status.eq.failed")"""
        return self.add_filter("or", filters.group(expression))

    def and_(self, expression: str) -> "QueryBuilder":
        return self.add_filter("and", filters.group(expression))

    # =========================================================================
    # Ordering and pagination
    # =========================================================================

    def order(self, column: str, *, ascending: bool = True) -> "QueryBuilder":
        """Add a sort key. Earlier calls take priority."""
        self.state.order.append(f"{column}.{'asc' if ascending else 'desc'}")
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self.state.limit = count
        return self

    def offset(self, count: int) -> "QueryBuilder":
        self.state.offset = count
        return self

    def range(self, start: int, end: int) -> "QueryBuilder":
        """Inclusive row range: range(0, 9) is offset(0).limit(10)."""
        return self.offset(start).limit(end - start + 1)

    # =========================================================================
    # Execution
    # =========================================================================

    async def execute(self) -> QueryResult:
        """Send the request and return the collection envelope."""
        return await send(self._http, build_request(self.state), self._headers)

    def __await__(self) -> Generator[Any, None, QueryResult]:
        return self.execute().__await__()

    async def single(self) -> SingleResult:
        """
        First row of the result; zero rows is an error.

        More than one row is not an error: the first row in server order
        is returned.
        """
        result = await self.execute()
        row = _first_row(result.data)
        if result.error is not None:
            return SingleResult(data=None, error=result.error)
        if row is None:
            return SingleResult(data=None, error=PostgrestError(message=NO_ROWS_MESSAGE))
        return SingleResult(data=row, error=None)

    async def maybe_single(self) -> SingleResult:
        """First row of the result, or None when nothing matched."""
        result = await self.execute()
        return SingleResult(data=_first_row(result.data), error=result.error)


def _first_row(data: Any) -> Any:
    if isinstance(data, list):
        return data[0] if data else None
    return data
