"""
Postbridge - Filter/Operator Encoder.

Turns a comparison into the value half of a PostgREST query parameter:

    column=eq.active
    column=in.(a,b,c)
    column=cs.["vip"]
    or=(status.eq.active,status.eq.paused)

Known limitation: in_() joins values with a bare comma. Values that
contain commas or parentheses produce an ambiguous list.
"""

import json
from enum import Enum
from typing import Any, Iterable


class Operator(str, Enum):
    """Operator tags understood by the data API."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    IS = "is"
    LIKE = "like"
    ILIKE = "ilike"
    CONTAINS = "cs"
    CONTAINED_BY = "cd"


# Operators whose operand is serialized as JSON text
JSON_OPERATORS = {Operator.CONTAINS, Operator.CONTAINED_BY}

# Keys that group a raw filter expression instead of naming a column
GROUP_KEYS = ("or", "and")


# =============================================================================
# Value Formatting
# =============================================================================


def format_scalar(value: Any) -> str:
    """Render a scalar the way the data API spells it (true/false/null)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_list(values: Iterable[Any]) -> str:
    """Parenthesized, comma-joined list for set membership."""
    if isinstance(values, (str, bytes)):
        raise ValueError(f"Expected a list of values, got {type(values).__name__} {values!r}")
    return "(" + ",".join(format_scalar(v) for v in values) + ")"


def format_json(value: Any) -> str:
    """Compact JSON text (no spaces) for containment operands."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


# =============================================================================
# Encoding
# =============================================================================


def encode_filter(operator: Operator | str, value: Any) -> str:
    """
    Encode an operator and operand as a query-parameter value.

    Args:
        operator: An Operator or its wire tag ("eq", "in", "cs", ...)
        value: Scalar, list for IN, any JSON-able value for CS/CD

    Returns:
        The wire value, e.g. "eq.5" or "in.(1,2,3)"
    """
    op = Operator(operator)
    return f"{op.value}.{format_operand(op, value)}"


def format_operand(op: Operator, value: Any) -> str:
    if op is Operator.IN:
        return format_list(value)
    if op in JSON_OPERATORS:
        return format_json(value)
    return format_scalar(value)


def negate(operator: str, value: Any) -> str:
    """
    Negate an arbitrary operator tag: not.<operator>.<value>.

    The operator is passed through untouched so any tag the server knows
    (fts, ov, ...) can be negated. A string operand is taken as already
    encoded. Other operands of a known operator are formatted as
    encode_filter would; unknown tags get a scalar.
    """
    if isinstance(value, str):
        return f"not.{operator}.{value}"
    try:
        op = Operator(operator)
    except ValueError:
        return f"not.{operator}.{format_scalar(value)}"
    return f"not.{operator}.{format_operand(op, value)}"


def group(expression: str) -> str:
    """Wrap an already-encoded filter expression for an or/and key."""
    return f"({expression})"


# =============================================================================
# Decoding
# =============================================================================


def parse_filter(raw: str) -> tuple[str, str]:
    """
    Split a wire value back into (operator tag, operand).

    Negations keep their prefix in the tag: "not.eq.x" -> ("not.eq", "x").

    Raises:
        ValueError: If the value carries no known operator tag.
    """
    head, sep, rest = raw.partition(".")
    if not sep:
        raise ValueError(f"Filter value has no operator tag: {raw!r}")

    if head == "not":
        inner, sep, operand = rest.partition(".")
        if not sep or not inner:
            raise ValueError(f"Negated filter has no inner operator: {raw!r}")
        return f"not.{inner}", operand

    try:
        Operator(head)
    except ValueError:
        raise ValueError(f"Unknown operator tag {head!r} in {raw!r}") from None
    return head, rest


def parse_expression(expression: str) -> tuple[str, str]:
    """
    Split a "column=op.value" expression into (column, wire value).

    Used by the CLI --where option.
    """
    column, sep, raw = expression.partition("=")
    if not sep or not column:
        raise ValueError(f"Expected column=op.value, got {expression!r}")
    column = column.strip()
    if column not in GROUP_KEYS:
        parse_filter(raw)
    return column, raw
