"""
Postbridge - Result envelopes.

Every core operation resolves to one of these. Callers branch on
`error` before touching `data`.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, JsonValue, model_validator

# Insert/update payload: one row or a batch of rows
Row = dict[str, JsonValue]
Payload = Row | list[Row]

CountMode = Literal["exact", "planned", "estimated"]
COUNT_MODES: tuple[str, ...] = ("exact", "planned", "estimated")


class PostgrestError(BaseModel):
    """
    Error body returned by the data API.

    Only `message` is guaranteed. PostgREST also sends code/details/hint;
    anything else the server adds is kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    message: str
    code: str | None = None
    details: str | None = None
    hint: str | None = None


class _Envelope(BaseModel):
    """Shared invariant: an error envelope never carries data."""

    data: Any = None
    error: PostgrestError | None = None

    @model_validator(mode="after")
    def _error_clears_data(self):
        if self.error is not None and self.data is not None:
            raise ValueError("An envelope with an error must not carry data")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None


class QueryResult(_Envelope):
    """Collection result: data is normally a list of rows (or None)."""

    data: Any = None
    count: int | None = None


class SingleResult(_Envelope):
    """Single-row result from single() / maybe_single()."""

    data: Any = None


class RpcResult(_Envelope):
    """Remote procedure result: data is whatever the procedure returned."""

    data: Any = None
