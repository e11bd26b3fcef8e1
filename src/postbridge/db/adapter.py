"""
Data Adapter Protocol.

Defines the interface application code types against. PostgrestClient is
the implementation; tests and alternate backends can supply their own.

The adapter mirrors the Supabase client surface so call sites written for
it keep working: from_()/table() return a query builder, rpc() calls a
stored procedure, channel() returns a realtime channel (which may not
deliver events, see postbridge.db.realtime).
"""

from typing import Any, Protocol, runtime_checkable

from postbridge.db.models import RpcResult
from postbridge.db.realtime import RealtimeChannel


@runtime_checkable
class DataAdapter(Protocol):
    """
    Abstract data access for the dashboard layer.

    The builder returned by from_() must support the fluent API:
    .select(), .insert(), .update(), .delete(), .eq(), ..., and be awaitable.
    """

    def from_(self, resource: str) -> Any:
        """Return a query builder for the given resource."""
        ...

    def table(self, resource: str) -> Any:
        ...

    async def rpc(self, function_name: str, params: dict | None = None) -> RpcResult:
        """Call a stored procedure / database function."""
        ...

    def channel(self, name: str) -> RealtimeChannel:
        ...

    def remove_channel(self, channel: RealtimeChannel) -> None:
        ...
