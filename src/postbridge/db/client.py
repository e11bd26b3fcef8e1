"""
Postbridge - Client Facade.

Single entry point for data access:

    client.from_("sequences").select("*").eq("is_enabled", True)
    await client.rpc("increment_counter", {"row_id": 7})
    client.channel("messages").on("INSERT", {}, handler).subscribe(cb)

The client holds no per-query state; builders are independent and can be
executed concurrently.
"""

import logging
from typing import Any

import httpx

from postbridge.config import settings
from postbridge.db.builder import QueryBuilder
from postbridge.db.models import PostgrestError, RpcResult
from postbridge.db.realtime import RealtimeChannel, UnsupportedRealtimeChannel
from postbridge.db.request_context import (
    HeaderProvider,
    api_key_headers,
    chain_headers,
    no_headers,
    request_token_headers,
)
from postbridge.db.response import normalize_rpc_response

logger = logging.getLogger(__name__)


class PostgrestClient:
    """
    Supabase-compatible facade over a PostgREST endpoint.

    Args:
        base_url: Base path of the data API, e.g. "http://localhost:3000"
        headers: Provider called before every request (auth headers)
        transport: Optional httpx transport (tests pass httpx.MockTransport)
        timeout: Seconds before a request is abandoned; None waits forever
    """

    def __init__(
        self,
        base_url: str,
        *,
        headers: HeaderProvider = no_headers,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url
        self._headers = headers
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "PostgrestClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def from_(self, resource: str) -> QueryBuilder:
        """Start a query against a resource (table or view)."""
        return QueryBuilder(self._http, resource, self._headers)

    # Name used by the Python Supabase client
    table = from_

    async def rpc(self, function_name: str, params: dict | None = None) -> RpcResult:
        """
        Call a stored procedure: POST {base}/rpc/{function_name}.

        Returns the same envelope rules as queries, without a count.
        """
        path = f"/rpc/{function_name}"
        try:
            headers = {**self._headers(), "Content-Type": "application/json"}
            logger.debug(f"POST {path} params={params}")
            response = await self._http.post(path, json=params or {}, headers=headers)
        except Exception as e:
            logger.warning(f"RPC {function_name} transport error: {e}")
            return RpcResult(data=None, error=PostgrestError(message=str(e)))
        return normalize_rpc_response(response)

    def channel(self, name: str) -> RealtimeChannel:
        """Realtime is not available over PostgREST; returns an inert channel."""
        logger.warning("Realtime channels are not supported with PostgREST. Poll with a query instead.")
        return UnsupportedRealtimeChannel(name)

    def remove_channel(self, channel: RealtimeChannel) -> None:
        channel.unsubscribe()


# =============================================================================
# Application Singleton
# =============================================================================

_client: PostgrestClient | None = None


def default_headers() -> HeaderProvider:
    """API key from settings (if any), then the current request's token."""
    providers: list[HeaderProvider] = []
    if settings.postgrest_api_key:
        providers.append(api_key_headers(settings.postgrest_api_key))
    providers.append(request_token_headers)
    return chain_headers(*providers)


def get_client() -> PostgrestClient:
    """
    Get the shared client configured from settings.

    Uses singleton pattern to reuse the connection pool.
    """
    global _client

    if _client is None:
        _client = PostgrestClient(
            settings.postgrest_url,
            headers=default_headers(),
            timeout=settings.postgrest_timeout,
        )

    return _client


def reset_client() -> None:
    """Drop the cached client (tests, settings reload)."""
    global _client
    _client = None
