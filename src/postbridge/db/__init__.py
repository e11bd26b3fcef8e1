"""
Postbridge - Data access.

Supabase-style query client over a PostgREST endpoint.
"""

from postbridge.db.adapter import DataAdapter
from postbridge.db.builder import QueryBuilder
from postbridge.db.client import PostgrestClient, get_client
from postbridge.db.models import PostgrestError, QueryResult, RpcResult, SingleResult
from postbridge.db.realtime import RealtimeChannel, UnsupportedRealtimeChannel

__all__ = [
    "DataAdapter",
    "PostgrestClient",
    "PostgrestError",
    "QueryBuilder",
    "QueryResult",
    "RealtimeChannel",
    "RpcResult",
    "SingleResult",
    "UnsupportedRealtimeChannel",
    "get_client",
]
