"""
Postbridge - Result Normalizer.

Maps an httpx.Response (or a transport exception) onto the envelopes in
postbridge.db.models. Nothing here raises for I/O or server errors.
"""

import logging
import re
from typing import Any

import httpx
from pydantic import ValidationError

from postbridge.db.models import PostgrestError, QueryResult, RpcResult

logger = logging.getLogger(__name__)

# "0-24/3573" or "*/3573" or "0-24/*"
_CONTENT_RANGE_TOTAL = re.compile(r"/(\d+|\*)")


def parse_content_range(header: str | None) -> int | None:
    """
    Extract the total from a Content-Range header.

    A wildcard total ("0-4/*") means the server did not count: None.
    """
    if not header:
        return None
    match = _CONTENT_RANGE_TOTAL.search(header)
    if match is None or match.group(1) == "*":
        return None
    return int(match.group(1))


def parse_error(response: httpx.Response) -> PostgrestError:
    """Error body from a failed response, or the status text if unparseable."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and isinstance(body.get("message"), str):
        try:
            return PostgrestError.model_validate(body)
        except ValidationError:
            return PostgrestError(message=body["message"])
    return PostgrestError(message=response.reason_phrase or f"HTTP {response.status_code}")


def _json_or(response: httpx.Response, default: Any) -> Any:
    try:
        return response.json()
    except ValueError:
        return default


def error_result(exc: BaseException) -> QueryResult:
    """Envelope for a transport-level failure."""
    return QueryResult(data=None, error=PostgrestError(message=str(exc)), count=0)


def normalize_response(response: httpx.Response, *, head_only: bool = False) -> QueryResult:
    """
    Build the collection envelope for a query response.

    Args:
        response: The completed HTTP response
        head_only: True when the request was a HEAD (no body expected)

    Returns:
        QueryResult with data/error/count set per the data API conventions
    """
    if not response.is_success:
        error = parse_error(response)
        logger.warning(
            f"{response.request.method} {response.request.url.path} failed: "
            f"{response.status_code} {error.message}"
        )
        return QueryResult(data=None, error=error, count=0)

    count = parse_content_range(response.headers.get("content-range"))

    if head_only:
        return QueryResult(data=None, error=None, count=count)

    # An unparseable 2xx body (e.g. 204 No Content) is an empty result
    data = _json_or(response, [])
    return QueryResult(data=data, error=None, count=count)


def normalize_rpc_response(response: httpx.Response) -> RpcResult:
    """Envelope for a remote procedure call; no count is reported."""
    if not response.is_success:
        error = parse_error(response)
        logger.warning(f"RPC {response.request.url.path} failed: {response.status_code} {error.message}")
        return RpcResult(data=None, error=error)
    return RpcResult(data=_json_or(response, None), error=None)
