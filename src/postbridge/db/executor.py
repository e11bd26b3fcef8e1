"""
Postbridge - Request Executor.

Two steps, kept apart so the request shape can be tested without I/O:

1. build_request(): QueryState -> PreparedRequest (method, path, params,
   headers, body). Pure.
2. send(): performs exactly one HTTP call and hands the response to the
   normalizer. No retries, no caching, no timeout of its own.

Request shape by intent (insert > update > delete > read):

    INSERT  POST   /res?select=...            body=payload
    UPDATE  PATCH  /res?select=...&filters    body=payload
    DELETE  DELETE /res?filters
    READ    GET    /res?select=...&filters&order&limit&offset  (HEAD if head-only)
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from postbridge.db.models import Payload, QueryResult
from postbridge.db.request_context import HeaderProvider, no_headers
from postbridge.db.response import error_result, normalize_response
from postbridge.db.state import Intent, QueryState

logger = logging.getLogger(__name__)

RETURN_REPRESENTATION = "return=representation"


@dataclass
class PreparedRequest:
    """A fully resolved HTTP request, ready to send."""

    method: str
    path: str
    params: list[tuple[str, str]] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    body: Payload | None = None
    head_only: bool = False


def prefer_header(count: str | None) -> str:
    """Prefer directive: always echo rows, optionally ask for a count."""
    if count:
        return f"count={count}, {RETURN_REPRESENTATION}"
    return RETURN_REPRESENTATION


def _read_params(state: QueryState) -> list[tuple[str, str]]:
    params = [("select", state.select), *state.filters]
    if state.order:
        params.append(("order", ",".join(state.order)))
    if state.limit is not None:
        params.append(("limit", str(state.limit)))
    if state.offset is not None:
        params.append(("offset", str(state.offset)))
    return params


def build_request(state: QueryState) -> PreparedRequest:
    """
    Resolve builder state into a single request.

    Mutations are applied by fixed precedence; a builder with more than
    one mutation set logs a warning and runs only the winner.
    """
    requested = state.requested_intents()
    if len(requested) > 1:
        logger.warning(
            f"{state.resource}: builder has {', '.join(i.value for i in requested)} set; "
            f"running {requested[0].value} only"
        )

    headers = {
        "Content-Type": "application/json",
        "Prefer": prefer_header(state.count),
    }
    path = f"/{state.resource}"
    intent = state.intent

    if intent is Intent.INSERT:
        params = [("select", state.select)] if state.select != "*" else []
        return PreparedRequest("POST", path, params, headers, body=state.insert)

    if intent is Intent.UPDATE:
        params = [("select", state.select), *state.filters]
        return PreparedRequest("PATCH", path, params, headers, body=state.update)

    if intent is Intent.DELETE:
        return PreparedRequest("DELETE", path, list(state.filters), headers)

    method = "HEAD" if state.head else "GET"
    return PreparedRequest(method, path, _read_params(state), headers, head_only=state.head)


async def send(
    http: httpx.AsyncClient,
    request: PreparedRequest,
    headers: HeaderProvider = no_headers,
) -> QueryResult:
    """
    Perform the request and normalize the outcome.

    Transport failures come back as an error envelope; nothing is raised.
    """
    try:
        # Core headers go on top of whatever the provider supplies
        merged = {**headers(), **request.headers}
        kwargs: dict[str, Any] = {"params": request.params, "headers": merged}
        if request.body is not None:
            kwargs["json"] = request.body

        logger.debug(f"{request.method} {request.path} params={request.params}")
        if request.body is not None:
            logger.debug(f"{request.method} {request.path} body={request.body}")

        response = await http.request(request.method, request.path, **kwargs)
    except Exception as e:
        logger.warning(f"{request.method} {request.path} transport error: {e}")
        return error_result(e)

    return normalize_response(response, head_only=request.head_only)
