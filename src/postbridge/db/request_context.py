"""
Postbridge - Request context and header providers.

The client never looks up credentials on its own. It calls a header
provider (a zero-argument callable returning a mapping) before every
request. The providers here cover the usual cases: a fixed API key, or
the access token of the request currently being handled, carried in a
context variable so it never has to be threaded through call sites.
"""

from contextvars import ContextVar
from typing import Callable, Mapping, Optional

HeaderProvider = Callable[[], Mapping[str, str]]

# Context variables for the current request's credentials
_access_token: ContextVar[Optional[str]] = ContextVar("access_token", default=None)
_user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


def set_request_context(access_token: str | None = None, user_id: str | None = None):
    """
    Bind the caller's credentials to the current task.

    Empty values leave the existing binding in place. Dashboard handlers
    call this once per incoming request, before any query runs.
    """
    if access_token:
        _access_token.set(access_token)
    if user_id:
        _user_id.set(user_id)


def get_access_token() -> str | None:
    """Access token bound to the current task, if any."""
    return _access_token.get()


def get_current_user_id() -> str | None:
    """User id bound to the current task, if any."""
    return _user_id.get()


def clear_request_context():
    """Unbind both values; call when the request finishes."""
    _access_token.set(None)
    _user_id.set(None)


# =============================================================================
# Header Providers
# =============================================================================


def no_headers() -> Mapping[str, str]:
    return {}


def static_headers(headers: Mapping[str, str]) -> HeaderProvider:
    """Provider that always returns the same headers."""
    frozen = dict(headers)
    return lambda: dict(frozen)


def api_key_headers(api_key: str) -> HeaderProvider:
    """apikey + bearer headers for a service key (PostgREST gateway style)."""
    return static_headers({"apikey": api_key, "Authorization": f"Bearer {api_key}"})


def request_token_headers() -> Mapping[str, str]:
    """Bearer header for the access token set in the current context, if any."""
    token = get_access_token()
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def chain_headers(*providers: HeaderProvider) -> HeaderProvider:
    """Merge several providers; later providers win on conflicting keys."""

    def merged() -> Mapping[str, str]:
        headers: dict[str, str] = {}
        for provider in providers:
            headers.update(provider())
        return headers

    return merged
