"""
Tests for response normalization.

Tests cover:
- Content-Range parsing
- Error bodies (JSON and fallback)
- Empty/unparseable success bodies
- Head-only responses
- Transport failures through the client
"""

import asyncio

import httpx
import pytest
from pydantic import ValidationError

from postbridge.db.models import PostgrestError, QueryResult
from postbridge.db.response import (
    normalize_response,
    normalize_rpc_response,
    parse_content_range,
)

REQUEST = httpx.Request("GET", "http://postgrest.test/api/subscribers")


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=REQUEST, **kwargs)


class TestContentRange:
    """Test total extraction from the range header."""

    def test_numeric_total(self):
        assert parse_content_range("0-4/42") == 42

    def test_wildcard_total(self):
        assert parse_content_range("0-4/*") is None

    def test_empty_range_with_total(self):
        assert parse_content_range("*/0") == 0

    def test_missing_header(self):
        assert parse_content_range(None) is None
        assert parse_content_range("") is None

    def test_malformed_header(self):
        assert parse_content_range("0-4") is None


class TestSuccess:
    """Test 2xx responses."""

    def test_rows_and_count(self, sample_subscribers):
        result = normalize_response(
            _response(200, json=sample_subscribers, headers={"Content-Range": "0-2/42"})
        )
        assert result.data == sample_subscribers
        assert result.error is None
        assert result.count == 42

    def test_wildcard_count_is_none(self):
        result = normalize_response(_response(200, json=[], headers={"Content-Range": "0-4/*"}))
        assert result.count is None

    def test_no_content_is_empty_list(self):
        result = normalize_response(_response(204))
        assert result.data == []
        assert result.error is None

    def test_unparseable_body_is_empty_list(self):
        result = normalize_response(_response(200, content=b"<html>oops</html>"))
        assert result.data == []
        assert result.error is None

    def test_head_only_has_no_data(self):
        result = normalize_response(
            _response(200, headers={"Content-Range": "*/17"}),
            head_only=True,
        )
        assert result.data is None
        assert result.error is None
        assert result.count == 17


class TestErrors:
    """Test non-2xx responses."""

    def test_json_error_message(self):
        result = normalize_response(_response(400, json={"message": "X"}))
        assert result.data is None
        assert result.error.message == "X"

    def test_postgrest_error_fields_kept(self):
        body = {
            "code": "23505",
            "details": "Key (psid)=(1) already exists.",
            "hint": None,
            "message": "duplicate key value violates unique constraint",
        }
        result = normalize_response(_response(409, json=body))
        assert result.error.code == "23505"
        assert result.error.details == "Key (psid)=(1) already exists."

    def test_fallback_to_status_text(self):
        result = normalize_response(_response(503, content=b"upstream down"))
        assert result.data is None
        assert result.error.message == "Service Unavailable"

    def test_body_without_message_falls_back(self):
        result = normalize_response(_response(404, json={"error": "nope"}))
        assert result.error.message == "Not Found"

    def test_error_count_is_zero(self):
        result = normalize_response(_response(500, json={"message": "boom"}))
        assert result.count == 0

    def test_error_ignores_head_only(self):
        result = normalize_response(_response(403, json={"message": "denied"}), head_only=True)
        assert result.error.message == "denied"


class TestEnvelope:
    """Test the envelope invariant."""

    def test_error_and_data_cannot_coexist(self):
        with pytest.raises(ValidationError):
            QueryResult(data=[1], error=PostgrestError(message="x"))

    def test_ok_flag(self):
        assert QueryResult(data=[]).ok is True
        assert QueryResult(error=PostgrestError(message="x")).ok is False


class TestRpcNormalization:
    """Test RPC envelopes."""

    def test_scalar_result(self):
        result = normalize_rpc_response(_response(200, json=12))
        assert result.data == 12
        assert result.error is None

    def test_void_result_is_none(self):
        result = normalize_rpc_response(_response(204))
        assert result.data is None
        assert result.error is None

    def test_error(self):
        result = normalize_rpc_response(_response(404, json={"message": "function not found"}))
        assert result.data is None
        assert result.error.message == "function not found"


class TestTransportFailure:
    """Exceptions from the transport become envelopes."""

    def test_connect_error(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client(handler)
        result = asyncio.run(client.from_("subscribers").execute())

        assert result.data is None
        assert result.error.message == "connection refused"
        assert result.count == 0

    def test_unserializable_payload(self, make_client):
        client, transport = make_client()
        result = asyncio.run(client.from_("events").insert({"at": object()}).execute())

        assert result.data is None
        assert result.error is not None
        assert transport.requests == []
