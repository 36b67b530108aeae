"""Unit tests for Supabase client query encoding and error normalization."""

from __future__ import annotations

import json
from io import BytesIO
from urllib.error import HTTPError, URLError

import pytest

from backend.db.supabase_client import SupabaseClient, SupabaseRequestError, SupabaseSettings


def _build_client() -> SupabaseClient:
    return SupabaseClient(
        SupabaseSettings(url="https://example.supabase.co", service_role_key="service-role")
    )


def _response(body: bytes = b"[]"):
    class _Response:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def read(self) -> bytes:
            return body

    return _Response()


def test_get_rows_encodes_order_and_select(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_method() == "GET"
        assert "order=created_at.desc" in request.full_url
        assert "select=id%2Cdescription" in request.full_url
        assert request.get_header("Apikey") == "service-role"
        return _response(b'[{"id": 1}]')

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows = client.get_rows(
        table="transactions",
        query=[("select", "id,description"), ("order", "created_at.desc")],
    )

    assert rows == [{"id": 1}]


def test_get_rows_wraps_single_object_response(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()
    monkeypatch.setattr(
        "backend.db.supabase_client.urlopen",
        lambda _request: _response(b'{"id": 5}'),
    )

    assert client.get_rows(table="transactions", query={"select": "id"}) == [{"id": 5}]


def test_get_rows_includes_status_and_body_on_http_error(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _raise_http_error(_request):
        raise HTTPError(
            url="https://example.supabase.co/rest/v1/transactions",
            code=400,
            msg="Bad Request",
            hdrs=None,
            fp=BytesIO(b"Bad Request from Supabase"),
        )

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _raise_http_error)

    with pytest.raises(SupabaseRequestError, match="status 400") as error:
        client.get_rows(table="transactions", query={"select": "*"})

    assert "Bad Request from Supabase" in str(error.value)
    assert error.value.status_code == 400


def test_unreachable_host_raises_request_error(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _raise_url_error(_request):
        raise URLError("name resolution failed")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _raise_url_error)

    with pytest.raises(SupabaseRequestError, match="name resolution failed"):
        client.delete_rows(table="transactions", query={"id": "eq.1"})


def test_post_rows_sends_json_body_and_prefer_header(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_method() == "POST"
        assert request.full_url == "https://example.supabase.co/rest/v1/transactions?select=id"
        assert request.get_header("Prefer") == "return=representation"
        assert request.get_header("Content-type") == "application/json"
        assert json.loads(request.data) == {"description": "Coffee", "amount": 3.5}
        return _response(b'[{"id": 3}]')

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows = client.post_rows(
        table="transactions",
        query={"select": "id"},
        payload={"description": "Coffee", "amount": 3.5},
    )

    assert rows == [{"id": 3}]


def test_patch_rows_uses_patch_method_and_filters(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_method() == "PATCH"
        assert request.full_url == "https://example.supabase.co/rest/v1/transactions?id=eq.3"
        return _response(b"[]")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows = client.patch_rows(table="transactions", query={"id": "eq.3"}, payload={"amount": 4})

    assert rows == []


def test_delete_rows_accepts_empty_body(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_method() == "DELETE"
        assert request.data is None
        return _response(b"")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    assert client.delete_rows(table="transactions", query={"id": "eq.3"}, prefer="return=minimal") == []
