"""Minimal Supabase PostgREST client used by backend repositories only."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


Query = dict[str, str | int] | list[tuple[str, str | int]]


class SupabaseRequestError(RuntimeError):
    """Raised when PostgREST answers with an error or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class SupabaseSettings:
    url: str
    service_role_key: str


class SupabaseClient:
    def __init__(self, settings: SupabaseSettings) -> None:
        self.settings = settings

    def _build_url(self, table: str, query: Query | None) -> str:
        url = f"{self.settings.url.rstrip('/')}/rest/v1/{table}"
        if query:
            url = f"{url}?{urlencode(query, doseq=True)}"
        return url

    def _send(
        self,
        *,
        method: str,
        table: str,
        query: Query | None = None,
        payload: dict[str, Any] | list[dict[str, Any]] | None = None,
        prefer: str | None = None,
    ) -> list[dict[str, Any]]:
        api_key = self.settings.service_role_key
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        data: bytes | None = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        if prefer:
            headers["Prefer"] = prefer

        request = Request(
            url=self._build_url(table, query),
            data=data,
            headers=headers,
            method=method,
        )
        try:
            with urlopen(request) as response:  # noqa: S310 - URL comes from trusted env config
                raw_body = response.read().decode("utf-8")
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise SupabaseRequestError(
                f"Supabase request failed with status {exc.code}: {body}",
                status_code=exc.code,
            ) from exc
        except URLError as exc:
            raise SupabaseRequestError(f"Supabase request failed: {exc.reason}") from exc

        if not raw_body.strip():
            return []
        rows = json.loads(raw_body)
        if isinstance(rows, dict):
            return [rows]
        return rows

    def get_rows(self, *, table: str, query: Query) -> list[dict[str, Any]]:
        """Fetch rows matching `query`."""

        return self._send(method="GET", table=table, query=query)

    def post_rows(
        self,
        *,
        table: str,
        payload: dict[str, Any] | list[dict[str, Any]],
        query: Query | None = None,
        prefer: str = "return=representation",
    ) -> list[dict[str, Any]]:
        """Insert rows and return the representation sent back by PostgREST."""

        return self._send(method="POST", table=table, query=query, payload=payload, prefer=prefer)

    def patch_rows(
        self,
        *,
        table: str,
        query: Query,
        payload: dict[str, Any],
        prefer: str = "return=representation",
    ) -> list[dict[str, Any]]:
        """Update rows matching `query` and return the updated representation."""

        return self._send(method="PATCH", table=table, query=query, payload=payload, prefer=prefer)

    def delete_rows(
        self,
        *,
        table: str,
        query: Query,
        prefer: str = "return=representation",
    ) -> list[dict[str, Any]]:
        """Delete rows matching `query` and return the deleted representation."""

        return self._send(method="DELETE", table=table, query=query, prefer=prefer)
