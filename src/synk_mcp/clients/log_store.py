"""Sync-log store interface and concrete adapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from synk_mcp.config import StoreConfig
from synk_mcp.errors import CollaboratorFailure

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SyncLogQuery:
    """Read-only query against the sync log."""

    limit: int
    order_by: str = "created_at"
    descending: bool = True
    filters: dict[str, str] = field(default_factory=dict)


class LogStoreClient(Protocol):
    """Minimal store contract used by `read_sync_state`."""

    async def query(self, query: SyncLogQuery) -> list[dict[str, Any]]:
        """Return matching rows in the requested order."""


class InMemoryLogStore:
    """Deterministic log store injected in tests in place of the PostgREST adapter."""

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self._records: list[dict[str, Any]] = list(records or [])
        self.queries: list[SyncLogQuery] = []

    def append(self, record: dict[str, Any]) -> None:
        self._records.append(dict(record))

    async def query(self, query: SyncLogQuery) -> list[dict[str, Any]]:
        self.queries.append(query)
        rows = [
            row
            for row in self._records
            if all(row.get(key) == value for key, value in query.filters.items())
        ]
        rows.sort(key=lambda row: row.get(query.order_by) or "", reverse=query.descending)
        return [dict(row) for row in rows[: query.limit]]


class PostgrestLogStore:
    """Queries the `sync_logs` table through the store's PostgREST endpoint."""

    def __init__(self, config: StoreConfig, *, client: httpx.AsyncClient | None = None) -> None:
        if not config.configured:
            raise ValueError("store url and service key are required")
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    @property
    def endpoint(self) -> str:
        return f"{str(self._config.url).rstrip('/')}/rest/v1/{self._config.table}"

    def _headers(self) -> dict[str, str]:
        key = str(self._config.service_key)
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/json",
        }

    async def query(self, query: SyncLogQuery) -> list[dict[str, Any]]:
        direction = "desc" if query.descending else "asc"
        params: list[tuple[str, str | int]] = [
            ("select", "*"),
            ("order", f"{query.order_by}.{direction}"),
            ("limit", query.limit),
        ]
        params.extend((key, f"eq.{value}") for key, value in query.filters.items())

        try:
            response = await self._client.get(self.endpoint, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("sync log query failed: %s", exc)
            raise CollaboratorFailure(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            raise CollaboratorFailure(_error_message(response))
        data = response.json()
        if not isinstance(data, list):
            raise CollaboratorFailure(f"unexpected store response: {type(data).__name__}")
        return data

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"store request failed with status {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"store request failed with status {response.status_code}"
