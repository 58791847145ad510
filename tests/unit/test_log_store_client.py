import asyncio

import httpx
import pytest

from synk_mcp.clients.log_store import InMemoryLogStore, PostgrestLogStore, SyncLogQuery
from synk_mcp.config import StoreConfig
from synk_mcp.errors import CollaboratorFailure

CONFIG = StoreConfig(url="https://project.supabase.co/", service_key="service-key")


def _store(handler) -> PostgrestLogStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PostgrestLogStore(CONFIG, client=client)


def test_postgrest_query_encodes_order_limit_and_filter() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"filename": "a.ts"}])

    rows = asyncio.run(
        _store(handler).query(SyncLogQuery(limit=5, filters={"filename": "a.ts"}))
    )

    assert rows == [{"filename": "a.ts"}]
    [request] = seen
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/sync_logs"
    params = request.url.params
    assert params["select"] == "*"
    assert params["order"] == "created_at.desc"
    assert params["limit"] == "5"
    assert params["filename"] == "eq.a.ts"
    assert request.headers["apikey"] == "service-key"
    assert request.headers["authorization"] == "Bearer service-key"


def test_postgrest_query_without_filter_sends_no_filename_param() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    asyncio.run(_store(handler).query(SyncLogQuery(limit=10)))

    assert "filename" not in seen[0].url.params


def test_postgrest_error_message_passed_through() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid API key", "code": "PGRST301"})

    with pytest.raises(CollaboratorFailure, match="Invalid API key"):
        asyncio.run(_store(handler).query(SyncLogQuery(limit=10)))


def test_postgrest_transport_error_becomes_collaborator_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CollaboratorFailure, match="connection refused"):
        asyncio.run(_store(handler).query(SyncLogQuery(limit=10)))


def test_postgrest_requires_configuration() -> None:
    with pytest.raises(ValueError):
        PostgrestLogStore(StoreConfig(url="https://project.supabase.co"))


def test_in_memory_store_orders_newest_first() -> None:
    store = InMemoryLogStore(
        [
            {"filename": "a.ts", "created_at": "2026-01-01"},
            {"filename": "a.ts", "created_at": "2026-03-01"},
            {"filename": "b.ts", "created_at": "2026-02-01"},
        ]
    )

    rows = asyncio.run(store.query(SyncLogQuery(limit=2)))

    assert [row["created_at"] for row in rows] == ["2026-03-01", "2026-02-01"]
