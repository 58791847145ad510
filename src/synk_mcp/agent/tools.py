"""Built-in tool implementations for the sync MCP server."""

from __future__ import annotations

import json
from collections.abc import Callable

from mcp.types import CallToolResult
from pydantic import BaseModel, Field

from synk_mcp.agent.registry import ToolRegistry, ToolSpec
from synk_mcp.clients.broadcast import BroadcastChannelClient
from synk_mcp.clients.log_store import LogStoreClient, SyncLogQuery
from synk_mcp.config import BroadcastConfig
from synk_mcp.obs.tracing import epoch_millis
from synk_mcp.types import BroadcastPayload, text_result


class ReadSyncStateInput(BaseModel):
    limit: int = Field(default=10, ge=0, strict=True, description="Max records to return")
    filename: str | None = Field(default=None, description="Only return records for this file")


class TriggerBroadcastInput(BaseModel):
    filename: str = Field(description="File the update applies to")
    content: str = Field(description="Changed content, sent to subscribers as the delta")
    summary: str = Field(description="Short human-readable summary of the change")


def register_builtin_tools(
    registry: ToolRegistry,
    log_store: LogStoreClient,
    channel: BroadcastChannelClient,
    *,
    broadcast_config: BroadcastConfig | None = None,
    clock: Callable[[], int] = epoch_millis,
) -> None:
    """Register the sync tools exposed to agent clients.

    Tools:
    - `read_sync_state`: newest-first slice of the sync log, optionally for one file.
    - `trigger_broadcast`: push a manual code update to every connected agent.
    """

    config = broadcast_config or BroadcastConfig()

    async def _read_sync_state(input_data: ReadSyncStateInput) -> CallToolResult:
        filters = {"filename": input_data.filename} if input_data.filename else {}
        records = await log_store.query(
            SyncLogQuery(limit=input_data.limit, order_by="created_at", descending=True, filters=filters)
        )
        return text_result(json.dumps(records, indent=2, ensure_ascii=False, default=str))

    async def _trigger_broadcast(input_data: TriggerBroadcastInput) -> CallToolResult:
        payload = BroadcastPayload(
            filename=input_data.filename,
            delta=input_data.content,
            summary=input_data.summary,
            timestamp=clock(),
        )
        status = await channel.publish(config.topic, config.event, payload.to_dict())
        return text_result(f"Broadcast Status: {status}")

    registry.register(
        ToolSpec(
            name="read_sync_state",
            description=(
                "Read recent code-sync events from the shared log, newest first. "
                "Optionally restrict to a single filename."
            ),
            args_schema=ReadSyncStateInput,
            handler=_read_sync_state,
            read_only=True,
        )
    )
    registry.register(
        ToolSpec(
            name="trigger_broadcast",
            description=(
                "Broadcast a manual code update to all connected agents on the "
                "sync stream."
            ),
            args_schema=TriggerBroadcastInput,
            handler=_trigger_broadcast,
        )
    )
