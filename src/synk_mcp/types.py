"""Shared domain models."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from mcp.types import CallToolResult, TextContent


def text_result(text: str, *, is_error: bool = False) -> CallToolResult:
    """Wrap plain text as a single-block tool result."""

    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


@dataclass(slots=True)
class BroadcastPayload:
    """Event published to other agents when code changes are pushed manually."""

    filename: str
    delta: str
    summary: str
    timestamp: int
    event: str = "manual_update"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float
    is_error: bool = False
