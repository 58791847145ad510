"""Error taxonomy for tool dispatch and collaborator calls."""

from __future__ import annotations

from typing import Any


class ToolError(Exception):
    """Base exception for failures raised by the tool registry."""

    def __init__(self, message: str, tool_name: str | None = None) -> None:
        self.message = message
        self.tool_name = tool_name
        super().__init__(message)


class UnknownTool(ToolError):
    """Raised when a caller asks for a tool name that is not registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}", tool_name=tool_name)


class InvalidInput(ToolError):
    """Raised when tool arguments fail schema validation.

    `errors` holds one entry per offending field, e.g.
    ``{"field": "filename", "message": "Field required"}``.
    """

    def __init__(self, tool_name: str, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        detail = "; ".join(f"{err['field']}: {err['message']}" for err in errors)
        super().__init__(f"Invalid arguments for tool {tool_name}: {detail}", tool_name=tool_name)


class HandlerError(ToolError):
    """Raised when a tool handler fails; carries the underlying message verbatim."""


class CollaboratorFailure(Exception):
    """Raised by log store and broadcast channel clients when the remote call fails."""
