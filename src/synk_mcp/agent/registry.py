"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Any

from mcp.types import CallToolResult, Tool, ToolAnnotations
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from synk_mcp.errors import HandlerError, InvalidInput, UnknownTool
from synk_mcp.types import ToolTrace


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str = Field(min_length=1)
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[BaseModel], Awaitable[CallToolResult]]
    read_only: bool = False

    def validate_input(self, payload: dict[str, Any] | None) -> BaseModel:
        try:
            return self.args_schema.model_validate(payload or {})
        except ValidationError as exc:
            raise InvalidInput(self.name, _field_errors(exc)) from exc

    async def invoke(self, payload: dict[str, Any] | None) -> CallToolResult:
        data = self.validate_input(payload)
        try:
            return await self.handler(data)
        except Exception as exc:
            raise HandlerError(str(exc), tool_name=self.name) from exc

    def to_wire(self) -> Tool:
        """Render the tool as an MCP `tools/list` entry."""

        schema = self.args_schema.model_json_schema()
        schema.pop("title", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=schema,
            annotations=ToolAnnotations(readOnlyHint=True) if self.read_only else None,
        )


class ToolRegistry:
    """Stores tool specs and dispatches validated calls to their handlers."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self._observer: Callable[[ToolTrace], None] | None = None

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def get(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownTool(name)
        return spec

    async def invoke(self, name: str, payload: dict[str, Any] | None) -> CallToolResult:
        return await self._execute_spec(self.get(name), payload)

    def specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def catalog(self) -> list[Tool]:
        return [spec.to_wire() for spec in self._tools.values()]

    async def _execute_spec(self, spec: ToolSpec, payload: dict[str, Any] | None) -> CallToolResult:
        start = perf_counter()
        try:
            result = await spec.invoke(payload)
        except HandlerError as exc:
            self._notify(spec.name, payload, exc.message, start, is_error=True)
            raise

        preview = getattr(result.content[0], "text", "") if result.content else ""
        self._notify(spec.name, payload, preview, start, is_error=result.isError)
        return result

    def _notify(
        self,
        name: str,
        payload: dict[str, Any] | None,
        preview: str,
        start: float,
        *,
        is_error: bool,
    ) -> None:
        if self._observer is None:
            return
        self._observer(
            ToolTrace(
                name=name,
                input_payload=dict(payload or {}),
                output_preview=preview[:320],
                latency_ms=(perf_counter() - start) * 1000.0,
                is_error=is_error,
            )
        )


def _field_errors(exc: ValidationError) -> list[dict[str, Any]]:
    errors: list[dict[str, Any]] = []
    for err in exc.errors(include_url=False):
        field = ".".join(str(part) for part in err["loc"]) or "<root>"
        errors.append({"field": field, "message": err["msg"], "type": err["type"]})
    return errors
