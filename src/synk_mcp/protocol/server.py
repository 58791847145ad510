"""MCP server wiring: tool registry handlers and the streamable HTTP session manager."""

from __future__ import annotations

import logging

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.shared.exceptions import McpError

from synk_mcp import __version__
from synk_mcp.agent.registry import ToolRegistry
from synk_mcp.config import ServerConfig
from synk_mcp.errors import HandlerError, InvalidInput, UnknownTool
from synk_mcp.types import text_result

SERVER_NAME = "synk-mcp"

logger = logging.getLogger(__name__)


def build_server(registry: ToolRegistry) -> Server:
    """Expose every registered tool through an MCP server.

    Unknown tool names and rejected arguments are answered with JSON-RPC
    `invalid params` errors before any collaborator is touched. A failing
    handler becomes an in-band result with `isError` set and the
    collaborator's message as its only text block.
    """

    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return registry.catalog()

    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        try:
            result = await registry.invoke(req.params.name, req.params.arguments)
        except UnknownTool as exc:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=exc.message)) from exc
        except InvalidInput as exc:
            raise McpError(
                types.ErrorData(code=types.INVALID_PARAMS, message=exc.message, data={"errors": exc.errors})
            ) from exc
        except HandlerError as exc:
            logger.warning("tool %s failed: %s", exc.tool_name, exc.message)
            result = text_result(exc.message, is_error=True)
        return types.ServerResult(result)

    # The `call_tool` decorator folds every exception into an in-band result,
    # so the handler is installed directly to keep protocol errors distinct.
    server.request_handlers[types.CallToolRequest] = call_tool
    return server


def build_session_manager(server: Server, config: ServerConfig | None = None) -> StreamableHTTPSessionManager:
    """Stateless streamable HTTP transport: every POST carries a full exchange."""

    config = config or ServerConfig()
    return StreamableHTTPSessionManager(
        app=server,
        json_response=config.json_response,
        stateless=True,
    )
