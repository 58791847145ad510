"""FastAPI application factory exposing the sync tools over MCP."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from synk_mcp import __version__
from synk_mcp.agent.registry import ToolRegistry
from synk_mcp.agent.tools import register_builtin_tools
from synk_mcp.api.endpoint import ProtocolEndpoint, with_cors
from synk_mcp.api.transport import mount_protocol_routes
from synk_mcp.clients.broadcast import BroadcastChannelClient, RealtimeBroadcastChannel
from synk_mcp.clients.log_store import LogStoreClient, PostgrestLogStore
from synk_mcp.config import AppConfig
from synk_mcp.obs.tracing import log_tool_trace
from synk_mcp.protocol.server import build_server, build_session_manager

logger = logging.getLogger(__name__)

REQUIRED_ENV = ("NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")


def create_app(
    config: AppConfig | None = None,
    *,
    log_store: LogStoreClient | None = None,
    channel: BroadcastChannelClient | None = None,
) -> FastAPI:
    """Wire collaborators, registry, MCP server and endpoint into one application.

    Collaborators are built once here and passed down explicitly; tests hand in
    in-memory fakes instead. Without injected collaborators the store URL and
    service key must be configured, otherwise startup fails.
    """

    config = config or AppConfig.from_env()
    if (log_store is None or channel is None) and not config.store.configured:
        raise ValueError(f"{' and '.join(REQUIRED_ENV)} must be set")
    log_store = log_store if log_store is not None else PostgrestLogStore(config.store)
    channel = channel if channel is not None else RealtimeBroadcastChannel(config.store, config.broadcast)

    registry = ToolRegistry()
    register_builtin_tools(registry, log_store, channel, broadcast_config=config.broadcast)
    registry.set_observer(log_tool_trace)

    sessions = build_session_manager(build_server(registry), config.server)
    endpoint = ProtocolEndpoint(sessions, config.server)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        names = [spec.name for spec in registry.specs()]
        logger.info("MCP endpoint at %s with tools: %s", config.server.base_path, ", ".join(names))
        async with sessions.run():
            yield
        for client in (log_store, channel):
            aclose = getattr(client, "aclose", None)
            if aclose is not None:
                await aclose()
        logger.info("MCP server shutting down")

    app = FastAPI(title="synk MCP server", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.registry = registry
    app.state.endpoint = endpoint

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return with_cors(JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code))

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s", request.url.path)
        return with_cors(JSONResponse({"error": str(exc)}, status_code=500))

    mount_protocol_routes(app, endpoint, config.server.base_path)
    return app
