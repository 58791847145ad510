"""HTTP protocol endpoint: CORS, preflight, health probe and the 500 fallback."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import Receive, Scope, Send

from synk_mcp.api.streaming import ResponseStream
from synk_mcp.config import ServerConfig
from synk_mcp.obs.tracing import Timer, epoch_millis

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "GET, POST, OPTIONS"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ALLOWED_METHODS,
    "Access-Control-Allow-Headers": (
        "Content-Type, Authorization, mcp-protocol-version, mcp-session-id, Last-Event-ID"
    ),
}


class SessionHandler(Protocol):
    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None: ...


def with_cors(response: Response) -> Response:
    response.headers.update(CORS_HEADERS)
    return response


class ProtocolEndpoint:
    """ASGI endpoint in front of the MCP session manager.

    Preflight and health requests are answered here and never reach the tool
    registry. Every response leaving this endpoint carries the CORS headers,
    and event streams are marked unbuffered for reverse proxies. A failure
    raised before the response has started becomes a 500 JSON body.
    """

    def __init__(
        self,
        sessions: SessionHandler,
        config: ServerConfig | None = None,
        *,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        self.sessions = sessions
        self.config = config or ServerConfig()
        self._clock = clock

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope)
        stream = ResponseStream(receive, send, CORS_HEADERS)

        with Timer() as timer:
            try:
                response = self._local_response(request)
                if response is not None:
                    await response(scope, stream.receive, stream.send)
                else:
                    await self.sessions.handle_request(scope, stream.receive, stream.send)
            except Exception as exc:
                if stream.started:
                    raise
                logger.exception("request %s %s failed", request.method, request.url.path)
                await JSONResponse({"error": str(exc)}, status_code=500)(scope, stream.receive, stream.send)
        logger.debug(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            stream.status_code,
            timer.elapsed_ms,
        )

    def _local_response(self, request: Request) -> Response | None:
        if request.method == "OPTIONS":
            return Response(
                status_code=204,
                headers={"Access-Control-Max-Age": str(self.config.preflight_max_age)},
            )
        if request.url.path.rstrip("/").endswith(self.config.health_suffix):
            return JSONResponse({"status": "ok", "timestamp": self._clock()})
        return None
