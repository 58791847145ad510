"""Route adapter exposing the protocol endpoint under a base path."""

from __future__ import annotations

from fastapi import FastAPI
from starlette.routing import Route

from synk_mcp.api.endpoint import ProtocolEndpoint

ROUTE_METHODS = ["GET", "POST", "OPTIONS"]


def mount_protocol_routes(app: FastAPI, endpoint: ProtocolEndpoint, base_path: str) -> None:
    """Serve the endpoint at `base_path` and at every path below it."""

    base = base_path.rstrip("/")
    app.router.routes.append(
        Route(base or "/", endpoint=endpoint, methods=ROUTE_METHODS, include_in_schema=False)
    )
    app.router.routes.append(
        Route(f"{base}/{{rest:path}}", endpoint=endpoint, methods=ROUTE_METHODS, include_in_schema=False)
    )
