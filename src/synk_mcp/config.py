"""Configuration models for the MCP server."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Configures HTTP routing, preflight caching and the response framing."""

    base_path: str = Field(default="/api/mcp", pattern=r"^/")
    health_suffix: str = Field(default="/health", pattern=r"^/")
    preflight_max_age: int = Field(default=86400, ge=0)
    # False streams replies as server-sent events; True answers with plain JSON.
    json_response: bool = False


class StoreConfig(BaseModel):
    """Connection settings for the sync-log store (PostgREST)."""

    url: str | None = None
    service_key: str | None = None
    table: str = Field(default="sync_logs", min_length=1)
    timeout_seconds: float = Field(default=10.0, gt=0.0)

    @property
    def configured(self) -> bool:
        return bool(self.url and self.service_key)


class BroadcastConfig(BaseModel):
    """Topic and event names used when publishing code updates."""

    topic: str = Field(default="synk-stream", min_length=1)
    event: str = Field(default="code_update", min_length=1)
    timeout_seconds: float = Field(default=10.0, gt=0.0)


class AppConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    broadcast: BroadcastConfig = Field(default_factory=BroadcastConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "AppConfig":
        """Build configuration from environment variables.

        Only presence is recorded here; `create_app` refuses to start when the
        store URL or credential is missing.
        """

        env = os.environ if environ is None else environ
        base_path = env.get("SYNK_MCP_BASE_PATH", "/api/mcp").rstrip("/") or "/"
        server = ServerConfig(
            base_path=base_path,
            json_response=env.get("SYNK_MCP_JSON_RESPONSE", "").lower() in {"1", "true", "yes"},
        )
        store = StoreConfig(
            url=env.get("NEXT_PUBLIC_SUPABASE_URL") or env.get("SUPABASE_URL"),
            service_key=env.get("SUPABASE_SERVICE_ROLE_KEY"),
        )
        return cls(
            server=server,
            store=store,
            log_level=env.get("SYNK_LOG_LEVEL", "INFO").upper(),
        )
