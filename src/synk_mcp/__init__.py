"""synk MCP server package."""

__version__ = "0.1.0"

from .config import AppConfig, BroadcastConfig, ServerConfig, StoreConfig

__all__ = ["AppConfig", "BroadcastConfig", "ServerConfig", "StoreConfig", "__version__"]
