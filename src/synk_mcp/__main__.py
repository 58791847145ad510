"""Entry point: python -m synk_mcp --host HOST --port PORT"""

import argparse
import logging
import os

DEFAULT_PORT = 3000

logger = logging.getLogger("synk_mcp")


def main() -> None:
    """Run the MCP server."""
    import uvicorn

    from synk_mcp.api.main import create_app
    from synk_mcp.config import AppConfig
    from synk_mcp.obs.tracing import configure_logging

    parser = argparse.ArgumentParser(description="synk MCP server")
    parser.add_argument("--host", default=os.getenv("SYNK_MCP_HOST", "0.0.0.0"))
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("SYNK_MCP_PORT", DEFAULT_PORT)),
        help=f"Port to listen on (default: {DEFAULT_PORT})",
    )
    args = parser.parse_args()

    config = AppConfig.from_env()
    configure_logging(config.log_level)
    app = create_app(config)

    logger.info("Starting MCP server on %s:%s", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
