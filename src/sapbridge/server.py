"""Server startup: connect a registry to a transport."""

import logging

import uvicorn

from sapbridge.adapters.fastapi_adapter import create_fastapi_app
from sapbridge.adapters.fastmcp_adapter import create_fastmcp_server
from sapbridge.context import ToolContext
from sapbridge.registry import Registry
from sapbridge.tools import build_registry

logger = logging.getLogger(__name__)

TRANSPORTS = ("stdio", "http")


async def connect(registry: Registry, transport: str) -> None:
    """Serve ``registry`` on ``transport`` until the transport closes.

    Raises:
        ValueError: For an unknown transport name.
    """
    settings = registry.context.server
    if transport == "stdio":
        server = create_fastmcp_server(registry)
        logger.info(f"{settings.name} running on stdio")
        await server.run_async(transport="stdio")
    elif transport == "http":
        app = create_fastapi_app(registry)
        config = uvicorn.Config(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
            log_config=None,
        )
        logger.info(f"{settings.name} listening on http://{settings.host}:{settings.port}/mcp")
        await uvicorn.Server(config).serve()
    else:
        raise ValueError(f"Unknown transport '{transport}', expected one of {TRANSPORTS}")


async def serve(context: ToolContext, transport: str | None = None) -> None:
    """Probe the backend, register tools and serve until shutdown."""
    try:
        health = await context.backend.health_check()
        logger.info(f"SAP Health: {health.status} - {health.message}")

        registry = build_registry(context)
        await connect(registry, transport or context.server.transport)
    finally:
        await context.aclose()
        logger.info("SAP MCP Server stopped")
