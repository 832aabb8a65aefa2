"""FastMCP adapter: serves a sapbridge registry over MCP stdio."""

import logging
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool, ToolResult

from sapbridge.function_schema import FunctionDescription
from sapbridge.registry import Registry

logger = logging.getLogger(__name__)


class RegistryTool(Tool):
    """FastMCP tool whose arguments are validated and run by a ``Registry``.

    FastMCP only publishes the registry's input schema; it never checks
    arguments itself, so every transport reports the same validation text.
    """

    def __init__(self, registry: Registry, **kwargs: Any):
        super().__init__(**kwargs)
        self._registry = registry

    @classmethod
    def from_description(cls, registry: Registry, tool_desc: FunctionDescription) -> "RegistryTool":
        listing = tool_desc.to_listing()
        return cls(
            registry,
            name=listing["name"],
            description=listing["description"],
            parameters=listing["inputSchema"],
        )

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        result = await self._registry.call(self.name, arguments)
        return ToolResult(content=result.text, is_error=result.is_error)


def create_fastmcp_server(registry: Registry, name: str | None = None) -> FastMCP:
    """Create a FastMCP server exposing every tool in ``registry``.

    Args:
        registry: Registry whose tools are published
        name: Server name, defaults to the configured server name

    Example:
        context = ToolContext.from_environment()
        server = create_fastmcp_server(build_registry(context))
        await server.run_async(transport="stdio")
    """
    server_settings = registry.context.server
    server = FastMCP(name=name or server_settings.name)

    for tool_desc in registry.functions:
        server.add_tool(RegistryTool.from_description(registry, tool_desc))

    logger.info(f"Available tools: {', '.join(registry.names)}")
    return server
