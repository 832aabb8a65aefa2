"""sapbridge - SAP OData data exposed as MCP tools."""

from sapbridge.context import ToolContext, get_tool_context
from sapbridge.errors import AuthError, BackendError, ConfigError, SapBridgeError
from sapbridge.models import TextContent, ToolResult
from sapbridge.registry import Registry
from sapbridge.server import connect, serve
from sapbridge.tools import build_registry

__all__ = [
    "AuthError",
    "BackendError",
    "ConfigError",
    "Registry",
    "SapBridgeError",
    "TextContent",
    "ToolContext",
    "ToolResult",
    "build_registry",
    "connect",
    "get_tool_context",
    "serve",
]
