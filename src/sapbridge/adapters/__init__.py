"""Transport adapters for a sapbridge registry."""

from sapbridge.adapters.fastapi_adapter import create_fastapi_app
from sapbridge.adapters.fastmcp_adapter import create_fastmcp_server

__all__ = ["create_fastapi_app", "create_fastmcp_server"]
