"""FastAPI adapter: serves a sapbridge registry as MCP JSON-RPC over HTTP."""

import logging
from datetime import datetime, timezone
from typing import Any, Literal

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, ValidationError

from sapbridge.registry import Registry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


class JsonRpcRequest(BaseModel):
    jsonrpc: Literal["2.0"]
    method: str
    id: int | str | None = None
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        return self.id is None


class ToolCallParams(BaseModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


def _result(request_id: int | str | None, result: Any) -> JSONResponse:
    return JSONResponse({"jsonrpc": "2.0", "id": request_id, "result": result})


def _error(request_id: int | str | None, code: int, message: str) -> JSONResponse:
    return JSONResponse(
        {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}
    )


def create_fastapi_app(
    registry: Registry,
    title: str = "SAP MCP Server",
    description: str = "MCP tools for SAP product and sales order data",
) -> FastAPI:
    """
    Create a FastAPI application serving the registry over HTTP.

    Endpoints:
        POST /mcp: MCP JSON-RPC messages (initialize, ping, tools/list, tools/call)
        GET /health: liveness plus a backend reachability flag
        GET /: server information

    Example:
        context = ToolContext.from_environment()
        app = create_fastapi_app(build_registry(context))

        # Run with: uvicorn.run(app, host="127.0.0.1", port=3000)
    """
    server_settings = registry.context.server
    app = FastAPI(title=title, description=description, version=server_settings.version)

    @app.get("/", summary="Server Information")
    async def root():
        return {
            "name": server_settings.name,
            "version": server_settings.version,
            "tools": registry.names,
            "endpoints": {"mcp": "/mcp", "health": "/health"},
        }

    @app.get("/health", summary="Health Check")
    async def health_check():
        health = await registry.context.backend.health_check()
        return {
            "status": "healthy",
            "sapConnected": health.connected,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.post("/mcp", summary="MCP JSON-RPC endpoint")
    async def mcp_endpoint(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            return _error(None, PARSE_ERROR, "Parse error")

        try:
            message = JsonRpcRequest.model_validate(payload)
        except ValidationError as e:
            request_id = payload.get("id") if isinstance(payload, dict) else None
            return _error(request_id, INVALID_REQUEST, f"Invalid request: {e.error_count()} error(s)")

        if message.is_notification:
            logger.debug(f"Notification received: {message.method}")
            return Response(status_code=202)

        return await _dispatch(registry, message)

    return app


async def _dispatch(registry: Registry, message: JsonRpcRequest) -> JSONResponse:
    server_settings = registry.context.server

    if message.method == "initialize":
        return _result(
            message.id,
            {
                "protocolVersion": message.params.get("protocolVersion", PROTOCOL_VERSION),
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": {"name": server_settings.name, "version": server_settings.version},
            },
        )

    if message.method == "ping":
        return _result(message.id, {})

    if message.method == "tools/list":
        return _result(message.id, {"tools": registry.list_tools()})

    if message.method == "tools/call":
        try:
            params = ToolCallParams.model_validate(message.params)
        except ValidationError:
            return _error(message.id, INVALID_PARAMS, "tools/call requires a tool name")
        result = await registry.call(params.name, params.arguments)
        return _result(message.id, result.to_message())

    return _error(message.id, METHOD_NOT_FOUND, f"Method not found: {message.method}")
