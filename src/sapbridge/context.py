"""Shared services for tool handlers.

The registry binds a ``ToolContext`` for the duration of each call with
``use_tool_context``; handlers fetch it with ``get_tool_context()``. The
context itself is built once at startup and never mutated afterwards.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from pydantic import BaseModel, Field

from sapbridge.backend import BackendClient
from sapbridge.config import (
    BackendSettings,
    ServerSettings,
    load_backend_settings,
    load_broker_binding,
    load_server_settings,
)
from sapbridge.destination import DestinationResolver


class ToolContext(BaseModel):
    """Settings and clients available to every tool."""

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    settings: BackendSettings
    server: ServerSettings = Field(default_factory=ServerSettings)
    backend: BackendClient
    destinations: DestinationResolver

    @classmethod
    def from_environment(cls) -> "ToolContext":
        """Load settings and construct clients.

        Raises:
            ConfigError: If backend settings are incomplete.
        """
        settings = load_backend_settings()
        server = load_server_settings()
        return cls(
            settings=settings,
            server=server,
            backend=BackendClient(settings),
            destinations=DestinationResolver(load_broker_binding(), timeout=settings.timeout),
        )

    async def aclose(self) -> None:
        await self.backend.aclose()
        await self.destinations.aclose()


_tool_context: ContextVar[ToolContext | None] = ContextVar("tool_context", default=None)


def get_tool_context() -> ToolContext:
    """Return the context bound to the current call.

    Raises:
        RuntimeError: If called outside ``Registry.call``.
    """
    context = _tool_context.get()
    if context is None:
        raise RuntimeError(
            "No tool context available. Tools must be invoked through Registry.call."
        )
    return context


@contextmanager
def use_tool_context(context: ToolContext) -> Iterator[ToolContext]:
    token = _tool_context.set(context)
    try:
        yield context
    finally:
        _tool_context.reset(token)
