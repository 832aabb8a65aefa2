"""Tool registry: declaration, validation and dispatch."""

import asyncio
import logging
from collections import OrderedDict
from typing import Any

from pydantic import ValidationError

from sapbridge.context import ToolContext, use_tool_context
from sapbridge.errors import SapBridgeError
from sapbridge.function_schema import FunctionDescription, ToolHandler, ToolListing
from sapbridge.models import ToolResult

logger = logging.getLogger(__name__)


def format_validation_error(error: ValidationError) -> str:
    """One ``field: message`` clause per validation failure."""
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "arguments"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


class Registry:
    """Tools bound to one ``ToolContext``.

    ``call`` is the only way tools run: it validates arguments before the
    handler is invoked and turns every failure into an error ``ToolResult``.
    """

    def __init__(self, context: ToolContext, tool_timeout: float | None = None):
        self.context = context
        self.tool_timeout = tool_timeout or context.server.tool_timeout
        self._tools: dict[str, FunctionDescription] = OrderedDict()

    def register(
        self,
        func: ToolHandler,
        name: str | None = None,
        description: str = "",
        error_prefix: str | None = None,
    ) -> FunctionDescription:
        """Register an async handler and generate its schema.

        Raises:
            ValueError: If a tool with the same name is already registered.
        """
        func_desc = FunctionDescription(
            func, name=name, description=description, error_prefix=error_prefix
        )
        if func_desc.name in self._tools:
            raise ValueError(f"Tool '{func_desc.name}' is already registered")

        self._tools[func_desc.name] = func_desc
        logger.debug(f"Registered tool: {func_desc.name}")
        return func_desc

    @property
    def functions(self) -> list[FunctionDescription]:
        return list(self._tools.values())

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get_description(self, name: str) -> FunctionDescription | None:
        return self._tools.get(name)

    def list_tools(self) -> list[ToolListing]:
        """Name, description and input schema of every tool."""
        return [func_desc.to_listing() for func_desc in self._tools.values()]

    async def call(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Validate ``arguments`` and run tool ``name``.

        Never raises for tool failures; cancellation still propagates.
        """
        logger.info(f"Calling tool: {name} with arguments: {arguments}")

        func_desc = self._tools.get(name)
        if func_desc is None:
            logger.error(f"Tool '{name}' not found")
            return ToolResult.error(f"Error: Tool '{name}' not found")

        try:
            call_kwargs = func_desc.validate_and_parse_args(arguments)
        except ValidationError as e:
            message = format_validation_error(e)
            logger.warning(f"Invalid arguments for {name}: {message}")
            return ToolResult.error(f"Validation error: {message}")

        prefix = func_desc.error_prefix
        try:
            with use_tool_context(self.context):
                text = await asyncio.wait_for(
                    func_desc.call_async(**call_kwargs), timeout=self.tool_timeout
                )
        except asyncio.TimeoutError:
            logger.error(f"Tool {name} timed out after {self.tool_timeout}s")
            return ToolResult.error(f"{prefix}: timed out after {self.tool_timeout}s")
        except SapBridgeError as e:
            logger.error(f"Tool {name} failed: {e}")
            return ToolResult.error(f"{prefix}: {e}")
        except Exception as e:
            logger.exception(f"Tool {name} raised unexpectedly")
            return ToolResult.error(f"{prefix}: {e}")

        logger.info(f"Tool {name} completed successfully")
        return ToolResult.ok(text)
