"""Tool schema extraction and argument validation."""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, create_model
from typing_extensions import TypedDict

from sapbridge.docstring import parse_docstring

ToolHandler = Callable[..., Awaitable[str]]


class ToolListing(TypedDict):
    name: str
    description: str
    inputSchema: dict[str, Any]


class FunctionDescription:
    """Name, argument model and handler of a single tool.

    The argument model is generated from the handler signature, so bounds
    declared with ``Annotated[int, Field(ge=1)]`` and defaults become part of
    both validation and the published input schema.
    """

    function: ToolHandler
    name: str
    description: str
    error_prefix: str
    args_model: type[BaseModel]
    args_json_schema: dict[str, Any]

    def __init__(
        self,
        func: ToolHandler,
        name: str | None = None,
        description: str = "",
        error_prefix: str | None = None,
    ):
        """Build the description and argument model for ``func``.

        Args:
            func: Async handler returning the rendered text
            name: Override for the tool name
            description: Override for the docstring summary
            error_prefix: Text placed before error messages from this tool
        """
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"Tool handler {func.__name__} must be an async function")

        self.function = func
        self.name = name or func.__name__
        self.sig = inspect.signature(func)

        self.docstring_info = parse_docstring(func.__doc__)
        self.description = description or self.docstring_info.description or f"Tool {self.name}"
        self.error_prefix = error_prefix or f"Error in {self.name}"

        self.args_model = self._create_args_model()
        self.args_json_schema = self.args_model.model_json_schema()

    def _create_args_model(self) -> type[BaseModel]:
        field_definitions: dict[str, Any] = {}

        for param_name, param in self.sig.parameters.items():
            # Raw annotation keeps Annotated[...] constraints intact.
            param_type = param.annotation if param.annotation is not inspect.Parameter.empty else Any
            param_description = self.docstring_info.parameters.get(param_name, "")

            if param.default is not inspect.Parameter.empty:
                field = Field(default=param.default, description=param_description)
            else:
                field = Field(description=param_description)
            field_definitions[param_name] = (param_type, field)

        model_name = "".join(part.title() for part in self.name.split("_")) + "Args"
        return create_model(
            model_name,
            __config__=ConfigDict(extra="forbid", frozen=True, populate_by_name=True),
            **field_definitions,
        )

    def validate_and_parse_args(self, json_args: dict[str, Any] | None) -> dict[str, Any]:
        """Validate raw JSON arguments, applying defaults.

        Raises:
            pydantic.ValidationError: If an argument is missing, mistyped,
                out of bounds or unknown.
        """
        parsed_args = self.args_model.model_validate(json_args or {})
        return {k: getattr(parsed_args, k) for k in self.args_model.model_fields}

    async def call_async(self, **kwargs: Any) -> str:
        return await self.function(**kwargs)

    def to_listing(self) -> ToolListing:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.args_json_schema,
        }
