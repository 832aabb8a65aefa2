"""Core data models shared by tools and adapters."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TextContent(BaseModel):
    """A single text item inside a tool result."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Protocol-shaped result of a tool call.

    Failures are results too: ``is_error`` is set and the text carries the
    message, but the shape is identical to a success.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: list[TextContent] = Field(min_length=1)
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def ok(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)], is_error=True)

    @property
    def text(self) -> str:
        """All content items joined by newlines."""
        return "\n".join(item.text for item in self.content)

    def to_message(self) -> dict[str, Any]:
        """Serialize using the wire field names (``isError``)."""
        return self.model_dump(by_alias=True)


class HealthStatus(BaseModel):
    """Outcome of a backend reachability probe."""

    status: Literal["connected", "error"]
    message: str

    @property
    def connected(self) -> bool:
        return self.status == "connected"
