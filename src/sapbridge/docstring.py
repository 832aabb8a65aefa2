"""Google-style docstring parsing for tool descriptions."""

from griffe import Docstring, DocstringSectionKind
from pydantic import BaseModel


class DocstringInfo(BaseModel):
    """Summary text and per-argument descriptions of a handler docstring."""

    description: str = ""
    parameters: dict[str, str] = {}


def parse_docstring(text: str | None) -> DocstringInfo:
    """Parse ``text`` with griffe's Google parser.

    The description is the leading text section; ``Args:`` entries become
    parameter descriptions used in the tool's input schema.
    """
    if not text:
        return DocstringInfo()

    sections = Docstring(text, lineno=1).parse("google", warnings=False)

    info = DocstringInfo()
    for section in sections:
        if section.kind is DocstringSectionKind.text and not info.description:
            info.description = section.value.strip()
        elif section.kind is DocstringSectionKind.parameters:
            info.parameters = {param.name: param.description for param in section.value}
    return info
