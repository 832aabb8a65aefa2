"""OData query construction.

Everything here is pure: no I/O, no settings. Filter values are emitted as
OData string literals with embedded quotes doubled, and the final query
string is percent-encoded so user text can never break the query grammar.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any
from urllib.parse import quote

from pydantic import BaseModel, BeforeValidator, Field

MAX_TOP = 100
DEFAULT_TOP = 10


def _reject_bool(value: Any) -> Any:
    # Lax int parsing turns JSON true/false into 1/0.
    if isinstance(value, bool):
        raise ValueError("expected an integer, got a boolean")
    return value


Top = Annotated[int, BeforeValidator(_reject_bool), Field(ge=1, le=MAX_TOP)]
Skip = Annotated[int, BeforeValidator(_reject_bool), Field(ge=0)]

# Characters OData expects to read literally in a query string.
_SAFE_QUERY_CHARS = "$'(),"


class EntityKind(str, Enum):
    """Entity sets the tools know how to query and render."""

    PRODUCT = "ProductSet"
    SALES_ORDER = "SalesOrderSet"

    @property
    def entity_set(self) -> str:
        return self.value

    @property
    def search_field(self) -> str:
        """Field matched by free-text search."""
        if self is EntityKind.PRODUCT:
            return "ProductDescription"
        return "CustomerID"


class QueryParameters(BaseModel):
    """Pagination and free-text search for a single backend query."""

    model_config = {"frozen": True}

    top: Top = DEFAULT_TOP
    skip: Skip = 0
    search: str | None = None

    @property
    def has_search(self) -> bool:
        return bool(self.search and self.search.strip())

    def to_params(self, filter_expression: str | None = None) -> dict[str, str]:
        """Return ordered OData system query options.

        ``$top`` and ``$skip`` are always present; ``$filter`` only when
        ``filter_expression`` is non-empty.
        """
        params = {
            "$top": str(self.top),
            "$skip": str(self.skip),
            "$format": "json",
        }
        if filter_expression:
            params["$filter"] = filter_expression
        return params


def odata_string(value: str) -> str:
    """Quote ``value`` as an OData string literal."""
    return "'" + value.replace("'", "''") + "'"


def contains_filter(field: str, value: str | None) -> str | None:
    """``contains(field,'value')``, or None for an empty search."""
    if not value or not value.strip():
        return None
    return f"contains({field},{odata_string(value.strip())})"


def equals_filter(field: str, value: str | None) -> str | None:
    """``field eq 'value'``, or None for an empty value."""
    if not value or not value.strip():
        return None
    return f"{field} eq {odata_string(value.strip())}"


def search_filter(kind: EntityKind, search: str | None) -> str | None:
    """Filter expression for a free-text search on ``kind``.

    Products match by description substring, sales orders by exact customer.
    """
    if kind is EntityKind.PRODUCT:
        return contains_filter(kind.search_field, search)
    return equals_filter(kind.search_field, search)


def encode_query(params: Mapping[str, str]) -> str:
    """Percent-encode query options into a ``k=v&k=v`` string."""
    return "&".join(
        f"{quote(key, safe=_SAFE_QUERY_CHARS)}={quote(value, safe=_SAFE_QUERY_CHARS)}"
        for key, value in params.items()
    )


def build_entity_path(
    service_path: str,
    entity_set: str,
    query: QueryParameters,
    filter_expression: str | None = None,
) -> str:
    """Join service path, entity set and the encoded query string."""
    path = f"{service_path.rstrip('/')}/{entity_set}"
    return f"{path}?{encode_query(query.to_params(filter_expression))}"
