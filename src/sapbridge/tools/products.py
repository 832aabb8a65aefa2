"""Product catalog tools."""

from sapbridge.context import get_tool_context
from sapbridge.query import DEFAULT_TOP, EntityKind, QueryParameters, Skip, Top
from sapbridge.render import render_envelope


async def get_products(
    top: Top = DEFAULT_TOP,
    skip: Skip = 0,
    search: str | None = None,
) -> str:
    """Fetch products from the SAP product catalog.

    Args:
        top: Number of records to fetch
        skip: Number of records to skip (for pagination)
        search: Search in product description
    """
    ctx = get_tool_context()
    query = QueryParameters(top=top, skip=skip, search=search)
    envelope = await ctx.backend.get_products(query)
    return render_envelope(EntityKind.PRODUCT, envelope, skip)
