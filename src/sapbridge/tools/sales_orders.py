"""Sales order tools."""

from typing import Annotated

from pydantic import Field

from sapbridge.context import get_tool_context
from sapbridge.query import DEFAULT_TOP, EntityKind, QueryParameters, Skip, Top
from sapbridge.render import render_envelope


async def get_sales_orders(
    top: Top = DEFAULT_TOP,
    skip: Skip = 0,
    customer_id: Annotated[str | None, Field(alias="customerId")] = None,
) -> str:
    """Fetch sales orders from SAP.

    Args:
        top: Number of records to fetch
        skip: Number of records to skip (for pagination)
        customer_id: Filter by customer ID
    """
    ctx = get_tool_context()
    query = QueryParameters(top=top, skip=skip)
    envelope = await ctx.backend.get_sales_orders(query, customer_id)
    return render_envelope(EntityKind.SALES_ORDER, envelope, skip)
