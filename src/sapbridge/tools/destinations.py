"""Tools that reach the backend through the platform destination service."""

from typing import Annotated

from pydantic import Field

from sapbridge.context import get_tool_context
from sapbridge.query import (
    DEFAULT_TOP,
    EntityKind,
    QueryParameters,
    Skip,
    Top,
    build_entity_path,
    search_filter,
)
from sapbridge.render import render_destinations, render_envelope


async def list_destinations() -> str:
    """List the destinations configured in the destination service."""
    ctx = get_tool_context()
    destinations = await ctx.destinations.list_destinations()
    return render_destinations(destinations)


async def call_destination(
    destination: Annotated[str, Field(min_length=1)],
    entity: EntityKind = EntityKind.PRODUCT,
    top: Top = DEFAULT_TOP,
    skip: Skip = 0,
    search: str | None = None,
) -> str:
    """Fetch SAP records through a named destination.

    Args:
        destination: Name of the destination configured in the destination service
        entity: Entity set to read
        top: Number of records to fetch
        skip: Number of records to skip (for pagination)
        search: Product description substring, or customer ID for sales orders
    """
    ctx = get_tool_context()
    query = QueryParameters(top=top, skip=skip, search=search)
    path = build_entity_path(
        ctx.settings.service_path(entity),
        entity.entity_set,
        query,
        search_filter(entity, query.search),
    )
    envelope = await ctx.destinations.call_destination(destination, path)
    return render_envelope(entity, envelope, skip)
