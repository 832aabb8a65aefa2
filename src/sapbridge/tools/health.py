"""Backend reachability diagnostics."""

from sapbridge.context import get_tool_context
from sapbridge.render import render_health


async def sap_health_check() -> str:
    """Check the connection to the SAP backend by fetching a single product."""
    ctx = get_tool_context()
    health = await ctx.backend.health_check()
    return render_health(health)
