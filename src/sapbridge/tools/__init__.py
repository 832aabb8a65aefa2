"""SAP tools and the registry that exposes them."""

from sapbridge.context import ToolContext
from sapbridge.registry import Registry
from sapbridge.tools.destinations import call_destination, list_destinations
from sapbridge.tools.health import sap_health_check
from sapbridge.tools.products import get_products
from sapbridge.tools.sales_orders import get_sales_orders


def build_registry(context: ToolContext, tool_timeout: float | None = None) -> Registry:
    """Create a registry with every SAP tool bound to ``context``."""
    registry = Registry(context, tool_timeout=tool_timeout)
    registry.register(sap_health_check, error_prefix="Health check failed")
    registry.register(get_products, error_prefix="Error fetching products")
    registry.register(get_sales_orders, error_prefix="Error fetching sales orders")
    registry.register(list_destinations, error_prefix="Error listing destinations")
    registry.register(call_destination, error_prefix="Error calling destination")
    return registry


__all__ = [
    "build_registry",
    "call_destination",
    "get_products",
    "get_sales_orders",
    "list_destinations",
    "sap_health_check",
]
