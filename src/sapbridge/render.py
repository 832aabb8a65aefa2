"""Rendering of backend envelopes into bounded human-readable text."""

from collections.abc import Callable
from typing import Any

from sapbridge.models import HealthStatus
from sapbridge.query import MAX_TOP, EntityKind

MAX_FIELD_LENGTH = 120


def extract_rows(envelope: Any) -> list[dict[str, Any]]:
    """Pull the row list out of an OData v2 or v4 envelope.

    Checks ``d.results`` first, then ``value``. Anything else, including a
    missing or malformed list, is treated as no rows.
    """
    if not isinstance(envelope, dict):
        return []

    data = envelope.get("d")
    if isinstance(data, dict) and isinstance(data.get("results"), list):
        rows = data["results"]
    elif isinstance(envelope.get("value"), list):
        rows = envelope["value"]
    else:
        return []
    return [row for row in rows if isinstance(row, dict)]


def _field(row: dict[str, Any], name: str, fallback: str = "") -> str:
    value = row.get(name)
    if value is None or value == "":
        return fallback
    text = str(value)
    if len(text) > MAX_FIELD_LENGTH:
        text = text[: MAX_FIELD_LENGTH - 3] + "..."
    return text


def format_product(row: dict[str, Any]) -> str:
    return (
        f"• {_field(row, 'ProductID')} - "
        f"{_field(row, 'Description', 'No description')} "
        f"({_field(row, 'Category', 'N/A')})"
    )


def format_sales_order(row: dict[str, Any]) -> str:
    line = (
        f"• {_field(row, 'SalesOrderID')} - Customer: {_field(row, 'CustomerID')} - "
        f"Total: {_field(row, 'NetAmount', 'N/A')} {_field(row, 'CurrencyCode')}"
    )
    return line.rstrip()


class _Layout:
    def __init__(self, label: str, noun: str, formatter: Callable[[dict[str, Any]], str]):
        self.label = label
        self.noun = noun
        self.formatter = formatter

    @property
    def empty_message(self) -> str:
        return f"No {self.noun} found matching your criteria."


_LAYOUTS = {
    EntityKind.PRODUCT: _Layout("Products", "products", format_product),
    EntityKind.SALES_ORDER: _Layout("Sales Orders", "sales orders", format_sales_order),
}


def render_rows(kind: EntityKind, rows: list[dict[str, Any]], skip: int = 0) -> str:
    """Render rows as a bulleted summary followed by a count line."""
    layout = _LAYOUTS[kind]
    if not rows:
        return layout.empty_message

    shown = rows[:MAX_TOP]
    lines = [layout.formatter(row) for row in shown]
    if len(rows) > len(shown):
        lines.append(f"... {len(rows) - len(shown)} more not shown")

    count = len(rows)
    noun = layout.noun.split()[-1]
    return (
        f"{layout.label} {skip + 1} to {skip + count}:\n\n"
        + "\n".join(lines)
        + f"\n\nTotal: {count} {noun}"
    )


def render_envelope(kind: EntityKind, envelope: Any, skip: int = 0) -> str:
    return render_rows(kind, extract_rows(envelope), skip)


def render_destinations(destinations: list[dict[str, Any]]) -> str:
    """Summarize destination records returned by the broker."""
    if not destinations:
        return "No destinations configured."

    lines = [
        f"• {_field(dest, 'Name')} - {_field(dest, 'URL', 'no URL')} "
        f"({_field(dest, 'Authentication', _field(dest, 'Type', 'N/A'))})"
        for dest in destinations[:MAX_TOP]
    ]
    return "Destinations:\n\n" + "\n".join(lines) + f"\n\nTotal: {len(destinations)} destinations"


def render_health(health: HealthStatus) -> str:
    return f"SAP Health Check:\nStatus: {health.status}\nMessage: {health.message}"
