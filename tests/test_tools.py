"""End-to-end tool behaviour against mocked SAP and broker endpoints."""

import httpx
import pytest
from conftest import json_responder

EXPECTED_TOOLS = [
    "sap_health_check",
    "get_products",
    "get_sales_orders",
    "list_destinations",
    "call_destination",
]


def test_all_tools_registered(make_registry):
    registry, _, _ = make_registry()
    assert registry.names == EXPECTED_TOOLS


@pytest.mark.asyncio
async def test_get_products_round_trip(make_registry):
    """Test the documented product rendering for a single v4 row."""
    envelope = {"value": [{"ProductID": "P1", "Description": "Widget", "Category": "Tools"}]}
    registry, backend, _ = make_registry(backend=json_responder(envelope))

    result = await registry.call("get_products", {"top": 5, "skip": 0})

    assert not result.is_error
    assert result.text == "Products 1 to 1:\n\n• P1 - Widget (Tools)\n\nTotal: 1 products"
    query = backend.requests[0].url.query.decode()
    assert "$top=5" in query
    assert "$skip=0" in query
    assert "$filter" not in query


@pytest.mark.asyncio
async def test_get_products_defaults_and_search(make_registry):
    registry, backend, _ = make_registry(backend=json_responder({"d": {"results": []}}))

    result = await registry.call("get_products", {"search": "Note book"})

    assert result.text == "No products found matching your criteria."
    query = backend.requests[0].url.query.decode()
    assert "$top=10" in query
    assert "$filter=contains(ProductDescription,'Note%20book')" in query


@pytest.mark.asyncio
@pytest.mark.parametrize("top", [0, 101, True])
async def test_out_of_range_top_makes_no_backend_call(make_registry, top):
    """Test that schema violations are reported before any backend request."""
    registry, backend, broker = make_registry()

    result = await registry.call("get_products", {"top": top})

    assert result.is_error
    assert result.text.startswith("Validation error: top")
    assert backend.call_count == 0
    assert broker.call_count == 0


@pytest.mark.asyncio
async def test_backend_error_reported_as_text(make_registry):
    body = {"error": {"message": {"value": "Service API_PRODUCT_SRV not found"}}}
    registry, _, _ = make_registry(backend=json_responder(body, 404))

    result = await registry.call("get_products", {})

    assert result.is_error
    assert result.text == "Error fetching products: Service API_PRODUCT_SRV not found"


@pytest.mark.asyncio
async def test_get_sales_orders(make_registry):
    envelope = {
        "d": {
            "results": [
                {"SalesOrderID": "SO1", "CustomerID": "C1", "NetAmount": "12.50", "CurrencyCode": "USD"}
            ]
        }
    }
    registry, backend, _ = make_registry(backend=json_responder(envelope))

    result = await registry.call("get_sales_orders", {"top": 1, "skip": 3, "customer_id": "C1"})

    assert result.text == (
        "Sales Orders 4 to 4:\n\n• SO1 - Customer: C1 - Total: 12.50 USD\n\nTotal: 1 orders"
    )
    assert "$filter=CustomerID%20eq%20'C1'" in backend.requests[0].url.query.decode()


@pytest.mark.asyncio
async def test_get_sales_orders_accepts_camel_case_customer(make_registry):
    """Test that clients sending ``customerId`` are filtered like ``customer_id``."""
    registry, backend, _ = make_registry()

    result = await registry.call("get_sales_orders", {"customerId": "C2"})

    assert not result.is_error
    assert "$filter=CustomerID%20eq%20'C2'" in backend.requests[0].url.query.decode()


def test_sales_orders_schema_publishes_customer_id_alias(make_registry):
    registry, _, _ = make_registry()

    schema = registry.get_description("get_sales_orders").args_json_schema

    assert "customerId" in schema["properties"]
    assert schema["properties"]["customerId"]["description"] == "Filter by customer ID"


@pytest.mark.asyncio
async def test_health_check_tool(make_registry):
    registry, backend, _ = make_registry(backend=json_responder({"value": []}))

    result = await registry.call("sap_health_check")

    assert not result.is_error
    assert result.text == (
        "SAP Health Check:\nStatus: connected\nMessage: Successfully connected to SAP"
    )
    assert backend.call_count == 1


@pytest.mark.asyncio
async def test_health_check_tool_reports_failure_without_error(make_registry):
    def responder(request):
        raise httpx.ConnectError("refused", request=request)

    registry, _, _ = make_registry(backend=responder)

    result = await registry.call("sap_health_check")

    assert not result.is_error
    assert "Status: error" in result.text
    assert "SAP connection failed" in result.text


@pytest.mark.asyncio
async def test_destination_tools_without_binding(make_registry):
    """Test that an unbound broker yields error results without network I/O."""
    registry, backend, broker = make_registry(binding=None)

    listed = await registry.call("list_destinations")
    called = await registry.call("call_destination", {"destination": "S4"})

    assert listed.is_error
    assert "Destination service not available" in listed.text
    assert called.is_error
    assert called.text.startswith("Error calling destination: Destination service not available")
    assert backend.call_count == 0
    assert broker.call_count == 0


@pytest.mark.asyncio
async def test_call_destination_token_rejected(make_registry):
    registry, _, broker = make_registry(broker=json_responder({"error": "unauthorized"}, 401))

    result = await registry.call("call_destination", {"destination": "S4"})

    assert result.is_error
    assert "Error" in result.text
    assert "401" in result.text
    assert broker.call_count == 1


@pytest.mark.asyncio
async def test_call_destination_sales_orders(make_registry):
    def broker(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/oauth/token":
            return httpx.Response(200, json={"access_token": "tok"})
        if request.url.path.startswith("/destination-configuration/"):
            return httpx.Response(
                200, json={"destinationConfiguration": {"URL": "https://s4.example.com"}}
            )
        return httpx.Response(
            200, json={"value": [{"SalesOrderID": "SO9", "CustomerID": "C7"}]}
        )

    registry, backend, transport = make_registry(broker=broker)

    result = await registry.call(
        "call_destination",
        {"destination": "S4", "entity": "SalesOrderSet", "search": "C7", "top": 1},
    )

    assert result.text == "Sales Orders 1 to 1:\n\n• SO9 - Customer: C7 - Total: N/A\n\nTotal: 1 orders"
    data_request = transport.requests[-1]
    assert data_request.url.path == "/sap/opu/odata/iwbep/GWSAMPLE_BASIC/SalesOrderSet"
    assert "$filter=CustomerID%20eq%20'C7'" in data_request.url.query.decode()
    assert backend.call_count == 0


@pytest.mark.asyncio
async def test_list_destinations_tool(make_registry):
    def broker(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/oauth/token":
            return httpx.Response(200, json={"access_token": "tok"})
        return httpx.Response(200, json=[{"Name": "S4", "URL": "https://s4.example.com", "Type": "HTTP"}])

    registry, _, _ = make_registry(broker=broker)

    result = await registry.call("list_destinations")

    assert not result.is_error
    assert "• S4 - https://s4.example.com (HTTP)" in result.text


@pytest.mark.asyncio
async def test_repeated_calls_are_identical(make_registry):
    """Test that identical read-only calls produce identical text."""
    envelope = {"value": [{"ProductID": "P1", "Description": "Widget", "Category": "Tools"}]}
    registry, backend, _ = make_registry(backend=json_responder(envelope))

    results = [await registry.call("get_products", {"top": 5}) for _ in range(3)]

    assert len({result.text for result in results}) == 1
    assert backend.call_count == 3
