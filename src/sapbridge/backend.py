"""Authenticated HTTP access to the OData backend."""

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from sapbridge.config import BackendSettings
from sapbridge.errors import BackendError, SapBridgeError
from sapbridge.models import HealthStatus
from sapbridge.query import (
    EntityKind,
    QueryParameters,
    encode_query,
    equals_filter,
    search_filter,
)

logger = logging.getLogger(__name__)


def provider_error_message(response: httpx.Response) -> str | None:
    """Extract the provider message from an error body, if any.

    Understands OData ``{"error": {"message": {"value": ...}}}`` (v2),
    ``{"error": {"message": "..."}}`` (v4) and OAuth ``error_description``.
    """
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(body, dict):
        return None
    if isinstance(body.get("error_description"), str) and body["error_description"]:
        return body["error_description"]
    if not isinstance(body.get("error"), dict):
        return None

    message = body["error"].get("message")
    if isinstance(message, dict):
        message = message.get("value")
    if isinstance(message, str) and message:
        return message
    return None


async def send_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    error_cls: type[SapBridgeError] = BackendError,
    label: str = "SAP API",
    **kwargs: Any,
) -> Any:
    """Send a request and decode the JSON body.

    Every failure, whether timeout, network error, non-2xx status or an
    unparsable body, is raised as ``error_cls``.
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        seconds = client.timeout.read or client.timeout.connect
        raise error_cls(f"{label} request timed out after {seconds}s") from e
    except httpx.RequestError as e:
        raise error_cls(f"{label} Error: connection failed - {e}") from e

    if not response.is_success:
        logger.error(f"{label} Error: {response.status_code} {response.text[:500]}")
        provider_message = provider_error_message(response)
        message = provider_message or (
            f"{label} Error: {response.status_code} {response.reason_phrase} - "
            f"Request failed with status code {response.status_code}"
        )
        raise error_cls(message, status_code=response.status_code)

    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise error_cls(f"{label} Error: response is not valid JSON") from e
    return body


def expect_object(body: Any, label: str = "SAP API") -> dict[str, Any]:
    """Reject envelopes that are not JSON objects."""
    if not isinstance(body, dict):
        raise BackendError(f"{label} Error: expected a JSON object, got {type(body).__name__}")
    return body


class BackendClient:
    """Client for the OData backend using HTTP basic authentication.

    Owns an ``httpx.AsyncClient`` connection pool; close it with ``aclose()``
    or use the client as an async context manager.
    """

    def __init__(
        self,
        settings: BackendSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        if not settings.verify_ssl:
            logger.warning(
                f"TLS certificate verification is disabled for {settings.base_url}"
            )

        headers = {
            "Accept": "application/json",
            "X-Requested-With": "XMLHttpRequest",
        }
        if settings.client:
            headers["sap-client"] = settings.client

        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            auth=(settings.username, settings.password),
            headers=headers,
            timeout=settings.timeout,
            verify=settings.verify_ssl,
            transport=transport,
        )

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Issue a request against the backend and return the JSON envelope.

        Args:
            method: HTTP method
            path: Path relative to the configured base URL
            params: OData query options, encoded with ``encode_query``

        Raises:
            BackendError: On non-2xx responses, network failures, timeouts or
                bodies that are not JSON objects.
        """
        url = f"{path}?{encode_query(params)}" if params else path
        logger.info(f"Calling SAP: {method} {url}")
        return expect_object(await send_json(self._client, method, url))

    def _service_path(self, kind: EntityKind) -> str:
        return self.settings.service_path(kind)

    async def get_entities(
        self,
        kind: EntityKind,
        query: QueryParameters,
        filter_expression: str | None = None,
    ) -> dict[str, Any]:
        path = f"{self._service_path(kind).rstrip('/')}/{kind.entity_set}"
        return await self.request("GET", path, query.to_params(filter_expression))

    async def get_products(self, query: QueryParameters) -> dict[str, Any]:
        """Fetch a page of products, filtered by description when searching."""
        return await self.get_entities(
            EntityKind.PRODUCT, query, search_filter(EntityKind.PRODUCT, query.search)
        )

    async def get_sales_orders(
        self, query: QueryParameters, customer_id: str | None = None
    ) -> dict[str, Any]:
        """Fetch a page of sales orders, optionally for a single customer."""
        return await self.get_entities(
            EntityKind.SALES_ORDER,
            query,
            equals_filter(EntityKind.SALES_ORDER.search_field, customer_id),
        )

    async def health_check(self) -> HealthStatus:
        """Fetch a single product to confirm the backend is reachable."""
        try:
            await self.get_entities(EntityKind.PRODUCT, QueryParameters(top=1))
        except BackendError as e:
            return HealthStatus(status="error", message=f"SAP connection failed: {e}")
        return HealthStatus(status="connected", message="Successfully connected to SAP")
