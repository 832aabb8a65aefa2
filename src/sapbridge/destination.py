"""Destination resolution through the platform destination service.

The broker issues OAuth2 client-credentials tokens and maps destination
names to backend URLs. Destinations are resolved on every call, so edits
made in the broker apply immediately.
"""

import logging
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from sapbridge.backend import expect_object, send_json
from sapbridge.config import BrokerBinding
from sapbridge.errors import AuthError, BackendError

logger = logging.getLogger(__name__)

# Cached tokens are refreshed once less than this many seconds remain.
TOKEN_REFRESH_MARGIN = 30.0

DESTINATIONS_API = "destination-configuration/v1"


class AccessToken(BaseModel):
    value: str
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at - TOKEN_REFRESH_MARGIN


class Destination(BaseModel):
    """A destination name resolved to a concrete endpoint."""

    model_config = {"frozen": True}

    name: str
    url: str
    auth_header: str


class DestinationResolver:
    """Resolve destination names via the bound destination service.

    Without a binding the resolver is degraded: every operation raises
    ``AuthError`` before touching the network.
    """

    def __init__(
        self,
        binding: BrokerBinding | None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.binding = binding
        self._clock = clock
        self._tokens: dict[tuple[str, str], AccessToken] = {}
        self._client: httpx.AsyncClient | None = None

        if binding is None:
            logger.warning("No destination service binding found; destination tools are disabled")
        else:
            self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def available(self) -> bool:
        return self.binding is not None

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    def _require_binding(self) -> tuple[BrokerBinding, httpx.AsyncClient]:
        if self.binding is None or self._client is None:
            raise AuthError("Destination service not available: no destination service binding found")
        return self.binding, self._client

    async def get_access_token(self) -> str:
        """Obtain a bearer token with the client-credentials grant.

        Tokens are reused only while the provider-declared ``expires_in``
        leaves more than ``TOKEN_REFRESH_MARGIN`` seconds. Responses without
        an expiry are never cached.

        Raises:
            AuthError: If unbound, or if the token endpoint rejects the grant.
        """
        binding, client = self._require_binding()
        key = (binding.token_url, binding.clientid)

        cached = self._tokens.get(key)
        if cached is not None and cached.is_fresh(self._clock()):
            return cached.value

        body = await send_json(
            client,
            "POST",
            binding.token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": binding.clientid,
                "client_secret": binding.clientsecret,
            },
            headers={"Accept": "application/json"},
            error_cls=AuthError,
            label="Destination token",
        )

        token = body.get("access_token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthError("Destination token response did not contain an access_token")

        expires_in = body.get("expires_in")
        if isinstance(expires_in, int | float) and expires_in > TOKEN_REFRESH_MARGIN:
            self._tokens[key] = AccessToken(value=token, expires_at=self._clock() + expires_in)
        else:
            self._tokens.pop(key, None)
        return token

    async def resolve(self, name: str) -> Destination:
        """Look up the configuration record of destination ``name``.

        Raises:
            AuthError: If the broker cannot be reached or refuses the lookup.
            BackendError: If the destination configuration has no URL.
        """
        binding, client = self._require_binding()
        token = await self.get_access_token()

        body = await send_json(
            client,
            "GET",
            f"{binding.service_url}/{DESTINATIONS_API}/destinations/{quote(name, safe='')}",
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            error_cls=AuthError,
            label="Destination service",
        )

        config = body.get("destinationConfiguration") if isinstance(body, dict) else None
        url = config.get("URL") if isinstance(config, dict) else None
        if not isinstance(url, str) or not url:
            raise BackendError(f"Destination '{name}' has no URL in its configuration")

        # Destinations with their own authentication come back with ready-made tokens.
        auth_header = f"Bearer {token}"
        auth_tokens = body.get("authTokens")
        if isinstance(auth_tokens, list) and auth_tokens:
            first = auth_tokens[0]
            if isinstance(first, dict) and first.get("value"):
                auth_header = f"{first.get('type', 'Bearer')} {first['value']}"

        return Destination(name=name, url=url.rstrip("/"), auth_header=auth_header)

    async def call_destination(self, name: str, entity_path: str) -> dict[str, Any]:
        """Resolve ``name`` and GET ``entity_path`` relative to its URL.

        Args:
            name: Destination name configured in the broker
            entity_path: Path plus query string, starting with ``/``

        Raises:
            AuthError: On token or lookup failures.
            BackendError: On a malformed destination or a failed data call.
        """
        _, client = self._require_binding()
        destination = await self.resolve(name)

        url = f"{destination.url}/{entity_path.lstrip('/')}"
        logger.info(f"Calling destination {name}: GET {url}")
        label = f"Destination {name}"
        body = await send_json(
            client,
            "GET",
            url,
            headers={"Authorization": destination.auth_header, "Accept": "application/json"},
            label=label,
        )
        return expect_object(body, label)

    async def list_destinations(self) -> list[dict[str, Any]]:
        """Return the subaccount-level destination records."""
        binding, client = self._require_binding()
        token = await self.get_access_token()

        body = await send_json(
            client,
            "GET",
            f"{binding.service_url}/{DESTINATIONS_API}/subaccountDestinations",
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            error_cls=AuthError,
            label="Destination service",
        )
        if not isinstance(body, list):
            raise BackendError("Destination service returned an unexpected destination list")
        return [dest for dest in body if isinstance(dest, dict)]
