"""Shared fixtures: settings, mock HTTP transports and tool contexts."""

from collections.abc import Callable

import httpx
import pytest

from sapbridge.backend import BackendClient
from sapbridge.config import BackendSettings, BrokerBinding, ServerSettings
from sapbridge.context import ToolContext
from sapbridge.destination import DestinationResolver
from sapbridge.registry import Registry
from sapbridge.tools import build_registry

Responder = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, responder: Responder):
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return responder(request)

        super().__init__(handler)

    @property
    def call_count(self) -> int:
        return len(self.requests)


def json_responder(body, status_code: int = 200) -> Responder:
    return lambda request: httpx.Response(status_code, json=body)


@pytest.fixture
def backend_settings() -> BackendSettings:
    return BackendSettings(
        base_url="https://sap.example.com",
        username="user",
        password="secret",
        _env_file=None,
    )


@pytest.fixture
def server_settings() -> ServerSettings:
    return ServerSettings(tool_timeout=5.0, _env_file=None)


@pytest.fixture
def broker_binding() -> BrokerBinding:
    return BrokerBinding(
        url="https://broker.example.com",
        clientid="client-id",
        clientsecret="client-secret",
    )


@pytest.fixture
def make_context(backend_settings, server_settings, broker_binding):
    """Factory for a ToolContext backed by mock transports.

    Returns ``(context, backend_transport, broker_transport)``.
    """

    def factory(
        backend: Responder | None = None,
        broker: Responder | None = None,
        binding: BrokerBinding | None = broker_binding,
        settings: BackendSettings = backend_settings,
    ) -> tuple[ToolContext, RecordingTransport, RecordingTransport]:
        backend_transport = RecordingTransport(backend or json_responder({"value": []}))
        broker_transport = RecordingTransport(broker or json_responder({}, 500))
        context = ToolContext(
            settings=settings,
            server=server_settings,
            backend=BackendClient(settings, transport=backend_transport),
            destinations=DestinationResolver(binding, transport=broker_transport),
        )
        return context, backend_transport, broker_transport

    return factory


@pytest.fixture
def make_registry(make_context):
    """Factory for a fully registered Registry plus its transports."""

    def factory(**kwargs) -> tuple[Registry, RecordingTransport, RecordingTransport]:
        context, backend_transport, broker_transport = make_context(**kwargs)
        return build_registry(context), backend_transport, broker_transport

    return factory
