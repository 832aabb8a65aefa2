"""Configuration management for sapbridge."""

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsError

from sapbridge.errors import ConfigError
from sapbridge.query import EntityKind

logger = logging.getLogger(__name__)

DESTINATION_SERVICE_LABEL = "destination"


class BackendSettings(BaseSettings):
    """Credentials and endpoints for the OData backend."""

    base_url: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    client: str | None = None
    product_service: str = "/sap/opu/odata/sap/API_PRODUCT_SRV"
    sales_service: str = "/sap/opu/odata/iwbep/GWSAMPLE_BASIC"
    # SAP_VERIFY_SSL=false accepts self-signed certificates.
    verify_ssl: bool = True
    timeout: float = Field(default=30.0, gt=0)

    model_config = {
        "env_prefix": "SAP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }

    def service_path(self, kind: EntityKind) -> str:
        """OData service root that serves ``kind``."""
        if kind is EntityKind.PRODUCT:
            return self.product_service
        return self.sales_service


class ServerSettings(BaseSettings):
    """Process-level settings for the MCP server."""

    name: str = "sap-mcp-server"
    version: str = "1.0.0"
    transport: Literal["stdio", "http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 3000
    tool_timeout: float = Field(default=60.0, gt=0)
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "SAPBRIDGE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }


class BrokerBinding(BaseModel):
    """Credentials of a bound destination service instance."""

    url: str = Field(min_length=1)
    clientid: str = Field(min_length=1)
    clientsecret: str = Field(min_length=1)
    uri: str | None = None

    model_config = {"extra": "ignore", "frozen": True}

    @property
    def token_url(self) -> str:
        return f"{self.url.rstrip('/')}/oauth/token"

    @property
    def service_url(self) -> str:
        """Base of the destination-configuration API."""
        return (self.uri or self.url).rstrip("/")


class PlatformSettings(BaseSettings):
    """Service bindings injected by the cloud platform."""

    vcap_services: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)

    model_config = {"extra": "ignore", "frozen": True}

    def destination_binding(self) -> BrokerBinding | None:
        """Return the first destination service binding, or None if unbound.

        A binding with incomplete credentials is reported and treated as absent.
        """
        for service in self.vcap_services.get(DESTINATION_SERVICE_LABEL, []):
            credentials = service.get("credentials")
            if not credentials:
                continue
            try:
                return BrokerBinding.model_validate(credentials)
            except ValidationError as e:
                logger.warning(
                    f"Ignoring malformed destination binding {service.get('name')!r}: {e}"
                )
        return None


def _missing_fields(prefix: str, error: ValidationError) -> list[str]:
    return [
        prefix + "_".join(str(part) for part in err["loc"]).upper()
        for err in error.errors()
    ]


def load_backend_settings(**overrides: Any) -> BackendSettings:
    """Load backend settings from the environment, failing fast if incomplete.

    Raises:
        ConfigError: If a required value is missing or invalid.
    """
    try:
        return BackendSettings(**overrides)
    except ValidationError as e:
        fields = ", ".join(_missing_fields("SAP_", e))
        raise ConfigError(f"Missing or invalid environment variables: {fields}") from e


def load_server_settings(**overrides: Any) -> ServerSettings:
    try:
        return ServerSettings(**overrides)
    except ValidationError as e:
        fields = ", ".join(_missing_fields("SAPBRIDGE_", e))
        raise ConfigError(f"Invalid server settings: {fields}") from e


def load_broker_binding() -> BrokerBinding | None:
    """Discover the destination service binding from ``VCAP_SERVICES``."""
    try:
        platform = PlatformSettings()
    except (SettingsError, ValidationError) as e:
        logger.warning(f"Could not parse VCAP_SERVICES: {e}")
        return None
    return platform.destination_binding()
