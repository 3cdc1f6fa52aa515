"""
Configuration — typed, validated settings.

The client is configured from a flat key/value mapping ("config
properties"), the shape the PKI connector host hands to every component:

    {
        "PROVIDER_NAME_AND_VERSION": "ContosoCA-1.0",
        "AAD_APP_ID": "...",
        "AAD_APP_KEY": "...",
        "TENANT": "contoso.onmicrosoft.com",
    }

Two pydantic models read the slices they need from that mapping:
  - ClientSettings     → the revocation client itself
  - TransportSettings  → the default HTTP transport (token + discovery)

For the CLI, AppSettings (pydantic-settings) loads the same keys from the
environment / .env file and turns them back into a property mapping.

All configuration errors surface at construction, not at call time.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from revocation_client.protocol import DEFAULT_SERVICE_VERSION

# The .env file sits at the project root, independent of the working directory.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


def _require_non_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value.strip()


class ClientSettings(BaseModel):
    """Settings consumed by RevocationClient."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    provider_name_and_version: str = Field(
        alias="PROVIDER_NAME_AND_VERSION",
        description="Certificate authority identity used for log correlation on the service",
    )
    service_version: str = Field(
        default=DEFAULT_SERVICE_VERSION,
        alias="PkiConnectorFEServiceVersion",
        description="Protocol version sent with every request",
    )

    @field_validator("provider_name_and_version")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_non_blank(value)

    @field_validator("service_version")
    @classmethod
    def default_when_blank(cls, value: str) -> str:
        return value.strip() or DEFAULT_SERVICE_VERSION

    @classmethod
    def from_properties(cls, properties: Mapping[str, str] | None) -> ClientSettings:
        """Validate a config property mapping. Raises pydantic.ValidationError."""
        return cls.model_validate(dict(properties or {}))


class TransportSettings(BaseModel):
    """
    Settings for the default HTTP transport.

    Authentication uses the OAuth2 client-credentials grant against
    {auth_authority}{tenant}/oauth2/token. Service endpoints are discovered
    through the Graph service principal of the Intune application.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    app_id: str = Field(alias="AAD_APP_ID", description="Azure AD application id")
    app_key: SecretStr = Field(alias="AAD_APP_KEY", description="Azure AD application secret")
    tenant: str = Field(alias="TENANT", description="Azure AD tenant")
    provider_name_and_version: str = Field(alias="PROVIDER_NAME_AND_VERSION")
    auth_authority: str = Field(
        default="https://login.microsoftonline.com/", alias="AUTH_AUTHORITY"
    )
    graph_resource_url: str = Field(default="https://graph.windows.net/", alias="GRAPH_RESOURCE_URL")
    graph_api_version: str = Field(default="1.6", alias="GRAPH_API_VERSION")
    intune_resource_url: str = Field(
        default="https://api.manage.microsoft.com/", alias="INTUNE_RESOURCE_URL"
    )
    intune_app_id: str = Field(
        default="0000000a-0000-0000-c000-000000000000", alias="INTUNE_APP_ID"
    )
    timeout_seconds: int = Field(default=60, ge=1, alias="HTTP_TIMEOUT_SECONDS")

    @field_validator("app_id", "tenant", "provider_name_and_version")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_non_blank(value)

    @field_validator("auth_authority", "graph_resource_url", "intune_resource_url")
    @classmethod
    def trailing_slash(cls, value: str) -> str:
        """URLs are joined by concatenation, so normalise to one trailing slash."""
        return value.rstrip("/") + "/"

    @classmethod
    def from_properties(cls, properties: Mapping[str, str] | None) -> TransportSettings:
        return cls.model_validate(dict(properties or {}))

    @property
    def token_url(self) -> str:
        return f"{self.auth_authority}{self.tenant}/oauth2/token"

    @property
    def service_endpoints_url(self) -> str:
        return (
            f"{self.graph_resource_url}{self.tenant}"
            f"/servicePrincipalsByAppId/{self.intune_app_id}/serviceEndpoints"
        )


class AppSettings(BaseSettings):
    """
    CLI settings loaded from the environment.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values

    Environment variable names are the config property keys themselves
    (PROVIDER_NAME_AND_VERSION, AAD_APP_ID, ...), matched case-insensitively.
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    provider_name_and_version: str | None = None
    service_version: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PkiConnectorFEServiceVersion", "service_version"),
    )
    aad_app_id: str | None = None
    aad_app_key: SecretStr | None = None
    tenant: str | None = None
    auth_authority: str | None = None
    graph_resource_url: str | None = None
    graph_api_version: str | None = None
    intune_resource_url: str | None = None
    intune_app_id: str | None = None
    http_timeout_seconds: int = Field(default=60, ge=1)
    log_level: str = Field(default="INFO")

    def to_properties(self) -> dict[str, str]:
        """Config property mapping for RevocationClient; unset keys are left out."""
        values: dict[str, str | None] = {
            "PROVIDER_NAME_AND_VERSION": self.provider_name_and_version,
            "PkiConnectorFEServiceVersion": self.service_version,
            "AAD_APP_ID": self.aad_app_id,
            "AAD_APP_KEY": self.aad_app_key.get_secret_value() if self.aad_app_key else None,
            "TENANT": self.tenant,
            "AUTH_AUTHORITY": self.auth_authority,
            "GRAPH_RESOURCE_URL": self.graph_resource_url,
            "GRAPH_API_VERSION": self.graph_api_version,
            "INTUNE_RESOURCE_URL": self.intune_resource_url,
            "INTUNE_APP_ID": self.intune_app_id,
            "HTTP_TIMEOUT_SECONDS": str(self.http_timeout_seconds),
        }
        return {key: value for key, value in values.items() if value is not None}
