# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/adfs_signed_assertion

"""
Configuration for the adfs-signed-assertion package.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import SecretStr, ValidationError, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from adfs_signed_assertion.exceptions import ConfigurationError
from adfs_signed_assertion.models import AdfsAuthType
from adfs_signed_assertion.utils.logger import logger

DEFAULT_TOKEN_ENDPOINT = "/adfs/oauth2/token/"

# Host configuration key -> field name
PROVIDER_DATA_KEYS: dict[str, str] = {
    "Host": "host",
    "Endpoint": "endpoint",
    "ClientId": "client_id",
    "Resource": "resource",
    "AuthType": "auth_type",
    "ClientSecret": "client_secret",
}
_FIELD_TO_KEY = {v: k for k, v in PROVIDER_DATA_KEYS.items()}


class AdfsProviderConfig(BaseSettings):
    """
    Static parameters for one AD FS federation target.

    Attributes:
        host (str): Base URL of the AD FS server (e.g. https://adfs.contoso.com).
        endpoint (str): Token endpoint path. Defaults to /adfs/oauth2/token/.
        client_id (str): The AD FS client identifier.
        resource (str): The target audience; must match the federated credential trust on the cloud side.
        auth_type (AdfsAuthType): WIA (default) or ClientSecret.
        client_secret (SecretStr | None): Shared secret, required only for ClientSecret.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        frozen=True,
    )

    host: str
    endpoint: str = DEFAULT_TOKEN_ENDPOINT
    client_id: str
    resource: str
    auth_type: AdfsAuthType = AdfsAuthType.WIA
    client_secret: SecretStr | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        The host owns configuration parsing: only explicitly passed values are used,
        never the process environment, dotenv files or secret directories.
        """
        return (init_settings,)

    @field_validator("host", "client_id", "resource", mode="before")
    @classmethod
    def require_non_blank(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, str) and not v.strip():
            raise ValueError(f"{_FIELD_TO_KEY[info.field_name]} missing in provider configuration")
        return v

    @field_validator("endpoint", mode="before")
    @classmethod
    def default_endpoint(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_TOKEN_ENDPOINT
        return v

    @field_validator("auth_type", mode="before")
    @classmethod
    def parse_auth_type(cls, v: Any) -> AdfsAuthType:
        """
        Only ClientSecret (case-insensitive) selects shared-secret auth; anything else is WIA.
        """
        if isinstance(v, AdfsAuthType):
            return v
        if isinstance(v, str) and v.strip().lower() == AdfsAuthType.CLIENT_SECRET.lower():
            return AdfsAuthType.CLIENT_SECRET
        if v is not None and not (isinstance(v, str) and v.strip().lower() in ("", AdfsAuthType.WIA.lower())):
            logger.warning(f"Unrecognized AuthType {v!r}, falling back to {AdfsAuthType.WIA}")
        return AdfsAuthType.WIA

    @field_validator("client_secret", mode="before")
    @classmethod
    def blank_secret_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def require_secret_for_client_secret_auth(self) -> "AdfsProviderConfig":
        if self.auth_type == AdfsAuthType.CLIENT_SECRET and self.client_secret is None:
            raise ValueError("ClientSecret missing in provider configuration")
        return self

    @property
    def token_endpoint(self) -> str:
        return f"{self.host.rstrip('/')}{self.endpoint}"

    @classmethod
    def from_provider_data(cls, data: Mapping[str, Any]) -> "AdfsProviderConfig":
        """
        Builds the configuration from the key/value pairs the host surfaces for this provider.

        Args:
            data: Provider-specific configuration (keys `Host`, `Endpoint`, `ClientId`, `Resource`,
                `AuthType`, `ClientSecret`). Unknown keys are ignored.

        Returns:
            AdfsProviderConfig: The validated configuration.

        Raises:
            ConfigurationError: If a required value is missing, blank or not a string.
        """
        values = {field: data[key] for key, field in PROVIDER_DATA_KEYS.items() if data.get(key) is not None}
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(_describe(e)) from e


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    cause = first.get("ctx", {}).get("error")
    if isinstance(cause, ValueError):
        return str(cause)

    loc = first.get("loc") or ()
    key = _FIELD_TO_KEY.get(str(loc[0]), str(loc[0])) if loc else "provider configuration"
    if first.get("type") == "missing":
        return f"{key} missing in provider configuration"
    return f"{key} is invalid in provider configuration: {first.get('msg')}"
