"""
Configuration management for the Mixer authentication strategy.

Configuration is resolved exactly once, when the plugin is initialized.
Credentials may be given literally or as ``("env", "VAR_NAME")`` references
that are looked up in the environment at resolution time; anything missing
or malformed raises :class:`ConfigError` so the application refuses to start
instead of failing on the first login.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .errors import ConfigError

MIXER_SITE_URL = "https://mixer.com/api/v1"
MIXER_AUTHORIZE_URL = "https://mixer.com/oauth/authorize"
MIXER_TOKEN_URL = "https://mixer.com/api/v1/oauth/token"
DEFAULT_REDIRECT_URI = "http://localhost:4000/auth/mixer/callback"
DEFAULT_TIMEOUT = 5.0

# Flask config key holding a settings mapping; MIXER_* variables otherwise
CONFIG_KEY = "MIXER_AUTH"


def resolve_value(value: Any, key: str) -> Any:
    """
    Resolve a configuration value that may reference an environment variable.

    Args:
        value: A literal value or an ``("env", "VAR_NAME")`` tuple
        key: Name of the setting, used in error messages

    Returns:
        The literal value, or the content of the referenced variable
    """
    if isinstance(value, (tuple, list)) and len(value) == 2 and value[0] == "env":
        env_key = value[1]
        resolved = os.environ.get(env_key)
        if resolved is None:
            raise ConfigError(f"{env_key!r} missing from environment, expected for {key}")
        return resolved
    return value


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid HTTP timeout: {value!r}")
    if timeout <= 0:
        raise ConfigError(f"HTTP timeout must be positive, got {timeout}")
    return timeout


@dataclass(frozen=True)
class ProviderConfig:
    """Mixer OAuth2 endpoints and client credentials."""

    client_id: str = ""
    client_secret: str = ""

    # OAuth2 endpoints
    site_url: str = MIXER_SITE_URL
    authorize_url: str = MIXER_AUTHORIZE_URL
    token_url: str = MIXER_TOKEN_URL

    redirect_uri: str = DEFAULT_REDIRECT_URI

    # Seconds before an outbound call counts as a transport failure
    timeout: float = DEFAULT_TIMEOUT

    def validate(self) -> "ProviderConfig":
        """Raise ConfigError unless both credentials are non-empty strings."""
        for key in ("client_id", "client_secret"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{key} missing from Mixer provider configuration")
        return self

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Create configuration from environment variables."""
        return cls(
            client_id=os.environ.get("MIXER_CLIENT_ID", ""),
            client_secret=os.environ.get("MIXER_CLIENT_SECRET", ""),
            site_url=os.environ.get("MIXER_SITE_URL", MIXER_SITE_URL),
            authorize_url=os.environ.get("MIXER_AUTHORIZE_URL", MIXER_AUTHORIZE_URL),
            token_url=os.environ.get("MIXER_TOKEN_URL", MIXER_TOKEN_URL),
            redirect_uri=os.environ.get("MIXER_REDIRECT_URI", DEFAULT_REDIRECT_URI),
            timeout=_parse_timeout(os.environ.get("MIXER_HTTP_TIMEOUT", DEFAULT_TIMEOUT)),
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ProviderConfig":
        """Create configuration from a mapping, resolving env references."""
        return cls(
            client_id=resolve_value(values.get("client_id", ""), "client_id"),
            client_secret=resolve_value(values.get("client_secret", ""), "client_secret"),
            site_url=values.get("site_url", MIXER_SITE_URL),
            authorize_url=values.get("authorize_url", MIXER_AUTHORIZE_URL),
            token_url=values.get("token_url", MIXER_TOKEN_URL),
            redirect_uri=os.environ.get(
                "MIXER_REDIRECT_URI",
                values.get("redirect_uri", DEFAULT_REDIRECT_URI),
            ),
            timeout=_parse_timeout(values.get("timeout", DEFAULT_TIMEOUT)),
        )


@dataclass(frozen=True)
class StrategyConfig:
    """Options that shape the login flow rather than the HTTP client."""

    # Profile field used as the normalized uid
    uid_field: str = "id"

    # Comma-separated scopes requested when the login request names none
    default_scope: str = ""

    # Whether redirect_uri is sent on the authorize and token requests
    send_redirect_uri: bool = True

    @classmethod
    def from_env(cls) -> "StrategyConfig":
        """Create configuration from environment variables."""
        return cls(
            uid_field=os.environ.get("MIXER_UID_FIELD", "id"),
            default_scope=os.environ.get("MIXER_DEFAULT_SCOPE", ""),
            send_redirect_uri=_parse_bool(os.environ.get("MIXER_SEND_REDIRECT_URI", "true")),
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "StrategyConfig":
        return cls(
            uid_field=values.get("uid_field", "id"),
            default_scope=values.get("default_scope", ""),
            send_redirect_uri=_parse_bool(values.get("send_redirect_uri", True)),
        )


@dataclass(frozen=True)
class PluginConfig:
    """Overall plugin configuration."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)

    # Name the strategy is registered under, i.e. /auth/<provider_name>
    provider_name: str = "mixer"

    def validate(self) -> "PluginConfig":
        self.provider.validate()
        if not self.provider_name:
            raise ConfigError("provider_name must not be empty")
        return self

    @classmethod
    def from_env(cls) -> "PluginConfig":
        """Create configuration from environment variables."""
        return cls(
            provider=ProviderConfig.from_env(),
            strategy=StrategyConfig.from_env(),
            provider_name=os.environ.get("MIXER_PROVIDER_NAME", "mixer"),
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "PluginConfig":
        """
        Create configuration from a literal mapping.

        Provider and strategy settings share one flat mapping, e.g.::

            {
                "client_id": ("env", "MIXER_CLIENT_ID"),
                "client_secret": ("env", "MIXER_CLIENT_SECRET"),
                "default_scope": "user:details:self",
            }
        """
        return cls(
            provider=ProviderConfig.from_mapping(values),
            strategy=StrategyConfig.from_mapping(values),
            provider_name=values.get("provider_name", "mixer"),
        )

    @classmethod
    def load(cls, values: Optional[Mapping[str, Any]] = None) -> "PluginConfig":
        """Build the configuration from a mapping if given, else from the environment."""
        return cls.from_mapping(values) if values is not None else cls.from_env()

    @classmethod
    def resolve(cls, values: Optional[Mapping[str, Any]] = None) -> "PluginConfig":
        """Build and validate the configuration, from a mapping if given."""
        return cls.load(values).validate()
