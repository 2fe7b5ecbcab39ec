"""
mixer-auth-strategy

A login strategy that lets a Flask application authenticate its users with
Mixer via the OAuth 2.0 authorization-code flow.

This plugin provides:
- Authorize URL construction with Mixer's client-id quirks
- Code-for-token exchange and the /users/current profile fetch
- A normalized auth record (uid, info, credentials, extra) for the host
- A Flask blueprint and CLI commands for wiring and debugging
"""

__version__ = "0.1.0"

from .blueprint import auth_bp
from .config import PluginConfig, ProviderConfig, StrategyConfig
from .errors import ConfigError, MixerAuthError, TokenExchangeError
from .models import AuthFailure, NormalizedAuthResult
from .oauth import MixerOAuth, OAuth2Adapter
from .plugin import MixerAuthPlugin
from .strategy import FlowContext, MixerStrategy, Strategy, StrategyRegistry

__all__ = [
    "AuthFailure",
    "ConfigError",
    "FlowContext",
    "MixerAuthError",
    "MixerAuthPlugin",
    "MixerOAuth",
    "MixerStrategy",
    "NormalizedAuthResult",
    "OAuth2Adapter",
    "PluginConfig",
    "ProviderConfig",
    "Strategy",
    "StrategyConfig",
    "StrategyRegistry",
    "TokenExchangeError",
    "auth_bp",
    "__version__",
]
