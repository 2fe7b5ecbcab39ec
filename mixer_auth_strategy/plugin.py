"""
Flask extension that wires the Mixer strategy into an application.

Configuration is resolved once in :meth:`MixerAuthPlugin.init_app`. If the
client credentials are missing, initialization fails with ConfigError rather
than letting the first login attempt fail.
"""

import logging

from flask import Flask

from .blueprint import EXTENSION_KEY, auth_bp
from .cli import mixer_cli
from .config import CONFIG_KEY, PluginConfig
from .oauth import MixerOAuth
from .strategy import MixerStrategy, StrategyRegistry

logger = logging.getLogger(__name__)


class MixerAuthPlugin:
    """
    Mixer login for Flask applications.

    Settings are read from ``app.config["MIXER_AUTH"]`` when present,
    otherwise from ``MIXER_*`` environment variables.
    """

    def __init__(self, app: Flask = None, transport=None):
        """
        Initialize the plugin.

        Args:
            app: Flask application instance (optional, can call init_app later)
            transport: Optional httpx transport for the provider calls
        """
        self.app = app
        self.transport = transport
        self.config: PluginConfig = None
        self.strategy: MixerStrategy = None

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask):
        """
        Resolve configuration and register the strategy with the application.

        Raises:
            ConfigError: If the provider configuration is incomplete
        """
        self.app = app
        self.config = PluginConfig.resolve(app.config.get(CONFIG_KEY))

        oauth = MixerOAuth(self.config.provider, transport=self.transport)
        self.strategy = MixerStrategy(self.config, oauth=oauth)

        registry = app.extensions.setdefault(EXTENSION_KEY, StrategyRegistry())
        registry.register(self.config.provider_name, self.strategy)

        if "mixer_auth" not in app.blueprints:
            app.register_blueprint(self.get_blueprint())
        app.cli.add_command(mixer_cli)

        logger.info("Mixer auth plugin initialized")
        logger.info(f"Provider: {self.config.provider_name}")
        logger.debug(f"Redirect URI: {self.config.provider.redirect_uri}")
        if not self.config.strategy.send_redirect_uri:
            logger.info("redirect_uri will not be sent to the provider")

    @property
    def registry(self):
        return self.app.extensions[EXTENSION_KEY]

    def get_blueprint(self):
        """Return the Flask blueprint for this extension."""
        return auth_bp

    def get_config_secrets_to_obfuscate(self):
        """Return config keys that should not be exposed."""
        return ["MIXER_CLIENT_SECRET"]

    @staticmethod
    def get_name() -> str:
        return "mixer-auth-strategy"

    @staticmethod
    def get_version() -> str:
        from . import __version__
        return __version__

    @staticmethod
    def get_description() -> str:
        return "Mixer OAuth2 login strategy for Flask"
