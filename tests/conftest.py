"""
Pytest fixtures for mixer_auth_strategy tests.

Provides:
- Provider/plugin configuration pointing at a fake Mixer host
- A scriptable fake Mixer served through httpx.MockTransport
- Strategy and Flask app fixtures wired to the fake
"""

import httpx
import pytest
from flask import Flask

from mixer_auth_strategy.config import PluginConfig, ProviderConfig, StrategyConfig
from mixer_auth_strategy.oauth import MixerOAuth
from mixer_auth_strategy.plugin import MixerAuthPlugin
from mixer_auth_strategy.strategy import MixerStrategy

SITE_URL = "https://mixer.test/api/v1"
AUTHORIZE_URL = "https://mixer.test/oauth/authorize"
TOKEN_URL = "https://mixer.test/api/v1/oauth/token"
REDIRECT_URI = "https://app.test/auth/mixer/callback"


class FakeMixer:
    """Answers token and API requests with scripted responses."""

    def __init__(self):
        self.requests = []
        self.token_status = 200
        self.token_body = {
            "access_token": "access-123",
            "refresh_token": "refresh-456",
            "token_type": "Bearer",
            "scope": "user:details:self,chat:connect",
        }
        self.user_status = 200
        self.user_body = {
            "id": 42,
            "username": "alice",
            "avatarUrl": "http://x/a.png",
            "level": 7,
        }
        self.raise_on = None
        self.raise_error = httpx.ConnectError

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if self.raise_on and path.endswith(self.raise_on):
            raise self.raise_error("connection failed", request=request)

        if path == "/api/v1/oauth/token":
            return self._respond(self.token_status, self.token_body)
        if path == "/api/v1/users/current":
            return self._respond(self.user_status, self.user_body)
        return httpx.Response(404, json={"error": "not found"})

    @staticmethod
    def _respond(status, body):
        if isinstance(body, (str, bytes)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def requests_to(self, suffix):
        return [r for r in self.requests if r.url.path.endswith(suffix)]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep MIXER_* variables from the outer environment out of tests."""
    for key in (
        "MIXER_CLIENT_ID", "MIXER_CLIENT_SECRET", "MIXER_SITE_URL",
        "MIXER_AUTHORIZE_URL", "MIXER_TOKEN_URL", "MIXER_REDIRECT_URI",
        "MIXER_HTTP_TIMEOUT", "MIXER_UID_FIELD", "MIXER_DEFAULT_SCOPE",
        "MIXER_SEND_REDIRECT_URI", "MIXER_PROVIDER_NAME",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def provider_config():
    return ProviderConfig(
        client_id="client-abc",
        client_secret="secret-xyz",
        site_url=SITE_URL,
        authorize_url=AUTHORIZE_URL,
        token_url=TOKEN_URL,
        redirect_uri=REDIRECT_URI,
        timeout=2.0,
    )


@pytest.fixture
def plugin_config(provider_config):
    return PluginConfig(provider=provider_config, strategy=StrategyConfig())


@pytest.fixture
def fake_mixer():
    return FakeMixer()


@pytest.fixture
def oauth(provider_config, fake_mixer):
    return MixerOAuth(provider_config, transport=fake_mixer.transport)


@pytest.fixture
def strategy(plugin_config, oauth):
    return MixerStrategy(plugin_config, oauth=oauth)


@pytest.fixture
def app(fake_mixer):
    """Flask app with the plugin initialized against the fake Mixer."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["MIXER_AUTH"] = {
        "client_id": "client-abc",
        "client_secret": "secret-xyz",
        "site_url": SITE_URL,
        "authorize_url": AUTHORIZE_URL,
        "token_url": TOKEN_URL,
        "redirect_uri": REDIRECT_URI,
    }
    MixerAuthPlugin(app, transport=fake_mixer.transport)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
