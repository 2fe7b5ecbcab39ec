import httpx
import pytest
from flask import Flask

from mixer_auth_strategy.cli import mixer_cli
from mixer_auth_strategy.plugin import MixerAuthPlugin


@pytest.fixture
def bare_app():
    """App without MIXER_AUTH, so commands fall back to MIXER_* variables."""
    app = Flask(__name__)
    app.cli.add_command(mixer_cli)
    return app


@pytest.fixture
def runner(bare_app):
    return bare_app.test_cli_runner()


@pytest.fixture
def configured_env(monkeypatch):
    monkeypatch.setenv("MIXER_CLIENT_ID", "client-abcdefghij")
    monkeypatch.setenv("MIXER_CLIENT_SECRET", "secret-xyz")


@pytest.fixture
def configured_app(fake_mixer):
    """App configured through MIXER_AUTH only, as the plugin documents."""
    app = Flask(__name__)
    app.config["MIXER_AUTH"] = {
        "client_id": "client-abcdefghij",
        "client_secret": "secret-xyz",
        "authorize_url": "https://mixer.test/oauth/authorize",
        "default_scope": "user:details:self",
        "provider_name": "beam",
    }
    MixerAuthPlugin(app, transport=fake_mixer.transport)
    return app


def test_show_config_masks_secrets(runner, configured_env):
    result = runner.invoke(args=["mixer", "show-config"])

    assert result.exit_code == 0
    assert "client-a..." in result.output
    assert "client-abcdefghij" not in result.output
    assert "secret-xyz" not in result.output
    assert "Client Secret: Configured" in result.output


def test_validate_config_ok(runner, configured_env):
    result = runner.invoke(args=["mixer", "validate-config"])

    assert result.exit_code == 0
    assert "[OK]" in result.output


def test_validate_config_reports_missing_credentials(runner):
    result = runner.invoke(args=["mixer", "validate-config"])

    assert result.exit_code == 1
    assert "MIXER_CLIENT_ID not configured" in result.output
    assert "MIXER_CLIENT_SECRET not configured" in result.output


def test_validate_config_reports_bad_timeout(runner, configured_env, monkeypatch):
    monkeypatch.setenv("MIXER_HTTP_TIMEOUT", "forever")

    result = runner.invoke(args=["mixer", "validate-config"])

    assert result.exit_code == 1
    assert "Invalid HTTP timeout" in result.output


def test_authorize_url(runner, configured_env):
    result = runner.invoke(args=["mixer", "authorize-url", "--scope", "a,b", "--state", "s1"])

    assert result.exit_code == 0
    url = httpx.URL(result.output.strip())
    assert url.params["scope"] == "a,b"
    assert url.params["state"] == "s1"
    assert url.params["client_id"] == "client-abcdefghij"


def test_authorize_url_requires_credentials(runner):
    result = runner.invoke(args=["mixer", "authorize-url"])

    assert result.exit_code == 1


# ============================================================
# Commands read the application's MIXER_AUTH mapping
# ============================================================

def test_show_config_reads_app_config(configured_app):
    result = configured_app.test_cli_runner().invoke(args=["mixer", "show-config"])

    assert result.exit_code == 0
    assert "Provider Name: beam" in result.output
    assert "Client ID: client-a..." in result.output
    assert "Client Secret: Configured" in result.output
    assert "Not configured" not in result.output


def test_validate_config_reads_app_config(configured_app):
    result = configured_app.test_cli_runner().invoke(args=["mixer", "validate-config"])

    assert result.exit_code == 0
    assert "[OK]" in result.output


def test_validate_config_names_missing_app_setting(bare_app):
    bare_app.config["MIXER_AUTH"] = {"client_id": "only-an-id"}

    result = bare_app.test_cli_runner().invoke(args=["mixer", "validate-config"])

    assert result.exit_code == 1
    assert "MIXER_AUTH['client_secret'] not configured" in result.output


def test_authorize_url_reads_app_config(configured_app):
    result = configured_app.test_cli_runner().invoke(args=["mixer", "authorize-url"])

    assert result.exit_code == 0
    url = httpx.URL(result.output.strip())
    assert url.host == "mixer.test"
    assert url.params["client_id"] == "client-abcdefghij"
    assert url.params["scope"] == "user:details:self"
