"""
Flask CLI commands for the Mixer login strategy.

These commands help with setup and debugging of the Mixer integration.
They read the same settings as the plugin: ``app.config["MIXER_AUTH"]``
when the application defines it, ``MIXER_*`` environment variables otherwise.
"""

import click
import httpx
from flask import current_app
from flask.cli import with_appcontext

from .config import CONFIG_KEY, PluginConfig
from .errors import ConfigError
from .models import AuthorizationRequest
from .oauth import MixerOAuth


def _app_settings():
    """Return the application's settings mapping, or None to use the environment."""
    return current_app.config.get(CONFIG_KEY)


def _setting_name(key: str) -> str:
    if _app_settings() is not None:
        return f"{CONFIG_KEY}[{key!r}]"
    return f"MIXER_{key.upper()}"


@click.group("mixer")
def mixer_cli():
    """Mixer login strategy management commands."""
    pass


@mixer_cli.command("show-config")
@with_appcontext
def show_config():
    """Display current Mixer configuration."""
    config = PluginConfig.load(_app_settings())
    provider = config.provider

    click.echo("=== Mixer Provider Configuration ===")
    click.echo(f"Provider Name: {config.provider_name}")
    click.echo(f"Site URL: {provider.site_url}")
    click.echo(f"Authorize URL: {provider.authorize_url}")
    click.echo(f"Token URL: {provider.token_url}")
    click.echo(f"Redirect URI: {provider.redirect_uri}")
    click.echo(f"HTTP Timeout: {provider.timeout}s")
    click.echo(f"Client ID: {provider.client_id[:8] + '...' if provider.client_id else 'Not configured'}")
    click.echo(f"Client Secret: {'Configured' if provider.client_secret else 'Not configured'}")

    click.echo("\n=== Strategy Options ===")
    click.echo(f"UID field: {config.strategy.uid_field}")
    click.echo(f"Default scope: {config.strategy.default_scope!r}")
    click.echo(f"Send redirect_uri: {config.strategy.send_redirect_uri}")


@mixer_cli.command("validate-config")
@with_appcontext
def validate_config():
    """Validate the current configuration."""
    errors = []

    try:
        config = PluginConfig.load(_app_settings())
    except ConfigError as e:
        errors.append(str(e))
        config = None

    if config is not None:
        if not config.provider.client_id:
            errors.append(f"{_setting_name('client_id')} not configured")
        if not config.provider.client_secret:
            errors.append(f"{_setting_name('client_secret')} not configured")

    if errors:
        click.echo("=== Errors ===")
        for error in errors:
            click.echo(f"  x {error}")
        click.echo(f"\nConfiguration validation failed with {len(errors)} error(s)")
        raise SystemExit(1)

    click.echo("[OK] Configuration is valid!")


@mixer_cli.command("authorize-url")
@click.option("--scope", default=None, help="Scopes to request (default: configured scope)")
@click.option("--state", default=None, help="Opaque state passed back on the callback")
@with_appcontext
def authorize_url(scope, state):
    """Print the authorize URL the login endpoint would redirect to."""
    try:
        config = PluginConfig.resolve(_app_settings())
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    oauth = MixerOAuth(config.provider)
    request = AuthorizationRequest(
        scope=config.strategy.default_scope if scope is None else scope,
        state=state,
        redirect_uri=config.provider.redirect_uri if config.strategy.send_redirect_uri else None,
    )
    click.echo(oauth.build_authorize_url(request))


@mixer_cli.command("test-connection")
@with_appcontext
def test_connection():
    """Test connectivity to the Mixer endpoints."""
    try:
        config = PluginConfig.load(_app_settings())
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    provider = config.provider

    click.echo("=== Testing Mixer Connectivity ===\n")

    with httpx.Client(timeout=provider.timeout, follow_redirects=True) as client:
        try:
            client.head(provider.authorize_url)
            click.echo(f"[OK] Authorize URL reachable: {provider.authorize_url}")
        except httpx.HTTPError as e:
            click.echo(f"[FAIL] Authorize URL: {e}")

        try:
            # Expected to be rejected without a code, reaching it is enough
            client.post(provider.token_url, headers={"Accept": "application/json"})
            click.echo(f"[OK] Token URL reachable: {provider.token_url}")
        except httpx.HTTPError as e:
            click.echo(f"[FAIL] Token URL: {e}")
