"""
Flask blueprint that mounts registered strategies.

This blueprint provides the following endpoints:
- GET /auth/providers - List registered providers
- GET /auth/<provider> - Redirect to the provider's authorize page
- GET /auth/<provider>/callback - Complete the login and return the auth record
"""

import logging

from flask import current_app, jsonify, redirect, request
from flask_smorest import Blueprint

from .models import AuthFailure
from .strategy import FlowContext, StrategyRegistry

logger = logging.getLogger(__name__)

EXTENSION_KEY = "auth_strategies"

auth_bp = Blueprint(
    "mixer_auth",
    __name__,
    url_prefix="/auth",
    description="Third-party login endpoints"
)


def get_registry() -> StrategyRegistry:
    """Return the strategy registry of the current application."""
    registry = current_app.extensions.get(EXTENSION_KEY)
    if registry is None:
        registry = StrategyRegistry()
        current_app.extensions[EXTENSION_KEY] = registry
    return registry


def _unknown_provider(provider: str):
    return jsonify({
        "error": "unknown_provider",
        "message": f"No strategy registered for {provider}",
    }), 404


@auth_bp.route("/providers")
def list_providers():
    """List the providers that can be used to log in."""
    return jsonify({"providers": get_registry().names()})


@auth_bp.route("/<provider>")
def login(provider):
    """
    Start a login with the given provider.

    Query Parameters:
        scope: Comma-separated scopes overriding the configured default
        state: Opaque value returned unchanged on the callback
    """
    strategy = get_registry().get(provider)
    if strategy is None:
        return _unknown_provider(provider)

    instruction = strategy.handle_login_request(request.args.to_dict())
    return redirect(instruction.url)


@auth_bp.route("/<provider>/callback")
def callback(provider):
    """
    Provider callback endpoint.

    Responds with the normalized auth record on success, or a 401 carrying
    the failure kind and message.
    """
    strategy = get_registry().get(provider)
    if strategy is None:
        return _unknown_provider(provider)

    flow = FlowContext()
    try:
        result = strategy.handle_callback(request.args.to_dict(), flow)
    finally:
        strategy.cleanup(flow)

    if isinstance(result, AuthFailure):
        return jsonify(result.to_dict()), 401

    return jsonify(result.to_dict())
