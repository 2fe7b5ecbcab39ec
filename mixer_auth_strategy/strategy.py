"""
Authentication strategies.

A strategy turns the host's two request phases into an OAuth2 login:

- the request phase answers ``/auth/<provider>`` with a redirect to the
  provider's authorize page;
- the callback phase answers ``/auth/<provider>/callback`` by exchanging the
  code, fetching the user and producing a :class:`NormalizedAuthResult`.

Strategy instances hold configuration only. Working state of one login
(token and raw user) lives in a :class:`FlowContext` that the caller owns
and hands back to :meth:`Strategy.cleanup` once the flow is done.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Union

from .config import PluginConfig
from .errors import TokenExchangeError
from .models import (
    AuthFailure,
    AuthorizationRequest,
    Credentials,
    Extra,
    Info,
    NormalizedAuthResult,
    RedirectInstruction,
    TokenResponse,
    UserProfile,
)
from .oauth import MixerOAuth

logger = logging.getLogger(__name__)

CallbackResult = Union[NormalizedAuthResult, AuthFailure]


@dataclass
class FlowContext:
    """Working state of a single login flow."""

    token: Optional[TokenResponse] = None
    user: Optional[UserProfile] = None

    @property
    def is_empty(self) -> bool:
        return self.token is None and self.user is None


class Strategy(ABC):
    """Contract between the host and a provider-specific login strategy."""

    name: str = ""

    @abstractmethod
    def handle_login_request(self, params: Mapping[str, str]) -> RedirectInstruction:
        """Return where to send the user agent to start the login."""
        ...

    @abstractmethod
    def handle_callback(
        self,
        params: Mapping[str, str],
        flow: Optional[FlowContext] = None,
    ) -> CallbackResult:
        """Complete the login from the provider's callback parameters."""
        ...

    @abstractmethod
    def uid(self, flow: FlowContext) -> Optional[str]:
        ...

    @abstractmethod
    def info(self, flow: FlowContext) -> Info:
        ...

    @abstractmethod
    def credentials(self, flow: FlowContext) -> Credentials:
        ...

    @abstractmethod
    def extra(self, flow: FlowContext) -> Extra:
        ...

    def cleanup(self, flow: FlowContext) -> None:
        """Discard the flow's working state. Safe to call more than once."""
        flow.token = None
        flow.user = None

    def build_result(self, flow: FlowContext) -> NormalizedAuthResult:
        return NormalizedAuthResult(
            uid=self.uid(flow),
            info=self.info(flow),
            credentials=self.credentials(flow),
            extra=self.extra(flow),
        )


class StrategyRegistry:
    """Maps provider names to strategy instances."""

    def __init__(self):
        self._strategies: Dict[str, Strategy] = {}

    def register(self, name: str, strategy: Strategy) -> None:
        if name in self._strategies:
            logger.warning(f"Replacing registered strategy for provider {name}")
        self._strategies[name] = strategy

    def get(self, name: str) -> Optional[Strategy]:
        return self._strategies.get(name)

    def names(self) -> list:
        return sorted(self._strategies)

    def __contains__(self, name: str) -> bool:
        return name in self._strategies

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._strategies)


class MixerStrategy(Strategy):
    """Login with Mixer."""

    def __init__(self, config: PluginConfig, oauth: Optional[MixerOAuth] = None):
        """
        Initialize the strategy.

        Args:
            config: Resolved plugin configuration
            oauth: Adapter to use; built from ``config.provider`` if omitted

        Raises:
            ConfigError: If the provider credentials are missing
        """
        self.config = config
        self.name = config.provider_name
        self.oauth = oauth or MixerOAuth(config.provider)

    @property
    def callback_url(self) -> Optional[str]:
        if self.config.strategy.send_redirect_uri:
            return self.config.provider.redirect_uri
        return None

    def handle_login_request(self, params: Mapping[str, str]) -> RedirectInstruction:
        """
        Build the redirect to Mixer's authorize page.

        The requested scope can be overridden per request, e.g.
        ``/auth/mixer?scope=user:details:self,chat:connect``. A ``state``
        parameter is passed through to Mixer and comes back on the callback.
        """
        scope = params.get("scope")
        if scope is None:
            scope = self.config.strategy.default_scope

        request = AuthorizationRequest(
            scope=scope,
            state=params.get("state"),
            redirect_uri=self.callback_url,
        )
        url = self.oauth.build_authorize_url(request)
        logger.info(f"Redirecting to {self.name} for authorization")
        return RedirectInstruction(url=url)

    def handle_callback(
        self,
        params: Mapping[str, str],
        flow: Optional[FlowContext] = None,
    ) -> CallbackResult:
        """
        Exchange the callback code and fetch the current user.

        Failures are returned as AuthFailure values. On success the token and
        user are left on ``flow`` until :meth:`cleanup` is called.
        """
        if flow is None:
            flow = FlowContext()

        code = params.get("code")
        if not code:
            logger.warning("Callback received without an authorization code")
            return AuthFailure.missing_code()

        try:
            token = self.oauth.exchange_code_for_token(code, redirect_uri=self.callback_url)
        except TokenExchangeError as e:
            logger.error(f"Token exchange with {self.name} failed: {e}")
            return AuthFailure.token_exchange()

        if token.access_token is None:
            logger.warning(
                f"{self.name} returned no access token: "
                f"{token.error} ({token.error_description})"
            )
            return AuthFailure.provider_error(token.error, token.error_description)

        return self._fetch_user(flow, token)

    def _fetch_user(self, flow: FlowContext, token: TokenResponse) -> CallbackResult:
        flow.token = token

        result = self.oauth.authenticated_get(token, "/users/current")
        if isinstance(result, UserProfile):
            flow.user = result
            auth = self.build_result(flow)
            logger.info(f"User {auth.uid} authenticated via {self.name}")
            return auth

        if result.unauthorized:
            logger.warning(f"{self.name} rejected the access token")
            return AuthFailure.unauthorized()

        logger.error(
            f"Fetching current user from {self.name} failed: "
            f"status={result.status_code} body={result.body!r}"
        )
        return AuthFailure.unknown_api_error()

    def uid(self, flow: FlowContext) -> Optional[str]:
        """The configured uid field of the user, ``id`` by default."""
        field = self.config.strategy.uid_field
        if field == "id":
            return flow.user.id
        value = flow.user.raw_fields.get(field)
        return str(value) if value is not None else None

    def info(self, flow: FlowContext) -> Info:
        user = flow.user
        return Info(
            name=user.username,
            nickname=user.username,
            avatar_url=user.avatar_url,
        )

    def credentials(self, flow: FlowContext) -> Credentials:
        token = flow.token
        scopes = (token.scope or "").split(",")
        return Credentials(
            token=token.access_token,
            refresh_token=token.refresh_token,
            expires_at=token.expires_at,
            token_type=token.token_type,
            expires=token.expires_at is not None,
            scopes=scopes,
        )

    def extra(self, flow: FlowContext) -> Extra:
        """The raw token and user payloads, verbatim."""
        return Extra(
            raw_token=dict(flow.token.raw_provider_fields),
            raw_user=dict(flow.user.raw_fields),
        )
