"""
OAuth2 client adapter for Mixer.

:class:`OAuth2Adapter` knows the authorization-code flow against one set of
endpoints. Provider deviations from plain OAuth2 are isolated in three hooks
(``client_headers``, ``client_params`` and ``token_endpoint_auth_method``) so
another provider can override them without touching the strategy.

:class:`MixerOAuth` fills those hooks in for Mixer, which wants the client id
in a ``Client-ID`` header and the client secret as a request parameter on
every call instead of HTTP Basic auth.
"""

import logging
from typing import Dict, Optional, Union

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.httpx_client import OAuth2Client

from .config import ProviderConfig
from .errors import TokenExchangeError
from .models import ApiError, AuthorizationRequest, TokenResponse, UserProfile

logger = logging.getLogger(__name__)


def _raise_for_server_error(resp: httpx.Response) -> httpx.Response:
    if resp.status_code >= 500:
        resp.raise_for_status()
    return resp


class OAuth2Adapter:
    """Authorization-code flow against a single provider."""

    token_endpoint_auth_method = "client_secret_basic"

    def __init__(
        self,
        config: ProviderConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the adapter.

        Args:
            config: Provider endpoints and credentials
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``

        Raises:
            ConfigError: If client_id or client_secret is missing
        """
        self.config = config.validate()
        self.transport = transport

    def client_headers(self) -> Dict[str, str]:
        """Extra headers sent on token and API requests."""
        return {}

    def client_params(self) -> Dict[str, str]:
        """Extra query parameters sent on API requests."""
        return {}

    def _client_kwargs(self) -> dict:
        kwargs = {"timeout": self.config.timeout}
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return kwargs

    def create_oauth2_client(self, redirect_uri: Optional[str] = None) -> OAuth2Client:
        """Create an authlib OAuth2 client for the token endpoint."""
        client = OAuth2Client(
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            token_endpoint_auth_method=self.token_endpoint_auth_method,
            redirect_uri=redirect_uri,
            **self._client_kwargs(),
        )
        client.register_compliance_hook("access_token_response", _raise_for_server_error)
        return client

    def build_authorize_url(self, request: AuthorizationRequest) -> str:
        """
        Build the provider's authorize URL for a login redirect.

        The scope parameter is always present, even when empty, so the
        provider sees exactly what was requested.
        """
        params = []
        if request.redirect_uri:
            params.append(("redirect_uri", request.redirect_uri))
        params.append(("scope", request.scope))
        if request.state is not None:
            params.append(("state", request.state))
        params.append(("client_id", self.config.client_id))
        params.append(("response_type", "code"))

        # Keeps any query already present on the configured authorize_url
        url = str(httpx.URL(self.config.authorize_url).copy_merge_params(params))
        logger.debug(f"Authorize URL: {url}")
        return url

    def exchange_code_for_token(
        self,
        code: str,
        redirect_uri: Optional[str] = None,
    ) -> TokenResponse:
        """
        Exchange an authorization code for a token.

        An OAuth error reported by the provider in the response body is not
        an exception: the returned token has no access_token and carries
        ``error``/``error_description`` in its raw fields.

        Raises:
            TokenExchangeError: On transport failure, a 5xx response or a
                body that is not JSON
        """
        headers = {"Accept": "application/json", **self.client_headers()}

        try:
            with self.create_oauth2_client(redirect_uri) as client:
                token = client.fetch_token(
                    self.config.token_url,
                    code=code,
                    headers=headers,
                )
        except AuthlibBaseError as e:
            logger.warning(f"Token endpoint reported an error: {e.error}")
            return TokenResponse.from_provider({
                "access_token": None,
                "error": e.error,
                "error_description": e.description,
            })
        except httpx.HTTPStatusError as e:
            raise TokenExchangeError(
                f"Token endpoint returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"Token request failed: {e!r}") from e
        except ValueError as e:
            raise TokenExchangeError(f"Token endpoint returned an unparsable body: {e}") from e

        logger.debug(f"Token response fields: {sorted(token.keys())}")
        return TokenResponse.from_provider(token)

    def authenticated_get(
        self,
        token: TokenResponse,
        path: str,
    ) -> Union[UserProfile, ApiError]:
        """
        GET an API path on behalf of the user.

        Returns:
            UserProfile on a 2xx JSON response, ApiError otherwise
        """
        url = f"{self.config.site_url.rstrip('/')}/{path.lstrip('/')}"
        headers = {
            "Authorization": f"Bearer {token.access_token}",
            "Accept": "application/json",
            **self.client_headers(),
        }

        try:
            with httpx.Client(**self._client_kwargs()) as client:
                resp = client.get(url, headers=headers, params=self.client_params())
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e!r}")
            return ApiError(status_code=None, body=str(e))

        if not resp.is_success:
            return ApiError(status_code=resp.status_code, body=resp.text)

        try:
            data = resp.json()
        except ValueError:
            return ApiError(status_code=resp.status_code, body=resp.text)

        if not isinstance(data, dict):
            return ApiError(status_code=resp.status_code, body=data)

        return UserProfile.from_provider(data)


class MixerOAuth(OAuth2Adapter):
    """OAuth2 adapter with Mixer's client-id header and secret parameter."""

    token_endpoint_auth_method = "client_secret_post"

    def client_headers(self) -> Dict[str, str]:
        return {"Client-ID": self.config.client_id}

    def client_params(self) -> Dict[str, str]:
        return {"client_secret": self.config.client_secret}
