"""
Records exchanged between the OAuth2 adapter, the strategy and the host.

Every record lives for a single login flow; none is reused across requests.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

MISSING_CODE = "missing_code"
TOKEN = "token"
TOKEN_EXCHANGE = "token_exchange"


@dataclass(frozen=True)
class AuthorizationRequest:
    """Parameters of one outgoing authorize redirect."""

    scope: str = ""
    state: Optional[str] = None
    redirect_uri: Optional[str] = None


@dataclass(frozen=True)
class RedirectInstruction:
    """Tells the host to send the user agent to ``url``."""

    url: str


@dataclass
class TokenResponse:
    """Result of exchanging an authorization code."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_at: Optional[int] = None
    scope: Optional[str] = None
    raw_provider_fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_provider(cls, fields: Dict[str, Any]) -> "TokenResponse":
        fields = dict(fields)
        return cls(
            access_token=fields.get("access_token"),
            refresh_token=fields.get("refresh_token"),
            token_type=fields.get("token_type"),
            expires_at=fields.get("expires_at"),
            scope=fields.get("scope"),
            raw_provider_fields=fields,
        )

    @property
    def error(self) -> Optional[str]:
        return self.raw_provider_fields.get("error")

    @property
    def error_description(self) -> Optional[str]:
        return self.raw_provider_fields.get("error_description")


@dataclass
class UserProfile:
    """The ``/users/current`` payload with the fields the strategy maps."""

    id: Optional[str]
    username: Optional[str]
    avatar_url: Optional[str] = None
    raw_fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_provider(cls, fields: Dict[str, Any]) -> "UserProfile":
        user_id = fields.get("id")
        return cls(
            id=str(user_id) if user_id is not None else None,
            username=fields.get("username"),
            avatar_url=fields.get("avatarUrl"),
            raw_fields=dict(fields),
        )


@dataclass(frozen=True)
class ApiError:
    """A failed provider API call; ``status_code`` is None on transport errors."""

    status_code: Optional[int]
    body: Any = None

    @property
    def unauthorized(self) -> bool:
        return self.status_code == 401


@dataclass(frozen=True)
class AuthFailure:
    """A recoverable login failure handed back to the host."""

    kind: str
    message: str

    @classmethod
    def missing_code(cls) -> "AuthFailure":
        return cls(MISSING_CODE, "No code received")

    @classmethod
    def provider_error(cls, code: Optional[str], description: Optional[str]) -> "AuthFailure":
        return cls(code or TOKEN, description or "no access token returned")

    @classmethod
    def unauthorized(cls) -> "AuthFailure":
        return cls(TOKEN, "unauthorized")

    @classmethod
    def unknown_api_error(cls) -> "AuthFailure":
        return cls(TOKEN, "unknown error")

    @classmethod
    def token_exchange(cls) -> "AuthFailure":
        return cls(TOKEN_EXCHANGE, "token exchange failed")

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


@dataclass(frozen=True)
class Info:
    name: Optional[str] = None
    nickname: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class Credentials:
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    token_type: Optional[str] = None
    expires: bool = False
    scopes: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Extra:
    raw_token: Dict[str, Any] = field(default_factory=dict)
    raw_user: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NormalizedAuthResult:
    """Provider-agnostic outcome of a successful login."""

    uid: Optional[str]
    info: Info
    credentials: Credentials
    extra: Extra

    def to_dict(self) -> dict:
        return asdict(self)
