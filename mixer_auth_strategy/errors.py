"""
Exceptions raised by the Mixer authentication strategy.

Only configuration problems are meant to reach the host application as
exceptions. Everything that can go wrong during a login is reported as an
``AuthFailure`` value (see :mod:`.models`).
"""


class MixerAuthError(Exception):
    """Base class for errors raised by this package."""


class ConfigError(MixerAuthError):
    """Missing or malformed provider configuration. Fatal at startup."""


class TokenExchangeError(MixerAuthError):
    """The token endpoint could not be reached or returned garbage."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code
