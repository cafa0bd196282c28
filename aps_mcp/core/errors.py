"""Exception types shared across clients, services and the tool layer."""

from __future__ import annotations


class ApsConfigurationError(RuntimeError):
    """Raised when required APS credentials are not configured."""


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"APS token request failed ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class ApsApiError(Exception):
    """Structured error raised by resource API calls.

    Carries the status code, method, path and raw body so a richer diagnostic
    can be built by the caller.
    """

    def __init__(
        self, status_code: int, method: str, path: str, response_body: str
    ) -> None:
        super().__init__(
            f"APS API {method} {path} failed ({status_code}): {response_body}"
        )
        self.status_code = status_code
        self.method = method
        self.path = path
        self.response_body = response_body


class HostMismatchError(ValueError):
    """Raised when an absolute URL points outside the configured API host."""


class ToolValidationError(ValueError):
    """Raised when a caller-supplied identifier or path fails a format check."""


class InteractiveLoginError(Exception):
    """Raised when the interactive authorization-code login does not complete."""


class LoginTimeoutError(InteractiveLoginError):
    """Raised when no authorization callback arrives in time."""


class CallbackStateError(InteractiveLoginError):
    """Raised when the OAuth state returned on the callback fails verification."""


__all__ = [
    "ApsApiError",
    "ApsConfigurationError",
    "CallbackStateError",
    "HostMismatchError",
    "InteractiveLoginError",
    "LoginTimeoutError",
    "OAuthTokenExchangeError",
    "ToolValidationError",
]
