"""Exceptions raised by the reddi authorization and request flow."""


class RedditAuthError(Exception):
    """Base class for fatal reddi errors."""


class StateMismatchError(RedditAuthError):
    """The redirect's ``state`` did not match the authorization session."""

    def __init__(self, received: str | None) -> None:
        self.received = received
        super().__init__(
            f"State does not match! Received state {received!r}; "
            "the redirect may be stale or forged."
        )


class ProviderAuthorizationError(RedditAuthError):
    """Reddit redirected back with an ``error`` parameter."""

    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(f"Error from Reddit: {error}")


class MalformedRedirectError(RedditAuthError):
    """The redirect carried neither ``code`` nor ``error``."""

    def __init__(self) -> None:
        super().__init__("Failed to get code: redirect had neither code nor error")


class AuthorizationCancelledError(RedditAuthError):
    """The callback listener was closed before a redirect arrived."""

    def __init__(self) -> None:
        super().__init__("Authorization cancelled before a redirect was received")


class ListenerBindError(RedditAuthError):
    """The local callback port could not be bound."""

    def __init__(self, port: int, reason: OSError) -> None:
        self.port = port
        self.reason = reason
        super().__init__(f"Could not listen on port {port}: {reason}")


class TokenResponseError(RedditAuthError):
    """The token endpoint response did not contain the expected tokens."""

    def __init__(self, missing: str, body: str) -> None:
        self.missing = missing
        self.body = body
        super().__init__(f"No {missing} in response: {body}")


class MissingRefreshTokenError(RedditAuthError):
    """A token refresh was requested without a refresh token."""

    def __init__(self) -> None:
        super().__init__("No refresh token available; run the authorization flow first")


class RequestFailedError(RedditAuthError):
    """An API request still failed after the single refresh-and-retry."""

    def __init__(self, url: str, status_code: int, body: str) -> None:
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Reddit request failed: {url} {status_code} {body}")
