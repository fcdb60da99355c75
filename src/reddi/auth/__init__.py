"""OAuth authentication for reddi.

This package implements Reddit's authorization-code and refresh-token
flows: a one-shot local callback listener, the token exchange, and the
JSON credential store.

Quick Start:
    ```python
    from reddi.auth import CredentialStore, OAuthManager
    from reddi.config import resolve_client_config, resolve_config_path

    path = resolve_config_path()
    store = CredentialStore(path)
    stored = store.load()
    config = resolve_client_config(path, stored)

    manager = OAuthManager(config, store, stored.credentials)
    if not manager.credentials.refresh_token:
        await manager.authorize()
    ```
"""

from reddi.auth.callback_server import (
    AUTHORIZE_URL,
    REDDIT_SCOPES,
    AuthorizationListener,
    build_authorization_url,
)
from reddi.auth.exceptions import (
    AuthorizationCancelledError,
    ListenerBindError,
    MalformedRedirectError,
    MissingRefreshTokenError,
    ProviderAuthorizationError,
    RedditAuthError,
    RequestFailedError,
    StateMismatchError,
    TokenResponseError,
)
from reddi.auth.models import (
    AuthorizationSession,
    ClientConfig,
    CredentialStatus,
    Credentials,
    StoredConfig,
)
from reddi.auth.oauth_manager import ACCESS_TOKEN_URL, OAuthManager
from reddi.auth.token_storage import CredentialStore

__all__ = [
    "ACCESS_TOKEN_URL",
    "AUTHORIZE_URL",
    "REDDIT_SCOPES",
    "AuthorizationCancelledError",
    "AuthorizationListener",
    "AuthorizationSession",
    "ClientConfig",
    "CredentialStatus",
    "CredentialStore",
    "Credentials",
    "ListenerBindError",
    "MalformedRedirectError",
    "MissingRefreshTokenError",
    "OAuthManager",
    "ProviderAuthorizationError",
    "RedditAuthError",
    "RequestFailedError",
    "StateMismatchError",
    "StoredConfig",
    "TokenResponseError",
    "build_authorization_url",
]
