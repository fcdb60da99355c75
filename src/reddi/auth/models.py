"""Data models for reddi credentials and configuration.

The persisted config file uses camelCase keys (``accessToken``,
``clientId``...). Models expose snake_case attributes and map to the
file format through field aliases.
"""

import secrets
import string
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

STATE_TOKEN_LENGTH = 30
_STATE_ALPHABET = string.ascii_letters + string.digits


def generate_state_token(length: int = STATE_TOKEN_LENGTH) -> str:
    """Generate a random alphanumeric nonce for the OAuth ``state`` parameter."""
    return "".join(secrets.choice(_STATE_ALPHABET) for _ in range(length))


class CredentialStatus(str, Enum):
    """What the persisted credentials allow the client to do."""

    AUTHORIZED = "authorized"  # access and refresh token present
    REFRESH_ONLY = "refresh_only"  # access token must be minted first
    MISSING = "missing"  # interactive authorization required


class Credentials(BaseModel):
    """OAuth token pair held by a client.

    Attributes:
        access_token: Bearer credential for API calls.
        refresh_token: Long-lived credential used to mint access tokens.
    """

    access_token: str | None = Field(default=None, alias="accessToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")

    model_config = {"populate_by_name": True}

    @property
    def status(self) -> CredentialStatus:
        if not self.refresh_token:
            return CredentialStatus.MISSING
        if not self.access_token:
            return CredentialStatus.REFRESH_ONLY
        return CredentialStatus.AUTHORIZED


class StoredConfig(BaseModel):
    """Raw contents of the persisted config file.

    Every field is optional; a first run has no file at all. ``port`` is
    kept as a string to match the file format.
    """

    access_token: str | None = Field(default=None, alias="accessToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    port: str | None = None
    client_id: str | None = Field(default=None, alias="clientId")
    oauth_callback: str | None = Field(default=None, alias="oauthCallback")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("port", mode="before")
    @classmethod
    def _port_as_string(cls, value: object) -> object:
        # Hand-edited files sometimes store the port as a number
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def credentials(self) -> Credentials:
        return Credentials(access_token=self.access_token, refresh_token=self.refresh_token)


class ClientConfig(BaseModel):
    """Resolved client configuration, immutable once built.

    Attributes:
        client_id: OAuth application client id.
        port: Local port the authorization listener binds to.
        oauth_callback_url: Redirect URI registered with the provider.
        config_file_path: Where credentials and config are persisted.
    """

    client_id: str
    port: int
    oauth_callback_url: str
    config_file_path: Path

    model_config = {"frozen": True}

    def to_stored(self, credentials: Credentials) -> StoredConfig:
        """Merge credentials with this config into the persisted shape."""
        return StoredConfig(
            access_token=credentials.access_token,
            refresh_token=credentials.refresh_token,
            port=str(self.port),
            client_id=self.client_id,
            oauth_callback=self.oauth_callback_url,
        )


class AuthorizationSession(BaseModel):
    """CSRF state for a single interactive authorization attempt.

    A fresh session is created for every authorization flow and never
    persisted.
    """

    state_token: str = Field(default_factory=generate_state_token)

    model_config = {"frozen": True}

    @property
    def expected_state(self) -> str:
        return self.state_token

    def matches(self, state: str | None) -> bool:
        """Check a redirect's ``state`` parameter against this session."""
        if state is None:
            return False
        return secrets.compare_digest(state.encode(), self.expected_state.encode())
