"""Unit tests for credential and configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from reddi.auth.models import (
    STATE_TOKEN_LENGTH,
    AuthorizationSession,
    ClientConfig,
    CredentialStatus,
    Credentials,
    StoredConfig,
    generate_state_token,
)


@pytest.mark.unit
class TestCredentials:
    """Tests for Credentials model."""

    def test_should_default_to_empty(self) -> None:
        """Verify an empty token pair has no tokens."""
        credentials = Credentials()
        assert credentials.access_token is None
        assert credentials.refresh_token is None

    def test_should_accept_file_aliases(self) -> None:
        """Verify camelCase keys from the config file populate the model."""
        credentials = Credentials.model_validate({"accessToken": "a", "refreshToken": "r"})
        assert credentials.access_token == "a"
        assert credentials.refresh_token == "r"

    @pytest.mark.parametrize(
        ("access_token", "refresh_token", "expected"),
        [
            ("a", "r", CredentialStatus.AUTHORIZED),
            (None, "r", CredentialStatus.REFRESH_ONLY),
            ("a", None, CredentialStatus.MISSING),
            (None, None, CredentialStatus.MISSING),
        ],
    )
    def test_should_report_status(
        self, access_token: str | None, refresh_token: str | None, expected: CredentialStatus
    ) -> None:
        """Verify status reflects which tokens are held."""
        credentials = Credentials(access_token=access_token, refresh_token=refresh_token)
        assert credentials.status == expected


@pytest.mark.unit
class TestStoredConfig:
    """Tests for StoredConfig model."""

    def test_should_ignore_unknown_keys(self) -> None:
        """Verify extra keys in the file are dropped."""
        stored = StoredConfig.model_validate({"clientId": "abc", "theme": "dark"})
        assert stored.client_id == "abc"

    def test_should_coerce_numeric_port(self) -> None:
        """Verify a numeric port in the file is kept as a string."""
        stored = StoredConfig.model_validate({"port": 8080})
        assert stored.port == "8080"

    def test_should_expose_credentials(self) -> None:
        """Verify the token pair is extracted from the stored config."""
        stored = StoredConfig.model_validate({"accessToken": "a", "refreshToken": "r"})
        assert stored.credentials == Credentials(access_token="a", refresh_token="r")


@pytest.mark.unit
class TestClientConfig:
    """Tests for ClientConfig model."""

    def test_should_be_immutable(self, client_config: ClientConfig) -> None:
        """Verify the resolved config cannot be mutated."""
        with pytest.raises(ValidationError):
            client_config.port = 1234

    def test_should_merge_into_stored_shape(
        self, client_config: ClientConfig, valid_credentials: Credentials
    ) -> None:
        """Verify to_stored combines tokens with config fields."""
        stored = client_config.to_stored(valid_credentials)

        assert stored.model_dump(by_alias=True) == {
            "accessToken": "test_access_token_abc123",
            "refreshToken": "test_refresh_token_xyz789",
            "port": "16661",
            "clientId": "test_client_id",
            "oauthCallback": "http://localhost:16661",
        }

    def test_should_keep_path_type(self, client_config: ClientConfig) -> None:
        """Verify config_file_path is a Path."""
        assert isinstance(client_config.config_file_path, Path)


@pytest.mark.unit
class TestAuthorizationSession:
    """Tests for AuthorizationSession model."""

    def test_should_generate_alphanumeric_state(self) -> None:
        """Verify the state token is 30 alphanumeric characters."""
        token = generate_state_token()
        assert len(token) == STATE_TOKEN_LENGTH == 30
        assert token.isalnum()

    def test_should_create_fresh_state_per_session(self) -> None:
        """Verify every session gets its own state token."""
        assert AuthorizationSession().state_token != AuthorizationSession().state_token

    def test_should_match_own_state(self) -> None:
        """Verify the expected state is accepted."""
        session = AuthorizationSession()
        assert session.expected_state == session.state_token
        assert session.matches(session.state_token) is True

    @pytest.mark.parametrize("state", [None, "", "wrong", "é" * 30])
    def test_should_reject_other_state(self, state: str | None) -> None:
        """Verify missing, empty, wrong or non-ASCII states are rejected."""
        session = AuthorizationSession(state_token="a" * 30)
        assert session.matches(state) is False
