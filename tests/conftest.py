"""Shared pytest fixtures for reddi tests.

This module provides reusable fixtures for the credential store, client
configuration, and a fake Reddit backend served through
``httpx.MockTransport``.
"""

import json
from collections.abc import Callable
from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest

from reddi.auth.models import ClientConfig, Credentials
from reddi.auth.token_storage import CredentialStore

# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def temp_config_path(tmp_path: Path) -> Path:
    """Get the path for a config file inside a not-yet-created directory."""
    return tmp_path / "reddi" / "config.json"


@pytest.fixture
def client_config(temp_config_path: Path) -> ClientConfig:
    """Create a resolved client config pointing at the temp config file."""
    return ClientConfig(
        client_id="test_client_id",
        port=16661,
        oauth_callback_url="http://localhost:16661",
        config_file_path=temp_config_path,
    )


@pytest.fixture
def ephemeral_config(temp_config_path: Path) -> ClientConfig:
    """Create a client config whose listener binds an ephemeral port."""
    return ClientConfig(
        client_id="test_client_id",
        port=0,
        oauth_callback_url="http://localhost:0",
        config_file_path=temp_config_path,
    )


# =============================================================================
# Credential Fixtures
# =============================================================================


@pytest.fixture
def valid_credentials() -> Credentials:
    """Create a complete access/refresh token pair."""
    return Credentials(
        access_token="test_access_token_abc123",
        refresh_token="test_refresh_token_xyz789",
    )


@pytest.fixture
def refresh_only_credentials() -> Credentials:
    """Create credentials holding only a refresh token."""
    return Credentials(refresh_token="test_refresh_token_xyz789")


@pytest.fixture
def credential_store(temp_config_path: Path) -> CredentialStore:
    """Create a CredentialStore backed by the temp config path."""
    return CredentialStore(temp_config_path)


# =============================================================================
# Fake Reddit Backend
# =============================================================================


class FakeReddit:
    """In-memory stand-in for Reddit's token endpoint and API host.

    Attributes:
        api_statuses: Statuses returned by successive API calls; the last
            one repeats once the list is exhausted.
        api_body: JSON body returned with 2xx API responses.
        token_body: JSON body returned by the token endpoint, or a
            callable building it from the posted form.
        token_status: Status returned by the token endpoint.
        token_requests: Decoded form bodies posted to the token endpoint.
        api_requests: Every request sent to the API host.
    """

    def __init__(self) -> None:
        self.api_statuses: list[int] = [200]
        self.api_body: object = {"name": "test_user"}
        self.token_status = 200
        self.token_body: object | Callable[[dict[str, str]], object] = self._issue_tokens
        self.token_requests: list[dict[str, str]] = []
        self.token_headers: list[httpx.Headers] = []
        self.api_requests: list[httpx.Request] = []
        self._issued = 0

    def _issue_tokens(self, form: dict[str, str]) -> dict[str, str]:
        self._issued += 1
        return {
            "access_token": f"access_{self._issued}",
            "refresh_token": f"refresh_{self._issued}",
            "token_type": "bearer",
            "expires_in": 86400,
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "www.reddit.com":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            self.token_requests.append(form)
            self.token_headers.append(request.headers)
            body = self.token_body(form) if callable(self.token_body) else self.token_body
            if isinstance(body, str):
                return httpx.Response(self.token_status, text=body)
            return httpx.Response(self.token_status, json=body)

        self.api_requests.append(request)
        index = min(len(self.api_requests), len(self.api_statuses)) - 1
        status = self.api_statuses[index]
        if 200 <= status < 300:
            return httpx.Response(status, json=self.api_body)
        return httpx.Response(status, text=json.dumps({"message": "Forbidden", "error": status}))

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_reddit() -> FakeReddit:
    """Create a fake Reddit backend."""
    return FakeReddit()
