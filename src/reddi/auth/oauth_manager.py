"""OAuth2 token exchange for the Reddit API.

Handles the two grants reddi uses against Reddit's token endpoint:

- ``authorization_code``: one-time exchange after interactive consent.
- ``refresh_token``: minting a new access token without user interaction.

Reddit "installed app" clients have no secret, so every token request is
authenticated with HTTP Basic ``client_id:`` (empty password).
"""

import asyncio
import base64
import json
import logging

import httpx

from reddi.auth.callback_server import AuthorizationListener
from reddi.auth.exceptions import MissingRefreshTokenError, TokenResponseError
from reddi.auth.models import AuthorizationSession, ClientConfig, Credentials
from reddi.auth.token_storage import CredentialStore

logger = logging.getLogger(__name__)

ACCESS_TOKEN_URL = "https://www.reddit.com/api/v1/access_token"


def basic_authorization(client_id: str) -> str:
    """Build the Basic Authorization header value for ``client_id:``."""
    encoded = base64.b64encode(f"{client_id}:".encode()).decode("ascii")
    return f"Basic {encoded}"


class OAuthManager:
    """Token exchange and persistence for one reddi client.

    Owns the in-memory ``Credentials`` and writes them through the
    ``CredentialStore`` after every successful exchange.

    Attributes:
        config: Resolved client config.
        storage: Store the credentials are persisted to.
        credentials: Current token pair.

    Example:
        ```python
        manager = OAuthManager(config, CredentialStore(config.config_file_path))

        # Interactive, one-time
        await manager.authorize()

        # Later, when the access token is rejected
        await manager.refresh_access_token()
        ```
    """

    def __init__(
        self,
        config: ClientConfig,
        storage: CredentialStore | None = None,
        credentials: Credentials | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.storage = storage or CredentialStore(config.config_file_path)
        self.credentials = credentials or Credentials()
        self._http_client = http_client
        self._owns_http_client = http_client is None

    @property
    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": basic_authorization(self.config.client_id)}

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0, connect=10.0))
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client if this manager created it."""
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def authorize(self, open_browser: bool = False) -> Credentials:
        """Run the interactive authorization flow.

        Starts the one-shot callback listener with a fresh session, waits
        for the redirect and exchanges the received code.

        Args:
            open_browser: Also open the authorization URL in a browser.

        Returns:
            The newly obtained credentials.
        """
        listener = AuthorizationListener(
            self.config, AuthorizationSession(), open_browser=open_browser
        )

        # The listener blocks on a socket accept; keep it off the event loop
        loop = asyncio.get_running_loop()
        waiter = loop.run_in_executor(None, listener.run)
        try:
            code = await asyncio.shield(waiter)
        except asyncio.CancelledError:
            # Release the port before the cancellation propagates
            listener.close()
            await asyncio.wait({waiter})
            if not waiter.cancelled():
                waiter.exception()
            logger.info("Authorization cancelled, callback listener stopped")
            raise

        logger.info("Received authorization code, exchanging for tokens")
        await self.exchange_authorization_code(code)
        return self.credentials

    async def exchange_authorization_code(self, code: str) -> None:
        """Exchange an authorization code for an access/refresh token pair."""
        await self._request_tokens(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.config.oauth_callback_url,
            }
        )

    async def refresh_access_token(self) -> None:
        """Mint a new access token from the current refresh token.

        Raises:
            MissingRefreshTokenError: If no refresh token is held.
        """
        if not self.credentials.refresh_token:
            raise MissingRefreshTokenError()

        logger.debug("Refreshing access token")
        await self._request_tokens(
            {
                "grant_type": "refresh_token",
                "refresh_token": self.credentials.refresh_token,
            }
        )

    async def _request_tokens(self, data: dict[str, str]) -> None:
        """POST a grant to the token endpoint and record the result.

        Raises:
            httpx.HTTPError: On network failure or a non-2xx response.
            TokenResponseError: If either token is missing from the body.
        """
        client = self._get_http_client()
        resp = await client.post(ACCESS_TOKEN_URL, data=data, headers=self.authorization_header)
        resp.raise_for_status()

        try:
            body = resp.json()
        except json.JSONDecodeError as e:
            raise TokenResponseError("access_token", resp.text) from e
        if not isinstance(body, dict):
            raise TokenResponseError("access_token", resp.text)

        access_token = body.get("access_token")
        if not access_token:
            raise TokenResponseError("access_token", json.dumps(body))

        refresh_token = body.get("refresh_token")
        if not refresh_token:
            raise TokenResponseError("refresh_token", json.dumps(body))

        self.credentials = Credentials(access_token=access_token, refresh_token=refresh_token)
        self.storage.save(self.credentials, self.config)
        logger.info("Obtained OAuth tokens via %s grant", data["grant_type"])
