"""Authenticated request client for the Reddit API.

Every call carries ``Authorization: Bearer <access token>``. An access
token is minted lazily from the refresh token before the first call, and
a 401/403 response triggers exactly one refresh followed by exactly one
retry. A response that is still unsuccessful after that is fatal.
"""

import logging
from pathlib import Path
from typing import Any

import httpx

from reddi.__version__ import __version__
from reddi.auth import (
    ClientConfig,
    CredentialStore,
    Credentials,
    OAuthManager,
    RequestFailedError,
)
from reddi.config import resolve_client_config, resolve_config_path

logger = logging.getLogger(__name__)

API_BASE_URL = "https://oauth.reddit.com"
USER_AGENT = f"reddi/{__version__}"

# Statuses that mean the access token was rejected
AUTH_FAILURE_STATUSES = frozenset({401, 403})


class RedditClient:
    """Bearer-authenticated pass-through client for oauth.reddit.com.

    Construction is cheap and performs no I/O; use ``RedditClient.open()``
    to load persisted credentials and make sure the client is authorized.

    Attributes:
        config: Resolved client config.
        manager: OAuthManager owning the credentials.

    Example:
        ```python
        async with await RedditClient.open() as reddit:
            me = await reddit.get("/api/v1/me")
            hot = await reddit.get("/r/python/hot", {"limit": 5})
        ```
    """

    def __init__(
        self,
        config: ClientConfig,
        credentials: Credentials | None = None,
        storage: CredentialStore | None = None,
        http_client: httpx.AsyncClient | None = None,
        open_browser: bool = False,
    ) -> None:
        self.config = config
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(30.0, connect=10.0),
        )
        self.manager = OAuthManager(
            config,
            storage=storage,
            credentials=credentials,
            http_client=self._http_client,
        )
        self.open_browser = open_browser

    @classmethod
    async def open(
        cls,
        config_path: str | Path | None = None,
        client_id: str | None = None,
        port: int | str | None = None,
        oauth_callback: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        open_browser: bool = False,
    ) -> "RedditClient":
        """Load configuration and credentials and return an authorized client.

        Runs the interactive authorization flow when no refresh token is
        persisted yet.
        """
        path = resolve_config_path(config_path)
        storage = CredentialStore(path)
        stored = storage.load()
        config = resolve_client_config(
            path,
            stored,
            client_id=client_id,
            port=port,
            oauth_callback=oauth_callback,
        )

        client = cls(
            config,
            credentials=stored.credentials,
            storage=storage,
            http_client=http_client,
            open_browser=open_browser,
        )
        try:
            await client.ensure_authorized()
        except BaseException:
            await client.close()
            raise
        return client

    @property
    def credentials(self) -> Credentials:
        return self.manager.credentials

    async def ensure_authorized(self) -> None:
        """Run interactive authorization if no refresh token is held."""
        if self.credentials.refresh_token:
            return
        logger.info("No refresh token stored, starting authorization flow")
        await self.manager.authorize(open_browser=self.open_browser)

    async def close(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "RedditClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _build_headers(self, headers: dict[str, str] | None) -> httpx.Headers:
        merged = httpx.Headers({"User-Agent": USER_AGENT})
        merged.update(headers or {})
        # Set last: callers cannot override the bearer credential
        merged["Authorization"] = f"Bearer {self.credentials.access_token}"
        return merged

    async def _send(
        self, method: str, url: str, headers: dict[str, str] | None, **kwargs: Any
    ) -> httpx.Response:
        if not self.credentials.access_token:
            await self.manager.refresh_access_token()
        return await self._http_client.request(
            method, url, headers=self._build_headers(headers), **kwargs
        )

    async def request(
        self,
        path: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Perform one API call and return its decoded JSON body.

        Args:
            path: API path, e.g. ``/api/v1/me``.
            method: HTTP method.
            headers: Extra headers; ``Authorization`` is always replaced.
            **kwargs: Passed through to ``httpx.AsyncClient.request``
                (``params``, ``data``, ``json``...).

        Returns:
            Parsed JSON response, or ``None`` for an empty body (e.g. 204).

        Raises:
            RequestFailedError: If the final response is not 2xx.
        """
        url = f"{API_BASE_URL}{path}"

        resp = await self._send(method, url, headers, **kwargs)
        if resp.status_code in AUTH_FAILURE_STATUSES:
            logger.info("Request to %s returned %d, refreshing token", url, resp.status_code)
            await self.manager.refresh_access_token()
            resp = await self._send(method, url, headers, **kwargs)

        if not resp.is_success:
            logger.error("Reddit request failed: %s %d", resp.request.url, resp.status_code)
            raise RequestFailedError(str(resp.request.url), resp.status_code, resp.text)

        if not resp.content:
            return None
        return resp.json()

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` with ``params`` encoded as the query string."""
        return await self.request(path, method="GET", params=params)

    async def post(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """POST to ``path`` with ``params`` encoded as the query string."""
        return await self.request(path, method="POST", params=params)
