"""One-shot local HTTP listener for the OAuth2 redirect.

Reddit redirects the operator's browser to the configured callback URL
with ``state`` and either ``code`` or ``error`` in the query string. The
listener binds the callback port, services exactly one request, closes
the socket and hands the outcome back to the caller.
"""

import logging
import threading
import urllib.parse
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer

import click

from reddi.auth.exceptions import (
    AuthorizationCancelledError,
    ListenerBindError,
    MalformedRedirectError,
    ProviderAuthorizationError,
    RedditAuthError,
    StateMismatchError,
)
from reddi.auth.models import AuthorizationSession, ClientConfig

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://www.reddit.com/api/v1/authorize"

# Seconds between checks for close() while waiting on the callback port
POLL_INTERVAL = 0.5

# Permissions requested on every authorization, in this order.
REDDIT_SCOPES: tuple[str, ...] = (
    "identity",
    "edit",
    "flair",
    "history",
    "modconfig",
    "modcontributors",
    "modflair",
    "modlog",
    "modposts",
    "modwiki",
    "mysubreddits",
    "privatemessages",
    "read",
    "report",
    "save",
    "submit",
    "subscribe",
    "vote",
    "wikiedit",
    "wikiread",
)

SUCCESS_PAGE = (
    b"<html><body><h1>Authorization Successful!</h1>"
    b"<p>You can continue using reddi. Close this window and return to the terminal.</p>"
    b"</body></html>"
)


def build_authorization_url(config: ClientConfig, session: AuthorizationSession) -> str:
    """Build the URL the operator opens to grant access.

    Args:
        config: Resolved client config (client id and callback URL).
        session: Authorization session providing the state token.

    Returns:
        Fully-qualified authorize URL with a comma-joined scope list.
    """
    params = {
        "client_id": config.client_id,
        "response_type": "code",
        "state": session.state_token,
        "redirect_uri": config.oauth_callback_url,
        "duration": "permanent",
        "scope": ",".join(REDDIT_SCOPES),
    }
    return f"{AUTHORIZE_URL}?{urllib.parse.urlencode(params, safe=',')}"


class _CallbackOutcome:
    """Result of the single serviced redirect."""

    def __init__(self) -> None:
        self.serviced = False
        self.code: str | None = None
        self.error: RedditAuthError | None = None


class AuthorizationListener:
    """Capture one OAuth redirect on the local callback port.

    Attributes:
        config: Resolved client config.
        session: CSRF state for this authorization attempt.
        host: Interface to bind; all interfaces by default.

    Example:
        ```python
        listener = AuthorizationListener(config, AuthorizationSession())
        code = listener.run()  # blocks until the browser is redirected
        ```
    """

    def __init__(
        self,
        config: ClientConfig,
        session: AuthorizationSession | None = None,
        host: str = "",
        open_browser: bool = False,
    ) -> None:
        self.config = config
        self.session = session or AuthorizationSession()
        self.host = host
        self.open_browser = open_browser
        self._server: HTTPServer | None = None
        self._outcome = _CallbackOutcome()
        self._stop = threading.Event()

    @property
    def authorization_url(self) -> str:
        return build_authorization_url(self.config, self.session)

    @property
    def port(self) -> int:
        """Port actually bound (differs from config when binding port 0)."""
        if self._server is None:
            return self.config.port
        return self._server.server_address[1]

    def bind(self) -> int:
        """Bind the callback port.

        Returns:
            The bound port.

        Raises:
            ListenerBindError: If the port is unavailable.
        """
        try:
            self._server = HTTPServer((self.host, self.config.port), self._make_handler())
        except OSError as e:
            raise ListenerBindError(self.config.port, e) from e
        logger.debug("Callback listener bound to port %d", self.port)
        return self.port

    def wait_for_code(self) -> str:
        """Service exactly one redirect and return its authorization code.

        The listening socket is closed before returning or raising, so no
        further connection is ever accepted. There is no timeout; the wait
        ends early only when ``close()`` is called from another thread.

        Raises:
            StateMismatchError: If ``state`` does not match the session.
            ProviderAuthorizationError: If Reddit reported an ``error``.
            MalformedRedirectError: If neither ``code`` nor ``error`` arrived.
            AuthorizationCancelledError: If ``close()`` ended the wait.
        """
        if self._server is None:
            self.bind()
        server = self._server
        server.timeout = POLL_INTERVAL

        try:
            while not self._outcome.serviced:
                if self._stop.is_set():
                    raise AuthorizationCancelledError()
                server.handle_request()
        finally:
            server.server_close()
            self._server = None
            logger.debug("Callback listener closed")

        if self._outcome.error is not None:
            raise self._outcome.error
        if self._outcome.code is None:
            raise MalformedRedirectError()
        return self._outcome.code

    def close(self) -> None:
        """Stop waiting for the redirect.

        Safe to call from any thread. The thread blocked in
        ``wait_for_code()`` notices within ``POLL_INTERVAL`` seconds,
        releases the port and raises ``AuthorizationCancelledError``.
        """
        self._stop.set()

    def run(self) -> str:
        """Bind, print the authorization URL, and wait for the redirect."""
        self.bind()
        auth_url = self.authorization_url

        click.echo(f"HTTP webserver running on port {self.port}", err=True)
        click.echo(f"\nGo here to generate an authorization code:\n{auth_url}", err=True)
        if self.open_browser:
            webbrowser.open(auth_url)

        return self.wait_for_code()

    def _make_handler(self) -> type[BaseHTTPRequestHandler]:
        session = self.session
        outcome = self._outcome

        class OAuthCallbackHandler(BaseHTTPRequestHandler):
            """HTTP handler for the OAuth redirect."""

            def log_message(self, format: str, *args) -> None:
                logger.debug("callback: " + format, *args)

            def handle(self) -> None:
                try:
                    super().handle()
                finally:
                    outcome.serviced = True

            def _respond(self, status: int, body: bytes, content_type: str) -> None:
                self.send_response(status)
                self.send_header("Content-type", content_type)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def do_GET(self) -> None:
                query = urllib.parse.parse_qs(urllib.parse.urlparse(self.path).query)
                state = query.get("state", [None])[0]

                if not session.matches(state):
                    logger.error("Rejected OAuth redirect with mismatched state")
                    self._respond(
                        400, b"FAILURE: state does not match", "text/plain; charset=utf-8"
                    )
                    outcome.error = StateMismatchError(state)
                    return

                code = query.get("code", [None])[0]
                if code:
                    self._respond(200, SUCCESS_PAGE, "text/html; charset=utf-8")
                    outcome.code = code
                    return

                error = query.get("error", [None])[0]
                if error:
                    message = f"FAILURE: Failed to get code\nError from Reddit: {error}"
                    self._respond(500, message.encode(), "text/plain; charset=utf-8")
                    outcome.error = ProviderAuthorizationError(error)
                    return

                self._respond(
                    400,
                    b"FAILURE: Failed to get code\nNo code or error in redirect",
                    "text/plain; charset=utf-8",
                )
                outcome.error = MalformedRedirectError()

        return OAuthCallbackHandler
