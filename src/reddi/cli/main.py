"""Command-line interface for reddi."""

import asyncio
import json
import logging
import sys

import click
import httpx

from reddi.__version__ import __version__
from reddi.auth import CredentialStatus, CredentialStore, RedditAuthError, RequestFailedError
from reddi.config import resolve_client_config, resolve_config_path


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def _fetch_all(paths: tuple[str, ...], **client_options) -> None:
    from reddi.client import RedditClient

    async with await RedditClient.open(**client_options) as reddit:
        for path in paths:
            resp = await reddit.request(path)
            click.echo(json.dumps(resp, indent=2))


def _show_status(config_path: str | None, **overrides) -> None:
    path = resolve_config_path(config_path)
    stored = CredentialStore(path).load()
    config = resolve_client_config(path, stored, **overrides)
    status = stored.credentials.status

    click.echo("reddi status:")
    click.echo(f"  Config file: {config.config_file_path}")
    click.echo(f"  Client id: {config.client_id}")
    click.echo(f"  Callback: {config.oauth_callback_url} (port {config.port})")

    if status == CredentialStatus.AUTHORIZED:
        click.echo("  ✓ Authorized")
    elif status == CredentialStatus.REFRESH_ONLY:
        click.echo("  ⚠️  Refresh token only (access token minted on first request)")
    else:
        click.echo("  ❌ Not authorized")
        click.echo("")
        click.echo("Run 'reddi /api/v1/me' to start the authorization flow.")
        sys.exit(1)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("paths", nargs=-1)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file path")
@click.option("--client-id", help="Reddit OAuth client id")
@click.option("--port", type=int, help="Local port for the OAuth callback listener")
@click.option("--oauth-callback", help="OAuth redirect URI registered with Reddit")
@click.option("--open-browser", is_flag=True, help="Open the authorization URL in a browser")
@click.option("--status", "show_status", is_flag=True, help="Show credential status and exit")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: click.Context,
    paths: tuple[str, ...],
    config_path: str | None,
    client_id: str | None,
    port: int | None,
    oauth_callback: str | None,
    open_browser: bool,
    show_status: bool,
    verbose: bool,
) -> None:
    """Request Reddit API PATHS with stored OAuth credentials.

    Each PATH (e.g. /api/v1/me) is requested in order and its JSON
    response printed. The first run opens a local callback listener and
    prints an authorization URL to visit.
    """
    _configure_logging(verbose)
    overrides = {"client_id": client_id, "port": port, "oauth_callback": oauth_callback}

    if show_status:
        _show_status(config_path, **overrides)
        return

    if not paths:
        click.echo(ctx.get_usage(), err=True)
        sys.exit(1)

    try:
        asyncio.run(
            _fetch_all(paths, config_path=config_path, open_browser=open_browser, **overrides)
        )
    except RequestFailedError as e:
        click.echo(f"❌ Reddit request failed: {e.url} {e.status_code}", err=True)
        click.echo(e.body, err=True)
        sys.exit(1)
    except (RedditAuthError, httpx.HTTPError, OSError) as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
