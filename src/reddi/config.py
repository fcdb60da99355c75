"""Client configuration resolution for reddi.

Environment Variables:
    REDDI_CONFIG: Path to the config file
        (default: $XDG_DATA_HOME/reddi/config.json)
    REDDI_CLIENT_ID: OAuth client id (default: the reddi application id)
    REDDI_OAUTH_PORT: Local port for the OAuth callback listener (default: 16661)
    REDDI_OAUTH_CALLBACK: Redirect URI (default: http://localhost:<port>)

Each field resolves as: explicit argument > environment variable >
persisted config value > built-in default.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from reddi.auth.models import ClientConfig, StoredConfig

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = "f9DcUNPm6x0nag"
DEFAULT_OAUTH_PORT = 16661

ENV_CONFIG_PATH = "REDDI_CONFIG"
ENV_CLIENT_ID = "REDDI_CLIENT_ID"
ENV_OAUTH_PORT = "REDDI_OAUTH_PORT"
ENV_OAUTH_CALLBACK = "REDDI_OAUTH_CALLBACK"


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Get the default config file location under the XDG data directory."""
    env = os.environ if environ is None else environ
    data_home = env.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / "reddi" / "config.json"


def resolve_config_path(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Resolve the config file path: argument > REDDI_CONFIG > default."""
    env = os.environ if environ is None else environ
    if config_path:
        return Path(config_path).expanduser()
    if env.get(ENV_CONFIG_PATH):
        return Path(env[ENV_CONFIG_PATH]).expanduser()
    return default_config_path(env)


def _parse_port(value: int | str, source: str) -> int | None:
    try:
        port = int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid port %r from %s", value, source)
        return None
    if not 0 <= port <= 65535:
        logger.warning("Ignoring out-of-range port %r from %s", value, source)
        return None
    return port


def _resolve_port(
    port: int | str | None, env: Mapping[str, str], stored: StoredConfig
) -> int:
    candidates = (
        (port, "argument"),
        (env.get(ENV_OAUTH_PORT), ENV_OAUTH_PORT),
        (stored.port, "config file"),
    )
    for value, source in candidates:
        if value is None or value == "":
            continue
        parsed = _parse_port(value, source)
        if parsed is not None:
            return parsed
    return DEFAULT_OAUTH_PORT


def resolve_client_config(
    config_file_path: Path,
    stored: StoredConfig | None = None,
    client_id: str | None = None,
    port: int | str | None = None,
    oauth_callback: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """Build the immutable client config.

    Args:
        config_file_path: Already-resolved config file path.
        stored: Values read from the config file, if any.
        client_id: Explicit client id override.
        port: Explicit callback port override.
        oauth_callback: Explicit redirect URI override.
        environ: Environment mapping, defaults to ``os.environ``.

    Returns:
        ClientConfig with every field populated.
    """
    env = os.environ if environ is None else environ
    stored = stored or StoredConfig()

    resolved_client_id = (
        client_id or env.get(ENV_CLIENT_ID) or stored.client_id or DEFAULT_CLIENT_ID
    )
    resolved_port = _resolve_port(port, env, stored)
    # Derived after the port so the default callback follows it
    resolved_callback = (
        oauth_callback
        or env.get(ENV_OAUTH_CALLBACK)
        or stored.oauth_callback
        or f"http://localhost:{resolved_port}"
    )

    return ClientConfig(
        client_id=resolved_client_id,
        port=resolved_port,
        oauth_callback_url=resolved_callback,
        config_file_path=config_file_path,
    )
