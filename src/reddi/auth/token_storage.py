"""JSON file storage for reddi credentials and client configuration.

The whole state (tokens plus client settings) lives in one JSON object:

    {
      "accessToken": "...",
      "refreshToken": "...",
      "port": "16661",
      "clientId": "...",
      "oauthCallback": "http://localhost:16661"
    }

The file is rewritten wholesale on every successful token exchange.
Writes go to a temporary file in the same directory which is then renamed
over the target, so an interrupted write leaves the previous file intact.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from reddi.auth.models import ClientConfig, Credentials, StoredConfig

logger = logging.getLogger(__name__)


class CredentialStore:
    """Load and persist the reddi config file.

    Attributes:
        path: Location of the config file.

    Example:
        ```python
        store = CredentialStore(Path("~/.local/share/reddi/config.json").expanduser())
        stored = store.load()
        store.save(Credentials(access_token="a", refresh_token="r"), config)
        ```
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> StoredConfig:
        """Read the config file.

        A missing, unreadable or corrupt file yields an empty
        ``StoredConfig`` instead of raising.
        """
        if not self.path.exists():
            logger.debug("No config file at %s", self.path)
            return StoredConfig()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return StoredConfig.model_validate(data)
        except (OSError, ValueError, RecursionError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable config file {self.path}: {e}")
            return StoredConfig()

    def load_credentials(self) -> Credentials:
        """Read only the token pair from the config file."""
        return self.load().credentials

    def save(self, credentials: Credentials, config: ClientConfig) -> None:
        """Persist credentials merged with the client config.

        Args:
            credentials: Token pair to write.
            config: Resolved client config providing the non-token fields.

        Raises:
            OSError: If the directory or file cannot be written.
        """
        stored = config.to_stored(credentials)
        payload = json.dumps(stored.model_dump(by_alias=True), indent=2) + "\n"

        self._ensure_parent_dir()

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                f.write(payload)
            # Owner read/write only (600)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("Saved credentials to %s", self.path)

    def _ensure_parent_dir(self) -> None:
        """Create the config directory with owner-only permissions if needed."""
        parent = self.path.parent
        if not parent.exists():
            parent.mkdir(parents=True, mode=0o700)
