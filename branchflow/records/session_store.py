"""YAML persistence for the authenticated session."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .errors import SessionStoreError
from .models import Session

logger = logging.getLogger(__name__)

SESSION_KEY = "odoo_auth"


class SessionStore:
    """Persist a Session under a single well-known key in a YAML file."""

    def __init__(self, path: str | Path, key: str = SESSION_KEY):
        self.path = Path(path).expanduser()
        self.key = key

    def load(self) -> Session | None:
        """Load the stored session.

        Returns:
            The stored Session, or None if nothing is stored.

        Raises:
            SessionStoreError: If the file exists but cannot be read or parsed.
        """
        data = self._read()
        raw = data.get(self.key)
        if not raw:
            return None
        if not isinstance(raw, dict):
            raise SessionStoreError(
                f"Expected mapping under '{self.key}', got {type(raw).__name__}",
                str(self.path),
            )
        try:
            return Session.model_validate(raw)
        except ValidationError as e:
            raise SessionStoreError(f"Invalid session data: {e}", str(self.path)) from e

    def save(self, session: Session) -> None:
        """Store a session, replacing any previous one."""
        data = self._read()
        data[self.key] = session.model_dump()
        self._write(data)
        logger.info("Session saved for %s@%s", session.username, session.database)

    def clear(self) -> None:
        """Remove the stored session, keeping any other keys in the file."""
        data = self._read()
        if data.pop(self.key, None) is not None:
            self._write(data)
            logger.info("Session cleared")

    def _read(self) -> dict:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SessionStoreError(f"Invalid YAML: {e}", str(self.path)) from e
        except OSError as e:
            raise SessionStoreError(f"Cannot read file: {e}", str(self.path)) from e

        if data is None:
            return {}

        if not isinstance(data, dict):
            raise SessionStoreError(
                f"Expected YAML mapping at root, got {type(data).__name__}",
                str(self.path),
            )
        return data

    def _write(self, data: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise SessionStoreError(f"Cannot write file: {e}", str(self.path)) from e
