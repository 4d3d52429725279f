"""
Session context: bearer token plus the display fields cached at login.

Passed explicitly to whatever needs it; nothing reads session state from
module globals. When a path is given the session is persisted as JSON and
reloaded on construction.
"""

import json
from pathlib import Path

from saju_client.config import settings
from saju_client.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class SessionStore:
    def __init__(self, path: Path | None = None):
        self._path = path
        self.token: str | None = None
        self.display_name: str | None = None
        self.email: str | None = None
        if path is not None:
            self._load()

    @classmethod
    def from_settings(cls) -> "SessionStore":
        return cls(settings.session_path())

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_token(self, token: str) -> None:
        self.token = token
        self._save()

    def clear_token(self) -> None:
        self.token = None
        self._save()

    def cache_user(self, display_name: str | None = None, email: str | None = None) -> None:
        """Remember display fields; None leaves the current value untouched."""
        if display_name:
            self.display_name = display_name
        if email:
            self.email = email
        self._save()

    def clear(self) -> None:
        self.token = None
        self.display_name = None
        self.email = None
        self._save()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file", path=str(self._path), error=str(e))
            return
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed session file", path=str(self._path))
            return
        self.token = data.get("token") or None
        self.display_name = data.get("name") or None
        self.email = data.get("email") or None

    def _save(self) -> None:
        if self._path is None:
            return
        payload = {"token": self.token, "name": self.display_name, "email": self.email}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
