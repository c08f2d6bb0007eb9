from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .models import UserProfile

logger = logging.getLogger(__name__)


class SessionProvider(Protocol):
    def get_current_user(self) -> Optional[UserProfile]: ...

    def get_auth_token(self) -> Optional[str]: ...


@dataclass(slots=True)
class StaticSession:
    user: Optional[UserProfile] = None
    token: Optional[str] = None

    def get_current_user(self) -> Optional[UserProfile]:
        return self.user

    def get_auth_token(self) -> Optional[str]:
        return self.token


class JsonFileSession:
    """
    Session stored as JSON with the browser storage layout::

        {"authToken": "...", "user": {"_id": "...", "name": "...", ...}}

    ``user`` may also be a JSON-encoded string, as it is in local storage.
    The file is re-read on every call so an external login is picked up.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def get_current_user(self) -> Optional[UserProfile]:
        data = self._read()
        user = data.get("user")
        if isinstance(user, str):
            try:
                user = json.loads(user or "{}")
            except ValueError:
                logger.warning("Ignoring malformed user record in %s", self.path)
                return None
        if not isinstance(user, dict) or not user:
            return None
        try:
            return UserProfile.from_record(user)
        except ValueError as exc:
            logger.warning("Ignoring invalid user record in %s: %s", self.path, exc)
            return None

    def get_auth_token(self) -> Optional[str]:
        token = self._read().get("authToken")
        return str(token) if token else None

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Cannot read session file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Session file %s does not hold a JSON object", self.path)
            return {}
        return data
