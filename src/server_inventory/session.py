"""
Client-held session: the bearer token and the logged-in user, persisted to disk with a fixed TTL.
"""

import os
import json
import time
from typing import Any, Callable, Dict, Optional
from loguru import logger
from server_inventory.constants import TOKEN_KEY, USER_KEY, SESSION_TTL


class SessionStore:
    """
    Durable token/user store.

    Each entry is written as {"value": ..., "expires_at": <unix ts>} and both
    entries are always written and removed together.  Any storage failure is
    logged and treated as "no session", so protected commands fail closed.
    """

    def __init__(
        self,
        path: str,
        ttl: int = SESSION_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.path = path
        self.ttl = ttl
        self.clock = clock

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path) as infile:
                data = json.load(infile)
        except (OSError, ValueError) as exc:
            logger.warning(f"Unable to read session storage {self.path}: {exc}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed session storage {self.path}")
            return {}
        return data

    def _save(self, data: Dict[str, Any]) -> bool:
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w") as outfile:
                json.dump(data, outfile)
            os.chmod(self.path, 0o600)
        except OSError as exc:
            logger.warning(f"Unable to write session storage {self.path}: {exc}")
            return False
        return True

    def _live_entries(self) -> Dict[str, Any]:
        """
        Load storage and return only unexpired entries, purging anything stale.
        """
        data = self._load()
        now = self.clock()
        live = {}
        for key in (TOKEN_KEY, USER_KEY):
            entry = data.get(key)
            if (
                isinstance(entry, dict)
                and entry.get("value") is not None
                and isinstance(entry.get("expires_at"), (int, float))
                and entry["expires_at"] > now
            ):
                live[key] = entry["value"]
        if len(live) != 2:
            if data:
                self._remove_file()
            return {}
        return live

    def _remove_file(self):
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning(f"Unable to clear session storage {self.path}: {exc}")

    def set_session(self, token: str, user: Dict[str, Any]):
        expires_at = self.clock() + self.ttl
        self._save(
            {
                TOKEN_KEY: {"value": token, "expires_at": expires_at},
                USER_KEY: {"value": user, "expires_at": expires_at},
            }
        )
        logger.debug(f"Stored session for user={user.get('username') if user else None}")

    def get_token(self) -> Optional[str]:
        return self._live_entries().get(TOKEN_KEY)

    def get_user(self) -> Optional[Dict[str, Any]]:
        return self._live_entries().get(USER_KEY)

    def clear_session(self):
        self._remove_file()

    def is_authenticated(self) -> bool:
        """
        Presence check only, the token is never validated against the API here.
        """
        return self.get_token() is not None
