"""Client-side authentication state."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class AuthSession:
    """Token and user payload held by a client.

    All reads and writes go through this object. When ``path`` is given
    the state is mirrored to a JSON file so it survives restarts.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._token: Optional[str] = None
        self._user: Optional[Dict[str, Any]] = None
        if self.path is not None and self.path.exists():
            self._load()

    def _load(self) -> None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return
        self._token = data.get("token")
        self._user = data.get("user")

    def _save(self) -> None:
        if self.path is None:
            return
        if self._token is None:
            if self.path.exists():
                self.path.unlink()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"token": self._token, "user": self._user}), encoding="utf-8")

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    @property
    def role_names(self) -> List[str]:
        roles = (self._user or {}).get("roles") or []
        return [(r if isinstance(r, str) else r.get("name", "")).lower() for r in roles]

    @property
    def permission_names(self) -> List[str]:
        return list((self._user or {}).get("permissions") or [])

    def has_any_role(self, roles) -> bool:
        wanted = {r.lower() for r in roles}
        return any(r in wanted for r in self.role_names)

    def set(self, token: str, user: Optional[Dict[str, Any]]) -> None:
        self._token = token
        self._user = user
        self._save()

    def update_user(self, user: Dict[str, Any]) -> None:
        self._user = user
        self._save()

    def clear(self) -> None:
        self._token = None
        self._user = None
        self._save()
