"""Local session state: token storage, cookie jar and navigation, persisted as JSON in STATE_DIR."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import STATE_DIR
from utils.logger import get_logger

logger = get_logger(__name__)


def _read_json(path: Path) -> Any:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read session file %s: %s", path, e)
        return None


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class LocalStorage:
    """Persistent string key/value store (the equivalent of browser localStorage)."""

    def __init__(self, state_dir: Optional[Path] = None) -> None:
        self._path = Path(state_dir or STATE_DIR) / "local_storage.json"

    def _load(self) -> Dict[str, str]:
        data = _read_json(self._path)
        return data if isinstance(data, dict) else {}

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        _write_json(self._path, data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            _write_json(self._path, data)

    def keys(self) -> List[str]:
        return list(self._load().keys())

    def clear(self) -> None:
        _write_json(self._path, {})


class CookieJar:
    """
    Cookies scoped by (name, path, domain) with optional expiry.
    Expired cookies are never returned. Removal must match path and domain,
    as in a browser, so callers remove across the variants they may have set.
    """

    def __init__(self, state_dir: Optional[Path] = None) -> None:
        self._path = Path(state_dir or STATE_DIR) / "cookies.json"

    def _load(self) -> List[Dict[str, Any]]:
        data = _read_json(self._path)
        return data if isinstance(data, list) else []

    def _save(self, cookies: List[Dict[str, Any]]) -> None:
        _write_json(self._path, cookies)

    @staticmethod
    def _is_live(cookie: Dict[str, Any]) -> bool:
        expires = cookie.get("expires")
        if not expires:
            return True
        return datetime.fromisoformat(expires) > datetime.now(timezone.utc)

    def get_all(self) -> Dict[str, str]:
        """name -> value for every live cookie."""
        return {c["name"]: c["value"] for c in self._load() if self._is_live(c)}

    def get(self, name: str) -> Optional[str]:
        return self.get_all().get(name)

    def set(
        self,
        name: str,
        value: str,
        expires_days: Optional[int] = None,
        path: str = "/",
        domain: str = "",
        secure: bool = False,
        same_site: str = "lax",
    ) -> None:
        cookies = [
            c for c in self._load()
            if not (c["name"] == name and c.get("path", "/") == path and c.get("domain", "") == domain)
        ]
        expires = None
        if expires_days is not None:
            expires = (datetime.now(timezone.utc) + timedelta(days=expires_days)).isoformat()
        cookies.append(
            {
                "name": name,
                "value": str(value),
                "path": path,
                "domain": domain,
                "expires": expires,
                "secure": secure,
                "sameSite": same_site,
            }
        )
        self._save(cookies)

    def remove(self, name: str, path: str = "/", domain: str = "") -> None:
        cookies = self._load()
        kept = [
            c for c in cookies
            if not (c["name"] == name and c.get("path", "/") == path and c.get("domain", "") == domain)
        ]
        if len(kept) != len(cookies):
            self._save(kept)

    def seed(self, cookies: Dict[str, str]) -> None:
        """Import cookies handed over by the host application (session cookies, path /)."""
        for name, value in (cookies or {}).items():
            if self.get(name) != value:
                self.set(name, value)


class Navigator:
    """
    Records navigation requests. The front end reads `pending_url` and performs the redirect;
    `history` keeps every replace for inspection.
    """

    def __init__(self) -> None:
        self.history: List[str] = []
        self.pending_url: Optional[str] = None
        self.state_url: Optional[str] = None

    def replace_state(self, url: str) -> None:
        """Overwrite the current history entry so the back button cannot return here."""
        self.state_url = url

    def replace(self, url: str) -> None:
        logger.info("Navigating to %s", url)
        self.history.append(url)
        self.pending_url = url
