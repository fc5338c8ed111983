"""
Client-side key/value storage, shaped like the browser's localStorage and
sessionStorage: string keys, string values, `clear()` wipes everything.

    JsonFileStorage   persistent, backed by one JSON file ("local storage");
                      `browser_storage` gives each browser its own file
    DictStorage       in-memory over any mutable mapping ("session storage");
                      the app hands it a dict living in st.session_state

The cached session record is a single key, `fc_session`, holding
{"email": ..., "role": ..., "timestamp": <ms>} as JSON.
"""

import json
import logging
import os
import re
import tempfile
import time
import uuid
from collections.abc import MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from frontend.roles import Role, parse_role

logger = logging.getLogger("storage")
logger.setLevel(logging.INFO)

SESSION_CACHE_KEY = "fc_session"

_BROWSER_ID = re.compile(r"^[0-9a-f]{32}$")


class CorruptCacheError(ValueError):
    """The cached session record exists but cannot be used."""


# ════════════════════════════════════════════
# Backends
# ════════════════════════════════════════════

class DictStorage:
    def __init__(self, mapping: Optional[MutableMapping] = None):
        self._data = mapping if mapping is not None else {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[str]:
        return list(self._data.keys())


class JsonFileStorage:
    """Persistent storage in a single JSON object file.

    A missing or unreadable file reads as empty; every write rewrites the
    whole file atomically.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=str(self.path.parent), delete=False, encoding="utf-8"
        ) as tf:
            json.dump(data, tf, ensure_ascii=False)
            temp_path = Path(tf.name)
        try:
            os.replace(temp_path, self.path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def clear(self) -> None:
        self._save({})

    def keys(self) -> list[str]:
        return list(self._load().keys())


# ── One local storage per browser ─────────────

def new_browser_id() -> str:
    return uuid.uuid4().hex


def is_browser_id(value) -> bool:
    return isinstance(value, str) and bool(_BROWSER_ID.match(value))


def browser_storage(root: str | Path, browser_id: str) -> JsonFileStorage:
    """The persistent store of one browser: `<root>/<browser_id>.json`.

    Browsers never share a file, so a token or cached session written by one
    is invisible to every other.
    """
    if not is_browser_id(browser_id):
        raise ValueError(f"invalid browser id: {browser_id!r}")
    return JsonFileStorage(Path(root) / f"{browser_id}.json")


# ════════════════════════════════════════════
# Cached session record
# ════════════════════════════════════════════

@dataclass(frozen=True)
class CachedSession:
    email: Optional[str]
    role: Role
    timestamp: Optional[int]


def write_cached_session(storage, email: str, role: Role, timestamp: Optional[int] = None) -> CachedSession:
    """Store the record under `fc_session`; timestamp defaults to now (ms)."""
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    record = CachedSession(email=email, role=parse_role(role), timestamp=timestamp)
    storage.set_item(
        SESSION_CACHE_KEY,
        json.dumps({"email": record.email, "role": record.role.value, "timestamp": record.timestamp}),
    )
    return record


def read_cached_session(storage) -> Optional[CachedSession]:
    """Return the cached record, None when absent.

    Raises CorruptCacheError when the value is not JSON, not an object, or has
    no `role` field. Callers are expected to delete the record in that case.
    """
    raw = storage.get_item(SESSION_CACHE_KEY)
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise CorruptCacheError(f"cached session is not valid JSON: {exc}") from exc
    if not isinstance(data, dict) or "role" not in data:
        raise CorruptCacheError("cached session has no role")

    email = data.get("email")
    timestamp = data.get("timestamp")
    return CachedSession(
        email=email if isinstance(email, str) else None,
        role=parse_role(data["role"]),
        timestamp=timestamp if isinstance(timestamp, int) else None,
    )
