"""Local key/value persistence for staged edits and analytics."""

from __future__ import annotations

import json
import logging
import pathlib
import re
from typing import Any

logger = logging.getLogger(__name__)

PENDING_SUPPLEMENTS = "pendingSupplements"
PENDING_POSTS = "pendingPosts"
ANALYTICS = "analytics"

KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")
DEFAULT_QUOTA = 5_000_000


class StorageFailure(RuntimeError):
    pass


class LocalStore:
    """JSON values stored one file per key.

    Reads and writes fail closed: ``get`` falls back to the caller's default and
    ``set`` reports ``False`` instead of raising.
    """

    def __init__(self, root: pathlib.Path, *, quota_bytes: int = DEFAULT_QUOTA) -> None:
        self.root = pathlib.Path(root)
        self.quota_bytes = quota_bytes

    def path_for(self, key: str) -> pathlib.Path:
        if not KEY_RE.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.root / f"{key}.json"

    def load(self, key: str) -> Any:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise StorageFailure(f"No value stored for {key}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageFailure(f"Could not read {path}") from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageFailure(f"Corrupt value stored for {key}") from exc

    def get(self, key: str, default: Any = None) -> Any:
        if not self.path_for(key).exists():
            return default
        try:
            value = self.load(key)
        except StorageFailure as exc:
            logger.warning("Ignoring stored %s: %s", key, exc)
            return default
        if default is not None and not isinstance(value, type(default)):
            logger.warning("Ignoring stored %s: expected %s", key, type(default).__name__)
            return default
        return value

    def set(self, key: str, value: Any) -> bool:
        path = self.path_for(key)
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error("Could not serialize %s: %s", key, exc)
            return False
        used = self._used_bytes(exclude=path) + len(payload.encode("utf-8"))
        if used > self.quota_bytes:
            logger.error("Storage quota exceeded writing %s (%s > %s bytes)", key, used, self.quota_bytes)
            return False
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            logger.error("Could not write %s: %s", path, exc)
            return False
        return True

    def append(self, key: str, item: Any) -> bool:
        items = self.get(key, [])
        items.append(item)
        return self.set(key, items)

    def _used_bytes(self, *, exclude: pathlib.Path) -> int:
        if not self.root.is_dir():
            return 0
        total = 0
        for entry in self.root.glob("*.json"):
            if entry == exclude:
                continue
            try:
                total += entry.stat().st_size
            except OSError:
                continue
        return total
