"""
Хранилища вывода мемоизации.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

STORE_VERSION = 1


def _sha1_text(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


class MemoStore(Protocol):
    """Хранилище отрендеренного вывода по ключу мемоизации."""

    def get(self, key: str) -> Optional[str]: ...

    def put(self, key: str, value: str) -> None: ...

    def forget(self, key: str) -> None: ...

    def clear(self) -> None: ...


class InMemoryStore:
    """Хранилище в памяти процесса (по умолчанию)."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def put(self, key: str, value: str) -> None:
        self._items[key] = value

    def forget(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class FileStore:
    """
    Файловое хранилище, переживающее перезапуск процесса.
      • ключи раскладываются по подкаталогам по префиксу sha1
      • запись атомарная (tmp + replace)
    Ошибки ввода-вывода не роняют рендер: вместо исключения промах.
    """

    def __init__(self, root: Path):
        self.dir = root
        try:
            self.dir.mkdir(parents=True, exist_ok=True)
            self.enabled = True
        except OSError:
            self.enabled = False
            logger.warning(f"Memo store {root} is not writable, memoized output will not persist")

    def get(self, key: str) -> Optional[str]:
        if not self.enabled:
            return None
        data = self._load_json(self._bucket_path(key))
        if not data or data.get("v") != STORE_VERSION or data.get("key") != key:
            return None
        value = data.get("value")
        return value if isinstance(value, str) else None

    def put(self, key: str, value: str) -> None:
        if not self.enabled:
            return
        try:
            self._atom_write(self._bucket_path(key), {
                "v": STORE_VERSION,
                "key": key,
                "value": value,
                "created_at": datetime.now(timezone.utc).isoformat(),
            })
        except OSError:
            pass

    def forget(self, key: str) -> None:
        try:
            self._bucket_path(key).unlink()
        except OSError:
            pass

    def clear(self) -> None:
        if not self.dir.exists():
            return
        for path in self.dir.rglob("*.json"):
            try:
                path.unlink()
            except OSError:
                pass

    # --------------------------- ВНУТРЕННЕЕ --------------------------- #

    def _bucket_path(self, key: str) -> Path:
        digest = _sha1_text(key)
        return self.dir / digest[:2] / digest[2:4] / f"{digest}.json"

    @staticmethod
    def _load_json(path: Path) -> Optional[dict]:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None

    @staticmethod
    def _atom_write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(f".json.{os.getpid()}.tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)


__all__ = ["MemoStore", "InMemoryStore", "FileStore", "STORE_VERSION"]
