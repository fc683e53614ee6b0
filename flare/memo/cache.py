"""
Кэш мемоизации вывода компонентов.

Ключ строится во время рендера из имени компонента и вычисленных атрибутов
вызова. Если атрибуты не сериализуются в JSON (объекты, NaN/Infinity),
ключа нет и вызов всегда рендерится заново.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any, Callable, Mapping, Optional

from markupsafe import Markup

from .store import InMemoryStore, MemoStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "flare_memoized_"

HitHook = Callable[[str], None]


class MemoCache:
    """Фасад над хранилищем мемоизированного вывода."""

    def __init__(self, store: Optional[MemoStore] = None, on_hit: Optional[HitHook] = None):
        self.store: MemoStore = store if store is not None else InMemoryStore()
        self.on_hit = on_hit

    @staticmethod
    def key(name: str, params: Mapping[str, Any]) -> Optional[str]:
        """
        Ключ мемоизации вызова.

        Args:
            name: Имя компонента
            params: Вычисленные атрибуты вызова

        Returns:
            "flare_memoized_<name>:<sha1>" или None, если параметры не сериализуются
        """
        try:
            payload = json.dumps(dict(params), sort_keys=True, allow_nan=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            logger.debug(f"Memo bypass for '{name}': {e}")
            return None
        digest = hashlib.sha1(payload.encode("utf-8")).hexdigest()
        return f"{KEY_PREFIX}{name}:{digest}"

    def has(self, key: Optional[str]) -> bool:
        return key is not None and self.store.get(key) is not None

    def get(self, key: str) -> Optional[Markup]:
        value = self.store.get(key)
        return None if value is None else Markup(value)

    def put(self, key: str, value: Any) -> str:
        self.store.put(key, str(value))
        return ""

    def hit(self, key: str) -> Markup:
        """Значение из кэша с уведомлением хука on_hit."""
        if self.on_hit is not None:
            self.on_hit(key)
        return self.get(key) or Markup("")

    def forget(self, key: str) -> None:
        self.store.forget(key)

    def clear(self) -> None:
        self.store.clear()


__all__ = ["MemoCache", "KEY_PREFIX", "HitHook"]
