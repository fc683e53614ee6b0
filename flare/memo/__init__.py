"""
Мемоизация вывода компонентов.
"""

from __future__ import annotations

from .cache import KEY_PREFIX, MemoCache
from .memoizer import Memoizer
from .store import FileStore, InMemoryStore, MemoStore

__all__ = ["MemoCache", "KEY_PREFIX", "Memoizer", "MemoStore", "InMemoryStore", "FileStore"]
