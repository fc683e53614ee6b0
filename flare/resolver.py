"""
Разрешение имени компонента в путь к исходнику.

Точки в имени становятся разделителями каталогов, ``ns::name`` ищется в каталоге,
зарегистрированном для пространства имён ``ns``. Для каждого каталога пробуются:

    <base>/<path>.jinja
    <base>/<path>/index.jinja
    <base>/<path>/<last>.jinja
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import DEFAULT_EXTENSION, ComponentPath

logger = logging.getLogger(__name__)


class ComponentResolver:
    """Поиск исходников компонентов по зарегистрированным каталогам."""

    def __init__(self, paths: Optional[List[ComponentPath]] = None, extension: str = DEFAULT_EXTENSION):
        self.extension = extension
        self._paths: List[ComponentPath] = []
        self._cache: Dict[str, Optional[str]] = {}
        for entry in paths or []:
            self.add_path(entry.path, entry.namespace)

    def add_path(self, path: str | Path, namespace: Optional[str] = None) -> None:
        """Регистрирует каталог компонентов (опционально в пространстве имён)."""
        self._paths.append(ComponentPath(Path(path).resolve(), namespace))
        self._cache.clear()

    def resolve(self, name: str) -> Optional[str]:
        """
        Находит исходник компонента.

        Args:
            name: Имя компонента ("button", "forms.input", "ui::card")

        Returns:
            Абсолютный путь или None, если компонент не найден
        """
        if name in self._cache:
            return self._cache[name]

        namespace, component = self._split(name)
        found: Optional[str] = None
        for entry in self._paths:
            if entry.namespace != namespace:
                continue
            candidate = self._find_in(entry.path, component)
            if candidate is not None:
                found = candidate.as_posix()
                break

        if found is None:
            logger.debug(f"Component '{name}' not found in {len(self._paths)} paths")
        self._cache[name] = found
        return found

    __call__ = resolve

    def _find_in(self, base: Path, component: str) -> Optional[Path]:
        relative = component.replace(".", "/")
        last = relative.rsplit("/", 1)[-1]
        candidates = (
            base / f"{relative}{self.extension}",
            base / relative / f"index{self.extension}",
            base / relative / f"{last}{self.extension}",
        )
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None

    @staticmethod
    def _split(name: str) -> Tuple[Optional[str], str]:
        if "::" in name:
            namespace, component = name.split("::", 1)
            return namespace, component
        return None, name

    def clear(self) -> None:
        self._cache.clear()


__all__ = ["ComponentResolver"]
