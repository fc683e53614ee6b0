"""
Реестр скомпилированных функций компонентов.

Общий для процесса: функция загружается из модуля-артефакта один раз и затем
берётся из реестра. Повторная загрузка под тем же именем ничего не переопределяет.
"""

from __future__ import annotations

import importlib.util
import logging
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

RenderFunction = Callable[..., str]


class FunctionRegistry:
    """Имя функции → функция рендера компонента."""

    def __init__(self) -> None:
        self._functions: Dict[str, RenderFunction] = {}

    def has(self, name: str) -> bool:
        return name in self._functions

    def get(self, name: str) -> Optional[RenderFunction]:
        return self._functions.get(name)

    def define(self, name: str, function: RenderFunction) -> RenderFunction:
        """Регистрирует функцию, если имя ещё не занято; возвращает действующую."""
        existing = self._functions.get(name)
        if existing is not None:
            return existing
        self._functions[name] = function
        return function

    def load(self, artifact_path: str, name: str) -> RenderFunction:
        """
        Загружает функцию из модуля-артефакта (с защитой от повторного определения).

        Args:
            artifact_path: Путь к сгенерированному модулю
            name: Имя функции в модуле

        Returns:
            Зарегистрированная функция
        """
        existing = self._functions.get(name)
        if existing is not None:
            return existing

        spec = importlib.util.spec_from_file_location(f"flare_compiled.{name}", artifact_path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load compiled component {artifact_path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        logger.debug(f"Registered {name} from {artifact_path}")
        return self.define(name, getattr(module, name))

    def forget(self, name: str) -> None:
        self._functions.pop(name, None)

    def clear(self) -> None:
        """Сброс между изолированными прогонами (тесты)."""
        self._functions.clear()

    def __len__(self) -> int:
        return len(self._functions)


__all__ = ["FunctionRegistry", "RenderFunction"]
