"""
Среда выполнения, к которой обращается скомпилированный код (``__blaze``).

Экземпляр создаётся на каждый проход рендера и владеет собственным стеком
областей видимости. Реестр функций и кэш мемоизации общие для процесса и
передаются снаружи.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Set

from markupsafe import Markup

from ..host import HostEnvironment
from ..memo.cache import MemoCache
from .attributes import ComponentSlot, to_css_classes, to_css_styles
from .registry import FunctionRegistry, RenderFunction
from .stack import ScopeStack

logger = logging.getLogger(__name__)

# (путь исходника, имя функции) → исходный код модуля-артефакта
ComponentCompiler = Callable[[str, str], str]
ScopeStore = Callable[[str, Any], None]


class ComponentRuntime:
    """Фасад среды выполнения для сгенерированного кода."""

    def __init__(
        self,
        env: HostEnvironment,
        compiled_path: str | Path,
        registry: FunctionRegistry,
        memo: MemoCache,
        compile_component: ComponentCompiler,
        *,
        function_prefix: str = "_",
        store_scope: Optional[ScopeStore] = None,
    ):
        self.env = env
        self.compiled_path = Path(compiled_path).as_posix()
        self.registry = registry
        self.memo = memo
        self.function_prefix = function_prefix
        self.stack = ScopeStack()
        self._compile_component = compile_component
        self._store_scope = store_scope
        self._checked: Set[str] = set()

    # ---------------------------- АРТЕФАКТЫ ---------------------------- #

    def ensure_compiled(self, source_path: str, artifact_path: str) -> str:
        """
        Компилирует исходник компонента в модуль, если артефакт отсутствует или устарел.

        Проверка выполняется один раз за проход рендера.
        """
        if artifact_path in self._checked:
            return ""
        self._checked.add(artifact_path)

        artifact = Path(artifact_path)
        source = Path(source_path)
        if artifact.exists() and artifact.stat().st_mtime >= source.stat().st_mtime:
            return ""

        name = self.function_prefix + artifact.stem
        code = self._compile_component(source.as_posix(), name)
        _atom_write(artifact, code)

        # Устаревшее определение больше не должно отдаваться из реестра
        self.registry.forget(name)
        self.env.forget(name)
        logger.debug(f"Compiled {source_path} -> {artifact_path}")
        return ""

    def require(self, artifact_path: str, name: str) -> RenderFunction:
        """Функция компонента из реестра (загружается при первом обращении)."""
        return self.registry.load(artifact_path, name)

    def render_body(self, name: str, source: str, variables: Dict[str, Any]) -> Markup:
        """Рендерит тело компонента и возвращает обрезанный результат."""
        output = self.env.template(name, source).render(variables)
        return Markup(output.strip())

    # ---------------------------- СТЕК ---------------------------- #

    def push_data(self, data: Optional[Dict[str, Any]] = None) -> None:
        self.stack.push(data)

    def push_slots(self, slots: Dict[str, Any]) -> None:
        self.stack.push_slots(slots)

    def pop_data(self) -> None:
        self.stack.pop()

    def current_component_data(self) -> Dict[str, Any]:
        return self.stack.current_component_data()

    def merged_component_slots(self) -> Dict[str, Any]:
        return self.stack.merged_component_slots()

    def get_consumable_data(self, name: str, default: Any = None) -> Any:
        value = self.stack.get_consumable_data(name, _NOT_FOUND)
        if value is _NOT_FOUND:
            return self.env.get_consumable_component_data(name, default)
        return value

    # ---------------------------- ПОМОЩНИКИ ШАБЛОНА ---------------------------- #

    def slot(self, contents: Any = "", attributes: Optional[Dict[str, Any]] = None) -> ComponentSlot:
        return ComponentSlot(Markup(str(contents).strip()), attributes)

    @staticmethod
    def classes(value: Any) -> str:
        return to_css_classes(value)

    @staticmethod
    def styles(value: Any) -> str:
        return to_css_styles(value)

    def store_scope(self, token: str, scope: Any) -> str:
        """Запоминает scope блока @unblaze во время изолированного рендера."""
        if self._store_scope is not None:
            self._store_scope(token, scope)
        return ""


_NOT_FOUND = object()


def _atom_write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.{os.getpid()}.tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


__all__ = ["ComponentRuntime", "ComponentCompiler"]
