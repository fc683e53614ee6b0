"""
Менеджер конвейера компонентов.

Flare владеет всеми разделяемыми объектами (реестр функций, кэш мемоизации,
окружение хоста, резолвер, конфигурация) и связывает проходы:

    текст → Parser → AST → Walker(pre: @aware, post: Folder → Memoizer → Compiler) → текст Jinja

Каждый вызов render*/compile создаёт собственный стек областей видимости,
поэтому экземпляр можно использовать для последовательных рендеров без сброса.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from markupsafe import Markup

from .compiler import AwareCompiler, Compiler, PropsCompiler, Wrapper
from .config import FlareConfig, OptimizeConfig, load_config
from .directives import ComponentDirectives, strip_blaze_directive
from .errors import ComponentNotFoundError
from .folder import FoldedComponent, Folder, Unblaze, compile_runtime
from .host import HostEnvironment
from .memo import FileStore, InMemoryStore, MemoCache, Memoizer
from .memo.store import MemoStore
from .parser import ComponentNode, Node, Parser, Tokenizer, Walker, render_nodes
from .resolver import ComponentResolver
from .runtime import ComponentRuntime, ComponentSlot, FunctionRegistry
from .runtime.runtime import ScopeStore
from .support.attributes import Attribute

logger = logging.getLogger(__name__)


class Flare:
    """Точка входа: компиляция и рендер шаблонов с компонентами."""

    def __init__(
        self,
        config: Optional[FlareConfig] = None,
        *,
        env: Optional[HostEnvironment] = None,
        memo_store: Optional[MemoStore] = None,
    ):
        self.config = config or FlareConfig()
        self.env = env or HostEnvironment()
        self.optimize: OptimizeConfig = self.config.optimize
        self.compiled_path = Path(self.config.compiled_path)

        self.resolver = ComponentResolver(self.config.component_paths, self.config.extension)
        self.directives = ComponentDirectives()
        self.registry = FunctionRegistry()
        if memo_store is None:
            memo_store = FileStore(Path(self.config.memo_path)) if self.config.memo_path else InMemoryStore()
        self.memo = MemoCache(memo_store)
        self.unblaze = Unblaze()

        self.tokenizer = Tokenizer()
        self.parser = Parser(self.tokenizer)
        self.walker = Walker()
        self.compiler = Compiler(self.resolver, self.directives, self.optimize)
        self.memoizer = Memoizer(self.resolver, self.directives, self.optimize, self.compiler.compile_node)
        self.folder = Folder(
            self.resolver,
            self.directives,
            self.optimize,
            self.unblaze,
            render=self.isolated_render,
            compile_inner=self.compile_for_unblaze,
        )
        self.wrapper = Wrapper(self.env)

        self._props = PropsCompiler()
        self._aware = AwareCompiler()
        self._folding = False

    @classmethod
    def from_config(cls, path: Path, **kwargs: Any) -> "Flare":
        """Создаёт менеджер по flare.yaml."""
        return cls(load_config(path), **kwargs)

    # ---------------------------- НАСТРОЙКА ---------------------------- #

    def add_path(self, path: str | Path, namespace: Optional[str] = None) -> None:
        self.resolver.add_path(path, namespace)

    @property
    def folded(self) -> List[FoldedComponent]:
        """Записи о свёрнутых компонентах (для инвалидации зависимых страниц)."""
        return list(self.folder.folded)

    def clear(self) -> None:
        """Сбрасывает всё накопленное состояние процесса."""
        self.registry.clear()
        self.memo.clear()
        self.directives.clear()
        self.resolver.clear()
        self.folder.clear()
        self.unblaze.clear()

    # ---------------------------- КОМПИЛЯЦИЯ ---------------------------- #

    def compile(self, template: str, path: Optional[str] = None) -> str:
        """
        Полный конвейер: свёртка, мемоизация и компиляция вызовов.

        Args:
            template: Текст шаблона
            path: Путь исходника (только для журнала)

        Returns:
            Текст шаблона Jinja
        """
        stack: List[ComponentNode] = []

        def _pre(node: Node) -> None:
            if not isinstance(node, ComponentNode):
                return None
            if stack:
                node.parents_attributes = self._parents_attributes(stack)
            if stack and self._consumes_aware(node):
                for parent in stack:
                    parent.has_aware_descendants = True
            if node.children:
                stack.append(node)
            return None

        def _post(node: Node) -> Node:
            if stack and stack[-1] is node:
                stack.pop()
            node = self.folder.fold(node)
            node = self.memoizer.memoize(node)
            return self.compiler.compile_node(node)

        nodes = self.walker.walk(self.parser.parse(template), pre=_pre, post=_post)
        if path:
            logger.debug(f"Compiled template {path}")
        return render_nodes(nodes)

    def compile_for_folding(self, template: str) -> str:
        """Только компиляция вызовов (изолированный рендер свёртки)."""
        nodes = self.walker.walk(self.parser.parse(template), post=self.compiler.compile_node)
        return render_nodes(nodes)

    def compile_for_unblaze(self, template: str) -> str:
        """Мемоизация и компиляция вызовов (содержимое блоков @unblaze)."""
        def _post(node: Node) -> Node:
            return self.compiler.compile_node(self.memoizer.memoize(node))

        nodes = self.walker.walk(self.parser.parse(template), post=_post)
        return render_nodes(nodes)

    def compile_component(self, path: str, function_name: str) -> str:
        """
        Компилирует исходник компонента в модуль-артефакт.

        Args:
            path: Путь исходника компонента
            function_name: Имя функции в модуле

        Returns:
            Исходный код модуля

        Raises:
            InvalidPropsDefinitionError: Некорректный @props
            InvalidAwareDefinitionError: Некорректный @aware
        """
        source = self.directives.source(path)
        body = strip_blaze_directive(source)
        body, props = self._props.extract(body, path)
        body, aware = self._aware.extract(body, path)

        if self._folding:
            body = self.compile_for_folding(self.unblaze.compile_for_fold(body))
        else:
            body = self.compile(compile_runtime(body), path)

        return self.wrapper.wrap(name=function_name, source_path=path, body=body, props=props, aware=aware)

    def compile_file(self, path: str | Path) -> str:
        """Компилирует файл шаблона страницы."""
        file = Path(path)
        return self.compile(file.read_text(encoding="utf-8"), file.as_posix())

    # ---------------------------- РЕНДЕР ---------------------------- #

    def create_runtime(
        self,
        compiled_path: Optional[str | Path] = None,
        *,
        function_prefix: str = "_",
        store_scope: Optional[ScopeStore] = None,
    ) -> ComponentRuntime:
        return ComponentRuntime(
            self.env,
            compiled_path or self.compiled_path,
            self.registry,
            self.memo,
            self.compile_component,
            function_prefix=function_prefix,
            store_scope=store_scope,
        )

    def render(self, source: str, context: Optional[Dict[str, Any]] = None) -> str:
        """Компилирует и рендерит шаблон страницы."""
        compiled = self.compile(source)
        context = dict(context or {})
        context["__blaze"] = self.create_runtime()
        return self.env.render_string(compiled, context)

    def render_component(
        self,
        name: str,
        data: Optional[Dict[str, Any]] = None,
        slots: Optional[Dict[str, Any]] = None,
    ) -> Markup:
        """
        Рендерит компонент по имени без шаблона страницы.

        Raises:
            ComponentNotFoundError: Имя не разрешается в исходник
        """
        path = self.resolver.resolve(name)
        if path is None:
            raise ComponentNotFoundError(name)

        runtime = self.create_runtime()
        function = self.compiler.function_name(path)
        artifact = (Path(runtime.compiled_path) / f"{function.lstrip('_')}.py").as_posix()
        runtime.ensure_compiled(path, artifact)
        render = runtime.require(artifact, function)

        data = dict(data or {})
        slots = {
            key: value if isinstance(value, ComponentSlot) else runtime.slot(value)
            for key, value in (slots or {}).items()
        }
        slots.setdefault("slot", runtime.slot(""))

        runtime.push_data(data)
        runtime.push_slots(slots)
        try:
            return render(runtime, data, slots, [])
        finally:
            runtime.pop_data()

    def isolated_render(self, template: str) -> str:
        """
        Рендерит вызов в изоляции для свёртки.

        Артефакты пишутся во временный каталог, имена функций получают
        префикс "__", блоки @unblaze оставляют маркеры со значением scope.
        """
        previous = self.compiler.function_prefix
        self.compiler.function_prefix = "__"
        self._folding = True
        try:
            with tempfile.TemporaryDirectory(prefix="flare-fold-") as tmp:
                compiled = self.compile_for_folding(template)
                runtime = self.create_runtime(tmp, function_prefix="__", store_scope=self.unblaze.store_scope)
                return self.env.render_string(compiled, {"__blaze": runtime})
        finally:
            self.compiler.function_prefix = previous
            self._folding = False

    # ---------------------------- @aware ---------------------------- #

    @staticmethod
    def _parents_attributes(stack: List[ComponentNode]) -> Dict[str, Attribute]:
        merged: Dict[str, Attribute] = {}
        for parent in stack:
            merged.update(parent.attributes)
        return merged

    def _consumes_aware(self, node: ComponentNode) -> bool:
        path = self.resolver.resolve(node.full_name)
        if path is None:
            return False
        return self._aware.matcher.has(self.directives.source(path))


__all__ = ["Flare"]
