"""
Граница с хост-шаблонизатором (Jinja2).

HostEnvironment: узкий интерфейс возможностей хоста, которыми пользуются
компилятор и среда выполнения: рендер строки шаблона, разбор ссылок на имена,
общие данные, хуки подготовки данных (composers) и стек данных предков хоста.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

import pathspec
from jinja2 import BaseLoader, Environment, Template, meta

logger = logging.getLogger(__name__)

Composer = Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]


class HostEnvironment:
    """
    Окружение Jinja2 с расширениями, которые ожидает скомпилированный код.

    Включены ``jinja2.ext.do`` (вызовы среды выполнения без вывода) и
    ``trim_blocks`` (служебные инструкции не оставляют переводов строк).
    """

    def __init__(self, loader: Optional[BaseLoader] = None, *, autoescape: bool = True, **options: Any):
        extensions = list(options.pop("extensions", []))
        if "jinja2.ext.do" not in extensions:
            extensions.append("jinja2.ext.do")
        options.setdefault("trim_blocks", True)

        self.jinja = Environment(loader=loader, autoescape=autoescape, extensions=extensions, **options)
        self._shared: Dict[str, Any] = {}
        self._composers: List[Tuple[pathspec.PathSpec, Composer]] = []
        self._component_data: List[Dict[str, Any]] = []
        self._templates: Dict[str, Template] = {}

    # ---------------------------- ОБЩИЕ ДАННЫЕ ---------------------------- #

    def share(self, name: str, value: Any) -> None:
        """Делает значение доступным всем компонентам, которые на него ссылаются."""
        self._shared[name] = value

    def shared(self, name: str, default: Any = None) -> Any:
        return self._shared.get(name, default)

    def shared_for(self, names: Iterable[str]) -> Dict[str, Any]:
        """Общие значения только для перечисленных имён."""
        return {name: self._shared[name] for name in names if name in self._shared}

    # ---------------------------- COMPOSERS ---------------------------- #

    def composer(self, pattern: str, callback: Composer) -> None:
        """
        Регистрирует хук подготовки данных для компонентов.

        Args:
            pattern: gitwildmatch-шаблон пути исходника ("components/cards/*.jinja")
            callback: Получает копию данных вызова, возвращает дополнения или None
        """
        spec = pathspec.PathSpec.from_lines("gitwildmatch", [pattern])
        self._composers.append((spec, callback))

    def compose(self, path: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Применяет подходящие хуки к данным вызова; явные данные вызова важнее."""
        if not self._composers:
            return data
        result = dict(data)
        for spec, callback in self._composers:
            if spec.match_file(path.lstrip("/")):
                extra = callback(dict(result))
                if extra:
                    result = {**extra, **result}
        return result

    # ---------------------------- ДАННЫЕ ПРЕДКОВ ХОСТА ---------------------------- #

    def push_consumable_component_data(self, data: Dict[str, Any]) -> None:
        self._component_data.append(dict(data))

    def pop_consumable_component_data(self) -> None:
        if self._component_data:
            self._component_data.pop()

    def get_consumable_component_data(self, name: str, default: Any = None) -> Any:
        for frame in reversed(self._component_data):
            if name in frame:
                return frame[name]
        return default

    # ---------------------------- ШАБЛОНЫ ---------------------------- #

    def referenced_names(self, source: str) -> Set[str]:
        """Имена, на которые шаблон ссылается, не объявляя их сам."""
        return meta.find_undeclared_variables(self.jinja.parse(source))

    def template(self, key: str, source: str) -> Template:
        """Компилирует шаблон (с кэшем по ключу)."""
        template = self._templates.get(key)
        if template is None:
            template = self.jinja.from_string(source)
            self._templates[key] = template
        return template

    def forget(self, key: str) -> None:
        self._templates.pop(key, None)

    def render_string(self, source: str, context: Dict[str, Any]) -> str:
        """Рендерит строку шаблона без кэширования."""
        return self.jinja.from_string(source).render(context)


__all__ = ["HostEnvironment", "Composer"]
