"""
Мешок атрибутов и объекты слотов, доступные внутри шаблона компонента.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional

from markupsafe import Markup, escape

from ..support.attributes import kebab_name
from ..support.literals import MISSING

# Атрибуты, значения которых при merge дописываются к умолчаниям
_APPENDABLE = {"class": " ", "style": " "}

_COMMENT_RE = re.compile(r"<!--.*?-->|\{#.*?#\}", re.S)


def to_css_classes(value: Any) -> str:
    """
    Собирает строку классов из условного описания.

    ['p-4', {'font-bold': active}] → "p-4 font-bold" (если active)
    """
    if value is None or value is False:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Mapping):
        return " ".join(str(k) for k, v in value.items() if v)
    classes = []
    for item in value:
        part = to_css_classes(item)
        if part:
            classes.append(part)
    return " ".join(classes)


def to_css_styles(value: Any) -> str:
    """Собирает строку стилей; каждое объявление завершается ';'."""
    if value is None or value is False:
        return ""
    if isinstance(value, str):
        items = [value]
    elif isinstance(value, Mapping):
        items = [str(k) for k, v in value.items() if v]
    else:
        items = [to_css_styles(item) for item in value]
    styles = []
    for item in items:
        item = item.strip()
        if item:
            styles.append(item if item.endswith(";") else item + ";")
    return " ".join(styles)


class AttributeBag(Mapping):
    """
    Атрибуты вызова, не объявленные как props.

    Рендерится в HTML-атрибуты: False/None пропускаются, True выводится
    как имя атрибута.
    """

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None):
        self._attributes: Dict[str, Any] = dict(attributes or {})

    @classmethod
    def sanitized(cls, data: Mapping[str, Any], bound: Iterable[str] = ()) -> "AttributeBag":
        """
        Создаёт мешок, экранируя строковые значения, заданные выражениями.

        Литералы из исходника шаблона считаются доверенными.
        """
        bound_keys = set(bound)
        attributes: Dict[str, Any] = {}
        for key, value in data.items():
            if key in bound_keys and isinstance(value, str):
                value = escape(value)
            attributes[key] = value
        return cls(attributes)

    # ---------------------------- Mapping ---------------------------- #

    def __getitem__(self, key: str) -> Any:
        return self._attributes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def all(self) -> Dict[str, Any]:
        return dict(self._attributes)

    def get(self, key: str, default: Any = None) -> Any:
        return self._attributes.get(key, default)

    def has(self, *keys: str) -> bool:
        return all(key in self._attributes for key in keys)

    def has_any(self, *keys: str) -> bool:
        return any(key in self._attributes for key in keys)

    # ---------------------------- ВЫБОРКИ ---------------------------- #

    def only(self, *keys: str) -> "AttributeBag":
        wanted = _flatten(keys)
        return AttributeBag({k: v for k, v in self._attributes.items() if k in wanted})

    def except_(self, *keys: str) -> "AttributeBag":
        unwanted = _flatten(keys)
        return AttributeBag({k: v for k, v in self._attributes.items() if k not in unwanted})

    def filter(self, callback: Callable[[Any, str], bool]) -> "AttributeBag":
        return AttributeBag({k: v for k, v in self._attributes.items() if callback(v, k)})

    def where_starts_with(self, prefix: str) -> "AttributeBag":
        return self.filter(lambda _value, key: key.startswith(prefix))

    def where_doesnt_start_with(self, prefix: str) -> "AttributeBag":
        return self.filter(lambda _value, key: not key.startswith(prefix))

    # ---------------------------- СЛИЯНИЕ ---------------------------- #

    def merge(self, defaults: Optional[Mapping[str, Any]] = None, **extra: Any) -> "AttributeBag":
        """
        Сливает умолчания с атрибутами вызова.

        class и style дописываются к умолчаниям, прочие атрибуты вызова
        перекрывают умолчания.
        """
        merged: Dict[str, Any] = dict(defaults or {})
        merged.update(extra)

        for key, value in self._attributes.items():
            if key in _APPENDABLE and key in merged and value not in (None, False, True):
                base = str(merged[key]).strip()
                own = str(value).strip()
                merged[key] = f"{base}{_APPENDABLE[key]}{own}".strip() if base else own
            else:
                merged[key] = value

        return AttributeBag(merged)

    def class_(self, value: Any) -> "AttributeBag":
        return self.merge({"class": to_css_classes(value)})

    def style(self, value: Any) -> "AttributeBag":
        return self.merge({"style": to_css_styles(value)})

    # ---------------------------- ВЫВОД ---------------------------- #

    def __html__(self) -> str:
        parts = []
        for key, value in self._attributes.items():
            if value is None or value is False:
                continue
            if value is True:
                value = key
            parts.append(f'{key}="{_attribute_value(value)}"')
        return " ".join(parts)

    def __str__(self) -> str:
        return self.__html__()

    def __repr__(self) -> str:
        return f"AttributeBag({self._attributes!r})"


def _attribute_value(value: Any) -> str:
    if hasattr(value, "__html__"):
        return str(value.__html__()).strip().replace('"', "&quot;")
    return str(value).strip().replace('"', "&quot;")


def _flatten(keys: Iterable[Any]) -> set:
    result = set()
    for key in keys:
        if isinstance(key, (list, tuple, set)):
            result.update(key)
        else:
            result.add(key)
    return result


class ComponentSlot:
    """Содержимое слота вместе с его атрибутами."""

    def __init__(self, contents: Any = "", attributes: Optional[Mapping[str, Any]] = None):
        self.contents = Markup(contents) if not isinstance(contents, Markup) else contents
        self.attributes = AttributeBag(attributes)

    def is_empty(self) -> bool:
        return self.contents == ""

    def is_not_empty(self) -> bool:
        return not self.is_empty()

    def has_actual_content(self) -> bool:
        """Есть ли что-то кроме пробелов и комментариев."""
        return _COMMENT_RE.sub("", str(self.contents)).strip() != ""

    def __bool__(self) -> bool:
        return self.is_not_empty()

    def __html__(self) -> str:
        return str(self.contents)

    def __str__(self) -> str:
        return str(self.contents)

    def __repr__(self) -> str:
        return f"ComponentSlot({str(self.contents)!r})"


def take_prop(data: Dict[str, Any], name: str, defaults: Mapping[str, Any]) -> Any:
    """
    Извлекает значение пропа из данных вызова.

    Проверяются имя и его kebab-вариант; оба ключа удаляются из данных.
    Умолчание применяется, только если ключа нет совсем: явно переданные
    None/False/"" всегда важнее умолчания.

    Returns:
        Значение, умолчание или MISSING
    """
    value: Any = MISSING
    for key in (name, kebab_name(name)):
        if key in data:
            found = data.pop(key)
            if value is MISSING:
                value = found
    if value is MISSING:
        return defaults.get(name, MISSING)
    return value


__all__ = [
    "AttributeBag",
    "ComponentSlot",
    "take_prop",
    "to_css_classes",
    "to_css_styles",
]
