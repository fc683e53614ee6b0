"""
AST-узлы компонентной разметки.

Дерево состоит из трёх основных вариантов: непрозрачный текст, вызов компонента
и слот. Отдельный вариант DynamicComponentNode описывает вызов, цель которого
вычисляется во время рендера: такие узлы не трогает ни один проход.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from ..support.attributes import Attribute, AttributeParser
from .tokens import SlotStyle

DEFAULT_SLOT = "default"


@dataclass(frozen=True)
class TextNode:
    """
    Непрозрачный текст шаблона.

    Всё, что не является тегом компонента или слота (HTML, конструкции Jinja),
    выводится как есть.
    """
    content: str

    def render(self) -> str:
        return self.content


@dataclass
class ComponentNode:
    """
    Вызов компонента <x-name attrs>...</x-name> или <x-name attrs />.

    Строка атрибутов хранится в исходном виде и разбирается лениво.
    """
    name: str
    prefix: str = "x-"
    namespace: str = ""
    attribute_string: str = ""
    children: List["Node"] = field(default_factory=list)
    self_closing: bool = False

    # Снимок атрибутов предков (ближайший предок побеждает) для @aware
    parents_attributes: Dict[str, Attribute] = field(default_factory=dict)
    has_aware_descendants: bool = False

    _attributes: Optional[Dict[str, Attribute]] = field(default=None, repr=False, compare=False)

    @property
    def full_name(self) -> str:
        """Имя для разрешения в путь: пространство имён + имя."""
        return self.namespace + self.name

    @property
    def attributes(self) -> Dict[str, Attribute]:
        if self._attributes is None:
            self._attributes = AttributeParser().parse(self.attribute_string)
        return self._attributes

    def set_attributes(self, attributes: Dict[str, Attribute]) -> None:
        """Заменяет атрибуты и синхронизирует исходную строку."""
        self._attributes = dict(attributes)
        self.attribute_string = AttributeParser().render(self._attributes)

    def named_slots(self) -> List["SlotNode"]:
        return [child for child in self.children if isinstance(child, SlotNode)]

    def loose_children(self) -> List["Node"]:
        return [child for child in self.children if not isinstance(child, SlotNode)]

    def render_open(self) -> str:
        attrs = f" {self.attribute_string}" if self.attribute_string else ""
        return f"<{self.prefix}{self.name}{attrs}>"

    def render(self) -> str:
        if self.self_closing:
            attrs = f" {self.attribute_string}" if self.attribute_string else ""
            return f"<{self.prefix}{self.name}{attrs} />"
        body = "".join(child.render() for child in self.children)
        return f"{self.render_open()}{body}</{self.prefix}{self.name}>"


@dataclass
class DynamicComponentNode:
    """
    Вызов с вычисляемой во время рендера целью (<x-dynamic-component :component="...">).

    Проходы оптимизации его не трогают, узел выводится как в исходнике.
    """
    name: str
    prefix: str = "x-"
    namespace: str = ""
    attribute_string: str = ""
    children: List["Node"] = field(default_factory=list)
    self_closing: bool = False

    def render_open(self) -> str:
        attrs = f" {self.attribute_string}" if self.attribute_string else ""
        return f"<{self.prefix}{self.name}{attrs}>"

    def render(self) -> str:
        if self.self_closing:
            attrs = f" {self.attribute_string}" if self.attribute_string else ""
            return f"<{self.prefix}{self.name}{attrs} />"
        body = "".join(child.render() for child in self.children)
        return f"{self.render_open()}{body}</{self.prefix}{self.name}>"


@dataclass
class SlotNode:
    """
    Слот внутри вызова компонента.

    Стандартная форма: <x-slot name="footer" class="...">.
    Короткая форма: <x-slot:footer class="..."> с закрытием </x-slot> или </x-slot:footer>.
    """
    name: Optional[str] = None
    attribute_string: str = ""
    slot_style: SlotStyle = SlotStyle.STANDARD
    prefix: str = "x-slot"
    children: List["Node"] = field(default_factory=list)
    close_has_name: bool = False

    @property
    def resolved_name(self) -> str:
        return self.name or DEFAULT_SLOT

    @property
    def is_dynamic_name(self) -> bool:
        return bool(self.name) and self.name.startswith("$")

    @property
    def attributes(self) -> Dict[str, Attribute]:
        return AttributeParser().parse(self.attribute_string)

    def content(self) -> str:
        return "".join(child.render() for child in self.children)

    def render_open(self) -> str:
        attrs = f" {self.attribute_string}" if self.attribute_string else ""
        if self.slot_style is SlotStyle.SHORT:
            return f"<{self.prefix}:{self.name}{attrs}>"
        return f"<{self.prefix}{attrs}>"

    def render(self) -> str:
        if self.slot_style is SlotStyle.SHORT and self.close_has_name:
            closer = f"</{self.prefix}:{self.name}>"
        else:
            closer = f"</{self.prefix}>"
        return f"{self.render_open()}{self.content()}{closer}"


Node = Union[TextNode, ComponentNode, SlotNode, DynamicComponentNode]


def render_nodes(nodes: List[Node]) -> str:
    """Сериализует список узлов обратно в текст."""
    return "".join(node.render() for node in nodes)


__all__ = [
    "DEFAULT_SLOT",
    "TextNode",
    "ComponentNode",
    "DynamicComponentNode",
    "SlotNode",
    "Node",
    "render_nodes",
]
