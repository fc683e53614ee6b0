"""
Свёртка вызовов компонентов на этапе компиляции.

Подходящий вызов рендерится один раз в изоляции: динамические атрибуты и
содержимое слотов заменяются заполнителями, а в полученный статический вывод
заполнители возвращаются как выражения Jinja. Так вызов перестаёт стоить
чего-либо во время рендера.

Любая неудача свёртки (кроме нарушения правил безопасности) молча
возвращает исходный узел: он будет скомпилирован обычным образом.
"""

from __future__ import annotations

import itertools
import logging
import os
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..config import OptimizeConfig
from ..directives import BlazeDirective, ComponentDirectives
from ..errors import FoldSafetyError
from ..compiler.props import AwareCompiler
from ..parser.nodes import DEFAULT_SLOT, ComponentNode, Node, SlotNode, TextNode
from ..resolver import ComponentResolver
from ..support.attributes import ATTRIBUTES_PROP, Attribute, AttributeParser, compile_echoes
from .unblaze import Unblaze, strip_blocks

logger = logging.getLogger(__name__)

WILDCARD = "*"

ATTR_PLACEHOLDER = "FLARE_ATTR_PLACEHOLDER_{}"
SLOT_PLACEHOLDER = "FLARE_SLOT_PLACEHOLDER_{}"

_PLACEHOLDER_RE = re.compile(r"FLARE_(?:ATTR|SLOT)_PLACEHOLDER_\d+")
_LEFTOVER_RE = re.compile(r"flare_(?:attr|slot)_placeholder_\d+", re.I)

# Имена состояния запроса; ищутся только внутри конструкций Jinja
_DENY_LIST: List[Tuple[re.Pattern, Callable[[str], FoldSafetyError]]] = [
    (re.compile(r"\brequest\b"), FoldSafetyError.for_request),
    (re.compile(r"\bsession\b"), FoldSafetyError.for_session),
    (re.compile(r"\bcurrent_user\b"), FoldSafetyError.for_auth),
    (re.compile(r"\bcsrf_token\("), FoldSafetyError.for_csrf),
    (re.compile(r"\bold\("), FoldSafetyError.for_old),
    (re.compile(r"\berrors\b"), FoldSafetyError.for_errors),
]
_ONCE_RE = re.compile(r"(?<![\w@])@once\b")
_AWARE_RE = re.compile(r"(?<![\w@])@aware\b")
_JINJA_CODE_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}", re.S)
_JINJA_STRING_RE = re.compile(r"'(?:\\.|[^'\\])*'|\"(?:\\.|[^\"\\])*\"")

IsolatedRenderer = Callable[[str], str]
InnerCompiler = Callable[[str], str]


class LeftoverPlaceholdersError(Exception):
    """В выводе остались заполнители, которые не удалось восстановить."""


@dataclass(frozen=True)
class FoldedComponent:
    """Свёрнутый компонент: страницы с ним устаревают вместе с исходником."""
    name: str
    path: str
    mtime: float


class Folder:
    """Проход свёртки."""

    def __init__(
        self,
        resolver: ComponentResolver,
        directives: ComponentDirectives,
        config: OptimizeConfig,
        unblaze: Unblaze,
        render: IsolatedRenderer,
        compile_inner: InnerCompiler,
    ):
        self.resolver = resolver
        self.directives = directives
        self.config = config
        self.unblaze = unblaze
        self._render = render
        self._compile_inner = compile_inner
        self._attributes = AttributeParser()
        self._aware = AwareCompiler()
        self.folded: List[FoldedComponent] = []

    def fold(self, node: Node) -> Node:
        """
        Сворачивает вызов компонента, если он подходит.

        Returns:
            TextNode со статическим выводом или исходный узел

        Raises:
            FoldSafetyError: Компонент помечен к свёртке, но читает состояние запроса
        """
        if not isinstance(node, ComponentNode):
            return node

        path = self.resolver.resolve(node.full_name)
        if path is None:
            return node

        directive = self.directives.read(path)
        if not self._eligible(path, directive):
            return node

        source = self.directives.source(path)
        self._check_safety(path, source, directive)

        if ATTRIBUTES_PROP in node.attributes:
            logger.debug(f"Not folding <{node.prefix}{node.name}>: forwards an attribute bag")
            return node

        try:
            folded = self._fold(node, path, source, directive)
        except FoldSafetyError:
            raise
        except Exception as e:
            logger.debug(f"Fold of <{node.prefix}{node.name}> fell back to compilation: {e}")
            return node

        if folded is None:
            return node

        self.folded.append(FoldedComponent(node.full_name, path, os.stat(path).st_mtime))
        logger.debug(f"Folded <{node.prefix}{node.name}> ({path})")
        return TextNode(folded)

    # ---------------------------- ПРАВИЛА ---------------------------- #

    def _eligible(self, path: str, directive: BlazeDirective) -> bool:
        flag = directive.flag("fold")
        return flag if flag is not None else self.config.should_fold(path)

    @staticmethod
    def _check_safety(path: str, source: str, directive: BlazeDirective) -> None:
        checked = strip_blocks(source)
        code = "\n".join(_JINJA_STRING_RE.sub("''", m.group(0)) for m in _JINJA_CODE_RE.finditer(checked))
        for pattern, factory in _DENY_LIST:
            if pattern.search(code):
                raise factory(path)
        if _ONCE_RE.search(checked):
            raise FoldSafetyError.for_once(path)
        if _AWARE_RE.search(checked) and not directive.aware:
            raise FoldSafetyError.for_aware(path)

    @staticmethod
    def _is_safe(names: Tuple[str, ...], directive: BlazeDirective) -> bool:
        unsafe = directive.unsafe
        safe = directive.safe
        if any(name in unsafe for name in names):
            return False
        return WILDCARD in safe or any(name in safe for name in names)

    def _slot_allowed(self, slot: SlotNode, directive: BlazeDirective) -> bool:
        name = slot.resolved_name
        if name in directive.unsafe and slot.content().strip():
            return False
        dynamic = any(attr.dynamic and not attr.is_static_value() for attr in slot.attributes.values())
        if dynamic and not (WILDCARD in directive.safe or name in directive.safe):
            return False
        return True

    # ---------------------------- СВЁРТКА ---------------------------- #

    def _fold(self, node: ComponentNode, path: str, source: str, directive: BlazeDirective) -> Optional[str]:
        counter = itertools.count()
        restore: Dict[str, str] = {}
        expressions: Dict[str, str] = {}

        attributes = dict(node.attributes)
        if directive.aware:
            for name in self._aware.read(source, path):
                if name not in attributes and name in node.parents_attributes:
                    attributes[name] = node.parents_attributes[name]

        usage_attributes = self._replace_attributes(attributes, directive, counter, restore, expressions)
        if usage_attributes is None:
            return None

        usage = ComponentNode(
            name=node.name,
            prefix=node.prefix,
            namespace=node.namespace,
            self_closing=node.self_closing,
        )
        usage.set_attributes(usage_attributes)

        for child in node.children:
            if isinstance(child, SlotNode):
                slot = self._replace_slot(child, directive, counter, restore, expressions)
                if slot is None:
                    return None
                usage.children.append(slot)
            elif child.render().strip():
                placeholder = SLOT_PLACEHOLDER.format(next(counter))
                restore[placeholder] = child.render()
                usage.children.append(TextNode(placeholder))
            else:
                usage.children.append(child)

        rendered = self._render(usage.render())
        rendered = self.unblaze.splice(rendered, expressions, self._compile_inner)
        output = _PLACEHOLDER_RE.sub(lambda m: restore.get(m.group(0), m.group(0)), rendered)

        leftover = _LEFTOVER_RE.search(output)
        if leftover:
            raise LeftoverPlaceholdersError(f"Unresolved placeholder {leftover.group(0)}")

        if node.has_aware_descendants:
            data = self._attributes.to_runtime_dict(node.attributes)
            output = (
                f"{{% do __blaze.push_data({data}) %}}"
                f"{{% do __blaze.env.push_consumable_component_data({data}) %}}"
                f"{output}"
                f"{{% do __blaze.env.pop_consumable_component_data() %}}"
                f"{{% do __blaze.pop_data() %}}"
            )
        return output

    def _replace_attributes(
        self,
        attributes: Dict[str, Attribute],
        directive: BlazeDirective,
        counter: itertools.count,
        restore: Dict[str, str],
        expressions: Dict[str, str],
    ) -> Optional[Dict[str, Attribute]]:
        replaced: Dict[str, Attribute] = {}
        for key, attr in attributes.items():
            if attr.is_static_value():
                replaced[key] = attr
                continue
            if not self._is_safe((attr.name, attr.prop_name), directive):
                logger.debug(f"Not folding: attribute '{attr.name}' is not marked safe")
                return None

            placeholder = ATTR_PLACEHOLDER.format(next(counter))
            if attr.bound():
                restore[placeholder] = f"{{{{ {attr.value} }}}}"
                expressions[placeholder] = f"({attr.value})"
            else:
                restore[placeholder] = str(attr.value)
                expressions[placeholder] = compile_echoes(str(attr.value))
            replaced[key] = Attribute(name=attr.name, value=placeholder, prop_name=attr.prop_name)
        return replaced

    def _replace_slot(
        self,
        slot: SlotNode,
        directive: BlazeDirective,
        counter: itertools.count,
        restore: Dict[str, str],
        expressions: Dict[str, str],
    ) -> Optional[SlotNode]:
        if slot.is_dynamic_name:
            return None
        if not self._slot_allowed(slot, directive):
            if slot.resolved_name != DEFAULT_SLOT:
                logger.debug(f"Not folding: slot '{slot.resolved_name}' is not allowed")
                return None
            logger.debug("Default slot is not allow-listed, inlining its content as is")

        attributes: Dict[str, Attribute] = {}
        for key, attr in slot.attributes.items():
            if attr.is_static_value():
                attributes[key] = attr
                continue
            placeholder = ATTR_PLACEHOLDER.format(next(counter))
            restore[placeholder] = f"{{{{ {attr.value} }}}}" if attr.bound() else str(attr.value)
            expressions[placeholder] = f"({attr.value})" if attr.bound() else compile_echoes(str(attr.value))
            attributes[key] = Attribute(name=attr.name, value=placeholder, prop_name=attr.prop_name)

        placeholder = SLOT_PLACEHOLDER.format(next(counter))
        restore[placeholder] = slot.content()
        return SlotNode(
            name=slot.name,
            attribute_string=self._attributes.render(attributes),
            slot_style=slot.slot_style,
            prefix=slot.prefix,
            children=[TextNode(placeholder)],
            close_has_name=slot.close_has_name,
        )

    def clear(self) -> None:
        self.folded.clear()


__all__ = [
    "Folder",
    "FoldedComponent",
    "LeftoverPlaceholdersError",
    "ATTR_PLACEHOLDER",
    "SLOT_PLACEHOLDER",
    "WILDCARD",
]
