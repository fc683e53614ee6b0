"""
Разбор строки атрибутов компонентного тега.

Формы атрибутов:

    name="value"        литерал
    name                булев литерал True
    :name="expr"        выражение Jinja
    :$name              краткая запись :name="name"
    ::name="value"      экранирование: литерал с именем ":name"
    title="a {{ b }}"   литерал с эхо-вставкой (считается динамическим)
    {{ attributes }}    проброс мешка атрибутов
    @class([...])       условные классы / стили
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from ..errors import UnsupportedDirectiveError
from .literals import match_balanced, to_literal

# Проп, пробрасывающий мешок атрибутов целиком
ATTRIBUTES_PROP = "attributes"

STATIC_LITERALS = frozenset({"true", "false", "none", "null", "True", "False", "None"})
# null не является литералом Jinja
_NULL_LITERALS = frozenset({"null"})

_CONDITIONAL_DIRECTIVES = {"class": "__blaze.classes", "style": "__blaze.styles"}
_UNSUPPORTED_DIRECTIVES = ("disabled", "checked", "selected", "readonly", "required")

_NAME_RE = re.compile(r"[^\s=/>\"']+")
_ECHO_RE = re.compile(r"\{\{-?(.*?)-?\}\}", re.S)
_SIMPLE_EXPR_RE = re.compile(r"[A-Za-z_][\w.]*\Z")


def prop_name(name: str) -> str:
    """Нормализованное имя пропа: дефисы заменяются подчёркиваниями."""
    return name.replace("-", "_")


def kebab_name(name: str) -> str:
    return name.replace("_", "-")


@dataclass
class Attribute:
    """Атрибут вызова компонента."""
    name: str
    value: Union[str, bool]
    prop_name: str
    dynamic: bool = False
    prefix: str = ""
    quotes: str = '"'

    def bound(self) -> bool:
        """Значение задано выражением (:name / :$name)."""
        return self.prefix in (":", ":$")

    def is_echo(self) -> bool:
        """Литерал с эхо-вставками {{ ... }}."""
        return self.dynamic and not self.bound()

    def is_static_value(self) -> bool:
        """Значение известно на этапе компиляции."""
        if not self.dynamic:
            return True
        return isinstance(self.value, str) and self.value.strip() in STATIC_LITERALS


class AttributeParser:
    """Разбор и сериализация атрибутов."""

    def parse(self, attribute_string: str) -> Dict[str, Attribute]:
        """
        Разбирает строку атрибутов.

        Args:
            attribute_string: Исходная строка атрибутов тега

        Returns:
            Упорядоченный словарь prop_name → Attribute (первое вхождение побеждает)

        Raises:
            UnsupportedDirectiveError: @disabled/@checked/... на теге компонента
        """
        attributes: Dict[str, Attribute] = {}
        text = attribute_string or ""
        pos = 0

        while pos < len(text):
            if text[pos].isspace():
                pos += 1
                continue

            attribute, pos = self._parse_one(text, pos)
            if attribute is not None and attribute.prop_name not in attributes:
                attributes[attribute.prop_name] = attribute

        return attributes

    def _parse_one(self, text: str, pos: int) -> Tuple[Optional[Attribute], int]:
        if text.startswith("{{", pos):
            end = text.find("}}", pos + 2)
            end = len(text) if end == -1 else end + 2
            expression = text[pos + 2:end - 2].strip().strip("-").strip()
            attribute = Attribute(
                name=ATTRIBUTES_PROP, value=expression, prop_name=ATTRIBUTES_PROP,
                dynamic=True, prefix=":",
            )
            return attribute, end

        if text[pos] == "@":
            return self._parse_directive(text, pos)

        m = _NAME_RE.match(text, pos)
        if not m:
            # Одиночный мусорный символ
            return None, pos + 1

        raw_name = m.group(0)
        pos = m.end()
        value, quotes, pos = self._read_value(text, pos)

        if raw_name.startswith("::"):
            name, prefix, dynamic = raw_name[1:], "::", False
        elif raw_name.startswith(":$"):
            name, prefix, dynamic = raw_name[2:], ":$", True
            value, quotes = name, ""
        elif raw_name.startswith(":"):
            name, prefix, dynamic = raw_name[1:], ":", True
            if value is True:
                value = "true"
        else:
            name, prefix, dynamic = raw_name, "", False

        if not dynamic and isinstance(value, str) and "{{" in value:
            dynamic = True

        return Attribute(
            name=name, value=value, prop_name=prop_name(name),
            dynamic=dynamic, prefix=prefix, quotes=quotes,
        ), pos

    @staticmethod
    def _read_value(text: str, pos: int) -> Tuple[Union[str, bool], str, int]:
        probe = pos
        while probe < len(text) and text[probe].isspace():
            probe += 1
        if probe >= len(text) or text[probe] != "=":
            return True, "", pos

        probe += 1
        while probe < len(text) and text[probe].isspace():
            probe += 1
        if probe >= len(text):
            return "", "", probe

        quote = text[probe]
        if quote not in ("'", '"'):
            m = re.compile(r"[^\s>]+").match(text, probe)
            value = m.group(0) if m else ""
            return value, "", probe + len(value)

        i = probe + 1
        while i < len(text):
            if text.startswith("{{", i):
                end = text.find("}}", i + 2)
                if end == -1:
                    break
                i = end + 2
                continue
            if text[i] == "\\":
                i += 2
                continue
            if text[i] == quote:
                return text[probe + 1:i], quote, i + 1
            i += 1
        return text[probe + 1:], quote, len(text)

    @staticmethod
    def _parse_directive(text: str, pos: int) -> Tuple[Optional[Attribute], int]:
        m = re.compile(r"@(\w+)").match(text, pos)
        if not m:
            return None, pos + 1
        directive = m.group(1)
        end = m.end()

        if directive in _UNSUPPORTED_DIRECTIVES:
            raise UnsupportedDirectiveError(directive)

        if directive in _CONDITIONAL_DIRECTIVES and end < len(text) and text[end] == "(":
            close = match_balanced(text, end)
            if close is not None:
                expression = text[end + 1:close].strip()
                return Attribute(
                    name=directive,
                    value=f"{_CONDITIONAL_DIRECTIVES[directive]}({expression})",
                    prop_name=directive, dynamic=True, prefix=":",
                ), close + 1

        # Неизвестная директива остаётся обычным булевым атрибутом
        return Attribute(name=m.group(0), value=True, prop_name=m.group(0), quotes=""), end

    # ---------------------------- СЕРИАЛИЗАЦИЯ ---------------------------- #

    def render(self, attributes: Dict[str, Attribute]) -> str:
        """Собирает строку атрибутов обратно в исходную форму."""
        parts: List[str] = []
        for attr in attributes.values():
            if attr.prefix == ":$":
                parts.append(f":${attr.name}")
            elif attr.prefix == ":":
                parts.append(f':{attr.name}="{attr.value}"')
            elif attr.value is True:
                parts.append(f"{attr.prefix[:1]}{attr.name}")
            else:
                quote = attr.quotes or '"'
                lead = ":" if attr.prefix == "::" else ""
                parts.append(f"{lead}{attr.name}={quote}{attr.value}{quote}")
        return " ".join(parts)

    def to_runtime_dict(self, attributes: Dict[str, Attribute], exclude: Tuple[str, ...] = ()) -> str:
        """
        Собирает литерал словаря Jinja для передачи атрибутов во время рендера.

        Эхо-вставки в литералах компилируются в экранированную конкатенацию,
        чтобы ключи мемоизации отражали вычисленные значения.
        """
        entries = [
            f"{to_literal(attr.name)}: {self.runtime_value(attr)}"
            for attr in attributes.values()
            if attr.name not in exclude
        ]
        return "{" + ", ".join(entries) + "}"

    def runtime_value(self, attr: Attribute) -> str:
        if attr.bound():
            expression = str(attr.value).strip()
            if expression in _NULL_LITERALS:
                return "none"
            return expression if _SIMPLE_EXPR_RE.match(expression) else f"({expression})"
        if attr.is_echo():
            return compile_echoes(str(attr.value))
        return to_literal(attr.value)

    @staticmethod
    def bound_keys(attributes: Dict[str, Attribute]) -> List[str]:
        """Имена атрибутов, заданных выражениями."""
        return [attr.name for attr in attributes.values() if attr.bound()]


def compile_echoes(value: str) -> str:
    """
    Компилирует литерал с эхо-вставками в выражение Jinja.

    'btn-{{ color }}' → 'btn-' ~ ((color)|e)
    """
    parts: List[str] = []
    last = 0
    for m in _ECHO_RE.finditer(value):
        if m.start() > last:
            parts.append(to_literal(value[last:m.start()]))
        parts.append(f"(({m.group(1).strip()})|e)")
        last = m.end()
    if last < len(value):
        parts.append(to_literal(value[last:]))
    if not parts:
        return to_literal("")
    return " ~ ".join(parts)


__all__ = [
    "ATTRIBUTES_PROP",
    "Attribute",
    "AttributeParser",
    "prop_name",
    "kebab_name",
    "compile_echoes",
]
