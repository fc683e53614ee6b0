"""
Разбор и сериализация литералов.

Аргументы директив (@props, @aware, @blaze) записываются литералами общего для
Python и Jinja синтаксиса: списки, словари, строки, числа и true/false/none.
Разбор идёт через стандартный ``ast`` без выполнения кода; всё, что не является
литералом, отклоняется со структурированной ошибкой.
"""

from __future__ import annotations

import ast
import math
from typing import Any, Dict, List, Optional

from markupsafe import Markup

from ..errors import DeclarationParseError


class _Missing:
    """Маркер отсутствующего значения (обязательный prop без умолчания)."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

_NAMED_CONSTANTS = {
    "true": True, "True": True,
    "false": False, "False": False,
    "none": None, "None": None, "null": None,
}

_OPENERS = {"(": ")", "[": "]", "{": "}"}


# --------------------------------------------------------------------------- #
# РАЗБОР
# --------------------------------------------------------------------------- #

def parse_literal(expression: str) -> Any:
    """
    Разбирает литерал в значение Python.

    Args:
        expression: Текст литерала

    Returns:
        Значение литерала

    Raises:
        DeclarationParseError: Синтаксическая ошибка или не-литерал
    """
    source = expression.strip()
    if not source:
        raise DeclarationParseError(expression, "empty expression")
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as e:
        raise DeclarationParseError(expression, f"invalid syntax ({e.msg})") from e
    return _evaluate(tree.body, expression)


def _evaluate(node: ast.AST, expression: str) -> Any:
    if isinstance(node, ast.Constant):
        return node.value
    if isinstance(node, ast.Name):
        if node.id in _NAMED_CONSTANTS:
            return _NAMED_CONSTANTS[node.id]
        raise DeclarationParseError(expression, f"'{node.id}' is not a literal value")
    if isinstance(node, (ast.List, ast.Tuple)):
        return [_evaluate(item, expression) for item in node.elts]
    if isinstance(node, ast.Dict):
        result: Dict[Any, Any] = {}
        for key, value in zip(node.keys, node.values):
            if key is None:
                raise DeclarationParseError(expression, "dict unpacking is not supported")
            result[_evaluate(key, expression)] = _evaluate(value, expression)
        return result
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, (ast.USub, ast.UAdd)):
        operand = _evaluate(node.operand, expression)
        if isinstance(operand, (int, float)) and not isinstance(operand, bool):
            return -operand if isinstance(node.op, ast.USub) else operand
    raise DeclarationParseError(expression, f"unsupported expression ({type(node).__name__})")


def parse_declarations(expression: str) -> Dict[str, Any]:
    """
    Разбирает список объявлений @props / @aware.

    Поддерживаются формы::

        ['label', 'size']                       # обязательные
        {'variant': 'primary'}                  # со значениями по умолчанию
        ['label', {'variant': 'primary'}]       # смешанная

    Returns:
        Упорядоченный словарь имя → значение по умолчанию (MISSING для обязательных)

    Raises:
        DeclarationParseError: При некорректной записи
    """
    value = parse_literal(expression)
    declarations: Dict[str, Any] = {}

    if isinstance(value, dict):
        items: List[Any] = [value]
    elif isinstance(value, list):
        items = value
    else:
        raise DeclarationParseError(expression, "expected a list or a dict")

    for item in items:
        if isinstance(item, str):
            declarations.setdefault(item, MISSING)
        elif isinstance(item, dict):
            for name, default in item.items():
                if not isinstance(name, str):
                    raise DeclarationParseError(expression, f"prop name must be a string, got {name!r}")
                declarations[name] = default
        else:
            raise DeclarationParseError(expression, f"unexpected item {item!r}")

    return declarations


def parse_parameters(expression: str) -> Dict[str, Any]:
    """
    Разбирает параметры вида ``fold: true, safe: ['type']``.

    Raises:
        DeclarationParseError: При некорректной записи
    """
    params: Dict[str, Any] = {}
    for part in split_top_level(expression, ","):
        if not part.strip():
            continue
        pieces = split_top_level(part, ":", maxsplit=1)
        if len(pieces) != 2 or not pieces[0].strip().isidentifier():
            raise DeclarationParseError(expression, f"expected 'name: value', got '{part.strip()}'")
        params[pieces[0].strip()] = parse_literal(pieces[1])
    return params


# --------------------------------------------------------------------------- #
# СКОБКИ И РАЗДЕЛИТЕЛИ
# --------------------------------------------------------------------------- #

def match_balanced(text: str, start: int) -> Optional[int]:
    """
    Находит закрывающую скобку для открывающей в позиции start.

    Строки в кавычках пропускаются, экранирование учитывается.

    Returns:
        Индекс закрывающей скобки или None
    """
    opener = text[start]
    closer = _OPENERS.get(opener)
    if closer is None:
        return None

    depth = 0
    quote: Optional[str] = None
    i = start
    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def split_top_level(text: str, separator: str, maxsplit: int = -1) -> List[str]:
    """Делит текст по разделителю вне скобок и кавычек."""
    parts: List[str] = []
    depth = 0
    quote: Optional[str] = None
    current: List[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if quote:
            current.append(char)
            if char == "\\" and i + 1 < len(text):
                current.append(text[i + 1])
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
            current.append(char)
        elif char in "([{":
            depth += 1
            current.append(char)
        elif char in ")]}":
            depth -= 1
            current.append(char)
        elif char == separator and depth == 0 and (maxsplit < 0 or len(parts) < maxsplit):
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    parts.append("".join(current))
    return parts


# --------------------------------------------------------------------------- #
# СЕРИАЛИЗАЦИЯ
# --------------------------------------------------------------------------- #

def to_literal(value: Any) -> str:
    """
    Сериализует значение в литерал Jinja.

    Raises:
        TypeError: Значение не представимо литералом
    """
    if value is None:
        return "none"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Markup):
        return repr(str(value))
    if isinstance(value, str):
        return repr(value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise TypeError(f"Non-finite number {value!r} has no literal form")
        return repr(value)
    if isinstance(value, dict):
        return "{" + ", ".join(f"{to_literal(k)}: {to_literal(v)}" for k, v in value.items()) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_literal(item) for item in value) + "]"
    raise TypeError(f"Value of type {type(value).__name__} has no literal form")


def to_python_literal(value: Any) -> str:
    """Сериализует значение в литерал Python (для генерируемых модулей)."""
    if isinstance(value, Markup):
        return repr(str(value))
    if isinstance(value, dict):
        return "{" + ", ".join(f"{to_python_literal(k)}: {to_python_literal(v)}" for k, v in value.items()) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_python_literal(item) for item in value) + "]"
    if value is None or isinstance(value, (bool, int, float, str)):
        return repr(value)
    raise TypeError(f"Value of type {type(value).__name__} has no literal form")


__all__ = [
    "MISSING",
    "parse_literal",
    "parse_declarations",
    "parse_parameters",
    "match_balanced",
    "split_top_level",
    "to_literal",
    "to_python_literal",
]
