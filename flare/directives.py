"""
Директивы исходника компонента.

DirectiveMatcher находит вызовы вида ``@name(...)`` со сбалансированными скобками.
ComponentDirectives читает параметры ``@blaze(...)`` из файлов компонентов
(с кэшем по mtime).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .support.literals import match_balanced, parse_parameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectiveMatch:
    """Найденный вызов директивы."""
    start: int
    end: int
    expression: Optional[str]

    @property
    def text(self) -> str:
        return "" if self.expression is None else self.expression


class DirectiveMatcher:
    """Поиск директивы @name с необязательным аргументом в скобках."""

    def __init__(self, name: str):
        self.name = name
        self._pattern = re.compile(r"(?<![\w@])@" + re.escape(name) + r"(?![\w-])")

    def match(self, source: str) -> List[DirectiveMatch]:
        """
        Находит все вызовы директивы.

        Args:
            source: Исходный текст

        Returns:
            Список совпадений в порядке следования
        """
        matches: List[DirectiveMatch] = []
        pos = 0
        while True:
            m = self._pattern.search(source, pos)
            if not m:
                break
            end = m.end()
            expression: Optional[str] = None

            probe = end
            while probe < len(source) and source[probe] in " \t":
                probe += 1
            if probe < len(source) and source[probe] == "(":
                close = match_balanced(source, probe)
                if close is not None:
                    expression = source[probe + 1:close].strip()
                    end = close + 1

            matches.append(DirectiveMatch(m.start(), end, expression))
            pos = end
        return matches

    def has(self, source: str) -> bool:
        return self._pattern.search(source) is not None

    def extract_expression(self, source: str) -> Optional[str]:
        """Аргумент первого вызова директивы."""
        for m in self.match(source):
            return m.expression
        return None

    def strip(self, source: str) -> str:
        """Удаляет все вызовы директивы вместе с переводом строки после них."""
        result: List[str] = []
        last = 0
        for m in self.match(source):
            result.append(source[last:m.start])
            last = m.end
            if source.startswith("\r\n", last):
                last += 2
            elif source.startswith("\n", last):
                last += 1
        result.append(source[last:])
        return "".join(result)


# --------------------------------------------------------------------------- #
# @blaze
# --------------------------------------------------------------------------- #

_BLAZE_HEAD_RE = re.compile(r"\A\s*(?:\{#.*?#\}\s*)*(?=@blaze\b)", re.S)


@dataclass(frozen=True)
class BlazeDirective:
    """
    Параметры @blaze(...) компонента.

    Директива учитывается только в начале исходника (допускаются пробелы
    и комментарии Jinja перед ней).
    """
    present: bool = False
    params: Dict[str, Any] = field(default_factory=dict)

    def flag(self, key: str) -> Optional[bool]:
        """Явное значение булева параметра или None, если не задан."""
        if key not in self.params:
            return None
        return bool(self.params[key])

    @property
    def safe(self) -> List[str]:
        return list(self.params.get("safe") or [])

    @property
    def unsafe(self) -> List[str]:
        return list(self.params.get("unsafe") or [])

    @property
    def aware(self) -> bool:
        return bool(self.params.get("aware", False))


BLAZE = DirectiveMatcher("blaze")


def parse_blaze_directive(source: str) -> BlazeDirective:
    """
    Читает @blaze в начале исходника.

    Raises:
        DeclarationParseError: Некорректные параметры директивы
    """
    head = _BLAZE_HEAD_RE.match(source)
    if not head:
        return BlazeDirective()

    matches = BLAZE.match(source[head.end():])
    if not matches or matches[0].start != 0:
        return BlazeDirective()

    expression = matches[0].expression
    params = parse_parameters(expression) if expression else {}
    return BlazeDirective(present=True, params=params)


def strip_blaze_directive(source: str) -> str:
    """Удаляет @blaze из начала исходника."""
    head = _BLAZE_HEAD_RE.match(source)
    if not head:
        return source
    return source[:head.end()] + BLAZE.strip(source[head.end():])


class ComponentDirectives:
    """
    Читатель директив компонентов по пути.

    Кэширует исходник и разобранный @blaze по mtime файла.
    """

    def __init__(self) -> None:
        self._cache: Dict[str, Tuple[float, str, BlazeDirective]] = {}

    def source(self, path: str) -> str:
        return self._load(path)[1]

    def read(self, path: str) -> BlazeDirective:
        return self._load(path)[2]

    def clear(self) -> None:
        self._cache.clear()

    def _load(self, path: str) -> Tuple[float, str, BlazeDirective]:
        file = Path(path)
        mtime = file.stat().st_mtime
        cached = self._cache.get(path)
        if cached and cached[0] == mtime:
            return cached

        source = file.read_text(encoding="utf-8")
        entry = (mtime, source, parse_blaze_directive(source))
        self._cache[path] = entry
        logger.debug(f"Read directives of {path}: {entry[2].params}")
        return entry


__all__ = [
    "DirectiveMatch",
    "DirectiveMatcher",
    "BlazeDirective",
    "parse_blaze_directive",
    "strip_blaze_directive",
    "ComponentDirectives",
]
