"""
Блоки @unblaze ... @endunblaze.

Содержимое блока всегда выполняется во время рендера, даже внутри свёрнутого
компонента. Значения компонента передаются в блок через ``scope``:

    @unblaze(scope: {'label': label})
        {{ scope.label }} {{ request.path }}
    @endunblaze

При обычной компиляции блок просто связывает ``scope`` во время рендера.
При свёртке блок заменяется маркером, а значение ``scope`` запоминается
во время изолированного рендера и подставляется в результат литералом.
"""

from __future__ import annotations

import itertools
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..directives import DirectiveMatcher
from ..support.literals import split_top_level, to_literal

logger = logging.getLogger(__name__)

UNBLAZE = DirectiveMatcher("unblaze")
ENDUNBLAZE = DirectiveMatcher("endunblaze")

SCOPE = "scope"

_MARKER_RE = re.compile(r"\[FLARE_UNBLAZE:(\w+)\]\[/FLARE_UNBLAZE:\1\]")
_PLACEHOLDER_RE = re.compile(r"FLARE_(?:ATTR|SLOT)_PLACEHOLDER_\d+")

_SAVE_SCOPE = f"{{% if {SCOPE} is defined %}}{{% set __{SCOPE} = {SCOPE} %}}{{% endif %}}"
_RESTORE_SCOPE = f"{{% if __{SCOPE} is defined %}}{{% set {SCOPE} = __{SCOPE} %}}{{% endif %}}"


@dataclass(frozen=True)
class UnblazeBlock:
    start: int
    end: int
    scope: Optional[str]
    content: str


def find_blocks(source: str) -> List[UnblazeBlock]:
    """Пары @unblaze/@endunblaze по порядку (без вложенности)."""
    blocks: List[UnblazeBlock] = []
    closers = ENDUNBLAZE.match(source)
    pos = 0
    for opener in UNBLAZE.match(source):
        if opener.start < pos:
            continue
        closer = next((c for c in closers if c.start >= opener.end), None)
        if closer is None:
            break
        blocks.append(UnblazeBlock(
            start=opener.start,
            end=closer.end,
            scope=_scope_expression(opener.expression),
            content=source[opener.end:closer.start],
        ))
        pos = closer.end
    return blocks


def _scope_expression(arguments: Optional[str]) -> Optional[str]:
    if not arguments:
        return None
    pieces = split_top_level(arguments, ":", maxsplit=1)
    if len(pieces) == 2 and pieces[0].strip() == SCOPE:
        return pieces[1].strip()
    return None


def strip_blocks(source: str) -> str:
    """Исходник без блоков @unblaze (для проверок свёртки)."""
    return _replace_blocks(source, lambda _block: "")


def compile_runtime(source: str) -> str:
    """Обычная компиляция: ``scope`` связывается во время рендера."""
    def _replace(block: UnblazeBlock) -> str:
        if block.scope is None:
            return block.content
        return f"{_SAVE_SCOPE}{{% set {SCOPE} = ({block.scope}) %}}{block.content}{_RESTORE_SCOPE}"

    return _replace_blocks(source, _replace)


def _replace_blocks(source: str, callback: Callable[[UnblazeBlock], str]) -> str:
    result: List[str] = []
    last = 0
    for block in find_blocks(source):
        result.append(source[last:block.start])
        result.append(callback(block))
        last = block.end
    result.append(source[last:])
    return "".join(result)


class Unblaze:
    """
    Хранилище блоков @unblaze свёрнутых компонентов.

    Общее для менеджера: маркеры, оставленные в выводе изолированного рендера,
    заменяются содержимым блоков уже после него.
    """

    def __init__(self) -> None:
        self._counter = itertools.count()
        self._contents: Dict[str, str] = {}
        self._scopes: Dict[str, Any] = {}

    def compile_for_fold(self, source: str) -> str:
        """Заменяет блоки маркерами, фиксирующими значение ``scope``."""
        def _replace(block: UnblazeBlock) -> str:
            token = f"u{next(self._counter)}"
            self._contents[token] = block.content
            capture = ""
            if block.scope is not None:
                capture = f"{{% do __blaze.store_scope({to_literal(token)}, ({block.scope})) %}}"
            return f"[FLARE_UNBLAZE:{token}]{capture}[/FLARE_UNBLAZE:{token}]"

        return _replace_blocks(source, _replace)

    def store_scope(self, token: str, scope: Any) -> None:
        self._scopes[token] = scope

    def splice(self, rendered: str, expressions: Dict[str, str], compile_inner: Callable[[str], str]) -> str:
        """
        Заменяет маркеры в выводе изолированного рендера.

        Args:
            rendered: Вывод изолированного рендера
            expressions: Заполнитель → выражение Jinja, которое он замещает
            compile_inner: Компиляция содержимого блока (мемоизация + вызовы)

        Returns:
            Текст шаблона, где каждый блок связывает ``scope`` и выполняется при рендере
        """
        def _replace(m: re.Match) -> str:
            token = m.group(1)
            content = compile_inner(self._contents.get(token, ""))
            if token not in self._scopes:
                return content
            literal = scope_literal(self._scopes[token], expressions)
            return f"{_SAVE_SCOPE}{{% set {SCOPE} = {literal} %}}{content}{_RESTORE_SCOPE}"

        return _MARKER_RE.sub(_replace, rendered)

    def clear(self) -> None:
        self._contents.clear()
        self._scopes.clear()


def scope_literal(value: Any, expressions: Dict[str, str]) -> str:
    """
    Литерал Jinja для значения ``scope``.

    Заполнители внутри строк превращаются обратно в выражения:
    'Hi FLARE_ATTR_PLACEHOLDER_0' → 'Hi ' ~ (name)
    """
    if isinstance(value, dict):
        items = ", ".join(f"{to_literal(k)}: {scope_literal(v, expressions)}" for k, v in value.items())
        return "{" + items + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(scope_literal(item, expressions) for item in value) + "]"
    if not isinstance(value, str) or not _PLACEHOLDER_RE.search(value):
        return to_literal(value)

    parts: List[str] = []
    last = 0
    for m in _PLACEHOLDER_RE.finditer(value):
        if m.start() > last:
            parts.append(to_literal(value[last:m.start()]))
        parts.append(expressions.get(m.group(0), to_literal(m.group(0))))
        last = m.end()
    if last < len(value):
        parts.append(to_literal(value[last:]))
    return " ~ ".join(parts)


__all__ = [
    "Unblaze",
    "UnblazeBlock",
    "find_blocks",
    "strip_blocks",
    "compile_runtime",
    "scope_literal",
    "SCOPE",
]
