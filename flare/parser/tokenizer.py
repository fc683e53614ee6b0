"""
Лексический анализатор компонентных тегов.

Конечный автомат, который выделяет из исходного текста шаблона теги компонентов
(``<x-button ...>``), слоты (``<x-slot:footer>``, ``<x-slot name="footer">``)
и всё остальное как непрозрачный текст. Конструкции Jinja (``{# #}``, ``{% %}``,
``{{ }}``, ``{% raw %}``) пропускаются целиком, чтобы теги внутри кода и
комментариев не распознавались.

Лексер никогда не бросает исключений: незакрытый или некорректный тег
откатывается и становится обычным текстом.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from .tokens import SlotStyle, SlotToken, TagToken, TextToken, Token, TokenType

logger = logging.getLogger(__name__)


class State(enum.Enum):
    """Состояния автомата."""

    TEXT = "TEXT"
    TAG_OPEN = "TAG_OPEN"
    TAG_CLOSE = "TAG_CLOSE"
    ATTRIBUTE_COLLECT = "ATTRIBUTE_COLLECT"
    SLOT_OPEN = "SLOT_OPEN"
    SLOT_CLOSE = "SLOT_CLOSE"
    SHORT_SLOT = "SHORT_SLOT"


@dataclass(frozen=True)
class TagPrefix:
    """Префикс тега: пространство имён компонентов и тег слота для него."""
    prefix: str
    namespace: str = ""
    slot: str = "x-slot"


DEFAULT_PREFIXES: Tuple[TagPrefix, ...] = (
    TagPrefix("x-"),
    TagPrefix("x:"),
)

_TAG_NAME_RE = re.compile(r"[\w\-:.]+")
_SLOT_NAME_RE = re.compile(r"\w+(?:-\w+)*")
_SLOT_NAME_ATTR_RE = re.compile(r"""(?:^|\s)(:?)name\s*=\s*(["'])(.*?)\2""", re.S)
_TEXT_STOP_RE = re.compile(r"[<{]")
_RAW_OPEN_RE = re.compile(r"\{%-?\s*raw\s*-?%\}")
_RAW_CLOSE_RE = re.compile(r"\{%-?\s*endraw\s*-?%\}")

# Парные разделители хоста: всё между ними считается текстом
_HOST_DELIMITERS = (
    ("{#", "#}"),
    ("{%", "%}"),
    ("{{", "}}"),
)


class Tokenizer:
    """
    Конечный автомат для разбора компонентных тегов.

    Экземпляр можно переиспользовать: каждый вызов tokenize() начинает
    с чистого состояния.
    """

    def __init__(self, prefixes: Optional[List[TagPrefix]] = None):
        self._prefixes: List[TagPrefix] = list(prefixes or DEFAULT_PREFIXES)
        self._sort_prefixes()

        self.content = ""
        self.position = 0
        self.length = 0
        self.tokens: List[Token] = []
        self.buffer: List[str] = []
        self.current_token: Optional[Union[TagToken, SlotToken]] = None
        self.tag_start = 0

        self._handlers: Dict[State, Callable[[], State]] = {
            State.TEXT: self._handle_text,
            State.TAG_OPEN: self._handle_tag_open,
            State.TAG_CLOSE: self._handle_tag_close,
            State.ATTRIBUTE_COLLECT: self._handle_attributes,
            State.SLOT_OPEN: self._handle_slot_open,
            State.SLOT_CLOSE: self._handle_slot_close,
            State.SHORT_SLOT: self._handle_short_slot,
        }

    # ---------------------------- ПРЕФИКСЫ ---------------------------- #

    def register_prefix(self, prefix: str, namespace: str = "", slot: str = "x-slot") -> None:
        """
        Регистрирует дополнительный префикс тегов.

        Args:
            prefix: Префикс тега (например, "ui:")
            namespace: Пространство имён для разрешения компонентов (например, "ui::")
            slot: Тег слотов для компонентов с этим префиксом
        """
        self._prefixes = [p for p in self._prefixes if p.prefix != prefix]
        self._prefixes.append(TagPrefix(prefix, namespace, slot))
        self._sort_prefixes()

    @property
    def prefixes(self) -> List[TagPrefix]:
        return list(self._prefixes)

    def _sort_prefixes(self) -> None:
        # Длинные префиксы проверяются первыми ("x:" не должен перехватывать "x:ui:")
        self._prefixes.sort(key=lambda p: len(p.prefix), reverse=True)

    def _slot_tags(self) -> List[str]:
        seen: List[str] = []
        for p in self._prefixes:
            if p.slot not in seen:
                seen.append(p.slot)
        return seen

    # ---------------------------- ОСНОВНОЙ ЦИКЛ ---------------------------- #

    def tokenize(self, content: str) -> List[Token]:
        """
        Разбивает исходный текст на токены.

        Args:
            content: Исходный текст шаблона

        Returns:
            Список токенов (текст, теги компонентов, теги слотов)
        """
        self._reset(content)

        state = State.TEXT
        while self.position < self.length:
            state = self._handlers[state]()

        if state is not State.TEXT:
            # Незавершённый тег в конце входа
            self._rollback()

        self._flush_buffer()

        logger.debug(f"Tokenized {self.length} chars into {len(self.tokens)} tokens")
        return self.tokens

    def _reset(self, content: str) -> None:
        self.content = content
        self.position = 0
        self.length = len(content)
        self.tokens = []
        self.buffer = []
        self.current_token = None
        self.tag_start = 0

    # ---------------------------- СОСТОЯНИЯ ---------------------------- #

    def _handle_text(self) -> State:
        stop = _TEXT_STOP_RE.search(self.content, self.position)
        if stop is None:
            self.buffer.append(self.content[self.position:])
            self.position = self.length
            return State.TEXT

        if stop.start() > self.position:
            self.buffer.append(self.content[self.position:stop.start()])
            self.position = stop.start()

        if self.current() == "{":
            if not self._skip_host_block():
                self.buffer.append("{")
                self.position += 1
            return State.TEXT

        return self._match_tag_start()

    def _match_tag_start(self) -> State:
        """Распознаёт начало тега слота или компонента в позиции '<'."""
        for slot_tag in self._slot_tags():
            if self._matches_at("</" + slot_tag) and self._peek_at(len(slot_tag) + 2) in (":", ">", " ", "\t", "\n", "\r"):
                self._begin_tag(SlotToken(TokenType.SLOT_CLOSE, prefix=slot_tag), len(slot_tag) + 2)
                return State.SLOT_CLOSE

            if self._matches_at("<" + slot_tag + ":"):
                self._begin_tag(SlotToken(TokenType.SLOT_OPEN, prefix=slot_tag, slot_style=SlotStyle.SHORT),
                                len(slot_tag) + 2)
                return State.SHORT_SLOT

            if self._matches_at("<" + slot_tag) and self._peek_at(len(slot_tag) + 1) in (">", " ", "\t", "\n", "\r"):
                self._begin_tag(SlotToken(TokenType.SLOT_OPEN, prefix=slot_tag), len(slot_tag) + 1)
                return State.SLOT_OPEN

        for p in self._prefixes:
            if self._matches_at("</" + p.prefix):
                self._begin_tag(TagToken(TokenType.TAG_CLOSE, prefix=p.prefix, namespace=p.namespace),
                                len(p.prefix) + 2)
                return State.TAG_CLOSE

            if self._matches_at("<" + p.prefix):
                self._begin_tag(TagToken(TokenType.TAG_OPEN, prefix=p.prefix, namespace=p.namespace),
                                len(p.prefix) + 1)
                return State.TAG_OPEN

        self.buffer.append("<")
        self.position += 1
        return State.TEXT

    def _handle_tag_open(self) -> State:
        name = self._match(_TAG_NAME_RE)
        if not name:
            return self._rollback()

        assert isinstance(self.current_token, TagToken)
        self.current_token.name = name
        self.position += len(name)
        return State.ATTRIBUTE_COLLECT

    def _handle_tag_close(self) -> State:
        name = self._match(_TAG_NAME_RE)
        if not name:
            return self._rollback()

        assert isinstance(self.current_token, TagToken)
        self.current_token.name = name
        self.position += len(name)
        self._skip_whitespace()

        if self.current() != ">":
            return self._rollback()

        self.position += 1
        return self._emit()

    def _handle_attributes(self) -> State:
        char = self.current()

        if char.isspace():
            self.position += 1
            return State.ATTRIBUTE_COLLECT

        if char == ">":
            self.position += 1
            if isinstance(self.current_token, SlotToken):
                self._resolve_standard_slot_name(self.current_token)
            return self._emit()

        if char == "/" and self._peek_at(1) == ">":
            if isinstance(self.current_token, SlotToken):
                # Самозакрывающийся слот не поддерживается
                return self._rollback()
            assert isinstance(self.current_token, TagToken)
            self.current_token.type = TokenType.TAG_SELF_CLOSE
            self.position += 2
            return self._emit()

        attributes = self._collect_attributes()
        if attributes is None:
            return self._rollback()

        assert self.current_token is not None
        self.current_token.attributes = attributes
        return State.ATTRIBUTE_COLLECT

    def _handle_slot_open(self) -> State:
        # Стандартный слот: атрибуты (включая name="...") собираются общим образом
        return State.ATTRIBUTE_COLLECT

    def _handle_short_slot(self) -> State:
        name = self._match(_SLOT_NAME_RE)
        if not name:
            return self._rollback()

        assert isinstance(self.current_token, SlotToken)
        self.current_token.name = name
        self.position += len(name)
        return State.ATTRIBUTE_COLLECT

    def _handle_slot_close(self) -> State:
        assert isinstance(self.current_token, SlotToken)

        if self.current() == ":":
            name = self._match(_SLOT_NAME_RE, offset=1)
            if not name:
                return self._rollback()
            self.current_token.name = name
            self.position += len(name) + 1

        self._skip_whitespace()
        if self.current() != ">":
            return self._rollback()

        self.position += 1
        return self._emit()

    # ---------------------------- АТРИБУТЫ ---------------------------- #

    def _collect_attributes(self) -> Optional[str]:
        """
        Собирает строку атрибутов до '>' или '/>' с учётом кавычек и скобок.

        Returns:
            Строку атрибутов или None, если тег не закрыт до конца входа
        """
        parts: List[str] = []
        in_single = False
        in_double = False
        depth = {"{": 0, "[": 0, "(": 0}
        closing = {"}": "{", "]": "[", ")": "("}

        while self.position < self.length:
            char = self.content[self.position]

            if char == "{" and self._peek_at(1) == "{":
                end = self.content.find("}}", self.position + 2)
                if end == -1:
                    return None
                parts.append(self.content[self.position:end + 2])
                self.position = end + 2
                continue

            prev = self.content[self.position - 1] if self.position > 0 else ""

            if char == '"' and not in_single and prev != "\\":
                in_double = not in_double
            elif char == "'" and not in_double and prev != "\\":
                in_single = not in_single

            if not in_single and not in_double:
                if char in depth:
                    depth[char] += 1
                elif char in closing and depth[closing[char]] > 0:
                    depth[closing[char]] -= 1

            balanced = not in_single and not in_double and not any(depth.values())
            if balanced and (char == ">" or (char == "/" and self._peek_at(1) == ">")):
                return "".join(parts).strip()

            parts.append(char)
            self.position += 1

        return None

    @staticmethod
    def _resolve_standard_slot_name(token: SlotToken) -> None:
        if token.slot_style is not SlotStyle.STANDARD or token.type is not TokenType.SLOT_OPEN:
            return
        m = _SLOT_NAME_ATTR_RE.search(token.attributes)
        if m:
            bound, value = m.group(1), m.group(3)
            # Имя, вычисляемое во время рендера, помечается '$'
            token.name = "$" + value if bound else value

    # ---------------------------- ХОСТ-БЛОКИ ---------------------------- #

    def _skip_host_block(self) -> bool:
        """
        Пропускает блок Jinja, начинающийся в текущей позиции, как текст.

        Незакрытый блок поглощает весь остаток входа.

        Returns:
            True, если блок был распознан
        """
        raw = _RAW_OPEN_RE.match(self.content, self.position)
        if raw:
            close = _RAW_CLOSE_RE.search(self.content, raw.end())
            end = close.end() if close else self.length
            return self._consume_text_until(end)

        for opener, closer in _HOST_DELIMITERS:
            if self._matches_at(opener):
                close_at = self.content.find(closer, self.position + len(opener))
                end = close_at + len(closer) if close_at != -1 else self.length
                return self._consume_text_until(end)

        return False

    def _consume_text_until(self, end: int) -> bool:
        self.buffer.append(self.content[self.position:end])
        self.position = end
        return True

    # ---------------------------- СЛУЖЕБНОЕ ---------------------------- #

    def _begin_tag(self, token: Union[TagToken, SlotToken], consumed: int) -> None:
        self._flush_buffer()
        self.current_token = token
        self.tag_start = self.position
        self.position += consumed

    def _emit(self) -> State:
        assert self.current_token is not None
        self.tokens.append(self.current_token)
        self.current_token = None
        return State.TEXT

    def _rollback(self) -> State:
        """Возвращает поглощённый текст незавершённого тега в буфер."""
        logger.debug(f"Unterminated tag at {self.tag_start}, treating as text")
        self.buffer.append(self.content[self.tag_start:self.position])
        self.current_token = None
        return State.TEXT

    def _flush_buffer(self) -> None:
        if self.buffer:
            text = "".join(self.buffer)
            self.buffer = []
            if not text:
                return
            # Соседние текстовые фрагменты склеиваются (в т.ч. после отката)
            if self.tokens and isinstance(self.tokens[-1], TextToken):
                self.tokens[-1].content += text
            else:
                self.tokens.append(TextToken(text))

    def _skip_whitespace(self) -> None:
        while self.position < self.length and self.content[self.position].isspace():
            self.position += 1

    def _match(self, pattern: re.Pattern, offset: int = 0) -> Optional[str]:
        m = pattern.match(self.content, self.position + offset)
        return m.group(0) if m else None

    def _matches_at(self, value: str) -> bool:
        return self.content.startswith(value, self.position)

    def _peek_at(self, offset: int) -> str:
        pos = self.position + offset
        return self.content[pos] if pos < self.length else ""

    def current(self) -> str:
        return self.content[self.position] if self.position < self.length else ""


def tokenize(content: str, prefixes: Optional[List[TagPrefix]] = None) -> List[Token]:
    """Удобная функция для одноразовой токенизации."""
    return Tokenizer(prefixes).tokenize(content)


__all__ = ["State", "TagPrefix", "DEFAULT_PREFIXES", "Tokenizer", "tokenize"]
