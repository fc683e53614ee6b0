"""
Типы токенов для лексера компонентных тегов.

Каждый токен несёт достаточно информации, чтобы парсер мог построить узел
и затем восстановить исходный текст тега.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union


class TokenType(enum.Enum):
    """Типы токенов потока."""

    TEXT = "TEXT"
    TAG_OPEN = "TAG_OPEN"                # <x-name attrs>
    TAG_SELF_CLOSE = "TAG_SELF_CLOSE"    # <x-name attrs />
    TAG_CLOSE = "TAG_CLOSE"              # </x-name>
    SLOT_OPEN = "SLOT_OPEN"              # <x-slot name="..."> / <x-slot:name>
    SLOT_CLOSE = "SLOT_CLOSE"            # </x-slot> / </x-slot:name>


class SlotStyle(str, enum.Enum):
    """Форма записи слота."""

    STANDARD = "standard"   # <x-slot name="footer">
    SHORT = "short"         # <x-slot:footer>


@dataclass
class TextToken:
    content: str
    type: TokenType = TokenType.TEXT


@dataclass
class TagToken:
    """Открывающий, самозакрывающийся или закрывающий тег компонента."""
    type: TokenType
    prefix: str
    namespace: str = ""
    name: str = ""
    attributes: str = ""


@dataclass
class SlotToken:
    """Открывающий или закрывающий тег слота."""
    type: TokenType
    prefix: str
    slot_style: SlotStyle = SlotStyle.STANDARD
    name: Optional[str] = None
    attributes: str = ""


Token = Union[TextToken, TagToken, SlotToken]


__all__ = [
    "TokenType",
    "SlotStyle",
    "Token",
    "TextToken",
    "TagToken",
    "SlotToken",
]
