"""
Свёртка вызовов компонентов на этапе компиляции.
"""

from __future__ import annotations

from .folder import (
    ATTR_PLACEHOLDER,
    SLOT_PLACEHOLDER,
    WILDCARD,
    FoldedComponent,
    Folder,
    LeftoverPlaceholdersError,
)
from .unblaze import Unblaze, compile_runtime, find_blocks, scope_literal, strip_blocks

__all__ = [
    "Folder",
    "FoldedComponent",
    "LeftoverPlaceholdersError",
    "ATTR_PLACEHOLDER",
    "SLOT_PLACEHOLDER",
    "WILDCARD",
    "Unblaze",
    "compile_runtime",
    "find_blocks",
    "scope_literal",
    "strip_blocks",
]
