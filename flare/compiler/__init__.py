"""
Компиляция вызовов компонентов и генерация функций компонентов.
"""

from __future__ import annotations

from .compiler import HASH_SALT, Compiler, component_hash
from .props import AwareCompiler, PropsCompiler
from .slots import DEFAULT_SLOT_KEY, SlotCompiler, slot_key
from .wrapper import Wrapper

__all__ = [
    "Compiler",
    "component_hash",
    "HASH_SALT",
    "PropsCompiler",
    "AwareCompiler",
    "SlotCompiler",
    "slot_key",
    "DEFAULT_SLOT_KEY",
    "Wrapper",
]
