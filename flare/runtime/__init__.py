"""
Среда выполнения скомпилированных шаблонов.
"""

from __future__ import annotations

from .attributes import AttributeBag, ComponentSlot, take_prop, to_css_classes, to_css_styles
from .registry import FunctionRegistry
from .runtime import ComponentRuntime
from .stack import ScopeStack

__all__ = [
    "AttributeBag",
    "ComponentSlot",
    "take_prop",
    "to_css_classes",
    "to_css_styles",
    "FunctionRegistry",
    "ComponentRuntime",
    "ScopeStack",
]
