"""
Вспомогательные разборщики: атрибуты тегов и литералы директив.
"""

from __future__ import annotations

from .attributes import ATTRIBUTES_PROP, Attribute, AttributeParser, compile_echoes, kebab_name, prop_name
from .literals import MISSING, parse_declarations, parse_literal, parse_parameters, to_literal

__all__ = [
    "ATTRIBUTES_PROP",
    "Attribute",
    "AttributeParser",
    "compile_echoes",
    "kebab_name",
    "prop_name",
    "MISSING",
    "parse_declarations",
    "parse_literal",
    "parse_parameters",
    "to_literal",
]
