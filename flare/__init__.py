"""
flare: компилятор компонентных тегов для шаблонов Jinja2.
"""

from __future__ import annotations

from .config import ComponentPath, FlareConfig, OptimizeConfig, load_config
from .errors import (
    ComponentNotFoundError,
    DeclarationParseError,
    FlareUserError,
    FoldSafetyError,
    InvalidAwareDefinitionError,
    InvalidPropsDefinitionError,
    UnsupportedDirectiveError,
)
from .host import HostEnvironment
from .manager import Flare

__all__ = [
    "Flare",
    "FlareConfig",
    "ComponentPath",
    "OptimizeConfig",
    "load_config",
    "HostEnvironment",
    "FlareUserError",
    "FoldSafetyError",
    "DeclarationParseError",
    "InvalidPropsDefinitionError",
    "InvalidAwareDefinitionError",
    "UnsupportedDirectiveError",
    "ComponentNotFoundError",
]
