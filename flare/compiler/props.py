"""
Разбор объявлений @props и @aware в исходнике компонента.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple, Type

from ..directives import DirectiveMatcher
from ..errors import DeclarationParseError, InvalidAwareDefinitionError, InvalidPropsDefinitionError
from ..support.attributes import prop_name
from ..support.literals import parse_declarations

Declarations = Dict[str, Any]


class _DeclarationCompiler:
    directive = ""
    error: Type[Exception] = Exception

    def __init__(self) -> None:
        self.matcher = DirectiveMatcher(self.directive)

    def extract(self, source: str, component_path: str) -> Tuple[str, Declarations]:
        """
        Читает объявления и удаляет директиву из исходника.

        Args:
            source: Исходник компонента
            component_path: Путь (для сообщений об ошибках)

        Returns:
            (исходник без директивы, имя → умолчание или MISSING)
        """
        return self.matcher.strip(source), self.read(source, component_path)

    def read(self, source: str, component_path: str) -> Declarations:
        expression = self.matcher.extract_expression(source)
        if not expression:
            return {}
        try:
            declarations = parse_declarations(expression)
        except DeclarationParseError as e:
            raise self.error(component_path, e) from e
        return {prop_name(name): default for name, default in declarations.items()}


class PropsCompiler(_DeclarationCompiler):
    """@props(['label', {'variant': 'primary'}])"""
    directive = "props"
    error = InvalidPropsDefinitionError


class AwareCompiler(_DeclarationCompiler):
    """@aware(['color'])"""
    directive = "aware"
    error = InvalidAwareDefinitionError


__all__ = ["PropsCompiler", "AwareCompiler", "Declarations"]
