"""
Компиляция вызовов компонентов.

Каждый вызов <x-name ...> заменяется кодом Jinja, который:
  • компилирует исходник компонента в модуль-артефакт (если нужно);
  • берёт функцию компонента из реестра;
  • кладёт кадр данных и слотов на стек среды выполнения;
  • вызывает функцию и снимает кадр.
"""

from __future__ import annotations

import hashlib
import itertools
import logging
from typing import List

from ..config import OptimizeConfig
from ..directives import ComponentDirectives
from ..parser.nodes import ComponentNode, Node, TextNode
from ..resolver import ComponentResolver
from ..support.attributes import AttributeParser
from ..support.literals import to_literal
from .slots import SlotCompiler

logger = logging.getLogger(__name__)

HASH_SALT = "v1"


def component_hash(path: str) -> str:
    """Стабильный идентификатор компонента по пути исходника."""
    return hashlib.sha1(f"{HASH_SALT}{path}".encode("utf-8")).hexdigest()


class Compiler:
    """
    Генератор кода вызовов.

    ``function_prefix`` переключается на "__" на время изолированного
    рендера свёртки, чтобы её артефакты не пересекались с постоянными.
    """

    def __init__(self, resolver: ComponentResolver, directives: ComponentDirectives, config: OptimizeConfig):
        self.resolver = resolver
        self.directives = directives
        self.config = config
        self.function_prefix = "_"
        self._counter = itertools.count()
        self._attributes = AttributeParser()
        self._slots = SlotCompiler(self._attributes)

    def function_name(self, path: str) -> str:
        return f"{self.function_prefix}{component_hash(path)}"

    def compile_node(self, node: Node) -> Node:
        """
        Компилирует вызов компонента.

        Returns:
            TextNode с кодом вызова или исходный узел (не найден, компиляция отключена)
        """
        if not isinstance(node, ComponentNode):
            return node

        path = self.resolver.resolve(node.full_name)
        if path is None:
            logger.debug(f"Leaving unresolved <{node.prefix}{node.name}> as is")
            return node
        if not self._enabled(path):
            return node

        digest = component_hash(path)
        function = self.function_name(path)
        artifact = f"__blaze.compiled_path ~ '/{digest}.py'"
        data = self._attributes.to_runtime_dict(node.attributes)
        bound = to_literal(self._attributes.bound_keys(node.attributes))

        lines: List[str] = [
            f"{{% do __blaze.ensure_compiled({to_literal(path)}, {artifact}) %}}",
            f"{{% set {function} = __blaze.require({artifact}, {to_literal(function)}) %}}",
            f"{{% do __blaze.push_data({data}) %}}",
        ]

        if node.self_closing:
            slots = "{}"
        else:
            n = next(self._counter)
            slots = f"__slots_{digest}_{n}"
            lines.append(f"{{% set {slots} = {{}} %}}")
            lines.extend(self._slots.compile(node, slots, prefix=f"__slot_{digest}_{n}"))
            lines.append(f"{{% do __blaze.push_slots({slots}) %}}")

        lines.append(
            f"{{{{ {function}(__blaze, {data}, {slots}, {bound}) }}}}"
            f"{{% do __blaze.pop_data() %}}"
        )
        return TextNode("\n".join(lines))

    def _enabled(self, path: str) -> bool:
        flag = self.directives.read(path).flag("compile")
        return flag if flag is not None else self.config.should_compile(path)


__all__ = ["Compiler", "component_hash", "HASH_SALT"]
