"""
Проход мемоизации.

Оборачивает скомпилированный вызов компонента в обращение к кэшу вывода.
Применяется только к самозакрывающимся вызовам: содержимое слотов в ключ
не входит.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable

from ..config import OptimizeConfig
from ..directives import ComponentDirectives
from ..parser.nodes import ComponentNode, Node, TextNode
from ..resolver import ComponentResolver
from ..support.attributes import AttributeParser
from ..support.literals import to_literal

logger = logging.getLogger(__name__)

NodeCompiler = Callable[[ComponentNode], Node]


class Memoizer:
    """Обёртка вызовов компонентов с включённой мемоизацией."""

    def __init__(
        self,
        resolver: ComponentResolver,
        directives: ComponentDirectives,
        config: OptimizeConfig,
        compile_node: NodeCompiler,
    ):
        self.resolver = resolver
        self.directives = directives
        self.config = config
        self._compile_node = compile_node
        self._counter = itertools.count()
        self._attributes = AttributeParser()

    def memoize(self, node: Node) -> Node:
        """
        Оборачивает вызов в проверку кэша.

        Returns:
            TextNode с кодом мемоизации или исходный узел, если вызов не подходит
        """
        if not isinstance(node, ComponentNode) or not node.self_closing:
            return node

        path = self.resolver.resolve(node.full_name)
        if path is None or not self._enabled(path):
            return node

        compiled = self._compile_node(node)
        if compiled is node or not isinstance(compiled, TextNode):
            return node

        n = next(self._counter)
        key_var = f"__memo_key_{n}"
        output_var = f"__memo_output_{n}"
        params = self._attributes.to_runtime_dict(node.attributes)

        logger.debug(f"Memoizing <{node.prefix}{node.name}> ({path})")
        return TextNode(
            f"{{% set {key_var} = __blaze.memo.key({to_literal(node.full_name)}, {params}) %}}\n"
            f"{{% if {key_var} is not none and __blaze.memo.has({key_var}) %}}"
            f"{{{{ __blaze.memo.hit({key_var}) }}}}"
            f"{{% else %}}"
            f"{{% set {output_var} %}}{compiled.content}{{% endset %}}"
            f"{{% if {key_var} is not none %}}{{% do __blaze.memo.put({key_var}, {output_var}) %}}{{% endif %}}"
            f"{{{{ {output_var} }}}}"
            f"{{% endif %}}"
        )

    def _enabled(self, path: str) -> bool:
        flag = self.directives.read(path).flag("memo")
        return flag if flag is not None else self.config.should_memoize(path)


__all__ = ["Memoizer"]
