"""
Стек контейнеров для построения дерева.

Открытые компоненты и слоты лежат на стеке; новые узлы добавляются
детьми текущей вершины или в корень, если стек пуст.
"""

from __future__ import annotations

from typing import List, Optional, Union

from .nodes import ComponentNode, DynamicComponentNode, Node, SlotNode

Container = Union[ComponentNode, SlotNode, DynamicComponentNode]


class ParseStack:
    """Стек открытых контейнеров и корневой список узлов."""

    def __init__(self) -> None:
        self.stack: List[Container] = []
        self.root: List[Node] = []

    def add_to_root(self, node: Node) -> None:
        """Добавляет узел в текущий контейнер или в корень."""
        current = self.current()
        if current is None:
            self.root.append(node)
        else:
            current.children.append(node)

    def push_container(self, container: Container) -> None:
        """Добавляет контейнер как ребёнка и делает его текущим."""
        self.add_to_root(container)
        self.stack.append(container)

    def pop_container(self) -> Optional[Container]:
        """Снимает текущий контейнер; на пустом стеке ничего не делает."""
        if not self.stack:
            return None
        return self.stack.pop()

    def current(self) -> Optional[Container]:
        return self.stack[-1] if self.stack else None

    def depth(self) -> int:
        return len(self.stack)

    def is_empty(self) -> bool:
        return not self.stack

    def get_ast(self) -> List[Node]:
        return self.root


__all__ = ["ParseStack", "Container"]
