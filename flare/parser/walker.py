"""
Обход AST в глубину с pre/post обработчиками.

Каждый проход оптимизации реализован только как обработчик обхода:
обработчик возвращает узел-замену, None (оставить как есть) или DELETE.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from .nodes import ComponentNode, Node, SlotNode


class _Delete:
    """Маркер удаления узла."""

    def __repr__(self) -> str:
        return "DELETE"


DELETE = _Delete()

Callback = Callable[[Node], object]


class Walker:
    """Обходчик дерева узлов."""

    def walk(
        self,
        nodes: List[Node],
        pre: Optional[Callback] = None,
        post: Optional[Callback] = None,
    ) -> List[Node]:
        """
        Обходит узлы, применяя обработчики.

        Args:
            nodes: Узлы текущего уровня
            pre: Вызывается до обхода детей
            post: Вызывается после обхода детей

        Returns:
            Новый список узлов уровня (с заменами и без удалённых)
        """
        result: List[Node] = []

        for node in nodes:
            current = self._apply(pre, node)
            if current is DELETE:
                continue

            if isinstance(current, (ComponentNode, SlotNode)) and current.children:
                current.children = self.walk(current.children, pre, post)

            current = self._apply(post, current)
            if current is DELETE:
                continue

            result.append(current)

        return result

    @staticmethod
    def _apply(callback: Optional[Callback], node: Node):
        if callback is None:
            return node
        replacement = callback(node)
        return node if replacement is None else replacement


__all__ = ["Walker", "DELETE"]
