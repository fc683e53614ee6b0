"""
Синтаксический анализатор компонентной разметки.

Строит дерево узлов из потока токенов за один проход с помощью стека
контейнеров. Несбалансированные закрывающие теги игнорируются.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .nodes import ComponentNode, DynamicComponentNode, Node, SlotNode, TextNode
from .stack import ParseStack
from .tokenizer import Tokenizer
from .tokens import SlotStyle, SlotToken, TagToken, TextToken, Token, TokenType

logger = logging.getLogger(__name__)

DYNAMIC_COMPONENT = "dynamic-component"


class Parser:
    """Строитель дерева на основе стека контейнеров."""

    def __init__(self, tokenizer: Optional[Tokenizer] = None):
        self.tokenizer = tokenizer or Tokenizer()

    def parse(self, content: str) -> List[Node]:
        """
        Разбирает исходный текст шаблона в дерево.

        Args:
            content: Исходный текст шаблона

        Returns:
            Список корневых узлов
        """
        return self.build(self.tokenizer.tokenize(content))

    def build(self, tokens: List[Token]) -> List[Node]:
        """
        Строит дерево из готового потока токенов.

        Args:
            tokens: Токены лексера

        Returns:
            Список корневых узлов
        """
        stack = ParseStack()

        for token in tokens:
            if isinstance(token, TextToken):
                stack.add_to_root(TextNode(token.content))
            elif isinstance(token, TagToken):
                self._handle_tag(stack, token)
            elif isinstance(token, SlotToken):
                self._handle_slot(stack, token)

        if not stack.is_empty():
            logger.debug(f"Parser finished with {stack.depth()} unclosed containers")
            self._unwind(stack)

        ast = stack.get_ast()
        logger.debug(f"Parsed AST with {len(ast)} root nodes")
        return ast

    @staticmethod
    def _unwind(stack: ParseStack) -> None:
        """Незакрытые контейнеры превращаются обратно в текст открывающего тега."""
        while not stack.is_empty():
            container = stack.pop_container()
            parent = stack.current()
            siblings = parent.children if parent is not None else stack.root
            for index, sibling in enumerate(siblings):
                if sibling is container:
                    siblings[index:index + 1] = [TextNode(container.render_open())] + container.children
                    break

    def _handle_tag(self, stack: ParseStack, token: TagToken) -> None:
        if token.type is TokenType.TAG_CLOSE:
            stack.pop_container()
            return

        self_closing = token.type is TokenType.TAG_SELF_CLOSE
        node_cls = DynamicComponentNode if token.name == DYNAMIC_COMPONENT else ComponentNode
        node = node_cls(
            name=token.name,
            prefix=token.prefix,
            namespace=token.namespace,
            attribute_string=token.attributes,
            self_closing=self_closing,
        )

        if self_closing:
            stack.add_to_root(node)
        else:
            stack.push_container(node)

    def _handle_slot(self, stack: ParseStack, token: SlotToken) -> None:
        if token.type is TokenType.SLOT_CLOSE:
            current = stack.pop_container()
            if isinstance(current, SlotNode) and current.slot_style is SlotStyle.SHORT:
                current.close_has_name = token.name is not None
            return

        stack.push_container(SlotNode(
            name=token.name,
            attribute_string=token.attributes,
            slot_style=token.slot_style,
            prefix=token.prefix,
        ))


__all__ = ["Parser", "DYNAMIC_COMPONENT"]
