"""
Лексер, парсер и модель узлов компонентной разметки.
"""

from __future__ import annotations

from .nodes import DEFAULT_SLOT, ComponentNode, DynamicComponentNode, Node, SlotNode, TextNode, render_nodes
from .parser import Parser
from .stack import ParseStack
from .tokenizer import TagPrefix, Tokenizer, tokenize
from .walker import DELETE, Walker

__all__ = [
    "DEFAULT_SLOT",
    "ComponentNode",
    "DynamicComponentNode",
    "Node",
    "SlotNode",
    "TextNode",
    "render_nodes",
    "Parser",
    "ParseStack",
    "TagPrefix",
    "Tokenizer",
    "tokenize",
    "DELETE",
    "Walker",
]
