"""
Кодогенерация слотов вызова компонента.
"""

from __future__ import annotations

from typing import List

from ..parser.nodes import DEFAULT_SLOT, ComponentNode, SlotNode, render_nodes
from ..parser.tokens import SlotStyle
from ..support.attributes import AttributeParser, prop_name
from ..support.literals import to_literal

# Ключ слота по умолчанию в словаре слотов
DEFAULT_SLOT_KEY = "slot"


def slot_key(slot: SlotNode) -> str:
    """Имя переменной слота внутри компонента."""
    name = slot.resolved_name
    if name == DEFAULT_SLOT:
        return DEFAULT_SLOT_KEY
    if slot.slot_style is SlotStyle.SHORT:
        return prop_name(name)
    return name


class SlotCompiler:
    """Собирает инструкции заполнения словаря слотов."""

    def __init__(self, attributes: AttributeParser | None = None):
        self._attributes = attributes or AttributeParser()

    def compile(self, node: ComponentNode, slots_var: str, prefix: str) -> List[str]:
        """
        Генерирует строки заполнения словаря слотов.

        Args:
            node: Вызов компонента с детьми
            slots_var: Имя переменной словаря слотов
            prefix: Префикс имён переменных содержимого слотов

        Returns:
            Строки инструкций Jinja
        """
        lines: List[str] = []
        has_default = False

        for index, slot in enumerate(node.named_slots()):
            if slot.is_dynamic_name:
                # Ключ вычисляется во время рендера
                key = f"({slot.name[1:]})"
            else:
                name = slot_key(slot)
                has_default = has_default or name == DEFAULT_SLOT_KEY
                key = to_literal(name)
            lines.extend(self._assign(slot_var=f"{prefix}_{index}", slots_var=slots_var, key=key,
                                      content=slot.content(),
                                      attributes=self._attributes.to_runtime_dict(slot.attributes, exclude=("name",))))

        if not has_default:
            lines.extend(self._assign(slot_var=f"{prefix}_{DEFAULT_SLOT_KEY}", slots_var=slots_var,
                                      key=to_literal(DEFAULT_SLOT_KEY), content=render_nodes(node.loose_children()),
                                      attributes="{}"))
        return lines

    @staticmethod
    def _assign(*, slot_var: str, slots_var: str, key: str, content: str, attributes: str) -> List[str]:
        return [
            f"{{% set {slot_var} %}}{content}{{% endset %}}",
            f"{{% do {slots_var}.update({{{key}: __blaze.slot({slot_var}, {attributes})}}) %}}",
        ]


__all__ = ["SlotCompiler", "slot_key", "DEFAULT_SLOT_KEY"]
