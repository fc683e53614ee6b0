"""
Стек областей видимости на время рендера.

Каждый активный вложенный вызов компонента держит кадр (данные, слоты).
Сгенерированный код кладёт кадр перед вызовом функции компонента и снимает после.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Frame:
    data: Dict[str, Any]
    slots: Dict[str, Any] = field(default_factory=dict)


class ScopeStack:
    """LIFO-стек кадров (данные, слоты)."""

    def __init__(self) -> None:
        self._frames: List[Frame] = []

    def push(self, data: Optional[Dict[str, Any]] = None) -> None:
        """Новый кадр с данными вызова и пустыми слотами."""
        self._frames.append(Frame(dict(data or {})))

    def push_slots(self, slots: Dict[str, Any]) -> None:
        """Дополняет слоты текущего кадра."""
        if not self._frames:
            self._frames.append(Frame({}))
        self._frames[-1].slots.update(slots)

    def pop(self) -> None:
        """Снимает верхний кадр вместе с его слотами."""
        if self._frames:
            self._frames.pop()

    def current_component_data(self) -> Dict[str, Any]:
        """Данные только верхнего кадра."""
        return dict(self._frames[-1].data) if self._frames else {}

    def merged_component_slots(self) -> Dict[str, Any]:
        """Слоты всех кадров снизу вверх; ближние кадры перекрывают дальние."""
        merged: Dict[str, Any] = {}
        for frame in self._frames:
            merged.update(frame.slots)
        return merged

    def get_consumable_data(self, name: str, default: Any = None) -> Any:
        """
        Значение для @aware.

        Сначала слоты от ближнего кадра к дальнему, затем данные в том же порядке.
        Слот всегда важнее одноимённых данных предков.
        """
        for frame in reversed(self._frames):
            if name in frame.slots:
                return frame.slots[name]
        for frame in reversed(self._frames):
            if name in frame.data:
                return frame.data[name]
        return default

    def depth(self) -> int:
        return len(self._frames)

    def __len__(self) -> int:
        return len(self._frames)


__all__ = ["Frame", "ScopeStack"]
