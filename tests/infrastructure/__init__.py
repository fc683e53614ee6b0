"""
Общая тестовая инфраструктура flare.

Модули:
- file_utils: создание файлов компонентов и шаблонов
- flare_utils: построители менеджера и нормализация вывода
"""

from .file_utils import touch_later, write, write_component
from .flare_utils import make_flare, render, squash

__all__ = [
    # File utilities
    "write", "write_component", "touch_later",

    # Flare builders
    "make_flare", "render", "squash",
]
