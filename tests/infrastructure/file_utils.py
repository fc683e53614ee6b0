"""
Утилиты для создания файлов компонентов и шаблонов в тестах.
"""

from __future__ import annotations

import os
import textwrap
from pathlib import Path


def write(p: Path, text: str) -> Path:
    """
    Записывает текст в файл, создавая родительские директории при необходимости.

    Args:
        p: Путь к файлу
        text: Содержимое для записи

    Returns:
        Путь к созданному файлу
    """
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


def write_component(root: Path, name: str, source: str, *, dedent: bool = True) -> Path:
    """
    Создаёт исходник компонента по имени.

    Точки в имени становятся каталогами: "forms.input" → forms/input.jinja.

    Args:
        root: Каталог компонентов
        name: Имя компонента
        source: Исходник
        dedent: Применить ли textwrap.dedent

    Returns:
        Путь к созданному файлу
    """
    if dedent:
        source = textwrap.dedent(source).strip() + "\n"
    return write(root / (name.replace(".", "/") + ".jinja"), source)


def touch_later(p: Path, seconds: float = 5.0) -> None:
    """Сдвигает mtime файла вперёд (для проверок перекомпиляции)."""
    stat = p.stat()
    os.utime(p, (stat.st_atime + seconds, stat.st_mtime + seconds))


__all__ = ["write", "write_component", "touch_later"]
