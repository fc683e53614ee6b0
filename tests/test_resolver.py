"""
Разрешение имён компонентов в пути исходников.
"""

from pathlib import Path

from flare.resolver import ComponentResolver
from tests.infrastructure import write


def _resolver(root: Path) -> ComponentResolver:
    resolver = ComponentResolver()
    resolver.add_path(root / "components")
    resolver.add_path(root / "vendor", namespace="ui")
    return resolver


def test_candidates_order(tmp_path: Path):
    base = tmp_path / "components"
    write(base / "button.jinja", "")
    write(base / "card" / "index.jinja", "")
    write(base / "alert" / "alert.jinja", "")

    resolver = _resolver(tmp_path)

    assert resolver.resolve("button") == (base / "button.jinja").resolve().as_posix()
    assert resolver.resolve("card") == (base / "card" / "index.jinja").resolve().as_posix()
    assert resolver.resolve("alert") == (base / "alert" / "alert.jinja").resolve().as_posix()


def test_dots_become_directories(tmp_path: Path):
    write(tmp_path / "components" / "forms" / "input.jinja", "")
    assert _resolver(tmp_path)("forms.input").endswith("components/forms/input.jinja")


def test_namespace(tmp_path: Path):
    write(tmp_path / "vendor" / "card.jinja", "")
    write(tmp_path / "components" / "card.jinja", "")

    resolver = _resolver(tmp_path)

    assert resolver.resolve("ui::card").endswith("vendor/card.jinja")
    assert resolver.resolve("card").endswith("components/card.jinja")


def test_unknown_component(tmp_path: Path):
    assert _resolver(tmp_path).resolve("missing") is None
