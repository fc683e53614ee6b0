from pathlib import Path

import pytest

from flare import Flare

# Импорт из унифицированной инфраструктуры
from tests.infrastructure import make_flare, write_component


@pytest.fixture
def components(tmp_path: Path) -> Path:
    """Каталог компонентов проекта."""
    root = tmp_path / "components"
    root.mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def flare(tmp_path: Path, components: Path) -> Flare:
    """Менеджер с пустой конфигурацией оптимизаций."""
    return make_flare(tmp_path)


@pytest.fixture
def component(components: Path):
    """Фабрика исходников компонентов: component("button", "...")."""
    def _make(name: str, source: str) -> Path:
        return write_component(components, name, source)
    return _make
