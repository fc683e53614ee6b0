from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML

from .errors import FlareUserError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
DEFAULT_CFG_FILE = "flare.yaml"
DEFAULT_EXTENSION = ".jinja"

_yaml = YAML(typ="safe")


# --------------------------------------------------------------------------- #
# ОПТИМИЗАЦИИ ПО ПУТЯМ
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class PathRule:
    """Умолчания оптимизаций для каталога или отдельного файла."""
    path: str
    compile: bool = True
    memo: bool = False
    fold: bool = False


class OptimizeConfig:
    """
    Умолчания оптимизаций по префиксу пути.

    Побеждает самое специфичное правило: точное совпадение файла важнее
    любого каталога, более длинный каталог важнее короткого. Директива
    @blaze в самом компоненте всегда важнее этих умолчаний.
    """

    def __init__(self) -> None:
        self._rules: Dict[str, PathRule] = {}

    def add(self, path: str | Path, *, compile: bool = True, memo: bool = False, fold: bool = False) -> "OptimizeConfig":
        key = _normalize(path)
        self._rules[key] = PathRule(key, compile=compile, memo=memo, fold=fold)
        logger.debug(f"Optimize rule {key}: compile={compile} memo={memo} fold={fold}")
        return self

    # Цепочечный синоним: config.in_("components/ui", fold=True).in_(...)
    in_ = add

    @property
    def rules(self) -> List[PathRule]:
        return list(self._rules.values())

    def rule_for(self, file: str | Path) -> Optional[PathRule]:
        """Самое специфичное правило для файла или None."""
        target = _normalize(file)

        exact = self._rules.get(target)
        if exact is not None:
            return exact

        best: Optional[PathRule] = None
        for rule in self._rules.values():
            if target.startswith(rule.path.rstrip("/") + "/"):
                if best is None or len(rule.path) > len(best.path):
                    best = rule
        return best

    def should_compile(self, file: str | Path) -> bool:
        rule = self.rule_for(file)
        return True if rule is None else rule.compile

    def should_memoize(self, file: str | Path) -> bool:
        rule = self.rule_for(file)
        return False if rule is None else rule.memo

    def should_fold(self, file: str | Path) -> bool:
        rule = self.rule_for(file)
        return False if rule is None else rule.fold

    def clear(self) -> None:
        self._rules.clear()


def _normalize(path: str | Path) -> str:
    return Path(path).expanduser().resolve().as_posix()


# --------------------------------------------------------------------------- #
# ФАЙЛ КОНФИГУРАЦИИ
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class ComponentPath:
    """Каталог компонентов, опционально в пространстве имён (ui → <x-ui::card>)."""
    path: Path
    namespace: Optional[str] = None


@dataclass
class FlareConfig:
    component_paths: List[ComponentPath] = field(default_factory=list)
    compiled_path: Path = Path(".flare/compiled")
    extension: str = DEFAULT_EXTENSION
    memo_path: Optional[Path] = None
    optimize: OptimizeConfig = field(default_factory=OptimizeConfig)


def load_config(path: Path) -> FlareConfig:
    """
    Загрузить flare.yaml.

    • Если файла нет, вернуть дефолты.
    • Относительные пути считаются от каталога файла конфигурации.
    • Несовместимая schema_version считается ошибкой.
    """
    if not path.exists():
        return FlareConfig()

    with path.open(encoding="utf-8") as f:
        raw: Dict[str, Any] = _yaml.load(f) or {}

    if not isinstance(raw, dict):
        raise FlareUserError(f"Config {path} must be a mapping")

    if raw.get("schema_version", SCHEMA_VERSION) != SCHEMA_VERSION:
        raise FlareUserError(
            f"Unsupported config schema {raw.get('schema_version')} "
            f"(flare expects {SCHEMA_VERSION})"
        )

    base = path.parent

    def _resolve(value: str) -> Path:
        p = Path(value).expanduser()
        return p if p.is_absolute() else (base / p)

    cfg = FlareConfig()
    cfg.extension = str(raw.get("extension", DEFAULT_EXTENSION))
    if raw.get("compiled_path"):
        cfg.compiled_path = _resolve(str(raw["compiled_path"]))

    for entry in raw.get("components") or []:
        if isinstance(entry, str):
            entry = {"path": entry}
        cfg.component_paths.append(ComponentPath(_resolve(str(entry["path"])), entry.get("namespace")))

    for entry in raw.get("optimize") or []:
        cfg.optimize.add(
            _resolve(str(entry["path"])),
            compile=bool(entry.get("compile", True)),
            memo=bool(entry.get("memo", False)),
            fold=bool(entry.get("fold", False)),
        )

    memo = raw.get("memo") or {}
    if memo.get("path"):
        cfg.memo_path = _resolve(str(memo["path"]))

    logger.debug(f"Loaded config {path}: {len(cfg.component_paths)} component paths, {len(cfg.optimize.rules)} rules")
    return cfg


__all__ = [
    "SCHEMA_VERSION",
    "DEFAULT_CFG_FILE",
    "DEFAULT_EXTENSION",
    "PathRule",
    "OptimizeConfig",
    "ComponentPath",
    "FlareConfig",
    "load_config",
]
