from __future__ import annotations

from importlib import metadata

DIST_NAME = "flare-components"


def tool_version() -> str:
    """
    Версия установленного пакета (пишется в заголовок скомпилированных модулей).
    Не зависит от остальных модулей (во избежание циклов).
    """
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"

__all__ = ["tool_version", "DIST_NAME"]
