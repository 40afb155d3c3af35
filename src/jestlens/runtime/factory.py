#
# src/jestlens/runtime/factory.py
#
"""
Factory for creating execution surfaces by name.
"""
from pathlib import Path

import structlog
from rich.console import Console

from jestlens.exceptions import ConfigurationError
from jestlens.runtime.protocols import ExecutionSurface
from jestlens.runtime.surfaces import EchoSurface, ShellSurface

log = structlog.get_logger("runtime.factory")

SURFACE_MAP = {
    "shell": ShellSurface,
    "echo": EchoSurface,
    "dry-run": EchoSurface,  # alias
}


def get_surface(kind: str, name: str, console: Console, cwd: Path | None = None) -> ExecutionSurface:
    """
    Factory function to get an execution surface instance.
    """
    surface_key = kind.lower()
    surface_class = SURFACE_MAP.get(surface_key)

    if not surface_class:
        log.error("Unsupported execution surface specified", surface=kind)
        raise ConfigurationError(
            f"Unsupported execution surface: '{kind}'. "
            f"Available surfaces: {list(SURFACE_MAP.keys())}"
        )

    log.debug("Instantiating execution surface", surface=kind, name=name)
    if surface_class is ShellSurface:
        return ShellSurface(name, console, cwd=cwd)
    return surface_class(name, console)

# 🔼⚙️
