#
# config/models.py
#
"""
Attrs-based data models for jestlens configuration structure.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from attrs import converters, define, field

DEFAULT_TERMINAL_NAME = "jestlens"
DEFAULT_ACTIONS_FILE_NAME = "jestlens_actions.py"
DEFAULT_JEST_BIN = Path("node_modules") / "jest" / "bin" / "jest.js"
YARN_PNP_JEST_BIN_GLOB = ".yarn/cache/jest-cli-*.zip"
YARN_PNP_JEST_BIN_SUFFIX = Path("node_modules") / "jest-cli" / "bin" / "jest.js"


def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_string_items(inst: Any, attr: Any, value: tuple[str, ...]) -> None:
    if not all(isinstance(item, str) for item in value):
        raise ValueError(f"Field '{attr.name}' must be a list of strings, got {list(value)}")


def _empty_to_none(value: str | None) -> str | None:
    return value or None


@define(frozen=True, slots=True)
class RunnerConfig:
    """How Jest is invoked for one workspace."""
    workspace_root: Path = field(converter=Path)
    jest_command: str | None = field(default=None, converter=_empty_to_none)
    jest_path: str | None = field(default=None, converter=_empty_to_none)
    project_path: str | None = field(default=None, converter=_empty_to_none)
    config_path: str | None = field(default=None, converter=_empty_to_none)
    run_options: tuple[str, ...] = field(
        default=(), converter=tuple, validator=_validate_string_items
    )
    debug_options: Mapping[str, Any] = field(factory=dict, converter=dict)
    enable_yarn_pnp_support: bool = field(default=False)
    detect_yarn_pnp_jest_bin: bool = field(default=False)
    terminal_name: str = field(default=DEFAULT_TERMINAL_NAME)
    actions_file_name: str = field(default=DEFAULT_ACTIONS_FILE_NAME)

    @property
    def jest_bin_path(self) -> str:
        if self.jest_path:
            return self.jest_path
        return str(self.workspace_root / DEFAULT_JEST_BIN)

    @property
    def resolved_project_path(self) -> str:
        return self.project_path or str(self.workspace_root)

    @property
    def jest_config_path(self) -> str | None:
        """Jest config file joined onto the workspace, or None when unset."""
        if not self.config_path:
            return None
        return str(self.workspace_root / self.config_path)

    @property
    def yarn_pnp_jest_bin_path(self) -> str | None:
        """First jest-cli binary found inside the Yarn PnP zip cache."""
        for archive in sorted(self.workspace_root.glob(YARN_PNP_JEST_BIN_GLOB)):
            return str(archive / YARN_PNP_JEST_BIN_SUFFIX)
        return None


@define(frozen=True, slots=True)
class GlobalConfig:
    """Global default settings for jestlens."""
    log_level: str = field(default="WARNING", validator=_validate_log_level)

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


@define(frozen=True, slots=True)
class JestLensConfig:
    """Root configuration object for jestlens."""
    runner: RunnerConfig = field()
    global_config: GlobalConfig = field(factory=GlobalConfig, metadata={"toml_name": "global"})
    source_path: Path | None = field(default=None, converter=converters.optional(Path))


# 🔼⚙️
