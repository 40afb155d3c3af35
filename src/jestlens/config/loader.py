#
# config/loader.py
#
"""
Loads jestlens.toml into the attrs configuration models.

Precedence: CLI options > environment variables > config file > defaults.
"""

import os
import shlex
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import attrs
import structlog

from jestlens.config.models import GlobalConfig, JestLensConfig, RunnerConfig
from jestlens.exceptions import ConfigurationError
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("config.loader")

DEFAULT_CONFIG_FILE_NAME = "jestlens.toml"

_RUNNER_KEYS = {
    f.name for f in attrs.fields(RunnerConfig) if f.name != "workspace_root"
}
_GLOBAL_KEYS = {f.name for f in attrs.fields(GlobalConfig)}
_BOOL_KEYS = {"enable_yarn_pnp_support", "detect_yarn_pnp_jest_bin"}
_LIST_KEYS = {"run_options"}
_TABLE_KEYS = {"debug_options"}

ENV_OVERRIDES: dict[str, str] = {
    "JESTLENS_JEST_COMMAND": "jest_command",
    "JESTLENS_JEST_PATH": "jest_path",
    "JESTLENS_PROJECT_PATH": "project_path",
    "JESTLENS_CONFIG_PATH": "config_path",
    "JESTLENS_RUN_OPTIONS": "run_options",
    "JESTLENS_ENABLE_YARN_PNP_SUPPORT": "enable_yarn_pnp_support",
    "JESTLENS_DETECT_YARN_PNP_JEST_BIN": "detect_yarn_pnp_jest_bin",
}
_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def _check_keys(table: Mapping[str, Any], allowed: set[str], section: str, path: Path | None) -> None:
    unknown = sorted(set(table) - allowed)
    if unknown:
        raise ConfigurationError(
            f"Unknown key(s) in [{section}]: {', '.join(unknown)}",
            str(path) if path else None,
        )


def _check_runner_types(table: Mapping[str, Any], path: Path | None) -> None:
    where = str(path) if path else None
    for key, value in table.items():
        if key in _BOOL_KEYS and not isinstance(value, bool):
            raise ConfigurationError(f"[runner].{key} must be a boolean", where)
        elif key in _LIST_KEYS and not (
            isinstance(value, list) and all(isinstance(item, str) for item in value)
        ):
            raise ConfigurationError(f"[runner].{key} must be a list of strings", where)
        elif key in _TABLE_KEYS and not isinstance(value, Mapping):
            raise ConfigurationError(f"[runner].{key} must be a table", where)
        elif key not in _BOOL_KEYS | _LIST_KEYS | _TABLE_KEYS and not isinstance(value, str):
            raise ConfigurationError(f"[runner].{key} must be a string", where)


def _parse_env_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ConfigurationError(f"Environment variable {name} must be a boolean, got '{raw}'")


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_name, key in ENV_OVERRIDES.items():
        if env_name not in environ:
            continue
        raw = environ[env_name]
        if key in _BOOL_KEYS:
            overrides[key] = _parse_env_bool(env_name, raw)
        elif key in _LIST_KEYS:
            overrides[key] = shlex.split(raw)
        else:
            overrides[key] = raw
        log.debug("Applied environment override", variable=env_name, key=key)
    return overrides


def _read_toml(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML: {e}", str(config_path)) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file: {e}", str(config_path)) from e


def load_config(
    config_path: Path | None,
    workspace_root: Path,
    environ: Mapping[str, str] | None = None,
) -> JestLensConfig:
    """
    Builds the effective configuration for a workspace.

    Args:
        config_path: Explicit config file. When None, `<workspace>/jestlens.toml`
            is used if it exists, otherwise defaults apply.
        workspace_root: Root of the JavaScript project.
        environ: Environment mapping; defaults to os.environ.

    Raises:
        ConfigurationError: The file is unreadable, not TOML, or has invalid keys/types.
    """
    environ = os.environ if environ is None else environ
    workspace_root = workspace_root.resolve()
    load_log = log.bind(workspace_root=str(workspace_root))

    if config_path is None:
        candidate = workspace_root / DEFAULT_CONFIG_FILE_NAME
        config_path = candidate if candidate.is_file() else None

    data: dict[str, Any] = {}
    if config_path is not None:
        load_log.debug("Reading configuration file", path=str(config_path), emoji_key="actions")
        data = _read_toml(config_path)
        _check_keys(data, {"global", "runner"}, "root", config_path)

    global_table = data.get("global", {})
    runner_table = data.get("runner", {})
    if not isinstance(global_table, Mapping) or not isinstance(runner_table, Mapping):
        raise ConfigurationError("[global] and [runner] must be tables", str(config_path))
    _check_keys(global_table, _GLOBAL_KEYS, "global", config_path)
    _check_keys(runner_table, _RUNNER_KEYS, "runner", config_path)
    _check_runner_types(runner_table, config_path)

    runner_values = {**runner_table, **_env_overrides(environ)}

    try:
        config = JestLensConfig(
            runner=RunnerConfig(workspace_root=workspace_root, **runner_values),
            global_config=GlobalConfig(**global_table),
            source_path=config_path,
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(str(e), str(config_path) if config_path else None) from e

    load_log.info(
        "Configuration loaded",
        source=str(config_path) if config_path else "defaults",
        run_options=list(config.runner.run_options),
    )
    return config


# 🔼⚙️
