# tests/unit/test_config.py

"""Tests for loading jestlens.toml and environment overrides."""

from pathlib import Path

import pytest

from jestlens.config import DEFAULT_CONFIG_FILE_NAME, RunnerConfig, load_config
from jestlens.exceptions import ConfigurationError

FULL_CONFIG = """\
[global]
log_level = "DEBUG"

[runner]
jest_command = "npx jest"
config_path = "jest.config.js"
run_options = ["--silent", "--ci"]
enable_yarn_pnp_support = true

[runner.debug_options]
name = "Custom"
env = { CI = "1" }
"""


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


class TestLoadConfig:
    def test_defaults_without_a_file(self, workspace: Path):
        config = load_config(None, workspace, environ={})

        assert config.source_path is None
        assert config.runner.workspace_root == workspace.resolve()
        assert config.runner.jest_command is None
        assert config.runner.run_options == ()
        assert config.runner.terminal_name == "jestlens"
        assert config.global_config.log_level == "WARNING"

    def test_default_file_in_workspace_is_picked_up(self, workspace: Path):
        path = _write(workspace / DEFAULT_CONFIG_FILE_NAME, FULL_CONFIG)
        config = load_config(None, workspace, environ={})

        assert config.source_path == path.resolve()
        assert config.runner.jest_command == "npx jest"
        assert config.runner.run_options == ("--silent", "--ci")
        assert config.runner.enable_yarn_pnp_support is True
        assert config.runner.debug_options == {"name": "Custom", "env": {"CI": "1"}}
        assert config.global_config.numeric_log_level == 10

    def test_explicit_path(self, tmp_path: Path, workspace: Path):
        path = _write(tmp_path / "custom.toml", '[runner]\nproject_path = "/srv/app"\n')
        config = load_config(path, workspace, environ={})
        assert config.runner.resolved_project_path == "/srv/app"

    @pytest.mark.parametrize(
        "text, message",
        [
            ("[runner\n", "Invalid TOML"),
            ("[extra]\nx = 1\n", "Unknown key"),
            ('[runner]\njest_cmd = "x"\n', "Unknown key"),
            ("[runner]\nrun_options = \"--ci\"\n", "list of strings"),
            ("[runner]\nrun_options = [1]\n", "list of strings"),
            ('[runner]\nenable_yarn_pnp_support = "yes"\n', "must be a boolean"),
            ("[runner]\ndebug_options = 3\n", "must be a table"),
            ("[runner]\njest_path = 3\n", "must be a string"),
            ('[global]\nlog_level = "LOUD"\n', "Invalid log_level"),
        ],
    )
    def test_invalid_files(self, workspace: Path, text: str, message: str):
        path = _write(workspace / DEFAULT_CONFIG_FILE_NAME, text)
        with pytest.raises(ConfigurationError, match=message) as exc_info:
            load_config(None, workspace, environ={})
        assert exc_info.value.path == str(path.resolve())


class TestEnvironmentOverrides:
    def test_env_wins_over_file(self, workspace: Path):
        _write(workspace / DEFAULT_CONFIG_FILE_NAME, FULL_CONFIG)
        config = load_config(
            None,
            workspace,
            environ={
                "JESTLENS_JEST_COMMAND": "yarn test",
                "JESTLENS_RUN_OPTIONS": "--watch --testTimeout 5000",
                "JESTLENS_ENABLE_YARN_PNP_SUPPORT": "off",
            },
        )
        assert config.runner.jest_command == "yarn test"
        assert config.runner.run_options == ("--watch", "--testTimeout", "5000")
        assert config.runner.enable_yarn_pnp_support is False

    def test_empty_string_clears_a_path(self, workspace: Path):
        _write(workspace / DEFAULT_CONFIG_FILE_NAME, FULL_CONFIG)
        config = load_config(None, workspace, environ={"JESTLENS_CONFIG_PATH": ""})
        assert config.runner.config_path is None
        assert config.runner.jest_config_path is None

    def test_invalid_boolean(self, workspace: Path):
        with pytest.raises(ConfigurationError, match="JESTLENS_DETECT_YARN_PNP_JEST_BIN"):
            load_config(None, workspace, environ={"JESTLENS_DETECT_YARN_PNP_JEST_BIN": "maybe"})


class TestRunnerConfig:
    def test_derived_paths(self):
        config = RunnerConfig(workspace_root=Path("/ws"), config_path="jest.config.js")
        assert config.jest_bin_path == "/ws/node_modules/jest/bin/jest.js"
        assert config.jest_config_path == "/ws/jest.config.js"
        assert config.resolved_project_path == "/ws"

    def test_empty_strings_are_unset(self):
        config = RunnerConfig(workspace_root=Path("/ws"), jest_command="", jest_path="")
        assert config.jest_command is None
        assert config.jest_bin_path == "/ws/node_modules/jest/bin/jest.js"

    def test_run_options_must_be_strings(self):
        with pytest.raises(ValueError):
            RunnerConfig(workspace_root=Path("/ws"), run_options=["--ci", 5])

    def test_no_yarn_cache(self, tmp_path: Path):
        assert RunnerConfig(workspace_root=tmp_path).yarn_pnp_jest_bin_path is None
