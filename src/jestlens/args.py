# src/jestlens/args.py
#
"""
Builds the Jest argument list and shell command for a file and test name.
"""

import sys
from collections.abc import Iterable

import structlog
from attrs import define, field

from jestlens.config.models import RunnerConfig
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("args")


def is_windows() -> bool:
    return sys.platform.startswith("win")


def normalize_path(path: str, windows: bool) -> str:
    """Jest expects forward slashes, including on Windows."""
    return path.replace("\\", "/") if windows else path


def escape_plus_sign(path: str) -> str:
    """Keeps Jest's glob layer from reading `+` as a pattern operator."""
    return path.replace("+", "\\+")


def escape_single_quotes(text: str, windows: bool) -> str:
    """Makes `text` safe inside a single-quoted POSIX shell token."""
    return text if windows else text.replace("'", "'\\''")


def quote(text: str, windows: bool) -> str:
    """Wraps one value for a shell line: double quotes on Windows, POSIX single quotes elsewhere."""
    if windows:
        return f'"{text}"'
    return f"'{escape_single_quotes(text, windows)}'"


def merge_options(static_options: Iterable[str], extra_options: Iterable[str]) -> list[str]:
    """Static options first, then extras; exact duplicates keep their first position."""
    return list(dict.fromkeys([*static_options, *extra_options]))


@define(frozen=True, slots=True)
class RunCommand:
    """A fully built Jest invocation."""
    executable: str
    args: tuple[str, ...] = field(converter=tuple)

    @property
    def text(self) -> str:
        return " ".join([self.executable, *self.args])

    def __str__(self) -> str:
        return self.text


class ArgBuilder:
    """Turns (file, test name, options) into Jest arguments for one workspace."""

    def __init__(self, config: RunnerConfig, windows: bool | None = None):
        self.config = config
        self.windows = is_windows() if windows is None else windows

    @property
    def executable(self) -> str:
        if self.config.jest_command:
            return self.config.jest_command
        if self.config.enable_yarn_pnp_support:
            return "yarn jest"
        return f"node {quote(normalize_path(self.config.jest_bin_path, self.windows), self.windows)}"

    def build(
        self,
        file_path: str,
        test_name: str | None = None,
        with_quoting: bool = True,
        extra_options: Iterable[str] = (),
    ) -> list[str]:
        """
        Ordered Jest arguments: file, `-c config`, `-t name`, then options.

        Args:
            file_path: Test file to run.
            test_name: Full test name pattern; omitted when falsy.
            with_quoting: Quote values for a shell line. When False the values
                are left bare for a structured (debugger) argument list.
            extra_options: Per-call options merged after the configured ones.
        """
        quoter = (lambda s: quote(s, self.windows)) if with_quoting else (lambda s: s)

        args = [quoter(escape_plus_sign(normalize_path(str(file_path), self.windows)))]

        config_path = self.config.jest_config_path
        if config_path:
            args.extend(["-c", quoter(normalize_path(config_path, self.windows))])

        if test_name:
            args.extend(["-t", quoter(test_name)])

        args.extend(merge_options(self.config.run_options, extra_options))
        return args

    def build_command(
        self,
        file_path: str,
        test_name: str | None = None,
        extra_options: Iterable[str] = (),
    ) -> RunCommand:
        command = RunCommand(
            executable=self.executable,
            args=self.build(file_path, test_name, True, extra_options),
        )
        log.debug("Built Jest command", command=command.text, emoji_key="command")
        return command

# 🔼⚙️
