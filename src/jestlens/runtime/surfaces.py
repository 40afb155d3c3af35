#
# src/jestlens/runtime/surfaces.py
#
"""
Terminal execution surfaces for the command-line host.
"""
import asyncio
import os
import shlex
from pathlib import Path

import structlog
from rich.console import Console

from jestlens.exceptions import JestLensError
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.surfaces")


class EchoSurface:
    """
    Prints each command instead of running it (dry run).
    """
    def __init__(self, name: str, console: Console):
        self.name = name
        self.console = console
        self.sent: list[str] = []

    def show(self) -> None:
        pass

    async def clear(self) -> None:
        pass

    async def send_text(self, text: str) -> None:
        self.sent.append(text)
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)


class ShellSurface:
    """
    A persistent shell-like session backed by asyncio subprocesses.

    `cd <dir>` lines change the session's working directory; every other
    line runs through the system shell in that directory with output
    streamed to the console.
    """
    def __init__(self, name: str, console: Console, cwd: Path | None = None):
        self.name = name
        self.console = console
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.last_exit_code: int | None = None

    def show(self) -> None:
        self.console.rule(f"[bold]{self.name}[/bold]")

    async def clear(self) -> None:
        if self.console.is_terminal:
            self.console.clear()

    async def send_text(self, text: str) -> None:
        surface_log = log.bind(surface=self.name, command=text, cwd=str(self.cwd))

        try:
            words = shlex.split(text, posix=os.name != "nt") if text.startswith("cd ") else []
        except ValueError as e:
            surface_log.error("Cannot parse directory change", error=str(e))
            raise JestLensError(f"cd: cannot parse '{text}': {e}") from e
        if len(words) == 2 and words[0] == "cd":
            target = (self.cwd / words[1].strip('"')).resolve()
            if not target.is_dir():
                surface_log.error("Directory does not exist", target=str(target))
                raise JestLensError(f"cd: no such directory: '{target}'")
            self.cwd = target
            surface_log.debug("Changed session directory", emoji_key="surface")
            return

        surface_log.info("Executing command", emoji_key="surface")
        try:
            process = await asyncio.create_subprocess_shell(
                text,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=self.cwd,
            )
            if process.stdout is not None:
                async for raw_line in process.stdout:
                    self.console.out(raw_line.decode("utf-8", errors="replace").rstrip("\n"), highlight=False)
            await process.wait()
        except OSError as e:
            surface_log.exception("Failed to start command")
            raise JestLensError(f"Failed to run '{text}': {e}") from e

        self.last_exit_code = process.returncode if process.returncode is not None else -1
        surface_log.info("Command finished", exit_code=self.last_exit_code, emoji_key="surface")

# 🔼⚙️
