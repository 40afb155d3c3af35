# src/jestlens/runtime/host.py

"""
An EditorHost for the command line: one file, one cursor, a shell for a terminal.
"""

import json
from pathlib import Path

import structlog
from rich.console import Console

from jestlens.runtime.factory import get_surface
from jestlens.runtime.protocols import ActiveDocument, DebugSpecification, ExecutionSurface
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.host")


class TerminalHost:
    """
    Hosts the dispatcher outside an editor.

    The "active document" is the file given on the command line; a test name
    given with --name plays the role of an editor selection. Debug launches
    are printed as JSON for a debugger front end to pick up.
    """

    def __init__(
        self,
        workspace_root: Path,
        console: Console,
        document: ActiveDocument | None = None,
        surface_kind: str = "shell",
        error_console: Console | None = None,
    ):
        self.workspace_root = Path(workspace_root)
        self.console = console
        self.error_console = error_console or Console(stderr=True)
        self.document = document
        self.surface_kind = surface_kind
        self.surfaces: dict[str, ExecutionSurface] = {}
        self.warnings: list[str] = []
        self.launches: list[DebugSpecification] = []

    def active_document(self) -> ActiveDocument | None:
        return self.document

    async def save_document(self, document: ActiveDocument) -> None:
        # Files on disk are already saved; nothing is buffered.
        log.debug("Document save requested", file=str(document.file_path))

    def find_surface(self, name: str) -> ExecutionSurface | None:
        return self.surfaces.get(name)

    def create_surface(self, name: str) -> ExecutionSurface:
        surface = get_surface(self.surface_kind, name, self.console, cwd=self.workspace_root)
        self.surfaces[name] = surface
        return surface

    async def start_debugging(self, workspace_folder: Path | None, specification: DebugSpecification) -> None:
        self.launches.append(specification)
        log.info(
            "Emitting debug launch configuration",
            workspace_folder=str(workspace_folder) if workspace_folder else None,
            emoji_key="debug",
        )
        self.console.print_json(json.dumps(specification.to_dict()))

    def show_warning(self, message: str) -> None:
        self.warnings.append(message)
        self.error_console.print(f"[yellow]Warning:[/yellow] {message}", highlight=False)

# 🔼⚙️
