#
# src/jestlens/runtime/protocols.py
#
"""
Defines the host-facing protocols and the values exchanged with them.
"""
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from attrs import define, field

if TYPE_CHECKING:
    from jestlens.runtime.dispatcher import CommandDispatcher


@define(frozen=True, slots=True)
class ActiveDocument:
    """
    The editor's current document and cursor.

    `text` is the unsaved buffer when the host has one; None means the
    parser reads the file from disk.
    """
    file_path: Path = field(converter=Path)
    cursor_line: int = field(default=1)
    text: str | None = field(default=None)
    selection_text: str = field(default="")
    workspace_folder: Path | None = field(default=None)


@define(frozen=True, slots=True)
class DebugSpecification:
    """A Node launch configuration for the host's debugger."""
    program: str
    cwd: str
    args: tuple[str, ...] = field(converter=tuple)
    console: str = field(default="integratedTerminal")
    internal_console_options: str = field(default="neverOpen")
    name: str = field(default="Debug Jest Tests")
    request: str = field(default="launch")
    type: str = field(default="node")
    runtime_args: tuple[str, ...] | None = field(default=None)
    extra: Mapping[str, Any] = field(factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """The outward launch record, camelCased the way debug adapters expect."""
        record: dict[str, Any] = dict(self.extra)
        record.update(
            console=self.console,
            internalConsoleOptions=self.internal_console_options,
            name=self.name,
            program=self.program,
            request=self.request,
            type=self.type,
            cwd=self.cwd,
            args=list(self.args),
        )
        if self.runtime_args is not None:
            record["runtimeArgs"] = list(self.runtime_args)
        return record


@define(frozen=True, slots=True)
class DebugLaunch:
    """A debug specification bound to the workspace folder it launches in."""
    specification: DebugSpecification
    workspace_folder: Path | None = field(default=None)


@runtime_checkable
class ExecutionSurface(Protocol):
    """
    A persistent interactive session (e.g. a terminal) that receives commands.
    """
    name: str

    def show(self) -> None:
        """Brings the surface to the foreground."""
        ...

    async def clear(self) -> None:
        """Clears previous output."""
        ...

    async def send_text(self, text: str) -> None:
        """Sends one command line to the session."""
        ...


@runtime_checkable
class EditorHost(Protocol):
    """
    Protocol for the editor (or CLI) that hosts the dispatcher.
    """
    workspace_root: Path

    def active_document(self) -> ActiveDocument | None:
        """The focused test document, or None when nothing is active."""
        ...

    async def save_document(self, document: ActiveDocument) -> None:
        """Persists unsaved changes before a run."""
        ...

    def find_surface(self, name: str) -> ExecutionSurface | None:
        """An already open surface with this name, if any."""
        ...

    def create_surface(self, name: str) -> ExecutionSurface:
        """Opens a new surface."""
        ...

    async def start_debugging(self, workspace_folder: Path | None, specification: DebugSpecification) -> None:
        """Hands a launch configuration to the debug subsystem."""
        ...

    def show_warning(self, message: str) -> None:
        """Surfaces a non-fatal warning to the user."""
        ...


@define(frozen=True, slots=True)
class HostCapabilities:
    """The part of the host that project action runners may use."""
    workspace_root: Path
    show_warning: Callable[[str], None]
    run_command: Callable[[str], Awaitable[None]]


@define(frozen=True, slots=True)
class RunnerArgs:
    test_name: str | None
    file_path: str
    options: tuple[str, ...] = field(converter=tuple)
    command: str


@define(frozen=True, slots=True)
class RunnerContext:
    """Everything a project action runner receives."""
    host: HostCapabilities
    dispatcher: "CommandDispatcher"
    args: RunnerArgs

# 🔼⚙️
