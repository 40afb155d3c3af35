# src/jestlens/runtime/dispatcher.py
"""
Runs, debugs and re-runs the test under the cursor through an editor host.
"""
from collections.abc import Iterable

import structlog

from jestlens.args import ArgBuilder, merge_options, quote
from jestlens.config.models import RunnerConfig
from jestlens.lens.action_source import ActionEntry, ActionSource
from jestlens.locator import NameLocator
from jestlens.parsing import SourceParser
from jestlens.runtime.protocols import (
    ActiveDocument,
    DebugLaunch,
    DebugSpecification,
    EditorHost,
    ExecutionSurface,
    HostCapabilities,
    RunnerArgs,
    RunnerContext,
)
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.dispatcher")

DEBUG_DEFAULTS: dict[str, str] = {
    "console": "integratedTerminal",
    "internalConsoleOptions": "neverOpen",
    "name": "Debug Jest Tests",
    "request": "launch",
    "type": "node",
}
RUN_IN_BAND = "--runInBand"
YARN_PNP_LOADER = ".pnp.js"


def _normalize_options(options: str | Iterable[str] | None) -> list[str]:
    if options is None:
        return []
    if isinstance(options, str):
        return [options]
    return [str(option) for option in options]


class CommandDispatcher:
    """
    Orchestrates save -> resolve test name -> build -> remember -> execute.

    Owns one reusable execution surface and the previous invocation. Every
    operation is a silent no-op when the host has no active document.
    """

    def __init__(
        self,
        host: EditorHost,
        config: RunnerConfig,
        parser: SourceParser,
        action_source: ActionSource | None = None,
        windows: bool | None = None,
    ):
        self.host = host
        self.config = config
        self.action_source = action_source
        self.locator = NameLocator(parser)
        self.arg_builder = ArgBuilder(config, windows)
        self._surface: ExecutionSurface | None = None
        self._previous: str | DebugLaunch | None = None
        log.debug("CommandDispatcher initialized.", workspace=str(config.workspace_root))

    @property
    def previous_invocation(self) -> str | DebugLaunch | None:
        return self._previous

    # --- Public operations ---

    async def run_current_test(self, explicit_name: str | None = None) -> None:
        prepared = await self._prepare(explicit_name)
        if prepared is None:
            return
        document, test_name = prepared
        command = self.arg_builder.build_command(str(document.file_path), test_name)
        await self._dispatch(command.text)

    async def run_with_options(
        self,
        action: str | None = None,
        options: str | Iterable[str] | None = None,
        explicit_name: str | None = None,
    ) -> None:
        """
        Runs the current test with extra Jest options.

        When `action` names a project entry, its options are merged first, and
        if it has a runner the runner receives the built command instead of
        the surface.
        """
        prepared = await self._prepare(explicit_name)
        if prepared is None:
            return
        document, test_name = prepared

        entry = await self._find_entry(document, action) if action else None
        merged = merge_options(entry.options if entry else (), _normalize_options(options))
        command = self.arg_builder.build_command(str(document.file_path), test_name, merged)

        if entry is not None and entry.runner is not None:
            context = RunnerContext(
                host=HostCapabilities(
                    workspace_root=self.host.workspace_root,
                    show_warning=self.host.show_warning,
                    run_command=self.run_command,
                ),
                dispatcher=self,
                args=RunnerArgs(
                    test_name=test_name,
                    file_path=str(document.file_path),
                    options=merged,
                    command=command.text,
                ),
            )
            await self._run_entry(entry, context)
            return

        await self._dispatch(command.text)

    async def run_current_file(self, options: str | Iterable[str] | None = None) -> None:
        prepared = await self._prepare(resolve_name=False)
        if prepared is None:
            return
        document, _ = prepared
        command = self.arg_builder.build_command(
            str(document.file_path), None, _normalize_options(options)
        )
        await self._dispatch(command.text)

    async def run_previous_test(self) -> None:
        previous = self._previous
        if previous is None:
            log.debug("No previous invocation to replay.")
            return

        document = self.host.active_document()
        if document is not None:
            await self.host.save_document(document)

        if isinstance(previous, str):
            log.info("Replaying previous command", command=previous, emoji_key="command")
            await self._go_to_project_directory()
            await self.run_command(previous)
        else:
            log.info("Replaying previous debug session", emoji_key="debug")
            await self._launch(previous)

    async def debug_current_test(self, explicit_name: str | None = None) -> None:
        prepared = await self._prepare(explicit_name)
        if prepared is None:
            return
        document, test_name = prepared
        specification = self.build_debug_specification(str(document.file_path), test_name)
        await self._launch(
            DebugLaunch(
                specification=specification,
                workspace_folder=document.workspace_folder or self.host.workspace_root,
            )
        )

    def build_debug_specification(self, file_path: str, test_name: str | None) -> DebugSpecification:
        """Launch defaults, overlaid by configured debug options, plus the test args."""
        config = self.config
        launch: dict = {
            **DEBUG_DEFAULTS,
            "program": config.jest_bin_path,
            "cwd": config.resolved_project_path,
            **config.debug_options,
        }
        if config.enable_yarn_pnp_support:
            launch["runtimeArgs"] = ["--require", str(config.workspace_root / YARN_PNP_LOADER)]
        if config.detect_yarn_pnp_jest_bin:
            pnp_bin = config.yarn_pnp_jest_bin_path
            if pnp_bin:
                launch["program"] = pnp_bin
            else:
                log.warning("No Yarn PnP Jest binary found; keeping default program", emoji_key="debug")

        args = list(launch.pop("args", None) or [])
        args.extend(self.arg_builder.build(file_path, test_name, with_quoting=False))
        args.append(RUN_IN_BAND)
        runtime_args = launch.pop("runtimeArgs", None)

        return DebugSpecification(
            console=launch.pop("console"),
            internal_console_options=launch.pop("internalConsoleOptions"),
            name=launch.pop("name"),
            program=str(launch.pop("program")),
            request=launch.pop("request"),
            type=launch.pop("type"),
            cwd=str(launch.pop("cwd")),
            args=args,
            runtime_args=tuple(runtime_args) if runtime_args is not None else None,
            extra=launch,
        )

    async def run_command(self, text: str) -> None:
        """Shows and clears the surface, then sends `text` to it."""
        surface = self._ensure_surface()
        surface.show()
        await surface.clear()
        await surface.send_text(text)

    def on_surface_closed(self, surface: ExecutionSurface) -> None:
        if surface is self._surface:
            log.debug("Execution surface closed; it will be recreated on next use.", surface=surface.name)
            self._surface = None

    def close(self) -> None:
        """Forgets the surface and the previous invocation."""
        self._surface = None
        self._previous = None
        log.debug("CommandDispatcher closed.")

    # --- Internals ---

    async def _prepare(
        self,
        explicit_name: str | None = None,
        resolve_name: bool = True,
    ) -> tuple[ActiveDocument, str | None] | None:
        document = self.host.active_document()
        if document is None:
            log.debug("No active document; nothing to do.")
            return None

        await self.host.save_document(document)

        test_name = explicit_name
        if not test_name and resolve_name:
            test_name = await self.locator.resolve(
                document.file_path,
                document.cursor_line,
                text=document.text,
                selection_text=document.selection_text,
            )
        return document, test_name

    async def _find_entry(self, document: ActiveDocument, action: str) -> ActionEntry | None:
        if self.action_source is None:
            log.warning("Project action requested but no action source is configured", action=action)
            return None
        entry = await self.action_source.find(document.file_path, action)
        if entry is None:
            log.warning("Unknown project action; running with options only", action=action, emoji_key="actions")
        return entry

    async def _run_entry(self, entry: ActionEntry, context: RunnerContext) -> None:
        log.info("Handing command to project runner", action=entry.name, command=context.args.command)
        try:
            await entry.run(context)
        except Exception as e:
            log.warning("Project action runner failed", action=entry.name, error=str(e), exc_info=True)
            self.host.show_warning(f"jestlens: action '{entry.name}' failed: {e}")

    async def _dispatch(self, command: str) -> None:
        self._previous = command
        log.info("Running Jest command", command=command, emoji_key="command")
        await self._go_to_project_directory()
        await self.run_command(command)

    async def _launch(self, launch: DebugLaunch) -> None:
        self._previous = launch
        log.info(
            "Starting debug session",
            program=launch.specification.program,
            args=list(launch.specification.args),
            emoji_key="debug",
        )
        await self.host.start_debugging(launch.workspace_folder, launch.specification)

    async def _go_to_project_directory(self) -> None:
        project_path = self.config.resolved_project_path
        await self.run_command(f"cd {quote(project_path, self.arg_builder.windows)}")

    def _ensure_surface(self) -> ExecutionSurface:
        if self._surface is None:
            name = self.config.terminal_name
            surface = self.host.find_surface(name)
            if surface is None:
                surface = self.host.create_surface(name)
                log.debug("Created execution surface", surface=name, emoji_key="surface")
            self._surface = surface
        return self._surface

# 🔼⚙️
