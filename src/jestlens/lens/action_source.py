#
# src/jestlens/lens/action_source.py
#
"""
Loads project-contributed lens actions from a `jestlens_actions.py` file.

The file is an ordinary Python module defining LENS_OPTIONS, a list of
mappings:

    LENS_OPTIONS = [
        {"name": "watch", "title": "Watch", "options": ["--watch"]},
        {"name": "coverage", "types": ["suite"], "options": "--coverage"},
        {"name": "notify", "runner": my_runner},
    ]

`runner`, when present, is called (or awaited) with a RunnerContext instead
of the dispatcher sending the command itself.
"""
import asyncio
import importlib.util
import inspect
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog
from attrs import define, field

from jestlens.config.models import DEFAULT_ACTIONS_FILE_NAME
from jestlens.exceptions import ActionSourceError
from jestlens.lens.models import ACTION_RUN_WITH_OPTIONS
from jestlens.runtime.protocols import RunnerContext
from jestlens.telemetry import StructLogger
from jestlens.tree import NodeType

log: StructLogger = structlog.get_logger("lens.action_source")

ACTIONS_ATTRIBUTE = "LENS_OPTIONS"
_ENTRY_KEYS = {"name", "title", "command", "options", "types", "runner"}


@define(frozen=True, slots=True)
class ActionEntry:
    """One project-defined action."""
    name: str
    title: str
    command: str = field(default=ACTION_RUN_WITH_OPTIONS)
    options: tuple[str, ...] = field(default=(), converter=tuple)
    node_types: frozenset[NodeType] | None = field(default=None)
    runner: Callable[[RunnerContext], Any] | None = field(default=None, eq=False, repr=False)

    def applies_to(self, node_type: NodeType) -> bool:
        return self.node_types is None or node_type in self.node_types

    async def run(self, context: RunnerContext) -> None:
        if self.runner is None:
            return
        result = self.runner(context)
        if inspect.isawaitable(result):
            await result


def find_actions_file(
    file_path: Path,
    workspace_root: Path,
    file_name: str = DEFAULT_ACTIONS_FILE_NAME,
) -> Path | None:
    """
    Walks from the file's directory up to the workspace root looking for `file_name`.

    The first directory that has it wins. Files outside the workspace get None.
    """
    directory = Path(file_path).resolve().parent
    root = Path(workspace_root).resolve()
    if directory != root and root not in directory.parents:
        log.debug("Test file is outside the workspace", file=str(file_path), workspace=str(root))
        return None

    while True:
        candidate = directory / file_name
        if candidate.is_file():
            return candidate
        if directory == root:
            return None
        directory = directory.parent


def _coerce_options(value: Any, where: str, path: Path) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise ActionSourceError(f"{where}.options must be a string or a list of strings", str(path))


def _coerce_types(value: Any, where: str, path: Path) -> frozenset[NodeType] | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    try:
        return frozenset(NodeType(item) for item in value)
    except (TypeError, ValueError) as e:
        raise ActionSourceError(
            f"{where}.types must name node types from {[t.value for t in NodeType]}", str(path), e
        ) from e


def _coerce_entry(raw: Any, index: int, path: Path) -> ActionEntry:
    where = f"{ACTIONS_ATTRIBUTE}[{index}]"
    if isinstance(raw, ActionEntry):
        return raw
    if not isinstance(raw, Mapping):
        raise ActionSourceError(f"{where} must be a mapping", str(path))

    unknown = sorted(set(raw) - _ENTRY_KEYS, key=str)
    if unknown:
        raise ActionSourceError(f"{where} has unknown key(s): {', '.join(map(str, unknown))}", str(path))

    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise ActionSourceError(f"{where}.name must be a non-empty string", str(path))
    title = raw.get("title", name)
    command = raw.get("command", ACTION_RUN_WITH_OPTIONS)
    if not isinstance(title, str) or not isinstance(command, str):
        raise ActionSourceError(f"{where}.title and .command must be strings", str(path))
    runner = raw.get("runner")
    if runner is not None and not callable(runner):
        raise ActionSourceError(f"{where}.runner must be callable", str(path))

    return ActionEntry(
        name=name,
        title=title,
        command=command,
        options=_coerce_options(raw.get("options", ()), where, path),
        node_types=_coerce_types(raw.get("types"), where, path),
        runner=runner,
    )


def load_action_entries(path: Path) -> tuple[ActionEntry, ...]:
    """
    Imports an actions file and validates its LENS_OPTIONS.

    Raises:
        ActionSourceError: The file cannot be imported, raises, or is malformed.
    """
    module_name = f"_jestlens_actions_{abs(hash(str(path)))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ActionSourceError("Cannot import actions file", str(path))

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except (Exception, SystemExit) as e:
        raise ActionSourceError("Actions file failed to load", str(path), e) from e

    raw_entries = getattr(module, ACTIONS_ATTRIBUTE, ())
    if isinstance(raw_entries, (str, Mapping)) or not isinstance(raw_entries, Iterable):
        raise ActionSourceError(f"{ACTIONS_ATTRIBUTE} must be a list", str(path))
    try:
        return tuple(_coerce_entry(raw, i, path) for i, raw in enumerate(raw_entries))
    except ActionSourceError:
        raise
    except Exception as e:
        raise ActionSourceError(f"Invalid {ACTIONS_ATTRIBUTE}", str(path), e) from e


class ActionSource:
    """
    Project-scoped, lazily loaded action entries.

    Loads are keyed by (file, modification time): concurrent callers share one
    in-flight load, and a failing file version is reported only once.
    """

    def __init__(
        self,
        workspace_root: Path,
        file_name: str = DEFAULT_ACTIONS_FILE_NAME,
        warn: Callable[[str], None] | None = None,
    ):
        self.workspace_root = Path(workspace_root)
        self.file_name = file_name
        self._warn = warn
        self._loads: dict[tuple[Path, int], asyncio.Future[tuple[ActionEntry, ...]]] = {}

    async def entries_for(self, file_path: Path) -> tuple[ActionEntry, ...]:
        """Entries that apply to `file_path`; empty when there is no usable file."""
        try:
            path = await asyncio.to_thread(find_actions_file, file_path, self.workspace_root, self.file_name)
            if path is None:
                return ()
            key = (path, path.stat().st_mtime_ns)
        except OSError as e:
            self._report(ActionSourceError("Cannot access actions file", None, e))
            return ()

        load = self._loads.get(key)
        if load is None:
            for stale in [k for k in self._loads if k[0] == path]:
                del self._loads[stale]
            load = asyncio.ensure_future(self._load(path))
            self._loads[key] = load
        return await load

    async def find(self, file_path: Path, name: str) -> ActionEntry | None:
        for entry in await self.entries_for(file_path):
            if entry.name == name:
                return entry
        return None

    async def _load(self, path: Path) -> tuple[ActionEntry, ...]:
        try:
            entries = await asyncio.to_thread(load_action_entries, path)
        except ActionSourceError as e:
            self._report(e)
            return ()
        log.info("Loaded project actions", path=str(path), count=len(entries), emoji_key="actions")
        return entries

    def _report(self, error: ActionSourceError) -> None:
        log.warning("Project actions unavailable", error=str(error), emoji_key="actions")
        if self._warn is not None:
            self._warn(f"jestlens: {error}")

# 🔼⚙️
