#
# src/jestlens/lens/models.py
#
"""
Action descriptors produced for each test declaration.

A descriptor is either a FixedAction (run/debug, always present) or an
ExternalAction contributed by the project actions file.
"""
from enum import Enum
from typing import Any, TypeAlias

from attrs import define, field

from jestlens.parsing.protocols import Position
from jestlens.tree import NodeType

ACTION_RUN = "run"
ACTION_DEBUG = "debug"
ACTION_RUN_WITH_OPTIONS = "run-with-options"
ACTION_RUN_PREVIOUS = "run-previous"


class FixedActionKind(Enum):
    RUN = ACTION_RUN
    DEBUG = ACTION_DEBUG

    @property
    def title(self) -> str:
        return self.value.capitalize()


@define(frozen=True, slots=True)
class SourceRange:
    start: Position
    end: Position


@define(frozen=True, slots=True)
class FixedAction:
    kind: FixedActionKind
    test_name: str
    range: SourceRange

    @property
    def title(self) -> str:
        return self.kind.title

    @property
    def command(self) -> str:
        return self.kind.value

    @property
    def arguments(self) -> tuple[Any, ...]:
        return (self.test_name,)


@define(frozen=True, slots=True)
class ExternalAction:
    identifier: str
    title: str
    test_name: str
    range: SourceRange
    command: str = field(default=ACTION_RUN_WITH_OPTIONS)
    options: tuple[str, ...] = field(default=(), converter=tuple)
    has_runner: bool = field(default=False)

    @property
    def arguments(self) -> tuple[Any, ...]:
        return (self.identifier, self.options, self.test_name)


ActionDescriptor: TypeAlias = FixedAction | ExternalAction


@define(frozen=True, slots=True)
class ActionGroup:
    """All descriptors attached to one declaration."""
    node_index: int
    node_type: NodeType
    test_name: str
    range: SourceRange
    actions: tuple[ActionDescriptor, ...] = field(converter=tuple)

    @property
    def fixed_actions(self) -> list[FixedAction]:
        return [a for a in self.actions if isinstance(a, FixedAction)]

    @property
    def external_actions(self) -> list[ExternalAction]:
        return [a for a in self.actions if isinstance(a, ExternalAction)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_index": self.node_index,
            "node_type": self.node_type.value,
            "test_name": self.test_name,
            "range": {
                "start": {"line": self.range.start.line, "column": self.range.start.column},
                "end": {"line": self.range.end.line, "column": self.range.end.column},
            },
            "actions": [
                {"title": a.title, "command": a.command, "arguments": list(a.arguments)}
                for a in self.actions
            ],
        }

# 🔼⚙️
