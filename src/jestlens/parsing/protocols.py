#
# src/jestlens/parsing/protocols.py
#
"""
Defines the parser adapter protocol and the block structure it produces.
"""
from pathlib import Path
from typing import Protocol, runtime_checkable

from attrs import define, field


@define(frozen=True, slots=True, order=True)
class Position:
    """A source position: 1-based line, 1-based column."""
    line: int
    column: int


@define(slots=True)
class ParsedBlock:
    """
    One declaration as reported by a parser adapter.

    `type` uses the adapter's own vocabulary (e.g. "describe", "it", "expect");
    the tree layer maps it onto suite/test/assertion/other.
    """
    type: str
    name: str
    start: Position
    end: Position
    children: list["ParsedBlock"] = field(factory=list)


@runtime_checkable
class SourceParser(Protocol):
    """
    Protocol for turning a test file into an ordered forest of blocks.
    """
    def parse(self, file_path: Path, text: str | None = None) -> list[ParsedBlock]:
        """
        Parses a test file.

        Args:
            file_path: Path of the file, used for diagnostics and for reading
                when `text` is not given.
            text: Current buffer contents, if already in memory.

        Returns:
            Top-level blocks in source order.

        Raises:
            ParseError: The source cannot be parsed.
        """
        ...

# 🔼⚙️
