# src/jestlens/locator.py
#
"""
Resolves a cursor line to the enclosing test declaration and its full name.
"""

import asyncio
import re
from pathlib import Path

import structlog

from jestlens.exceptions import ParseError
from jestlens.parsing import SourceParser
from jestlens.telemetry import StructLogger
from jestlens.tree import DeclarationNode, DeclarationTree, NodeType

log: StructLogger = structlog.get_logger("locator")

_REGEXP_SPECIAL = re.compile(r"[\\^$.|?*+()\[\]{}]")
_QUOTES = ("'", '"', "`")


def escape_regexp(text: str) -> str:
    """Backslash-escapes every character with special meaning in a regex."""
    return _REGEXP_SPECIAL.sub(r"\\\g<0>", text)


def unquote(text: str) -> str:
    """Strips one level of matching surrounding quotes."""
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return text


def find_node(line: int, tree: DeclarationTree) -> DeclarationNode | None:
    """
    Finds the deepest non-assertion declaration whose line range holds `line`.

    Siblings are scanned in source order; the first one containing the line
    is descended into, and a sibling starting after the line ends the scan.
    """
    match: DeclarationNode | None = None
    candidates = tree.roots
    while candidates:
        found: DeclarationNode | None = None
        for index in candidates:
            node = tree.nodes[index]
            if node.start.line > line:
                break
            if node.contains_line(line):
                found = node
                break
        if found is None:
            break
        if found.type is not NodeType.ASSERTION:
            match = found
        candidates = found.children
    return match


def full_test_name(tree: DeclarationTree, node: DeclarationNode) -> str:
    """Escaped names from the outermost ancestor down to `node`, space-joined."""
    return " ".join(
        escape_regexp(ancestor.name)
        for ancestor in tree.ancestry(node.index)
        if ancestor.type is not NodeType.ASSERTION
    )


def locate(line: int, tree: DeclarationTree) -> str | None:
    """Full test name at `line`, or None when the whole file should run."""
    node = find_node(line, tree)
    if node is None:
        return None
    return full_test_name(tree, node)


async def parse_tree(parser: SourceParser, file_path: Path, text: str | None = None) -> DeclarationTree | None:
    """Runs the parser off the event loop; a parse failure yields None."""
    try:
        blocks = await asyncio.to_thread(parser.parse, file_path, text)
    except ParseError as e:
        log.warning("Could not parse test file", file=str(file_path), error=str(e), emoji_key="parse")
        return None
    return DeclarationTree.from_blocks(blocks)


class NameLocator:
    """Finds the test name for an editor position, honoring explicit selections."""

    def __init__(self, parser: SourceParser):
        self.parser = parser

    async def resolve(
        self,
        file_path: Path,
        line: int,
        text: str | None = None,
        selection_text: str = "",
    ) -> str | None:
        if selection_text:
            name = unquote(selection_text)
            log.debug("Using selected text as test name", test_name=name, emoji_key="locate")
            return name

        tree = await parse_tree(self.parser, file_path, text)
        if tree is None:
            return None
        name = locate(line, tree)
        log.debug(
            "Located test at cursor",
            file=str(file_path),
            line=line,
            test_name=name,
            emoji_key="locate",
        )
        return name

# 🔼⚙️
