# src/jestlens/tree.py
#
"""
Index-addressed arena of test declarations.

Nodes live in one flat tuple in pre-order. Each node stores its parent's
index (ROOT_PARENT for top-level nodes) and the indices of its children, so
name resolution can walk upward without owning back-references.
"""

from collections.abc import Iterator, Sequence
from enum import Enum

import structlog
from attrs import define, field

from jestlens.parsing.protocols import ParsedBlock, Position
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("tree")

ROOT_PARENT = -1


class NodeType(Enum):
    """Kinds of declarations the core distinguishes."""

    SUITE = "suite"
    TEST = "test"
    ASSERTION = "assertion"
    OTHER = "other"

    @classmethod
    def from_block_type(cls, block_type: str) -> "NodeType":
        return _BLOCK_TYPE_MAP.get(block_type.lower(), cls.OTHER)


_BLOCK_TYPE_MAP = {
    "describe": NodeType.SUITE,
    "suite": NodeType.SUITE,
    "it": NodeType.TEST,
    "test": NodeType.TEST,
    "expect": NodeType.ASSERTION,
    "assertion": NodeType.ASSERTION,
}


@define(frozen=True, slots=True)
class DeclarationNode:
    index: int
    type: NodeType
    name: str
    start: Position
    end: Position
    parent: int = field(default=ROOT_PARENT)
    children: tuple[int, ...] = field(default=())

    @property
    def is_root(self) -> bool:
        return self.parent == ROOT_PARENT

    def contains_line(self, line: int) -> bool:
        return self.start.line <= line <= self.end.line


@define(frozen=True, slots=True)
class DeclarationTree:
    """An ordered forest of declarations stored as an arena."""

    nodes: tuple[DeclarationNode, ...] = field(default=())
    roots: tuple[int, ...] = field(default=())

    @classmethod
    def from_blocks(cls, blocks: Sequence[ParsedBlock]) -> "DeclarationTree":
        """Flattens a parser forest into an arena, assigning pre-order indices."""
        slots: list[DeclarationNode | None] = []

        def add(block: ParsedBlock, parent: int) -> int:
            index = len(slots)
            slots.append(None)
            child_indices = tuple(add(child, index) for child in block.children)
            slots[index] = DeclarationNode(
                index=index,
                type=NodeType.from_block_type(block.type),
                name=block.name,
                start=block.start,
                end=block.end,
                parent=parent,
                children=child_indices,
            )
            return index

        roots = tuple(add(block, ROOT_PARENT) for block in blocks)
        tree = cls(nodes=tuple(slots), roots=roots)
        log.debug("Built declaration tree", nodes=len(tree.nodes), roots=len(roots))
        return tree

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, index: int) -> DeclarationNode:
        return self.nodes[index]

    def children_of(self, node: DeclarationNode) -> list[DeclarationNode]:
        return [self.nodes[i] for i in node.children]

    def ancestry(self, index: int) -> list[DeclarationNode]:
        """The chain from the outermost ancestor down to (and including) `index`."""
        chain: list[DeclarationNode] = []
        while index != ROOT_PARENT:
            node = self.nodes[index]
            chain.append(node)
            index = node.parent
        chain.reverse()
        return chain

    def walk(self) -> Iterator[DeclarationNode]:
        """Pre-order traversal, which is also index order."""
        return iter(self.nodes)

# 🔼⚙️
