#
# src/jestlens/lens/enumerator.py
#
"""
Produces one ActionGroup per declaration in a test file.
"""
import asyncio
from pathlib import Path

import structlog

from jestlens.lens.action_source import ActionSource
from jestlens.lens.models import (
    ActionDescriptor,
    ActionGroup,
    ExternalAction,
    FixedAction,
    FixedActionKind,
    SourceRange,
)
from jestlens.locator import full_test_name, parse_tree
from jestlens.parsing import SourceParser
from jestlens.runtime.protocols import ActiveDocument
from jestlens.telemetry import StructLogger
from jestlens.tree import DeclarationNode, DeclarationTree, NodeType

log: StructLogger = structlog.get_logger("lens.enumerator")


class LensEnumerator:
    """
    Walks a declaration tree and attaches run/debug (and project) actions.

    Groups come out in post-order: a node's children's groups, in document
    order, precede the node's own group. Children are computed concurrently
    and joined before the parent's group is composed.
    """

    def __init__(self, parser: SourceParser, action_source: ActionSource | None = None):
        self.parser = parser
        self.action_source = action_source

    async def provide(self, document: ActiveDocument) -> list[ActionGroup]:
        """Parses the document and enumerates it; unparsable files have no groups."""
        tree = await parse_tree(self.parser, document.file_path, document.text)
        if tree is None:
            return []
        return await self.enumerate(tree, document.file_path)

    async def enumerate(self, tree: DeclarationTree, file_path: Path) -> list[ActionGroup]:
        branches = await asyncio.gather(*(self._collect(tree, root, file_path) for root in tree.roots))
        groups = [group for branch in branches for group in branch]
        log.debug(
            "Enumerated lens actions",
            file=str(file_path),
            groups=len(groups),
            emoji_key="lens",
        )
        return groups

    async def _collect(self, tree: DeclarationTree, index: int, file_path: Path) -> list[ActionGroup]:
        node = tree.nodes[index]
        own, *child_branches = await asyncio.gather(
            self._group_for(tree, node, file_path),
            *(self._collect(tree, child, file_path) for child in node.children),
        )
        groups = [group for branch in child_branches for group in branch]
        if own is not None:
            groups.append(own)
        return groups

    async def _group_for(
        self,
        tree: DeclarationTree,
        node: DeclarationNode,
        file_path: Path,
    ) -> ActionGroup | None:
        if node.type is NodeType.ASSERTION:
            return None

        test_name = full_test_name(tree, node)
        source_range = SourceRange(start=node.start, end=node.end)
        actions: list[ActionDescriptor] = [
            FixedAction(kind=FixedActionKind.RUN, test_name=test_name, range=source_range),
            FixedAction(kind=FixedActionKind.DEBUG, test_name=test_name, range=source_range),
        ]

        if self.action_source is not None:
            try:
                entries = await self.action_source.entries_for(file_path)
            except Exception as e:
                # Fixed actions are always offered, whatever the actions file does.
                log.warning(
                    "Skipping project actions for declaration",
                    test_name=test_name,
                    error=str(e),
                    emoji_key="actions",
                )
                entries = ()
            actions.extend(
                ExternalAction(
                    identifier=entry.name,
                    title=entry.title,
                    test_name=test_name,
                    range=source_range,
                    command=entry.command,
                    options=entry.options,
                    has_runner=entry.runner is not None,
                )
                for entry in entries
                if entry.applies_to(node.type)
            )

        return ActionGroup(
            node_index=node.index,
            node_type=node.type,
            test_name=test_name,
            range=source_range,
            actions=actions,
        )

# 🔼⚙️
