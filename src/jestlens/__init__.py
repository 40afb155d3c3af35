#
# src/jestlens/__init__.py
#
"""
jestlens: find the Jest test under the cursor and build the command to run or debug it.
"""
from .args import ArgBuilder, RunCommand, merge_options
from .locator import escape_regexp, locate
from .tree import DeclarationNode, DeclarationTree, NodeType

__all__ = [
    "ArgBuilder",
    "DeclarationNode",
    "DeclarationTree",
    "NodeType",
    "RunCommand",
    "escape_regexp",
    "locate",
    "merge_options",
]

# 🔼⚙️
