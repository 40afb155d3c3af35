#
# src/jestlens/parsing/__init__.py
#
"""
Parser adapter sub-package: turns test files into declaration blocks.
"""
from .protocols import ParsedBlock, Position, SourceParser
from .scanner import JsTestScanner

__all__ = [
    "JsTestScanner",
    "ParsedBlock",
    "Position",
    "SourceParser",
]

# 🔼⚙️
