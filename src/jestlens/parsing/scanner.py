#
# src/jestlens/parsing/scanner.py
#
"""
Tree-sitter parser adapter for Jest-style JavaScript/TypeScript test files.

The grammar is picked from the file extension (JavaScript with JSX, TypeScript
or TSX). The syntax tree is walked for describe/it/test/expect calls,
including their modifier (`.only`, `.skip`, ...) and `.each` table forms.
"""
import importlib
import re
from pathlib import Path
from typing import Any

import structlog
import tree_sitter

from jestlens.exceptions import ParseError
from jestlens.parsing.protocols import ParsedBlock, Position
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("parsing.scanner")

SUITE_CALLEES = frozenset({"describe", "fdescribe", "xdescribe", "suite", "context"})
TEST_CALLEES = frozenset({"it", "fit", "xit", "test", "xtest", "specify"})
ASSERTION_CALLEES = frozenset({"expect"})
CALL_MODIFIERS = frozenset({"only", "skip", "each", "concurrent", "todo", "failing"})

# grammar name -> (import module, language function)
GRAMMARS: dict[str, tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
}
GRAMMAR_BY_EXTENSION: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "ts": "typescript",
    "mts": "typescript",
    "cts": "typescript",
    "tsx": "tsx",
}
DEFAULT_GRAMMAR = "javascript"

_SIMPLE_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0",
}
_CODE_POINT_ESCAPE = re.compile(r"\\(?:u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|x([0-9a-fA-F]{2}))")


def _block_type(callee: str) -> str | None:
    if callee in SUITE_CALLEES:
        return "describe"
    if callee in TEST_CALLEES:
        return "it"
    if callee in ASSERTION_CALLEES:
        return "expect"
    return None


def decode_escape(sequence: str) -> str:
    """Decodes one JavaScript escape sequence (backslash included)."""
    match = _CODE_POINT_ESCAPE.fullmatch(sequence)
    if match:
        digits = next(group for group in match.groups() if group is not None)
        code_point = int(digits, 16)
        # Lone surrogates are kept so that pairs can be joined afterwards.
        return chr(code_point) if code_point <= 0x10FFFF else ""
    body = sequence[1:]
    if body.startswith(("\r\n", "\n", "\r", "\u2028", "\u2029")):
        return ""
    return _SIMPLE_ESCAPES.get(body, body)


def _join_surrogates(text: str) -> str:
    return text.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


class _SourceView:
    """Byte-offset helpers over one parsed source."""

    def __init__(self, source: bytes, file_path: str):
        self.source = source
        self.file_path = file_path

    def text(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def position(self, point: Any, byte_offset: int) -> Position:
        # Tree-sitter columns count bytes; Position columns count characters.
        line_start = byte_offset - point[1]
        column = len(self.source[line_start:byte_offset].decode("utf-8", errors="replace"))
        return Position(line=point[0] + 1, column=column + 1)

    def start(self, node: Any) -> Position:
        return self.position(node.start_point, node.start_byte)

    def end(self, node: Any) -> Position:
        end = self.position(node.end_point, node.end_byte)
        # The end position points at the closing parenthesis itself.
        return Position(line=end.line, column=end.column - 1)

    def literal(self, node: Any) -> str:
        """Value of a string or template literal: escapes decoded, substitutions kept as source."""
        content_start = node.start_byte + 1
        content_end = node.end_byte - 1
        parts: list[str] = []
        cursor = content_start
        for child in node.children:
            if child.start_byte < content_start or child.end_byte > content_end:
                continue
            if child.type not in ("escape_sequence", "template_substitution"):
                continue
            parts.append(self.source[cursor : child.start_byte].decode("utf-8", errors="replace"))
            child_text = self.text(child)
            parts.append(decode_escape(child_text) if child.type == "escape_sequence" else child_text)
            cursor = child.end_byte
        parts.append(self.source[cursor:content_end].decode("utf-8", errors="replace"))
        return _join_surrogates("".join(parts))


def _first_error(root: Any) -> Any | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed([child for child in node.children if child.has_error or child.is_missing]))
    return None


class JsTestScanner:
    """Parser adapter for Jest-style JavaScript and TypeScript test files."""

    def __init__(self) -> None:
        self._languages: dict[str, tree_sitter.Language] = {}

    @staticmethod
    def grammar_for(file_path: Path) -> str:
        ext = Path(file_path).suffix.lower().lstrip(".")
        return GRAMMAR_BY_EXTENSION.get(ext, DEFAULT_GRAMMAR)

    def _get_language(self, grammar: str) -> tree_sitter.Language:
        if grammar in self._languages:
            return self._languages[grammar]
        module_name, language_func = GRAMMARS[grammar]
        try:
            module = importlib.import_module(module_name)
            language = tree_sitter.Language(getattr(module, language_func)())
        except (ImportError, AttributeError) as e:
            raise ParseError(f"Grammar not available: {grammar} ({e})") from e
        self._languages[grammar] = language
        return language

    def parse(self, file_path: Path, text: str | None = None) -> list[ParsedBlock]:
        file_path = Path(file_path)
        if text is None:
            try:
                source = file_path.read_bytes()
                source.decode("utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ParseError(f"Cannot read test file: {e}", str(file_path)) from e
        else:
            source = text.encode("utf-8")

        grammar = self.grammar_for(file_path)
        parser = tree_sitter.Parser()
        parser.language = self._get_language(grammar)
        tree = parser.parse(source)

        view = _SourceView(source, str(file_path))
        if tree.root_node.has_error:
            error = _first_error(tree.root_node)
            line = error.start_point[0] + 1 if error is not None else None
            if error is not None and error.is_missing:
                message = f"Syntax error: missing '{error.type}'"
            else:
                message = "Syntax error"
            raise ParseError(message, str(file_path), line)

        roots = self._collect_blocks(tree.root_node, view)
        log.debug(
            "Parsed test file",
            file=str(file_path),
            grammar=grammar,
            top_level_blocks=len(roots),
            emoji_key="parse",
        )
        return roots

    def _collect_blocks(self, root: Any, view: _SourceView) -> list[ParsedBlock]:
        roots: list[ParsedBlock] = []
        # Pre-order walk, so blocks are appended in document order.
        stack: list[tuple[Any, list[ParsedBlock]]] = [(root, roots)]
        while stack:
            node, siblings = stack.pop()
            target = siblings
            if node.type == "call_expression":
                block_type = self._call_block_type(node, view)
                if block_type is not None:
                    block = ParsedBlock(
                        type=block_type,
                        name=self._name_of(node, view),
                        start=view.start(node),
                        end=view.end(node),
                    )
                    siblings.append(block)
                    target = block.children
            for child in reversed(node.children):
                stack.append((child, target))
        return roots

    @staticmethod
    def _call_block_type(call: Any, view: _SourceView) -> str | None:
        """
        Classifies a call: `it(...)`, `it.only(...)`, `it.each(table)(...)` or
        `it.each`table`(...)`. The inner table call of an `.each` form is not
        a block itself.
        """
        function = call.child_by_field_name("function")
        tabled = function is not None and function.type == "call_expression"
        if tabled:
            function = function.child_by_field_name("function")

        modifiers: list[str] = []
        while function is not None and function.type == "member_expression":
            prop = function.child_by_field_name("property")
            if prop is None or view.text(prop) not in CALL_MODIFIERS:
                return None
            modifiers.append(view.text(prop))
            function = function.child_by_field_name("object")

        if function is None or function.type != "identifier":
            return None
        if ("each" in modifiers) != tabled:
            return None
        return _block_type(view.text(function))

    @staticmethod
    def _name_of(call: Any, view: _SourceView) -> str:
        arguments = call.child_by_field_name("arguments")
        if arguments is None:
            return ""
        first = next((arg for arg in arguments.named_children if arg.type != "comment"), None)
        if first is None:
            return ""
        if first.type in ("string", "template_string"):
            return view.literal(first)
        # Non-literal name: the raw source of the first argument.
        return view.text(first).strip()

# 🔼⚙️
