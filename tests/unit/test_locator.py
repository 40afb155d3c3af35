# tests/unit/test_locator.py

"""Tests for resolving a cursor line to a full test name."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from jestlens.exceptions import ParseError
from jestlens.locator import (
    NameLocator,
    escape_regexp,
    find_node,
    locate,
    parse_tree,
    unquote,
)
from jestlens.parsing import JsTestScanner, ParsedBlock, Position
from jestlens.tree import DeclarationTree


def _tree(source: str) -> DeclarationTree:
    return DeclarationTree.from_blocks(JsTestScanner().parse(Path("x.test.js"), source))


class TestLocate:
    @pytest.mark.parametrize(
        "line, expected",
        [
            (1, "A"),
            (2, "A B"),
            (3, "A B"),
            (4, "A B"),
            (5, r"A C \(b\)"),
            (7, r"A C \(b\)"),
            (8, "A"),
        ],
    )
    def test_sample_lines(self, sample_source: str, line: int, expected: str):
        assert locate(line, _tree(sample_source)) == expected

    def test_outside_any_declaration_is_none(self, sample_source: str):
        tree = _tree("const helper = 1;\n\n" + sample_source)
        assert locate(1, tree) is None
        assert locate(20, tree) is None

    def test_suite_and_test_on_one_line(self):
        tree = _tree('suite("A", () => { test("B", () => { expect(1).toBe(1) }) })\n')
        assert locate(1, tree) == "A B"

    def test_empty_file_runs_whole_file(self):
        assert locate(1, _tree("")) is None

    def test_assertion_is_never_the_match(self):
        tree = _tree('it("only", () => {\n  expect(a).toBe(b);\n});\n')
        node = find_node(2, tree)
        assert node is not None
        assert node.name == "only"

    def test_other_node_types_are_part_of_the_name(self):
        blocks = [
            ParsedBlock("describe", "A", Position(1, 1), Position(9, 1), [
                ParsedBlock("group", "helper", Position(2, 1), Position(8, 1), [
                    ParsedBlock("it", "B", Position(3, 1), Position(5, 1)),
                ]),
            ]),
        ]
        tree = DeclarationTree.from_blocks(blocks)
        assert locate(4, tree) == "A helper B"
        assert locate(7, tree) == "A helper"

    def test_first_sibling_wins_on_shared_line(self):
        tree = _tree('it("x", () => {}); it("y", () => {});\n')
        assert locate(1, tree) == "x"


class TestEscaping:
    def test_escape_regexp_escapes_every_metacharacter(self):
        assert escape_regexp(r"a.b*c+d?e^f$g|h(i)j[k]l{m}n\o") == (
            r"a\.b\*c\+d\?e\^f\$g\|h\(i\)j\[k\]l\{m\}n\\o"
        )

    def test_escape_regexp_leaves_plain_text(self):
        assert escape_regexp("plain words - and 'quotes'") == "plain words - and 'quotes'"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("'single'", "single"),
            ('"double"', "double"),
            ("`tick`", "tick"),
            ("'mismatched\"", "'mismatched\""),
            ("bare", "bare"),
            ("'", "'"),
        ],
    )
    def test_unquote(self, raw: str, expected: str):
        assert unquote(raw) == expected


@pytest.mark.asyncio
class TestNameLocator:
    async def test_resolves_from_disk(self, sample_test_file: Path):
        locator = NameLocator(JsTestScanner())
        assert await locator.resolve(sample_test_file, 2) == "A B"

    async def test_prefers_unsaved_text(self, sample_test_file: Path):
        locator = NameLocator(JsTestScanner())
        name = await locator.resolve(sample_test_file, 1, text='it("buffer only", () => {});\n')
        assert name == "buffer only"

    async def test_selection_wins_and_is_unquoted(self, sample_test_file: Path):
        parser = MagicMock()
        locator = NameLocator(parser)
        name = await locator.resolve(sample_test_file, 2, selection_text="'picked by hand'")
        assert name == "picked by hand"
        parser.parse.assert_not_called()

    async def test_locates_inside_a_react_component_test(self, tmp_path: Path):
        component_test = tmp_path / "button.test.jsx"
        component_test.write_text(
            'describe("Button", () => {\n'
            '  it("renders", () => {\n'
            "    render(<div>\n"
            "      hello\n"
            "    </div>);\n"
            "    render(<p>Don't</p>);\n"
            "  });\n"
            "});\n"
        )
        tree = await parse_tree(JsTestScanner(), component_test)
        assert tree is not None
        assert locate(5, tree) == "Button renders"

    async def test_parse_failure_yields_none(self, tmp_path: Path):
        broken = tmp_path / "broken.test.js"
        broken.write_text('describe("A", () => {\n')
        assert await NameLocator(JsTestScanner()).resolve(broken, 1) is None

    async def test_parse_tree_swallows_only_parse_errors(self, tmp_path: Path):
        parser = MagicMock()
        parser.parse.side_effect = ParseError("boom")
        assert await parse_tree(parser, tmp_path / "x.test.js") is None

        parser.parse.side_effect = RuntimeError("unexpected")
        with pytest.raises(RuntimeError):
            await parse_tree(parser, tmp_path / "x.test.js")
