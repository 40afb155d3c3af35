# tests/unit/test_lens.py

"""Tests for per-declaration action enumeration."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from jestlens.lens import (
    ACTION_RUN_WITH_OPTIONS,
    ActionSource,
    ExternalAction,
    FixedActionKind,
    LensEnumerator,
)
from jestlens.parsing import JsTestScanner
from jestlens.runtime.protocols import ActiveDocument
from jestlens.tree import NodeType

ACTIONS_FILE = """\
LENS_OPTIONS = [
    {"name": "watch", "title": "Watch", "options": ["--watch"]},
    {"name": "coverage", "title": "Coverage", "types": ["suite"], "options": "--coverage"},
]
"""


@pytest.mark.asyncio
class TestLensEnumerator:
    async def test_one_group_per_non_assertion_node(self, sample_test_file: Path):
        groups = await LensEnumerator(JsTestScanner()).provide(ActiveDocument(sample_test_file))

        assert len(groups) == 3
        assert sum(len(g.fixed_actions) for g in groups) == 6
        assert all(g.node_type is not NodeType.ASSERTION for g in groups)

    async def test_groups_are_post_order(self, sample_test_file: Path):
        groups = await LensEnumerator(JsTestScanner()).provide(ActiveDocument(sample_test_file))
        assert [g.test_name for g in groups] == ["A B", r"A C \(b\)", "A"]

    async def test_fixed_actions_carry_the_full_name(self, sample_test_file: Path):
        groups = await LensEnumerator(JsTestScanner()).provide(ActiveDocument(sample_test_file))
        run, debug = groups[0].fixed_actions

        assert run.kind is FixedActionKind.RUN
        assert (run.title, run.command, run.arguments) == ("Run", "run", ("A B",))
        assert (debug.title, debug.command, debug.arguments) == ("Debug", "debug", ("A B",))
        assert run.range.start.line == 2
        assert run.range.end.line == 4

    async def test_sibling_order_is_document_order(self, tmp_path: Path):
        path = tmp_path / "flat.test.js"
        path.write_text(
            'describe("S", () => {\n'
            '  describe("inner", () => { it("deep", () => {}); });\n'
            '  it("after", () => {});\n'
            '});\n'
            'test("last", () => {});\n'
        )
        groups = await LensEnumerator(JsTestScanner()).provide(ActiveDocument(path))
        assert [g.test_name for g in groups] == ["S inner deep", "S inner", "S after", "S", "last"]

    async def test_unparsable_file_has_no_groups(self, tmp_path: Path):
        path = tmp_path / "broken.test.js"
        path.write_text('describe("A", () => {\n')
        assert await LensEnumerator(JsTestScanner()).provide(ActiveDocument(path)) == []

    async def test_unsaved_text_is_used(self, sample_test_file: Path):
        document = ActiveDocument(sample_test_file, text='it("draft", () => {});\n')
        groups = await LensEnumerator(JsTestScanner()).provide(document)
        assert [g.test_name for g in groups] == ["draft"]

    async def test_external_actions_follow_fixed_ones(self, workspace: Path, sample_test_file: Path):
        (workspace / "jestlens_actions.py").write_text(ACTIONS_FILE)
        enumerator = LensEnumerator(JsTestScanner(), ActionSource(workspace))

        groups = await enumerator.provide(ActiveDocument(sample_test_file))
        by_name = {g.test_name: g for g in groups}

        suite_titles = [a.title for a in by_name["A"].actions]
        assert suite_titles == ["Run", "Debug", "Watch", "Coverage"]
        assert [a.title for a in by_name["A B"].actions] == ["Run", "Debug", "Watch"]

        watch = by_name["A B"].external_actions[0]
        assert isinstance(watch, ExternalAction)
        assert watch.command == ACTION_RUN_WITH_OPTIONS
        assert watch.arguments == ("watch", ("--watch",), "A B")
        assert not watch.has_runner

    async def test_broken_actions_file_warns_once(self, workspace: Path, sample_test_file: Path):
        (workspace / "jestlens_actions.py").write_text("raise RuntimeError('boom')\n")
        warn = MagicMock()
        enumerator = LensEnumerator(JsTestScanner(), ActionSource(workspace, warn=warn))

        first = await enumerator.provide(ActiveDocument(sample_test_file))
        second = await enumerator.provide(ActiveDocument(sample_test_file))

        assert len(first) == len(second) == 3
        assert all(len(g.actions) == 2 for g in first)
        warn.assert_called_once()
        assert "Actions file failed to load" in warn.call_args.args[0]

    async def test_to_dict_is_json_ready(self, sample_test_file: Path):
        groups = await LensEnumerator(JsTestScanner()).provide(ActiveDocument(sample_test_file))
        record = json.loads(json.dumps(groups[-1].to_dict()))

        assert record["test_name"] == "A"
        assert record["node_type"] == "suite"
        assert record["range"]["start"] == {"line": 1, "column": 1}
        assert record["actions"][0] == {"title": "Run", "command": "run", "arguments": ["A"]}

    async def test_malformed_entry_keeps_fixed_actions(self, workspace: Path, sample_test_file: Path):
        (workspace / "jestlens_actions.py").write_text("LENS_OPTIONS = [{'name': 'x', 1: 'a', 'zz': 2}]\n")
        warn = MagicMock()
        enumerator = LensEnumerator(JsTestScanner(), ActionSource(workspace, warn=warn))

        groups = await enumerator.provide(ActiveDocument(sample_test_file))

        assert len(groups) == 3
        assert all(len(g.actions) == 2 for g in groups)
        warn.assert_called_once()

    async def test_failing_action_lookup_keeps_fixed_actions(self, sample_test_file: Path):
        source = MagicMock()
        source.entries_for = AsyncMock(side_effect=RuntimeError("lookup failed"))
        enumerator = LensEnumerator(JsTestScanner(), source)

        groups = await enumerator.provide(ActiveDocument(sample_test_file))

        assert [g.test_name for g in groups] == ["A B", r"A C \(b\)", "A"]
        assert all(len(g.fixed_actions) == 2 for g in groups)
