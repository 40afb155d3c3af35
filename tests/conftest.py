# tests/conftest.py

import io
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from jestlens.args import ArgBuilder
from jestlens.config import RunnerConfig
from jestlens.parsing import JsTestScanner
from jestlens.runtime.protocols import ActiveDocument
from jestlens.runtime.surfaces import EchoSurface

SAMPLE_TEST_SOURCE = """\
describe("A", () => {
  it("B", () => {
    expect(1).toBe(1);
  });
  test("C (b)", async () => {
    expect(true).toBeTruthy();
  });
});
"""


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An empty JavaScript project root."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def sample_test_file(workspace: Path) -> Path:
    """A test file with one suite holding two tests (lines 1-8)."""
    test_dir = workspace / "src"
    test_dir.mkdir()
    path = test_dir / "sample.test.js"
    path.write_text(SAMPLE_TEST_SOURCE)
    return path


@pytest.fixture
def runner_config(workspace: Path) -> RunnerConfig:
    return RunnerConfig(workspace_root=workspace)


@pytest.fixture
def posix_builder() -> ArgBuilder:
    """An ArgBuilder with POSIX quoting for a fixed, non-existent workspace."""
    return ArgBuilder(RunnerConfig(workspace_root=Path("/ws")), windows=False)


@pytest.fixture
def scanner() -> JsTestScanner:
    return JsTestScanner()


@pytest.fixture
def quiet_console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False)


@pytest.fixture
def echo_surface(quiet_console: Console) -> EchoSurface:
    return EchoSurface("jestlens", quiet_console)


@pytest.fixture
def fake_host(workspace: Path, sample_test_file: Path, echo_surface: EchoSurface) -> MagicMock:
    """
    A mock EditorHost whose active document is the sample file with the
    cursor on the `it("B")` line. New surfaces are the shared echo_surface.
    """
    host = MagicMock()
    host.workspace_root = workspace
    host.active_document.return_value = ActiveDocument(
        file_path=sample_test_file,
        cursor_line=2,
        workspace_folder=workspace,
    )
    host.save_document = AsyncMock()
    host.start_debugging = AsyncMock()
    host.find_surface.return_value = None
    host.create_surface.return_value = echo_surface
    return host


@pytest.fixture
def sample_source() -> str:
    return SAMPLE_TEST_SOURCE
