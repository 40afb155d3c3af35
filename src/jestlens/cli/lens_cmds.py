# src/jestlens/cli/lens_cmds.py

import asyncio
import json
from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.table import Table

from jestlens.cli.utils import (
    load_config_or_exit,
    logging_options,
    setup_command_logging,
    workspace_options,
)
from jestlens.lens import ActionSource, LensEnumerator
from jestlens.lens.models import ActionGroup
from jestlens.parsing import JsTestScanner
from jestlens.runtime.protocols import ActiveDocument
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.lens")


def _render_table(groups: list[ActionGroup], console: Console) -> None:
    table = Table(title="Test actions", show_lines=False)
    table.add_column("Line", justify="right", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Test name")
    table.add_column("Actions", style="green")
    for group in groups:
        table.add_row(
            str(group.range.start.line),
            group.node_type.value,
            group.test_name,
            ", ".join(action.title for action in group.actions),
        )
    console.print(table)


@click.command(name="lenses")
@click.argument(
    "test_file",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the action groups as JSON.")
@workspace_options
@logging_options
@click.pass_context
def lenses_cli(
    ctx: click.Context,
    test_file: Path,
    as_json: bool,
    workspace: Path,
    config_path: Path | None,
    **kwargs,
):
    """List the run/debug actions for every test declaration in TEST_FILE."""
    setup_command_logging(ctx, kwargs)
    config = load_config_or_exit(ctx, workspace, config_path)
    runner = config.runner

    console = Console()
    action_source = ActionSource(
        runner.workspace_root,
        runner.actions_file_name,
        warn=lambda message: click.echo(f"Warning: {message}", err=True),
    )
    enumerator = LensEnumerator(JsTestScanner(), action_source)
    document = ActiveDocument(file_path=test_file.resolve(), workspace_folder=runner.workspace_root)

    groups = asyncio.run(enumerator.provide(document))
    log.info("Enumerated action groups", file=str(test_file), count=len(groups), emoji_key="lens")

    if as_json:
        click.echo(json.dumps([group.to_dict() for group in groups], indent=2))
        return
    if not groups:
        click.echo("No test declarations found.")
        return
    _render_table(groups, console)

# 🖥️⚙️
