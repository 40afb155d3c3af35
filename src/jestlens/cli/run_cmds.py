# src/jestlens/cli/run_cmds.py

"""
Commands that locate, build, run and debug Jest tests from the terminal.
"""

import asyncio
import json
from pathlib import Path

import click
import structlog
from rich.console import Console

from jestlens.args import ArgBuilder
from jestlens.cli.utils import (
    load_config_or_exit,
    logging_options,
    setup_command_logging,
    workspace_options,
)
from jestlens.config import JestLensConfig
from jestlens.exceptions import JestLensError
from jestlens.lens.action_source import ActionSource
from jestlens.locator import locate, parse_tree
from jestlens.parsing import JsTestScanner
from jestlens.runtime.dispatcher import CommandDispatcher
from jestlens.runtime.host import TerminalHost
from jestlens.runtime.protocols import ActiveDocument
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.run")

TEST_FILE = click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path)


def _target_options(f):
    """Options picking the test inside a file: a cursor line or an explicit name."""
    f = click.option(
        "-t",
        "--name",
        "test_name",
        default=None,
        help="Explicit test name pattern (takes precedence over --line).",
    )(f)
    f = click.option(
        "-n",
        "--line",
        type=click.IntRange(min=1),
        default=None,
        help="1-based line of the cursor inside TEST_FILE.",
    )(f)
    return f


def _build_dispatcher(
    config: JestLensConfig,
    test_file: Path,
    line: int | None,
    surface_kind: str,
    console: Console,
) -> tuple[TerminalHost, CommandDispatcher]:
    runner = config.runner
    document = ActiveDocument(
        file_path=test_file.resolve(),
        cursor_line=line or 1,
        workspace_folder=runner.workspace_root,
    )
    host = TerminalHost(runner.workspace_root, console, document=document, surface_kind=surface_kind)
    action_source = ActionSource(runner.workspace_root, runner.actions_file_name, warn=host.show_warning)
    dispatcher = CommandDispatcher(host, runner, JsTestScanner(), action_source=action_source)
    return host, dispatcher


@click.command(name="locate")
@click.argument("test_file", type=TEST_FILE)
@click.option("-n", "--line", type=click.IntRange(min=1), required=True, help="1-based cursor line.")
@logging_options
@click.pass_context
def locate_cli(ctx: click.Context, test_file: Path, line: int, **kwargs):
    """Print the full test name enclosing LINE of TEST_FILE."""
    setup_command_logging(ctx, kwargs)
    log.info("Executing 'locate' command", file=str(test_file), line=line)

    tree = asyncio.run(parse_tree(JsTestScanner(), test_file))
    if tree is None:
        click.echo(f"Error: could not parse '{test_file}'.", err=True)
        ctx.exit(1)

    name = locate(line, tree)
    if name is None:
        click.echo(f"No test declaration encloses line {line}; the whole file would run.", err=True)
        return
    click.echo(name)


@click.command(name="command")
@click.argument("test_file", type=TEST_FILE)
@_target_options
@click.option("-o", "--option", "options", multiple=True, help="Extra Jest option (repeatable).")
@click.option("--debug", "as_debug", is_flag=True, default=False, help="Print the debug launch configuration instead.")
@workspace_options
@logging_options
@click.pass_context
def command_cli(
    ctx: click.Context,
    test_file: Path,
    line: int | None,
    test_name: str | None,
    options: tuple[str, ...],
    as_debug: bool,
    workspace: Path,
    config_path: Path | None,
    **kwargs,
):
    """Print the Jest command line for a test without running it."""
    setup_command_logging(ctx, kwargs)
    config = load_config_or_exit(ctx, workspace, config_path)

    if not test_name and line is not None:
        tree = asyncio.run(parse_tree(JsTestScanner(), test_file))
        test_name = locate(line, tree) if tree is not None else None

    file_path = str(test_file.resolve())
    if as_debug:
        console = Console(stderr=True)
        host = TerminalHost(config.runner.workspace_root, console)
        dispatcher = CommandDispatcher(host, config.runner, JsTestScanner())
        specification = dispatcher.build_debug_specification(file_path, test_name)
        click.echo(json.dumps(specification.to_dict(), indent=2))
        return

    command = ArgBuilder(config.runner).build_command(file_path, test_name, options)
    click.echo(command.text)


@click.command(name="run")
@click.argument("test_file", type=TEST_FILE)
@_target_options
@click.option("-o", "--option", "options", multiple=True, help="Extra Jest option (repeatable).")
@click.option("-a", "--action", default=None, help="Name of a project action from the actions file.")
@click.option("--file", "whole_file", is_flag=True, default=False, help="Run every test in TEST_FILE.")
@click.option("--dry-run", is_flag=True, default=False, help="Print commands instead of executing them.")
@workspace_options
@logging_options
@click.pass_context
def run_cli(
    ctx: click.Context,
    test_file: Path,
    line: int | None,
    test_name: str | None,
    options: tuple[str, ...],
    action: str | None,
    whole_file: bool,
    dry_run: bool,
    workspace: Path,
    config_path: Path | None,
    **kwargs,
):
    """Run the test at --line (or named by --name) of TEST_FILE with Jest."""
    setup_command_logging(ctx, kwargs)
    config = load_config_or_exit(ctx, workspace, config_path)
    host, dispatcher = _build_dispatcher(
        config, test_file, line, "echo" if dry_run else "shell", Console()
    )

    async def _run() -> None:
        if whole_file or (line is None and not test_name):
            await dispatcher.run_current_file(options)
        elif action or options:
            await dispatcher.run_with_options(action, options, explicit_name=test_name)
        else:
            await dispatcher.run_current_test(test_name)

    try:
        asyncio.run(_run())
    except JestLensError as e:
        log.error("Run failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    finally:
        dispatcher.close()

    exit_codes = [getattr(s, "last_exit_code", None) for s in host.surfaces.values()]
    failed = [code for code in exit_codes if code]
    if failed:
        ctx.exit(failed[0])


@click.command(name="debug")
@click.argument("test_file", type=TEST_FILE)
@_target_options
@workspace_options
@logging_options
@click.pass_context
def debug_cli(
    ctx: click.Context,
    test_file: Path,
    line: int | None,
    test_name: str | None,
    workspace: Path,
    config_path: Path | None,
    **kwargs,
):
    """Emit the debugger launch configuration for a test as JSON."""
    setup_command_logging(ctx, kwargs)
    config = load_config_or_exit(ctx, workspace, config_path)
    _, dispatcher = _build_dispatcher(config, test_file, line, "echo", Console())
    asyncio.run(dispatcher.debug_current_test(test_name))

# 🖥️⚙️
