# src/jestlens/cli/main.py

"""
Main CLI entry point for jestlens using Click.
Handles global options like logging level.
"""

from importlib.metadata import PackageNotFoundError, version

import click
import structlog

from jestlens.cli.config_cmds import config_cli
from jestlens.cli.lens_cmds import lenses_cli
from jestlens.cli.run_cmds import command_cli, debug_cli, locate_cli, run_cli
from jestlens.cli.utils import logging_options, setup_logging_from_context
from jestlens.telemetry import StructLogger

try:
    __version__ = version("jestlens")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

log: StructLogger = structlog.get_logger("cli.main")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", package_name="jestlens")
@logging_options
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool | None,
):
    """
    jestlens: find, run and debug individual Jest tests.

    Resolves the test under a cursor line to its full name and drives Jest with it.
    Configuration precedence: CLI options > Environment Variables > Config File > Defaults.
    """
    ctx.ensure_object(dict)

    ctx.obj["LOG_LEVEL"] = log_level
    ctx.obj["LOG_FILE"] = log_file
    ctx.obj["JSON_LOGS"] = json_logs if json_logs is not None else False

    setup_logging_from_context(ctx, default_log_level="WARNING")
    log.debug(
        "Main CLI group initialized",
        log_level=log_level,
        log_file=log_file,
        json_logs=json_logs,
    )


cli.add_command(command_cli)
cli.add_command(config_cli)
cli.add_command(debug_cli)
cli.add_command(lenses_cli)
cli.add_command(locate_cli)
cli.add_command(run_cli)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
