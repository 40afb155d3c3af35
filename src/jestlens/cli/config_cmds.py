# src/jestlens/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from jestlens.cli.utils import (
    load_config_or_exit,
    logging_options,
    setup_command_logging,
    workspace_options,
)
from jestlens.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


@click.group(name="config")
def config_cli():
    """Commands for inspecting and validating configuration."""
    pass


@config_cli.command(name="show")
@workspace_options
@logging_options
@click.pass_context
def show_config(ctx: click.Context, workspace: Path, config_path: Path | None, **kwargs):
    """Load, validate, and display the configuration."""
    setup_command_logging(ctx, kwargs)
    log.info("Executing 'config show' command", config_path=str(config_path) if config_path else None)

    config = load_config_or_exit(ctx, workspace, config_path)
    log.debug("Configuration loaded successfully by 'show' command.")

    # Echo a rich-formatted string so CliRunner can capture it.
    click.echo(pretty_repr(config, expand_all=True))

    runner = config.runner
    if runner.detect_yarn_pnp_jest_bin and runner.yarn_pnp_jest_bin_path is None:
        click.echo("\nWarning: no Yarn PnP Jest binary found under .yarn/.", err=True)

# 🖥️⚙️
