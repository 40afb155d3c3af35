# src/jestlens/cli/utils.py

import logging
from pathlib import Path

import click
import structlog

from jestlens.config import JestLensConfig, load_config
from jestlens.exceptions import ConfigurationError
from jestlens.telemetry.logger import setup_logging as core_setup_logging

log = structlog.get_logger("cli.utils")

LOG_LEVEL_CHOICES = click.Choice(list(logging._nameToLevel.keys()), case_sensitive=False)


def logging_options(f):
    """Decorator to add logging options to any command."""
    f = click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        default=None,
        envvar="JESTLENS_LOG_LEVEL",
        help="Set the logging level (overrides [global].log_level).",
    )(f)
    f = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar="JESTLENS_LOG_FILE",
        help="Also write JSON logs to this file.",
    )(f)
    f = click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar="JESTLENS_JSON_LOGS",
        help="Render stderr logs as JSON lines.",
    )(f)
    return f


def workspace_options(f):
    """Decorator adding the workspace root and config file options."""
    f = click.option(
        "-c",
        "--config-path",
        type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
        default=None,
        envvar="JESTLENS_CONF",
        show_envvar=True,
        help="Path to jestlens.toml (default: <workspace>/jestlens.toml if present).",
    )(f)
    f = click.option(
        "-w",
        "--workspace",
        type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
        default=Path("."),
        show_default=True,
        help="Root of the JavaScript project.",
    )(f)
    return f


def setup_logging_from_context(
    ctx: click.Context,
    local_log_level: str | None = None,
    local_log_file: str | None = None,
    local_json_logs: bool | None = None,
    default_log_level: str = "WARNING",
) -> None:
    """
    Setup logging using context values, allowing local overrides.
    """
    ctx.ensure_object(dict)
    log_level_str = local_log_level or ctx.obj.get("LOG_LEVEL") or default_log_level
    log_file_path = local_log_file or ctx.obj.get("LOG_FILE")
    use_json_logs = local_json_logs if local_json_logs is not None else ctx.obj.get("JSON_LOGS", False)

    numeric_level = logging.getLevelName(log_level_str.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
        log_level_str = "INFO"

    core_setup_logging(
        level=numeric_level,
        json_logs=use_json_logs,
        log_file=log_file_path,
    )

    log.debug(
        "CLI logging initialized via utils",
        level=log_level_str,
        file=log_file_path or "console",
        json=use_json_logs,
    )


def setup_command_logging(ctx: click.Context, options: dict) -> None:
    """Applies a command's own logging options over the group's."""
    ctx.ensure_object(dict)
    if options.get("log_level"):
        ctx.obj["LOG_LEVEL"] = options["log_level"]
    if options.get("log_file"):
        ctx.obj["LOG_FILE"] = options["log_file"]
    if options.get("json_logs") is not None:
        ctx.obj["JSON_LOGS"] = options["json_logs"]
    setup_logging_from_context(ctx)


def load_config_or_exit(ctx: click.Context, workspace: Path, config_path: Path | None) -> JestLensConfig:
    """Loads configuration, turning a ConfigurationError into exit status 1."""
    try:
        config = load_config(config_path, workspace)
    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: Configuration problem:\n{e}", err=True)
        ctx.exit(1)

    # [global].log_level applies only when no CLI or env level was given.
    ctx.ensure_object(dict)
    if config.source_path is not None and not ctx.obj.get("LOG_LEVEL"):
        setup_logging_from_context(ctx, default_log_level=config.global_config.log_level)
    return config

# ⚙️🛠️
