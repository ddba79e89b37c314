"""CLI entry point for gitgate.

Loads configuration, configures logging and serves JSON-RPC on stdio until
the client disconnects or asks the process to stop.
"""

from __future__ import annotations

import logging
from pathlib import Path

import anyio
import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

# Load environment variables from .env in the current directory before any
# configuration is read
load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

from gitgate import __version__  # noqa: E402
from gitgate.config import GitGateConfig, load_config  # noqa: E402
from gitgate.exceptions import ConfigError  # noqa: E402
from gitgate.logging import configure_logging, get_logger  # noqa: E402
from gitgate.server import RpcDispatcher, serve  # noqa: E402
from gitgate.state import AppState, build_state  # noqa: E402

__all__ = ["cli"]

logger = get_logger(__name__)

# stdout is reserved for JSON-RPC
err_console = Console(stderr=True)


def _log_level(verbose: int, quiet: bool) -> int | None:
    if quiet:
        return logging.ERROR
    if verbose == 1:
        return logging.INFO
    if verbose >= 2:
        return logging.DEBUG
    return None


def _print_summary(config: GitGateConfig, state: AppState) -> None:
    table = Table(title=f"{state.server_name} {__version__}", show_header=True)
    table.add_column("Repository")
    table.add_column("Path")
    table.add_column("Push")
    table.add_column("Pending", justify="right")
    for ctx_state in state.contexts.values():
        ctx = ctx_state.context
        table.add_row(
            ctx.repo_name or "-",
            str(ctx.working_directory),
            f"{ctx.local_branch} -> {ctx.remote_name}/{ctx.remote_branch}",
            str(ctx_state.pending_count),
        )
    err_console.print(table)
    if state.log_dir is not None:
        err_console.print(f"[dim]Log directory:[/dim] {state.log_dir}")
    else:
        err_console.print(
            "[yellow]No log directory configured; journals are kept in memory "
            "until set_log_dir is called.[/yellow]"
        )
    if config.tool_prefix:
        err_console.print(f"[dim]Tool prefix:[/dim] {config.tool_prefix}")


@click.command()
@click.version_option(version=__version__, prog_name="gitgate")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides ./gitgate.yaml).",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=str),
    default=None,
    help="Directory for operation logs, push history and pending changes.",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Only log errors.",
)
@click.option(
    "--json-logs",
    is_flag=True,
    default=False,
    help="Render diagnostics as JSON lines on stderr.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    log_dir: str | None,
    verbose: int,
    quiet: bool,
    json_logs: bool,
) -> None:
    """gitgate - review-gated git operations over JSON-RPC stdio."""
    configure_logging(force_json=json_logs, level=_log_level(verbose, quiet))

    try:
        config = load_config(
            Path(config_file) if config_file else None,
            log_dir=Path(log_dir) if log_dir else None,
        )
        state = build_state(config)
    except ConfigError as e:
        error_parts = [f"Error: {e.message}"]
        if e.field:
            error_parts.append(f"  Field: {e.field}")
        if e.value is not None:
            error_parts.append(f"  Value: {e.value}")
        click.echo("\n".join(error_parts), err=True)
        ctx.exit(1)

    if not quiet:
        _print_summary(config, state)

    dispatcher = RpcDispatcher(state)
    try:
        exit_code = anyio.run(serve, dispatcher)
    except Exception as e:
        logger.exception("server_crashed")
        try:
            dispatcher.record_event("fatal_error", {"error": str(e)}, "crashed")
        except Exception:
            logger.exception("fatal_error_not_journaled")
        ctx.exit(1)
    ctx.exit(exit_code)


if __name__ == "__main__":
    cli()
