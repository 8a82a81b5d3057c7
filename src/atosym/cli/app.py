"""Root Typer application with subcommand registration."""

from __future__ import annotations

from typing import Optional

import typer

from atosym import AtosContext, __version__

app = typer.Typer(
    name="atosym",
    help="atosym — resolve addresses in Mach-O and ELF images to symbols and source lines",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def get_context(ctx: typer.Context) -> AtosContext:
    if not isinstance(ctx.obj, AtosContext):
        ctx.obj = AtosContext()
    return ctx.obj


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"atosym {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", "-C", help="Path to atosym.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose resolution trace and debug logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit log events as JSON"),
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=_version_callback, is_eager=True
    ),
) -> None:
    """atosym — atos-style address symbolication."""
    from atosym.config.loader import load_config
    from atosym.utils.logging import setup_logging

    overrides = {"logging": {"level": "DEBUG" if verbose else None, "json_output": json_logs or None}}
    state = get_context(ctx)
    state.config = load_config(config, overrides=overrides)
    state.verbose = verbose
    setup_logging(
        level=state.config.logging.level,
        json_output=state.config.logging.json_output,
    )


# -- Subcommand registration --
from atosym.cli.symbolicate import symbolicate_cmd  # noqa: E402
from atosym.cli.slices import slices_cmd  # noqa: E402

app.command(name="symbolicate")(symbolicate_cmd)
app.command(name="slices")(slices_cmd)
