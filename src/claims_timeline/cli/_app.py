"""Root Typer application with global options."""

from typing import Optional

import typer

from claims_timeline import __version__

app = typer.Typer(
    name="claims-timeline",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"claims-timeline {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show per-claim diagnostics"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only warnings and failures"),
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable JSON on stdout"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_print_version, is_eager=True, help="Show version and exit"
    ),
):
    """Turn medical claims JSON into a normalized, date-sorted timeline."""
    ctx.ensure_object(dict)
    ctx.obj.update(verbose=verbose, quiet=quiet, json=json_output)
