"""Config commands: write and check parser configuration files."""

from pathlib import Path

import typer

from claims_timeline.cli._app import app
from claims_timeline.cli._common import ensure_initialized, fail, setup_logging
from claims_timeline.cli._console import output_result, print_err, print_ok
from claims_timeline.errors import ClaimsTimelineError

config_app = typer.Typer(no_args_is_help=True, help="Manage parser configuration files.")
app.add_typer(config_app, name="config")


@config_app.command("init", help="Write a sample configuration file.")
def config_init_cmd(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Where to write the configuration"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    from claims_timeline.config.loader import write_sample_config

    try:
        written = write_sample_config(path, overwrite=force)
    except ClaimsTimelineError as e:
        fail(e)
    print_ok(f"Wrote sample configuration to {written}")


@config_app.command("check", help="Validate a configuration file.")
def config_check_cmd(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Configuration file to check"),
):
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    from claims_timeline.config.loader import load_parser_config

    try:
        config = load_parser_config(path)
    except ClaimsTimelineError as e:
        fail(e)

    problems = config.validate_values()
    claim_type_count = len(config.claim_types) if config.claim_types is not None else 0

    if ctx.obj["json"]:
        output_result({"path": str(path), "valid": not problems, "problems": problems,
                       "claim_types": claim_type_count}, ctx=ctx)
    elif problems:
        for problem in problems:
            print_err(problem)
    else:
        print_ok(f"{path.name} is valid ({claim_type_count} claim types, date format {config.date_format})")

    if problems:
        raise SystemExit(1)
