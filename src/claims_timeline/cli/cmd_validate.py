"""Validate command: structural check without extraction."""

from pathlib import Path

import typer

from claims_timeline.cli._app import app
from claims_timeline.cli._common import ensure_initialized, fail, load_config, setup_logging
from claims_timeline.cli._console import output_result, print_ok, print_warn
from claims_timeline.errors import ClaimsTimelineError


@app.command("validate", help="Check that a file contains recognizable claim arrays.")
def validate_cmd(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Claims JSON file"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Parser configuration (YAML/JSON)"),
):
    """Run the fixed-schema structural validation and report what was found."""
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    from claims_timeline.extraction.fixed_schema import FixedSchemaExtractor
    from claims_timeline.ingestion import load_document

    config = load_config(config_path)
    try:
        document = load_document(file)
        report = FixedSchemaExtractor(config).validate_structure(document)
    except ClaimsTimelineError as e:
        fail(e)

    if ctx.obj["json"]:
        output_result({"valid": True, **report.to_dict()}, ctx=ctx)
        return

    print_ok(f"{file.name} has a valid claims structure ({', '.join(report.found)})")
    output_result(report.checked_paths, ctx=ctx, title="Checked paths")
    if not ctx.obj["quiet"]:
        for warning in report.warnings:
            print_warn(warning)
