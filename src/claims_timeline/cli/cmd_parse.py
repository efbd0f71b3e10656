"""Parse command: run the fallback orchestrator on one file."""

import json
from pathlib import Path

import typer

from claims_timeline.cli._app import app
from claims_timeline.cli._common import ensure_initialized, fail, load_config, setup_logging
from claims_timeline.cli._console import console, print_ok, stdout_console
from claims_timeline.errors import ClaimsTimelineError


@app.command("parse", help="Parse a claims JSON file into a timeline.")
def parse_cmd(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Claims JSON file"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Parser configuration (YAML/JSON)"),
    date_format: str = typer.Option(None, "--date-format", help="Date format, e.g. MM/DD/YYYY"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the timeline JSON to this file"),
):
    """Parse FILE and print the serialized timeline, or write it with --output."""
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    from claims_timeline.extraction.orchestrator import FallbackOrchestrator

    config = load_config(config_path, date_format)
    try:
        outcome = FallbackOrchestrator(config).parse_file(file)
    except ClaimsTimelineError as e:
        fail(e)

    payload = outcome.timeline.to_serializable()

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

    if ctx.obj["json"]:
        stdout_console.print_json(data={"strategy": outcome.strategy, "timeline": payload})
        return

    if not ctx.obj["quiet"]:
        metadata = outcome.timeline.metadata
        date_range = outcome.timeline.date_range
        print_ok(f"Parsed {file.name} with {outcome.strategy} strategy")
        console.print(f"  Claims:      {metadata.total_claims}")
        console.print(f"  Claim types: {', '.join(metadata.claim_types) or '-'}")
        console.print(f"  Date range:  {date_range.start.isoformat()} to {date_range.end.isoformat()}")
        if outcome.report and outcome.report.issues:
            console.print(f"  Recovered:   {len(outcome.report)} item issues")
        if output:
            console.print(f"  Output:      {output}")

    if not output:
        stdout_console.print_json(data=payload)
