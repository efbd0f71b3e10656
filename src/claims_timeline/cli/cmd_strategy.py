"""Strategy command: report which extraction strategy would succeed."""

from pathlib import Path

import typer

from claims_timeline.cli._app import app
from claims_timeline.cli._common import ensure_initialized, fail, load_config, setup_logging
from claims_timeline.cli._console import output_result, print_ok, print_warn
from claims_timeline.errors import ClaimsTimelineError


@app.command("strategy", help="Show which parsing strategy would handle a file.")
def strategy_cmd(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Claims JSON file"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Parser configuration (YAML/JSON)"),
):
    """Print fixed_schema, configurable, baseline or none. Exits 1 for none."""
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=True)

    from claims_timeline.extraction.orchestrator import NO_STRATEGY, FallbackOrchestrator
    from claims_timeline.ingestion import load_document

    config = load_config(config_path)
    try:
        document = load_document(file)
    except ClaimsTimelineError as e:
        fail(e)

    strategy = FallbackOrchestrator(config).detect_strategy(document)

    if ctx.obj["json"]:
        output_result({"file": str(file), "strategy": strategy}, ctx=ctx)
    elif strategy == NO_STRATEGY:
        print_warn(f"No strategy can parse {file.name}")
    else:
        print_ok(f"{file.name}: {strategy}")

    if strategy == NO_STRATEGY:
        raise SystemExit(1)
