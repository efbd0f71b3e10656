"""Batch command: parse every claims file in a folder in parallel."""

import json
import threading
from pathlib import Path

import typer

from claims_timeline.cli._app import app
from claims_timeline.cli._common import ensure_initialized, fail, load_config, setup_logging
from claims_timeline.cli._console import console, output_result, output_table, print_ok, print_warn
from claims_timeline.errors import ClaimsTimelineError


@app.command("batch", help="Parse all claims files in a folder.")
def batch_cmd(
    ctx: typer.Context,
    folder: Path = typer.Argument(..., help="Folder containing claims JSON files"),
    recursive: bool = typer.Option(True, "--recursive/--no-recursive", help="Include subfolders"),
    workers: int = typer.Option(4, "--workers", "-w", min=1, help="Parallel worker threads"),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Where to write <name>-timeline.json"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Parser configuration (YAML/JSON)"),
):
    """Scan FOLDER, parse each claims file and write one timeline JSON per file."""
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    from claims_timeline.batch import parse_files, scan_folder, summarize
    from claims_timeline.cli._progress import BatchProgress

    config = load_config(config_path)
    try:
        files = scan_folder(folder, recursive=recursive, config=config)
    except ClaimsTimelineError as e:
        fail(e)

    claims_files = [f for f in files if f.is_claims]
    if not claims_files:
        print_warn(f"No claims files found in {folder} ({len(files)} JSON files scanned)")
        raise SystemExit(1)

    out_dir = output_dir or folder
    out_dir.mkdir(parents=True, exist_ok=True)

    cancel_event = threading.Event()
    show_progress = not (ctx.obj["quiet"] or ctx.obj["json"])
    try:
        with BatchProgress(len(claims_files), enabled=show_progress, console=console) as progress:
            results = parse_files(
                [f.path for f in claims_files],
                config=config,
                max_workers=workers,
                cancel_event=cancel_event,
                on_progress=progress.on_file_done,
            )
    except KeyboardInterrupt:
        cancel_event.set()
        print_warn("Interrupted; remaining files were cancelled")
        raise SystemExit(130)

    rows = []
    for result in results:
        row = {"file": result.path.name, "strategy": result.strategy or "-", "claims": 0, "output": "-"}
        if result.succeeded:
            target = out_dir / f"{result.path.stem}-timeline.json"
            with open(target, "w", encoding="utf-8") as f:
                json.dump(result.timeline.to_serializable(), f, indent=2, ensure_ascii=False)
            row["claims"] = result.timeline.metadata.total_claims
            row["output"] = str(target)
        else:
            row["error"] = f"[{result.error.kind.value}] {result.error.message}"
        rows.append(row)

    summary = summarize(results)

    if ctx.obj["json"]:
        output_result({
            "files": rows,
            "summary": {
                "total_files": summary.total_files,
                "processed_files": summary.processed_files,
                "failed_files": summary.failed_files,
                "total_claims": summary.total_claims,
                "claim_types": summary.claim_types,
                "date_range": {
                    "start": summary.date_start.isoformat() if summary.date_start else None,
                    "end": summary.date_end.isoformat() if summary.date_end else None,
                },
            },
        }, ctx=ctx)
    else:
        output_table(rows, ctx=ctx, title="Batch results", columns=["file", "strategy", "claims", "output"])
        for path, message in summary.errors.items():
            print_warn(f"{Path(path).name}: {message}")
        print_ok(
            f"Processed {summary.processed_files}/{summary.total_files} files, "
            f"{summary.total_claims} claims"
        )
        if summary.date_start:
            console.print(f"  Date range: {summary.date_start.isoformat()} to {summary.date_end.isoformat()}")

    if summary.failed_files:
        raise SystemExit(1)
