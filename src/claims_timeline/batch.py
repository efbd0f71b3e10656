"""Folder scanning and parallel parsing of many claims files.

Each file is parsed by an independent pipeline call; the orchestrator holds
configuration only, so worker threads share it without locking.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from claims_timeline.errors import ClaimsTimelineError, ExtractionCancelledError, FileAccessError
from claims_timeline.extraction.base import check_cancelled
from claims_timeline.extraction.orchestrator import FallbackOrchestrator, detect_claims_format
from claims_timeline.ingestion import load_document
from claims_timeline.schemas.parser_config import ParserConfig
from claims_timeline.schemas.timeline import TimelineData
from claims_timeline.utils.field_paths import resolve_path

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass
class JsonFileInfo:
    """A JSON file found while scanning a folder."""

    name: str
    path: Path
    size: int
    is_claims: bool = False
    claim_count: int = 0
    claim_types: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class FileParseResult:
    """Outcome of parsing one file."""

    path: Path
    strategy: Optional[str] = None
    timeline: Optional[TimelineData] = None
    error: Optional[ClaimsTimelineError] = None

    @property
    def succeeded(self) -> bool:
        return self.timeline is not None


@dataclass
class BatchSummary:
    """Totals across a batch of parsed files."""

    total_files: int = 0
    processed_files: int = 0
    failed_files: int = 0
    total_claims: int = 0
    claim_types: List[str] = field(default_factory=list)
    date_start: Optional[date] = None
    date_end: Optional[date] = None
    errors: Dict[str, str] = field(default_factory=dict)


def _probe_claims(document: object, config: ParserConfig) -> JsonFileInfo:
    """Count claims by shape without extracting them."""
    info = JsonFileInfo(name="", path=Path(), size=0)
    if not detect_claims_format(document, config):
        return info

    info.is_claims = True
    for claim_type, path in (("rxTba", config.rx_tba_path), ("rxHistory", config.rx_history_path)):
        items = resolve_path(document, path)
        if isinstance(items, list):
            info.claim_count += len(items)
            info.claim_types.append(claim_type)

    med_claims = resolve_path(document, f"{config.med_history_path}.claims")
    if isinstance(med_claims, list):
        info.claim_count += sum(
            len(c["lines"]) if isinstance(c, dict) and isinstance(c.get("lines"), list) else 1
            for c in med_claims
        )
        info.claim_types.append("medHistory")
    return info


def analyze_json_file(path: Path, config: Optional[ParserConfig] = None) -> JsonFileInfo:
    """Describe one JSON file; read and parse errors are recorded, not raised."""
    config = config or ParserConfig()
    try:
        document = load_document(path)
        info = _probe_claims(document, config)
    except ClaimsTimelineError as e:
        info = JsonFileInfo(name="", path=Path(), size=0, error=e.message)

    info.name = path.name
    info.path = path
    try:
        info.size = path.stat().st_size
    except OSError:
        info.size = 0
    return info


def scan_folder(
    folder: Union[str, Path],
    recursive: bool = True,
    config: Optional[ParserConfig] = None,
) -> List[JsonFileInfo]:
    """
    List the JSON files under ``folder`` sorted by name, each probed for claims.

    Raises:
        FileAccessError: If the folder cannot be read
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise FileAccessError(f"Folder not found: {folder}", file_path=str(folder))

    pattern = "**/*" if recursive else "*"
    try:
        candidates = [p for p in folder.glob(pattern) if p.is_file() and p.suffix.lower() == ".json"]
    except OSError as e:
        raise FileAccessError.from_os_error(e, str(folder)) from e

    files = [analyze_json_file(p, config) for p in candidates]
    files.sort(key=lambda f: f.name.lower())
    logger.debug(f"Scanned {folder}: {len(files)} JSON files, {sum(f.is_claims for f in files)} with claims")
    return files


def parse_files(
    paths: Sequence[Union[str, Path]],
    config: Optional[ParserConfig] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    cancel_event: Optional[threading.Event] = None,
    on_progress: Optional[Callable[[FileParseResult], None]] = None,
) -> List[FileParseResult]:
    """
    Parse files in parallel, one independent pipeline call per file.

    Results come back in input order. A failed file yields a result carrying
    its error; cancellation marks unfinished files as cancelled.
    """
    if not paths:
        return []

    orchestrator = FallbackOrchestrator(config)
    results: List[Optional[FileParseResult]] = [None] * len(paths)
    workers = max(1, min(max_workers, len(paths)))

    def parse_one(path: Path) -> FileParseResult:
        try:
            check_cancelled(cancel_event, str(path))
            outcome = orchestrator.parse_file(path, cancel_event)
        except ClaimsTimelineError as e:
            return FileParseResult(path=path, error=e.with_file_path(str(path)))
        return FileParseResult(path=path, strategy=outcome.strategy, timeline=outcome.timeline)

    logger.info(f"Parsing {len(paths)} files with {workers} workers")

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(parse_one, Path(p)): i
            for i, p in enumerate(paths)
        }

        for future in as_completed(futures):
            index = futures[future]
            try:
                result = future.result()
            except Exception as e:
                logger.error(f"Unexpected error parsing {paths[index]}: {e}")
                error = ClaimsTimelineError(f"Unexpected error: {e}", file_path=str(paths[index]))
                result = FileParseResult(path=Path(paths[index]), error=error)
            results[index] = result
            if on_progress:
                on_progress(result)

    cancelled = sum(isinstance(r.error, ExtractionCancelledError) for r in results)
    if cancelled:
        logger.warning(f"{cancelled} files were cancelled before completion")

    return results


def summarize(results: Sequence[FileParseResult]) -> BatchSummary:
    """Aggregate per-file results into totals, claim types and an overall range."""
    summary = BatchSummary(total_files=len(results))
    for result in results:
        if not result.succeeded:
            summary.failed_files += 1
            summary.errors[str(result.path)] = result.error.message if result.error else "Unknown error"
            continue

        timeline = result.timeline
        summary.processed_files += 1
        summary.total_claims += timeline.metadata.total_claims
        for claim_type in timeline.metadata.claim_types:
            if claim_type not in summary.claim_types:
                summary.claim_types.append(claim_type)
        if timeline.claims:
            start, end = timeline.date_range.start, timeline.date_range.end
            summary.date_start = start if summary.date_start is None else min(summary.date_start, start)
            summary.date_end = end if summary.date_end is None else max(summary.date_end, end)
    return summary
