"""Shared helpers for CLI commands."""

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from claims_timeline.cli._console import console, print_failure
from claims_timeline.config.loader import resolve_parser_config
from claims_timeline.errors import ClaimsTimelineError, ConfigurationError
from claims_timeline.schemas.parser_config import ParserConfig
from claims_timeline.startup import ensure_initialized as _ensure_initialized
from claims_timeline.utils.date_parsing import is_supported_format

logger = logging.getLogger(__name__)


def ensure_initialized() -> None:
    """Load .env before any command runs."""
    _ensure_initialized()


def setup_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging with Rich handler."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def fail(error: BaseException) -> None:
    """Report an error and exit with status 1."""
    print_failure(error)
    raise SystemExit(1)


def load_config(config_path: Optional[Path], date_format: Optional[str] = None) -> ParserConfig:
    """Resolve the parser config for a command, applying a --date-format override.

    Exits with status 1 on configuration errors.
    """
    try:
        config = resolve_parser_config(config_path or _ensure_initialized().config_path)
        if date_format:
            if not is_supported_format(date_format):
                raise ConfigurationError(
                    f"Unsupported date format '{date_format}'",
                    recovery_suggestions=[
                        "Use one of: YYYY-MM-DD, MM/DD/YYYY, DD-MM-YYYY, YYYY/MM/DD, DD/MM/YYYY, MM-DD-YYYY"
                    ],
                )
            config = config.model_copy(update={"date_format": date_format, "global_date_format": date_format})
    except ClaimsTimelineError as e:
        fail(e)
    return config
