"""CLI package: Typer-based command-line interface.

Usage:
    claims-timeline --help
    python -m claims_timeline parse claims.json
"""

from claims_timeline.cli._app import app

# Register command modules (side-effect imports)
import claims_timeline.cli.cmd_parse  # noqa: F401
import claims_timeline.cli.cmd_validate  # noqa: F401
import claims_timeline.cli.cmd_strategy  # noqa: F401
import claims_timeline.cli.cmd_batch  # noqa: F401
import claims_timeline.cli.cmd_config  # noqa: F401

__all__ = ["app"]
