"""Centralized initialization for claims_timeline entry points.

Loads the ``.env`` file once so ``CLAIMS_TIMELINE_CONFIG`` and other
environment settings are visible to every command.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class StartupState:
    """Environment state after initialization."""

    project_root: Path
    env_loaded: bool = False
    config_path: Optional[Path] = None


# Module-level state
_initialized: bool = False
_state: Optional[StartupState] = None


def _find_project_root(start_path: Optional[Path] = None) -> Path:
    """Find project root by looking for pyproject.toml or .env, else the cwd."""
    current = start_path or Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / ".env").exists() or (parent / "pyproject.toml").exists():
            return parent
    return current


def _load_env(project_root: Path) -> bool:
    """Load .env file from project root.

    Returns:
        True if .env was loaded, False otherwise.
    """
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.debug(f"Loaded .env from {env_path}")
        return True
    logger.debug(f"No .env found at {env_path}")
    return False


def ensure_initialized() -> StartupState:
    """Ensure the application is initialized (idempotent).

    Returns:
        Current StartupState.
    """
    global _initialized, _state

    if _initialized and _state is not None:
        return _state

    project_root = _find_project_root()
    env_loaded = _load_env(project_root)
    config_env = os.getenv("CLAIMS_TIMELINE_CONFIG")
    _state = StartupState(
        project_root=project_root,
        env_loaded=env_loaded,
        config_path=Path(config_env) if config_env else None,
    )
    _initialized = True
    return _state


def reset_for_testing() -> None:
    """Reset initialization state (for testing only)."""
    global _initialized, _state
    _initialized = False
    _state = None
