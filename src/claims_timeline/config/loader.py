"""Load parser configuration from YAML/JSON files."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from claims_timeline.errors import ConfigurationError
from claims_timeline.schemas.claim_types import ClaimTypeConfig
from claims_timeline.schemas.parser_config import DEFAULT_COLORS, ParserConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent
DEFAULT_CLAIM_TYPES_FILE = CONFIG_DIR / "default_claim_types.yaml"
CONFIG_ENV_VAR = "CLAIMS_TIMELINE_CONFIG"

_default_claim_types_cache: Optional[List[ClaimTypeConfig]] = None


def _read_yaml(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            recovery_suggestions=["Check the --config path", f"Create one with: claims-timeline config init {path}"],
        )
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Configuration file {path} is not valid YAML/JSON: {e}") from e


def load_default_claim_types() -> List[ClaimTypeConfig]:
    """Load the packaged default claim types (cached after first call)."""
    global _default_claim_types_cache

    if _default_claim_types_cache is None:
        data = _read_yaml(DEFAULT_CLAIM_TYPES_FILE) or {}
        _default_claim_types_cache = [
            ClaimTypeConfig.model_validate(item) for item in data.get("claim_types", [])
        ]
        logger.debug(f"Loaded {len(_default_claim_types_cache)} default claim types")

    return list(_default_claim_types_cache)


def clear_default_claim_types_cache() -> None:
    """Clear the default claim types cache (for testing)."""
    global _default_claim_types_cache
    _default_claim_types_cache = None


def parser_config_from_dict(data: Dict[str, Any]) -> ParserConfig:
    """Build a ParserConfig, wrapping pydantic errors as ConfigurationError."""
    try:
        return ParserConfig.model_validate(data)
    except PydanticValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigurationError(
            f"Invalid parser configuration: {'; '.join(problems)}",
            details={"problems": problems},
        ) from e


def load_parser_config(path: Union[str, Path]) -> ParserConfig:
    """
    Load a ParserConfig from a YAML or JSON file.

    Values in the file override the defaults; ``colors`` is merged key by key
    so a file may set a single color.

    Args:
        path: Path to the configuration file

    Returns:
        Validated ParserConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    data = _read_yaml(path)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {path} must contain a mapping, got {type(data).__name__}"
        )

    colors = data.get("colors")
    if isinstance(colors, dict):
        data = {**data, "colors": {**DEFAULT_COLORS, **colors}}

    config = parser_config_from_dict(data)
    logger.debug(f"Loaded parser config from {path}")
    return config


def resolve_parser_config(path: Optional[Union[str, Path]] = None) -> ParserConfig:
    """Config from ``path``, else from $CLAIMS_TIMELINE_CONFIG, else defaults."""
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR) or None
        if path:
            logger.info(f"Using configuration from {CONFIG_ENV_VAR}: {path}")
    if path is None:
        return ParserConfig()
    return load_parser_config(path)


def sample_config_data() -> Dict[str, Any]:
    """Sample configuration: fixed-schema settings plus the default claim types."""
    return {
        "rxTbaPath": "rxTba",
        "rxHistoryPath": "rxHistory",
        "medHistoryPath": "medHistory",
        "dateFormat": "YYYY-MM-DD",
        "colors": dict(DEFAULT_COLORS),
        "globalDateFormat": "YYYY-MM-DD",
        "claimTypes": [
            claim_type.model_dump(by_alias=True, exclude_none=True)
            for claim_type in load_default_claim_types()
        ],
    }


def write_sample_config(path: Union[str, Path], overwrite: bool = False) -> Path:
    """Write a sample configuration file.

    Raises:
        ConfigurationError: If the file exists and ``overwrite`` is False
    """
    path = Path(path)
    if path.exists() and not overwrite:
        raise ConfigurationError(
            f"Configuration file already exists: {path}",
            recovery_suggestions=["Choose another path", "Pass --force to overwrite"],
        )
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(sample_config_data(), f, sort_keys=False)
    return path
