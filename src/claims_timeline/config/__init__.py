"""Parser configuration loading."""

from claims_timeline.config.loader import (
    CONFIG_ENV_VAR,
    load_default_claim_types,
    load_parser_config,
    resolve_parser_config,
    write_sample_config,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "load_default_claim_types",
    "load_parser_config",
    "resolve_parser_config",
    "write_sample_config",
]
