"""Fallback orchestration across extraction strategies.

Strategies run in a fixed order against the same parsed document:
fixed schema, then configurable, then baseline. The first one that returns
a timeline wins; its result is returned unchanged. When every strategy
fails, a single ``AllStrategiesFailedError`` names all of them.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from claims_timeline.config.loader import load_default_claim_types
from claims_timeline.errors import (
    AllStrategiesFailedError,
    ClaimsTimelineError,
    ExtractionCancelledError,
    ExtractionError,
)
from claims_timeline.extraction.base import ClaimsExtractor, ExtractionReport
from claims_timeline.extraction.baseline import BaselineExtractor
from claims_timeline.extraction.configurable import ConfigurableExtractor
from claims_timeline.extraction.fixed_schema import FixedSchemaExtractor
from claims_timeline.ingestion import load_document
from claims_timeline.schemas.parser_config import ParserConfig
from claims_timeline.schemas.timeline import TimelineData
from claims_timeline.utils.field_paths import resolve_path

logger = logging.getLogger(__name__)

NO_STRATEGY = "none"


@dataclass
class StrategyOutcome:
    """Result of running one strategy: a timeline or an error, never both."""

    strategy: str
    timeline: Optional[TimelineData] = None
    error: Optional[ClaimsTimelineError] = None
    report: Optional[ExtractionReport] = None

    @property
    def succeeded(self) -> bool:
        return self.timeline is not None


class FallbackOrchestrator:
    """
    Runs extraction strategies in order until one succeeds.

    Holds configuration only, so one instance can parse many documents,
    including from several threads at once.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        logger: Optional[logging.Logger] = None,
        strategies: Optional[Sequence[ClaimsExtractor]] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Parser configuration shared by all strategies
            logger: Logger injected into every default strategy
            strategies: Override the default strategy order (mainly for tests)
        """
        self.config = config or ParserConfig()
        self.logger = logger or logging.getLogger(__name__)
        if strategies is None:
            strategies = [
                FixedSchemaExtractor(self.config, self.logger),
                ConfigurableExtractor(self.config, self.logger),
                BaselineExtractor(self.config, self.logger),
            ]
        self.strategies: List[ClaimsExtractor] = list(strategies)

    @property
    def strategy_names(self) -> List[str]:
        return [strategy.name for strategy in self.strategies]

    def _attempt(
        self,
        strategy: ClaimsExtractor,
        document: Any,
        cancel_event: Optional[threading.Event],
    ) -> StrategyOutcome:
        try:
            timeline, report = strategy.extract_with_report(document, cancel_event)
        except ExtractionCancelledError:
            raise
        except ClaimsTimelineError as e:
            return StrategyOutcome(strategy=strategy.name, error=e)
        except Exception as e:
            error = ExtractionError(f"Unexpected error in {strategy.name} strategy: {e}")
            error.__cause__ = e
            return StrategyOutcome(strategy=strategy.name, error=error)
        return StrategyOutcome(strategy=strategy.name, timeline=timeline, report=report)

    def run(self, document: Any, cancel_event: Optional[threading.Event] = None) -> StrategyOutcome:
        """
        Try each strategy in order and return the winning outcome.

        Raises:
            ExtractionCancelledError: As soon as cancellation is observed
            AllStrategiesFailedError: If no strategy produced a timeline
        """
        attempts = []
        for strategy in self.strategies:
            self.logger.debug(f"Attempting {strategy.name} strategy")
            outcome = self._attempt(strategy, document, cancel_event)
            if outcome.succeeded:
                self.logger.info(
                    f"{strategy.name} strategy succeeded with {outcome.timeline.metadata.total_claims} claims"
                )
                return outcome
            self.logger.info(
                f"{strategy.name} strategy failed: [{outcome.error.kind.value}] {outcome.error.message}"
            )
            attempts.append((strategy.name, outcome.error))

        raise AllStrategiesFailedError(attempts)

    def parse_document(self, document: Any, cancel_event: Optional[threading.Event] = None) -> TimelineData:
        """Parse an already-loaded JSON document into a timeline."""
        return self.run(document, cancel_event).timeline

    def parse_file(
        self,
        path: Union[str, Path],
        cancel_event: Optional[threading.Event] = None,
    ) -> StrategyOutcome:
        """
        Read, parse and extract one claims file.

        File access, empty input and JSON syntax errors are raised directly,
        before any strategy runs.
        """
        document = load_document(path)
        try:
            return self.run(document, cancel_event)
        except ClaimsTimelineError as e:
            raise e.with_file_path(str(path))

    def detect_strategy(self, document: Any) -> str:
        """Name of the strategy that would succeed on ``document``, or "none".

        Replays the same ordered trial as ``run`` without keeping results.
        """
        for strategy in self.strategies:
            if self._attempt(strategy, document, None).succeeded:
                return strategy.name
        return NO_STRATEGY


def detect_claims_format(document: Any, config: Optional[ParserConfig] = None) -> bool:
    """True when ``document`` looks like claims data; never raises.

    A document qualifies when any fixed-schema array or any configured claim
    type array resolves to a list.
    """
    if not isinstance(document, dict):
        return False
    config = config or ParserConfig()

    paths = [config.rx_tba_path, config.rx_history_path, f"{config.med_history_path}.claims"]
    try:
        claim_types = config.claim_types if config.claim_types is not None else load_default_claim_types()
    except ClaimsTimelineError:
        claim_types = []
    paths.extend(claim_type.array_path for claim_type in claim_types)

    return any(isinstance(resolve_path(document, path), list) for path in paths)
