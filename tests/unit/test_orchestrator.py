"""Unit tests for fallback orchestration across strategies."""

import threading
from datetime import date

import pytest

from claims_timeline.errors import (
    AllStrategiesFailedError,
    EmptyInputError,
    ErrorKind,
    ExtractionCancelledError,
    ExtractionError,
    FileAccessError,
    JsonSyntaxError,
)
from claims_timeline.extraction.base import ClaimsExtractor
from claims_timeline.extraction.baseline import BaselineExtractor
from claims_timeline.extraction.fixed_schema import FixedSchemaExtractor
from claims_timeline.extraction.orchestrator import NO_STRATEGY, FallbackOrchestrator, detect_claims_format
from claims_timeline.schemas.claim_types import claim_type_from_dict
from claims_timeline.schemas.parser_config import ParserConfig


class CancelDuringFirstItem(FixedSchemaExtractor):
    """Sets the cancel event while the first prescription is being built."""

    def __init__(self, cancel_event):
        super().__init__()
        self.cancel_event = cancel_event
        self.started = []

    def _days_supply(self, value, claim_type, claim_id):
        self.started.append(claim_id)
        self.cancel_event.set()
        return super()._days_supply(value, claim_type, claim_id)


class ExplodingExtractor(ClaimsExtractor):
    """Fails with a non-library exception."""

    name = "exploding"

    def extract_records(self, document, report, cancel_event=None):
        raise RuntimeError("boom")


@pytest.fixture
def visits_config():
    return ParserConfig(claim_types=[claim_type_from_dict({
        "name": "visits",
        "arrayPath": "data.visits",
        "startDate": "start",
        "endDate": "start",
    })])


class TestRun:
    """Tests for ordered strategy trials."""

    def test_fixed_schema_wins(self, mixed_document):
        outcome = FallbackOrchestrator().run(mixed_document)
        assert outcome.strategy == "fixed_schema"
        assert outcome.error is None
        assert outcome.timeline.metadata.total_claims == 5

    def test_falls_back_to_configurable(self, visits_config):
        doc = {"data": {"visits": [{"id": "v1", "start": "2024-02-01"}]}}
        outcome = FallbackOrchestrator(visits_config).run(doc)
        assert outcome.strategy == "configurable"
        assert outcome.timeline.claims[0].id == "v1"

    def test_falls_back_to_baseline(self):
        config = ParserConfig(date_format="MM/DD/YYYY")
        outcome = FallbackOrchestrator(config).run({"rxTba": [{"id": "x", "dos": "2024-01-15"}]})
        assert outcome.strategy == "baseline"
        assert outcome.timeline.claims[0].start_date == date(2024, 1, 15)

    def test_total_failure_names_every_strategy(self):
        with pytest.raises(AllStrategiesFailedError) as exc_info:
            FallbackOrchestrator().run({"unrelated": "data"})
        error = exc_info.value
        assert [name for name, _ in error.attempts] == ["fixed_schema", "configurable", "baseline"]
        assert error.terminal_kind == ErrorKind.VALIDATION
        for name in ("fixed_schema", "configurable", "baseline"):
            assert name in error.message

    def test_unexpected_exception_is_wrapped(self, rx_document):
        orchestrator = FallbackOrchestrator(strategies=[ExplodingExtractor(), BaselineExtractor()])
        assert orchestrator.run(rx_document).strategy == "baseline"

        orchestrator = FallbackOrchestrator(strategies=[ExplodingExtractor()])
        with pytest.raises(AllStrategiesFailedError) as exc_info:
            orchestrator.run(rx_document)
        wrapped = exc_info.value.last_error
        assert isinstance(wrapped, ExtractionError)
        assert isinstance(wrapped.__cause__, RuntimeError)

    def test_cancellation_propagates(self, rx_document):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(ExtractionCancelledError):
            FallbackOrchestrator().run(rx_document, cancel)

    def test_cancel_set_mid_item_stops_at_next_item(self):
        cancel = threading.Event()
        extractor = CancelDuringFirstItem(cancel)
        orchestrator = FallbackOrchestrator(strategies=[extractor, BaselineExtractor()])
        doc = {"rxTba": [
            {"id": "a", "dos": "2024-01-01", "dayssupply": 5},
            {"id": "b", "dos": "2024-01-02", "dayssupply": 5},
        ]}
        with pytest.raises(ExtractionCancelledError, match=r"rxTba\[1\]"):
            orchestrator.run(doc, cancel)
        assert extractor.started == ["a"]

    def test_sentinel_date_does_not_sink_other_claims(self):
        doc = {"rxTba": [
            {"id": "good", "dos": "2024-01-15", "dayssupply": 30, "medication": "Med A"},
            {"id": "sentinel", "dos": "9999-12-31", "dayssupply": 30},
        ]}
        outcome = FallbackOrchestrator().run(doc)
        assert outcome.strategy == "fixed_schema"
        assert [c.id for c in outcome.timeline.claims] == ["good"]

    def test_strategy_names(self):
        assert FallbackOrchestrator().strategy_names == ["fixed_schema", "configurable", "baseline"]


class TestTimelineInvariants:
    """Tests for properties of every produced timeline."""

    def test_sorted_and_ranged(self, mixed_document):
        timeline = FallbackOrchestrator().parse_document(mixed_document)
        starts = [c.start_date for c in timeline.claims]
        assert starts == sorted(starts, reverse=True)
        assert [c.id for c in timeline.claims] == ["rx2", "l2", "l1", "rx1", "h1"]
        assert timeline.date_range.start == date(2023, 11, 20)
        assert timeline.date_range.end == date(2024, 5, 11)
        assert all(c.end_date >= c.start_date for c in timeline.claims)
        assert timeline.metadata.total_claims == len(timeline.claims)

    def test_idempotent(self, mixed_document):
        orchestrator = FallbackOrchestrator()
        first = orchestrator.parse_document(mixed_document).to_serializable()
        second = orchestrator.parse_document(mixed_document).to_serializable()
        assert first == second

    def test_claim_types_listed(self, mixed_document):
        timeline = FallbackOrchestrator().parse_document(mixed_document)
        assert timeline.metadata.claim_types == ["rxTba", "rxHistory", "medHistory"]


class TestParseFile:
    """Tests for file-level parsing."""

    def test_success(self, write_json, rx_document):
        outcome = FallbackOrchestrator().parse_file(write_json(rx_document))
        assert outcome.strategy == "fixed_schema"
        assert outcome.timeline.metadata.total_claims == 1

    def test_missing_file_raises_before_strategies(self, tmp_path):
        with pytest.raises(FileAccessError):
            FallbackOrchestrator().parse_file(tmp_path / "absent.json")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("  \n", encoding="utf-8")
        with pytest.raises(EmptyInputError):
            FallbackOrchestrator().parse_file(path)

    def test_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"rxTba": [', encoding="utf-8")
        with pytest.raises(JsonSyntaxError):
            FallbackOrchestrator().parse_file(path)

    def test_failure_carries_file_path(self, write_json):
        path = write_json({"unrelated": "data"})
        with pytest.raises(AllStrategiesFailedError) as exc_info:
            FallbackOrchestrator().parse_file(path)
        assert exc_info.value.file_path == str(path)


class TestDetection:
    """Tests for detect_strategy and detect_claims_format."""

    def test_detect_strategy(self, mixed_document):
        orchestrator = FallbackOrchestrator()
        assert orchestrator.detect_strategy(mixed_document) == "fixed_schema"
        assert orchestrator.detect_strategy({"unrelated": "data"}) == NO_STRATEGY

    def test_detect_claims_format(self, mixed_document):
        assert detect_claims_format(mixed_document)
        assert detect_claims_format({"rxTba": []})
        assert not detect_claims_format({"unrelated": "data"})
        assert not detect_claims_format([1, 2, 3])
        assert not detect_claims_format("text")

    def test_detect_configured_array(self, visits_config):
        doc = {"data": {"visits": []}}
        assert detect_claims_format(doc, visits_config)
        assert not detect_claims_format(doc)
