"""
Pytest fixtures for claims_timeline tests.
Provides sample claim documents and helpers for writing them to disk.
"""

import json
from pathlib import Path

import pytest

from claims_timeline.config.loader import clear_default_claim_types_cache


@pytest.fixture(autouse=True)
def _fresh_default_claim_types():
    """Reload packaged claim types for every test."""
    clear_default_claim_types_cache()
    yield
    clear_default_claim_types_cache()


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document to tmp_path and return its path."""
    def _write(data, name="claims.json"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def rx_document():
    """One fully specified pending prescription."""
    return {
        "rxTba": [
            {"id": "rx1", "dos": "2024-01-15", "dayssupply": 30, "medication": "Med A"},
        ]
    }


@pytest.fixture
def med_document():
    """One medical claim with a single service line."""
    return {
        "medHistory": {
            "claims": [
                {
                    "claimId": "m1",
                    "provider": "City Clinic",
                    "claimDate": "2024-03-02",
                    "totalAmount": 120.0,
                    "lines": [
                        {
                            "lineId": "l1",
                            "srvcStart": "2024-03-01",
                            "srvcEnd": "2024-03-01",
                            "description": "Visit",
                        }
                    ],
                }
            ]
        }
    }


@pytest.fixture
def mixed_document():
    """All three claim shapes with out-of-order dates."""
    return {
        "rxTba": [
            {"id": "rx1", "dos": "2024-01-15", "dayssupply": 30, "medication": "Med A"},
            {"id": "rx2", "dos": "2024-05-01", "dayssupply": 10, "medication": "Med B"},
        ],
        "rxHistory": [
            {"id": "h1", "dos": "2023-11-20", "dayssupply": 90, "medication": "Med C"},
        ],
        "medHistory": {
            "claims": [
                {
                    "claimId": "m1",
                    "provider": "City Clinic",
                    "lines": [
                        {"lineId": "l1", "srvcStart": "2024-03-01", "srvcEnd": "2024-03-03", "description": "Stay"},
                        {"lineId": "l2", "srvcStart": "2024-03-02", "description": "Lab"},
                    ],
                }
            ]
        },
    }
