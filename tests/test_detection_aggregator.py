"""Tests for detection merging and the implication closure."""
import pytest
from core.detection_aggregator import DetectionAggregator, clamp_confidence
from rules.rules_loader import FingerprintStore


@pytest.fixture
def store(categories):
    return FingerprintStore.from_dicts(categories, {
        "WordPress": {"cats": [1], "implies": ["PHP\\;confidence:50", "MySQL"]},
        "PHP": {"cats": [27]},
        "MySQL": {"cats": []},
        "WooCommerce": {"cats": [6], "implies": "WordPress"},
        "Alpha": {"implies": ["Beta"]},
        "Beta": {"implies": ["Alpha"]},
        "Dangling": {"implies": ["NotInStore"]},
    })


def test_clamp_confidence():
    assert clamp_confidence(250) == 100
    assert clamp_confidence(-5) == 0
    assert clamp_confidence(42) == 42


def test_add_creates_record_with_categories(store):
    aggregator = DetectionAggregator(store)
    record = aggregator.add_or_strengthen("WordPress", 90, "6.4")
    assert record.confidence == 90
    assert record.version == "6.4"
    assert [(c.id, c.name) for c in record.categories] == [(1, "CMS")]


def test_add_clamps_to_100(store):
    aggregator = DetectionAggregator(store)
    assert aggregator.add_or_strengthen("PHP", 300).confidence == 100


def test_strengthen_never_weakens(store):
    aggregator = DetectionAggregator(store)
    aggregator.add_or_strengthen("PHP", 80, "8.1")
    aggregator.add_or_strengthen("PHP", 40, "7.4")
    record = aggregator.records["PHP"]
    assert record.confidence == 80
    assert record.version == "8.1"


def test_strengthen_fills_missing_version(store):
    aggregator = DetectionAggregator(store)
    aggregator.add_or_strengthen("PHP", 60)
    aggregator.add_or_strengthen("PHP", 90, "8.2")
    assert aggregator.records["PHP"].confidence == 90
    assert aggregator.records["PHP"].version == "8.2"


def test_unknown_technology_is_ignored(store):
    aggregator = DetectionAggregator(store)
    assert aggregator.add_or_strengthen("Nope", 100) is None
    assert aggregator.records == {}


def test_implies_with_confidence_override(store):
    aggregator = DetectionAggregator(store)
    aggregator.add_or_strengthen("WordPress", 90)
    added = aggregator.resolve_implications()
    assert added == 2
    assert aggregator.records["PHP"].confidence == 50
    assert aggregator.records["MySQL"].confidence == 100


def test_implications_are_transitive(store):
    aggregator = DetectionAggregator(store)
    aggregator.add_or_strengthen("WooCommerce", 100)
    aggregator.resolve_implications()
    assert list(aggregator.records) == ["WooCommerce", "WordPress", "PHP", "MySQL"]


def test_implied_never_overrides_existing_detection(store):
    aggregator = DetectionAggregator(store)
    aggregator.add_or_strengthen("WordPress", 90)
    aggregator.add_or_strengthen("PHP", 20)
    aggregator.resolve_implications()
    assert aggregator.records["PHP"].confidence == 20


def test_cycle_terminates_with_each_detected_once(store):
    aggregator = DetectionAggregator(store)
    aggregator.add_or_strengthen("Alpha", 70)
    aggregator.resolve_implications()
    assert sorted(aggregator.records) == ["Alpha", "Beta"]
    assert aggregator.records["Alpha"].confidence == 70
    assert aggregator.records["Beta"].confidence == 100


def test_closure_is_idempotent(store):
    aggregator = DetectionAggregator(store)
    aggregator.add_or_strengthen("WooCommerce", 100)
    aggregator.resolve_implications()
    before = {name: (r.confidence, r.version) for name, r in aggregator.records.items()}
    assert aggregator.resolve_implications() == 0
    after = {name: (r.confidence, r.version) for name, r in aggregator.records.items()}
    assert before == after


def test_implied_name_missing_from_store_is_skipped(store):
    aggregator = DetectionAggregator(store)
    aggregator.add_or_strengthen("Dangling", 100)
    assert aggregator.resolve_implications() == 0
    assert list(aggregator.records) == ["Dangling"]
