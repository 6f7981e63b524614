import pytest
from core.rules_validator import (
    detect_cookie_overlaps,
    detect_dangling_implies,
    detect_header_overlaps,
    detect_implication_cycles,
    detect_invalid_patterns,
    detect_unknown_categories,
    print_validation_report,
    validate_store,
)
from rules.rules_loader import FingerprintStore


@pytest.fixture
def store(categories):
    return FingerprintStore.from_dicts(categories, {
        "Broken": {"cats": [1], "html": "([", "dom": {"#x": {"attributes": {"href": "(?P<"}}}},
        "Alpha": {"cats": [27], "implies": ["Beta\\;confidence:50"], "cookies": {"session": ""}},
        "Beta": {"implies": "Alpha", "cookies": {"session": ""}},
        "Orphan": {"cats": [404], "implies": "Ghost", "headers": {"Server": "orphan"}},
        "Other": {"headers": {"server": "other"}},
    })


def test_invalid_patterns(store):
    invalid = detect_invalid_patterns(store)
    assert ("Broken", "html", "([") in invalid
    assert ("Broken", "dom[#x].href", "(?P<") in invalid
    assert len(invalid) == 2


def test_dangling_implies(store):
    assert detect_dangling_implies(store) == {"Orphan": ["Ghost"]}


def test_unknown_categories(store):
    assert detect_unknown_categories(store) == {"Orphan": [404]}


def test_implication_cycles(store):
    cycles = detect_implication_cycles(store)
    assert len(cycles) == 1
    assert cycles[0][0] == cycles[0][-1]
    assert set(cycles[0]) == {"Alpha", "Beta"}


def test_overlaps(store):
    assert detect_cookie_overlaps(store) == {"session": ["Alpha", "Beta"]}
    assert detect_header_overlaps(store) == {"server": ["Orphan", "Other"]}


def test_validate_store_report(store, capsys):
    report = validate_store(store)
    assert report.technology_count == 5
    assert report.has_errors

    print_validation_report(report)
    out = capsys.readouterr().out
    assert "INVALID PATTERNS: 2" in out
    assert "Orphan -> Ghost" in out


def test_clean_store_has_no_errors(categories):
    store = FingerprintStore.from_dicts(categories, {"PHP": {"cats": [27], "headers": {"x-powered-by": "php"}}})
    report = validate_store(store)
    assert not report.has_errors
    assert report.implication_cycles == []
