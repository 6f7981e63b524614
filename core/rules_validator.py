"""
Utility functions to validate a fingerprint database for broken or overlapping rules.

Nothing here affects detection: a broken pattern is skipped at match time anyway.
The report only surfaces what a database maintainer would want to fix.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

from core.patterns import compile_pattern, split_confidence
from models.technology import SignalType, TechnologyRule
from rules.rules_loader import FingerprintStore


@dataclass
class ValidationReport:
    technology_count: int = 0
    invalid_patterns: List[Tuple[str, str, str]] = field(default_factory=list)  # (technology, field, pattern)
    dangling_implies: Dict[str, List[str]] = field(default_factory=dict)
    unknown_categories: Dict[str, List[int]] = field(default_factory=dict)
    implication_cycles: List[List[str]] = field(default_factory=list)
    cookie_overlaps: Dict[str, List[str]] = field(default_factory=dict)
    header_overlaps: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.invalid_patterns or self.dangling_implies or self.unknown_categories)


def _iter_raw_patterns(rule: TechnologyRule) -> Iterator[Tuple[str, str]]:
    """Yield (field, raw pattern) for every signature of a rule."""
    for signal_type in SignalType:
        signatures = rule.signals(signal_type)
        if signal_type is SignalType.DOM:
            for selector, check in signatures.items():
                for raw in check.text:
                    yield f"dom[{selector}].text", raw
                for attribute, patterns in check.attributes.items():
                    for raw in patterns:
                        yield f"dom[{selector}].{attribute}", raw
        elif isinstance(signatures, dict):
            for key, patterns in signatures.items():
                for raw in patterns:
                    yield f"{signal_type.value}[{key}]", raw
        else:
            for raw in signatures:
                yield signal_type.value, raw


def detect_invalid_patterns(store: FingerprintStore) -> List[Tuple[str, str, str]]:
    invalid = []
    for name, rule in store.all():
        for field_name, raw in _iter_raw_patterns(rule):
            if compile_pattern(raw) is None:
                invalid.append((name, field_name, raw))
    return invalid


def detect_dangling_implies(store: FingerprintStore) -> Dict[str, List[str]]:
    """Implied technologies that are not in the database."""
    dangling = {}
    for name, rule in store.all():
        missing = [split_confidence(t)[0] for t in rule.implies if split_confidence(t)[0] not in store]
        if missing:
            dangling[name] = missing
    return dangling


def detect_unknown_categories(store: FingerprintStore) -> Dict[str, List[int]]:
    known = store.categories()
    unknown = {}
    for name, rule in store.all():
        missing = [cat_id for cat_id in rule.categories if cat_id not in known]
        if missing:
            unknown[name] = missing
    return unknown


def detect_implication_cycles(store: FingerprintStore) -> List[List[str]]:
    """
    Find cycles in the ``implies`` graph with an iterative depth-first search.

    Each cycle is reported once, as the path that closes it.
    """
    graph = {
        name: [split_confidence(t)[0] for t in rule.implies if split_confidence(t)[0] in store]
        for name, rule in store.all()
    }
    visited = set()
    cycles = []

    for root in graph:
        if root in visited:
            continue
        path: List[str] = []
        on_path = set()
        stack = [(root, iter(graph[root]))]
        path.append(root)
        on_path.add(root)
        visited.add(root)

        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                path.pop()
                on_path.discard(node)
                continue
            if child in on_path:
                cycles.append(path[path.index(child):] + [child])
            elif child not in visited:
                visited.add(child)
                path.append(child)
                on_path.add(child)
                stack.append((child, iter(graph[child])))

    return cycles


def _overlaps(store: FingerprintStore, signal_type: SignalType) -> Dict[str, List[str]]:
    users = defaultdict(list)
    for name, rule in store.all():
        for key in rule.signals(signal_type):
            users[key].append(name)
    return {key: names for key, names in users.items() if len(names) > 1}


def detect_cookie_overlaps(store: FingerprintStore) -> Dict[str, List[str]]:
    """Cookies used by multiple technologies."""
    return _overlaps(store, SignalType.COOKIES)


def detect_header_overlaps(store: FingerprintStore) -> Dict[str, List[str]]:
    """Headers used by multiple technologies."""
    return _overlaps(store, SignalType.HEADERS)


def validate_store(store: FingerprintStore) -> ValidationReport:
    return ValidationReport(
        technology_count=store.size(),
        invalid_patterns=detect_invalid_patterns(store),
        dangling_implies=detect_dangling_implies(store),
        unknown_categories=detect_unknown_categories(store),
        implication_cycles=detect_implication_cycles(store),
        cookie_overlaps=detect_cookie_overlaps(store),
        header_overlaps=detect_header_overlaps(store),
    )


def print_validation_report(report: ValidationReport, verbose: bool = True) -> None:
    """Print a human-readable validation report."""
    print("\n" + "="*70)
    print("FINGERPRINT DATABASE VALIDATION REPORT")
    print("="*70)
    print(f"\nTotal Technologies: {report.technology_count}")

    if report.invalid_patterns:
        print(f"\n✗ INVALID PATTERNS: {len(report.invalid_patterns)}")
        for name, field_name, raw in report.invalid_patterns:
            print(f"  {name} {field_name}: {raw!r}")
    else:
        print("\n✓ All patterns compile")

    if report.dangling_implies:
        print(f"\n✗ UNKNOWN IMPLIED TECHNOLOGIES: {len(report.dangling_implies)}")
        for name, missing in sorted(report.dangling_implies.items()):
            print(f"  {name} -> {', '.join(missing)}")
    else:
        print("\n✓ All implied technologies exist")

    if report.unknown_categories:
        print(f"\n✗ UNKNOWN CATEGORIES: {len(report.unknown_categories)}")
        for name, missing in sorted(report.unknown_categories.items()):
            print(f"  {name} -> {', '.join(str(c) for c in missing)}")
    else:
        print("\n✓ All category ids exist")

    if report.implication_cycles:
        print(f"\n⚠ IMPLICATION CYCLES: {len(report.implication_cycles)}")
        for cycle in report.implication_cycles:
            print(f"  {' -> '.join(cycle)}")

    for label, overlaps in (("COOKIE", report.cookie_overlaps), ("HEADER", report.header_overlaps)):
        if overlaps:
            print(f"\n⚠ {label} OVERLAPS: {len(overlaps)}")
            if verbose:
                for key, names in sorted(overlaps.items()):
                    print(f"  '{key}' -> {', '.join(names)}")
        else:
            print(f"\n✓ No {label.lower()} overlaps")

    print("\n" + "="*70)
