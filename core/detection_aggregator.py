"""Detection aggregation and implication closure.

Per-technology match outcomes are merged into one record per technology name,
then technologies implied by detected ones are added until nothing changes.
Records are only ever strengthened: confidence can rise, and a version is
filled in only when none was known.
"""
from typing import Dict, Optional
import logging

from core.patterns import split_confidence
from models.detection import DetectionRecord
from rules.rules_loader import FingerprintStore

logger = logging.getLogger(__name__)

MAX_CONFIDENCE = 100


def clamp_confidence(confidence: int) -> int:
    return max(0, min(int(confidence), MAX_CONFIDENCE))


class DetectionAggregator:
    """Accumulates detections for one run against one store."""

    def __init__(self, store: FingerprintStore):
        self.store = store
        self.records: Dict[str, DetectionRecord] = {}

    def add_or_strengthen(self, name: str, confidence: int, version: Optional[str] = None) -> Optional[DetectionRecord]:
        """
        Record a detection or strengthen an existing one.

        Names unknown to the store are ignored and return None.
        """
        rule = self.store.get(name)
        if rule is None:
            return None

        confidence = clamp_confidence(confidence)
        existing = self.records.get(name)
        if existing:
            existing.confidence = max(existing.confidence, confidence)
            if existing.version is None and version:
                existing.version = version
            return existing

        record = DetectionRecord(
            name=name,
            confidence=confidence,
            version=version or None,
            categories=[self.store.category(cat_id) for cat_id in rule.categories],
            website=rule.website,
            icon=rule.icon,
        )
        self.records[name] = record
        return record

    def resolve_implications(self) -> int:
        """
        Add technologies implied by detected ones until a full pass adds nothing.

        Returns the number of technologies added. Cycles in ``implies`` are
        harmless: a name already detected is never added again.
        """
        added = 0
        changed = True
        while changed:
            changed = False
            # Snapshot the names: records may grow during the pass
            for name in list(self.records):
                rule = self.store.get(name)
                if rule is None:
                    continue
                for token in rule.implies:
                    implied_name, implied_confidence = split_confidence(token)
                    if implied_name in self.records or self.store.get(implied_name) is None:
                        continue
                    self.add_or_strengthen(implied_name, implied_confidence)
                    logger.debug(f"{name} implies {implied_name} ({implied_confidence})")
                    added += 1
                    changed = True
        return added
