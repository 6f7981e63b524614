import logging
from typing import Awaitable, Callable, Dict, Set

from core.context import SignalSnapshot
from core.detection_aggregator import DetectionAggregator
from core.ranking import finalize, CONFIDENCE_FLOOR
from core.signal_matcher import SignalMatcher
from models.detection import DetectionRecord, DetectionResult
from models.technology import Category, SignalType
from rules.rules_loader import FingerprintStore, get_default_store

Collector = Callable[[], Awaitable[SignalSnapshot]]


class Engine:
    def __init__(self, store: FingerprintStore = None, exclude_signals: Set[SignalType] = None,
                 confidence_floor: int = CONFIDENCE_FLOOR):
        """Initialize the engine over a fingerprint store.

        Args:
            store: Fingerprint database; the process-wide default when omitted
            exclude_signals: Signal kinds to ignore (e.g., {SignalType.HTML})
            confidence_floor: Minimum confidence for a reported technology
        """
        self.logger = logging.getLogger(__name__)
        self.store = store or get_default_store()
        self.matcher = SignalMatcher(exclude_signals=exclude_signals)
        self.confidence_floor = confidence_floor

        if exclude_signals:
            self.logger.info(f"Excluded signals: {', '.join(sorted(s.value for s in exclude_signals))}")

    def detect(self, snapshot: SignalSnapshot) -> Dict[str, DetectionRecord]:
        """Match every technology, then close over ``implies``; no ranking."""
        self.store.ensure_loaded()
        aggregator = DetectionAggregator(self.store)

        for name, rule in self.store.all():
            try:
                outcome = self.matcher.evaluate(rule, snapshot)
            except Exception as e:
                self.logger.debug(f"Skipping rule {name}: {e}", exc_info=True)
                continue
            if outcome.confidence > 0:
                aggregator.add_or_strengthen(name, outcome.confidence, outcome.version)

        self.logger.debug(f"Matched {len(aggregator.records)} technologies directly")
        added = aggregator.resolve_implications()
        if added:
            self.logger.debug(f"Implications added {added} technologies")
        return aggregator.records

    def detect_technologies(self, snapshot: SignalSnapshot) -> DetectionResult:
        return finalize(self.detect(snapshot), confidence_floor=self.confidence_floor)

    async def collect_and_detect(self, collect: Collector) -> DetectionResult:
        """Run a signal collector, then detect; collection failures yield an empty result."""
        try:
            snapshot = await collect()
        except Exception as e:
            self.logger.warning(f"Signal collection failed, reporting no technologies: {e}")
            return DetectionResult.empty()
        self.logger.debug(
            f"Collected {len(snapshot.script_urls)} scripts, {len(snapshot.xhr_urls)} xhr, "
            f"{len(snapshot.headers)} headers, {len(snapshot.cookies)} cookies, HTML {len(snapshot.html)} chars"
        )
        return self.detect_technologies(snapshot)


def detect_technologies(snapshot: SignalSnapshot, store: FingerprintStore = None) -> DetectionResult:
    """Detect technologies on one page's signals."""
    return Engine(store).detect_technologies(snapshot)


def get_category_name(category_id: int, store: FingerprintStore = None) -> str:
    return (store or get_default_store()).category_name(category_id)


def get_categories(store: FingerprintStore = None) -> Dict[int, Category]:
    return (store or get_default_store()).categories()


def get_technology_count(store: FingerprintStore = None) -> int:
    return (store or get_default_store()).size()
