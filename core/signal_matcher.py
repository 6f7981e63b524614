"""Evaluate one technology rule against one page's signals."""
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Set

# Import all analyzers to trigger @AnalyzerRegistry.register decorators
import analyzers.js
import analyzers.meta_tags
import analyzers.html
import analyzers.headers
import analyzers.cookies
import analyzers.dom

from core.analyzer_registry import AnalyzerRegistry
from core.context import SignalSnapshot
from models.technology import SignalType, TechnologyRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchOutcome:
    """Summed weight of every signal that matched; not capped here."""
    confidence: int = 0
    version: Optional[str] = None


class SignalMatcher:
    def __init__(self, exclude_signals: Set[SignalType] = None):
        self.analyzers: Dict[SignalType, object] = AnalyzerRegistry.instantiate_all(exclude=exclude_signals)

    def evaluate(self, rule: TechnologyRule, snapshot: SignalSnapshot) -> MatchOutcome:
        total = 0
        version = None

        for signal_type, analyzer in self.analyzers.items():
            signatures = rule.signals(signal_type)
            if not signatures:
                continue

            for result in analyzer.evaluate(signatures, snapshot):
                total += result.confidence
                # The first version found wins
                if version is None and result.version:
                    version = result.version

        if total:
            logger.debug(f"{rule.name}: confidence {total}, version {version}")
        return MatchOutcome(confidence=total, version=version)
