from typing import Dict, List
import logging
from core.context import SignalSnapshot
from core.patterns import PatternMatch, match_patterns, match_present, DEFAULT_CONFIDENCE
from core.analyzer_registry import AnalyzerRegistry
from models.technology import SignalType, DomCheck


@AnalyzerRegistry.register(SignalType.DOM)
class DomAnalyzer:
    """Check the collector's selector results against text and attribute patterns."""

    def evaluate(self, signatures: Dict[str, DomCheck], snapshot: SignalSnapshot) -> List[PatternMatch]:
        logger = logging.getLogger(__name__)
        matches = []

        for selector, check in signatures.items():
            element = snapshot.dom_results.get(selector)
            if element is None or not element.exists:
                continue

            if check.is_existence_only():
                logger.debug(f"DomAnalyzer matched selector {selector}")
                matches.append(PatternMatch(confidence=DEFAULT_CONFIDENCE))
                continue

            # Text and each attribute contribute independently
            if check.text:
                result = match_patterns(check.text, element.text)
                if result:
                    matches.append(result)

            for attribute, patterns in check.attributes.items():
                if attribute not in element.attributes:
                    continue
                result = match_present(patterns, element.attributes[attribute])
                if result:
                    matches.append(result)

        return matches
