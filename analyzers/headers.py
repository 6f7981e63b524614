from typing import Dict, List
import logging
from core.context import SignalSnapshot, lookup
from core.patterns import PatternMatch, match_present
from core.analyzer_registry import AnalyzerRegistry
from models.technology import SignalType, Patterns


@AnalyzerRegistry.register(SignalType.HEADERS)
class HeadersAnalyzer:
    def evaluate(self, signatures: Dict[str, Patterns], snapshot: SignalSnapshot) -> List[PatternMatch]:
        logger = logging.getLogger(__name__)
        matches = []

        for header_name, patterns in signatures.items():
            header_value = lookup(snapshot.headers, header_name)
            if header_value is None:
                continue

            result = match_present(patterns, header_value)
            if result:
                logger.debug(f"HeadersAnalyzer matched header {header_name}")
                matches.append(result)

        return matches
