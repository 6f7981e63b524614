from typing import List
import time
import logging

from core.context import SignalSnapshot, MAX_HTML_LENGTH
from core.patterns import PatternMatch, match_patterns
from core.analyzer_registry import AnalyzerRegistry
from models.technology import SignalType, Patterns

# Warn on slow regex evaluation to surface problematic patterns
PATTERN_SLOW_THRESHOLD_SECONDS = 0.5


@AnalyzerRegistry.register(SignalType.HTML)
class HtmlAnalyzer:
    """Match the page markup once; repeated occurrences do not add up."""

    def evaluate(self, patterns: Patterns, snapshot: SignalSnapshot) -> List[PatternMatch]:
        logger = logging.getLogger(__name__)
        scan_html = snapshot.html
        if len(scan_html) > MAX_HTML_LENGTH:
            scan_html = scan_html[:MAX_HTML_LENGTH]
            logger.debug(f"HtmlAnalyzer truncating HTML for scanning to {MAX_HTML_LENGTH} chars (original {len(snapshot.html)})")

        start = time.perf_counter()
        result = match_patterns(patterns, scan_html)
        duration = time.perf_counter() - start
        if duration > PATTERN_SLOW_THRESHOLD_SECONDS:
            logger.warning(f"HtmlAnalyzer slow patterns {patterns[0][:50]}... took {duration:.2f}s")

        return [result] if result else []
