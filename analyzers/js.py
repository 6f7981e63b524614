from typing import Dict, Iterable, List
import logging
from core.context import SignalSnapshot, JsValue
from core.patterns import PatternMatch, match_patterns, match_present
from core.analyzer_registry import AnalyzerRegistry
from models.technology import SignalType, Patterns

logger = logging.getLogger(__name__)


def _match_urls(patterns: Patterns, urls: Iterable[str]) -> List[PatternMatch]:
    """Every matching URL contributes, so repeated evidence adds up."""
    matches = []
    for url in urls:
        result = match_patterns(patterns, url)
        if result:
            matches.append(result)
    return matches


@AnalyzerRegistry.register(SignalType.SCRIPT_SRC)
class ScriptSrcAnalyzer:
    """Match loaded script URLs."""

    def evaluate(self, patterns: Patterns, snapshot: SignalSnapshot) -> List[PatternMatch]:
        return _match_urls(patterns, snapshot.script_urls)


@AnalyzerRegistry.register(SignalType.XHR)
class XhrAnalyzer:
    """Match XHR/fetch request URLs."""

    def evaluate(self, patterns: Patterns, snapshot: SignalSnapshot) -> List[PatternMatch]:
        return _match_urls(patterns, snapshot.xhr_urls)


@AnalyzerRegistry.register(SignalType.JS)
class JsGlobalsAnalyzer:
    """Match JavaScript globals already resolved by the collector."""

    def evaluate(self, signatures: Dict[str, Patterns], snapshot: SignalSnapshot) -> List[PatternMatch]:
        matches = []
        for path, patterns in signatures.items():
            if path not in snapshot.js_globals:
                continue
            result = match_present(patterns, self._as_text(snapshot.js_globals[path]))
            if result:
                logger.debug(f"JsGlobalsAnalyzer matched global {path}")
                matches.append(result)
        return matches

    @staticmethod
    def _as_text(value: JsValue) -> str:
        # Objects and functions arrive as True; render booleans the way the page would
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
