from typing import Dict, List
from core.context import SignalSnapshot
from core.patterns import PatternMatch, match_present
from core.analyzer_registry import AnalyzerRegistry
from models.technology import SignalType, Patterns


@AnalyzerRegistry.register(SignalType.COOKIES)
class CookiesAnalyzer:
    def evaluate(self, signatures: Dict[str, Patterns], snapshot: SignalSnapshot) -> List[PatternMatch]:
        matches = []

        for cookie_name, patterns in signatures.items():
            # Check by cookie name, then the value against the pattern
            cookie = snapshot.find_cookie(cookie_name)
            if cookie is None:
                continue
            result = match_present(patterns, cookie.value)
            if result:
                matches.append(result)

        return matches
