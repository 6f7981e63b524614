from typing import Dict, List
from core.context import SignalSnapshot, lookup
from core.patterns import PatternMatch, match_present
from core.analyzer_registry import AnalyzerRegistry
from models.technology import SignalType, Patterns


@AnalyzerRegistry.register(SignalType.META)
class MetaTagsAnalyzer:
    """Analyze meta tags (name or property) for CMS/framework signatures."""

    def evaluate(self, signatures: Dict[str, Patterns], snapshot: SignalSnapshot) -> List[PatternMatch]:
        matches = []
        for meta_name, patterns in signatures.items():
            content = lookup(snapshot.meta, meta_name)
            if content is None:
                continue
            result = match_present(patterns, content)
            if result:
                matches.append(result)
        return matches
