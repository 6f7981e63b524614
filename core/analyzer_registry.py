"""Dispatch table from signal kind to the analyzer that evaluates it."""
import logging
from typing import Dict, Type, List, Set, Optional

from models.technology import SignalType

logger = logging.getLogger(__name__)


class AnalyzerRegistry:
    """Registry of signal analyzers, one per SignalType."""

    _analyzers: Dict[SignalType, Type] = {}
    _order: List[SignalType] = []  # Preserve registration order

    @classmethod
    def register(cls, signal_type: SignalType):
        """Decorator to register an analyzer class for a signal kind.

        Example:
            @AnalyzerRegistry.register(SignalType.HEADERS)
            class HeadersAnalyzer:
                def evaluate(self, signatures, snapshot) -> List[PatternMatch]:
                    ...
        """
        if not isinstance(signal_type, SignalType):
            raise ValueError(f"signal_type must be a SignalType, got {signal_type!r}")

        def decorator(analyzer_class: Type):
            if signal_type in cls._analyzers:
                logger.warning(f"Analyzer for '{signal_type.value}' already registered, overwriting")
            else:
                cls._order.append(signal_type)

            cls._analyzers[signal_type] = analyzer_class
            logger.debug(f"Registered analyzer: {signal_type.value} -> {analyzer_class.__name__}")
            return analyzer_class
        return decorator

    @classmethod
    def get_all_types(cls) -> List[SignalType]:
        """Registered signal kinds in registration order."""
        return cls._order.copy()

    @classmethod
    def get_analyzer_class(cls, signal_type: SignalType) -> Optional[Type]:
        return cls._analyzers.get(signal_type)

    @classmethod
    def missing(cls) -> Set[SignalType]:
        """Signal kinds without a registered analyzer."""
        return set(SignalType) - set(cls._analyzers)

    @classmethod
    def instantiate_all(cls, exclude: Set[SignalType] = None) -> Dict[SignalType, object]:
        """Instantiate every registered analyzer, keyed and ordered by SignalType.

        Raises RuntimeError if any signal kind has no analyzer, so a new
        SignalType cannot be silently ignored by the matcher.
        """
        missing = cls.missing()
        if missing:
            names = ", ".join(sorted(t.value for t in missing))
            raise RuntimeError(f"No analyzer registered for signal types: {names}")

        exclude = exclude or set()
        instances = {}
        # Evaluation order is the SignalType declaration order, not import order
        for signal_type in SignalType:
            if signal_type in exclude:
                logger.info(f"Skipping excluded analyzer: {signal_type.value}")
                continue
            instances[signal_type] = cls._analyzers[signal_type]()
            logger.debug(f"Instantiated analyzer: {signal_type.value}")
        return instances

    @classmethod
    def clear(cls):
        """Clear all registered analyzers (useful for testing)."""
        cls._analyzers.clear()
        cls._order.clear()
