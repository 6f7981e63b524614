"""
Compilation and matching of fingerprint signature strings.

A signature is ``<regex>\\;version:\\<n>\\;confidence:<weight>`` where both
suffixes are optional and may appear in any order.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional

import regex

logger = logging.getLogger(__name__)

SEPARATOR = "\\;"
DEFAULT_CONFIDENCE = 100
# Hard timeout per search to stop catastrophic backtracking on large HTML
REGEX_TIMEOUT_SECONDS = 0.8


@dataclass(frozen=True)
class CompiledPattern:
    regex: "regex.Pattern"
    version_group: Optional[int] = None
    confidence: int = DEFAULT_CONFIDENCE


@dataclass(frozen=True)
class PatternMatch:
    """The alternative that matched: its weight and the version it captured."""
    confidence: int
    version: Optional[str] = None


def parse_version_group(token: str) -> Optional[int]:
    """Turn a ``\\<n>`` backreference token into a group index."""
    if not token.startswith("\\"):
        return None
    digits = ""
    for char in token[1:]:
        if not char.isdigit():
            break
        digits += char
    return int(digits) if digits else None


def split_confidence(token: str, default: int = DEFAULT_CONFIDENCE):
    """Split ``Name\\;confidence:<n>`` into ``(name, n)``."""
    parts = token.split(SEPARATOR)
    confidence = default
    for part in parts[1:]:
        if part.startswith("confidence:"):
            try:
                confidence = int(part[len("confidence:"):])
            except ValueError:
                logger.debug(f"Ignoring malformed confidence in {token!r}")
    return parts[0], confidence


@lru_cache(maxsize=None)
def compile_pattern(raw: str) -> Optional[CompiledPattern]:
    """Compile a raw signature; returns None when the regex is invalid."""
    parts = raw.split(SEPARATOR)
    body = parts[0]
    version_group = None
    confidence = DEFAULT_CONFIDENCE

    for part in parts[1:]:
        if part.startswith("version:"):
            version_group = parse_version_group(part[len("version:"):])
        elif part.startswith("confidence:"):
            try:
                confidence = int(part[len("confidence:"):])
            except ValueError:
                logger.debug(f"Ignoring malformed confidence in pattern {raw!r}")

    try:
        compiled = regex.compile(body, regex.IGNORECASE)
    except regex.error as e:
        logger.debug(f"Skipping uncompilable pattern {body!r}: {e}")
        return None

    return CompiledPattern(regex=compiled, version_group=version_group, confidence=confidence)


def extract_version(match, version_group: Optional[int]) -> Optional[str]:
    """Return the text of the referenced capture group, if any."""
    if match is None or version_group is None:
        return None
    try:
        value = match.group(version_group)
    except IndexError:
        return None
    return value or None


def search(compiled: CompiledPattern, value: str):
    try:
        return compiled.regex.search(value, timeout=REGEX_TIMEOUT_SECONDS)
    except TimeoutError:
        logger.warning(f"Pattern timed out after {REGEX_TIMEOUT_SECONDS}s: {compiled.regex.pattern[:50]}...")
        return None


def _body(raw: str) -> str:
    return raw.split(SEPARATOR, 1)[0]


def presence_weight(alternatives: Iterable[str]) -> Optional[int]:
    """
    Weight of an existence-only signature, or None if it needs a regex match.

    A signature is existence-only when every alternative has an empty regex
    body; its weight is the first alternative's declared confidence.
    """
    alternatives = list(alternatives)
    if not alternatives or any(_body(raw) for raw in alternatives):
        return None
    compiled = compile_pattern(alternatives[0])
    return compiled.confidence if compiled else DEFAULT_CONFIDENCE


def match_patterns(alternatives: Iterable[str], value: Optional[str]) -> Optional[PatternMatch]:
    """
    Try alternatives in order against ``value``.

    The first alternative that compiles and matches decides the weight and
    version; later alternatives are not consulted. Alternatives with an empty
    regex body never match here.
    """
    if not value:
        return None

    for raw in alternatives:
        if not _body(raw):
            continue
        compiled = compile_pattern(raw)
        if compiled is None:
            continue
        match = search(compiled, value)
        if match:
            return PatternMatch(
                confidence=compiled.confidence,
                version=extract_version(match, compiled.version_group),
            )
    return None


def match_present(alternatives: Iterable[str], value: Optional[str]) -> Optional[PatternMatch]:
    """
    Evaluate a signature against a signal known to be present.

    Existence-only signatures match whatever the value; others need a regex hit.
    """
    weight = presence_weight(alternatives)
    if weight is not None:
        return PatternMatch(confidence=weight)
    return match_patterns(alternatives, value)
