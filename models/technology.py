from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple, Optional, Any, Union, List

# A pattern field in the fingerprint database is a single string or a list of
# alternatives; both are normalised to a tuple of raw alternative strings.
Patterns = Tuple[str, ...]


class SignalType(Enum):
    """Kinds of page signal a technology rule can be matched against."""
    SCRIPT_SRC = "scriptSrc"
    XHR = "xhr"
    META = "meta"
    JS = "js"
    HTML = "html"
    HEADERS = "headers"
    COOKIES = "cookies"
    DOM = "dom"


@dataclass(frozen=True)
class Category:
    id: int
    name: str


@dataclass(frozen=True)
class DomCheck:
    """What to verify on the first element matched by a DOM selector."""
    text: Patterns = ()
    attributes: Dict[str, Patterns] = field(default_factory=dict)
    exists_only: bool = False

    def is_existence_only(self) -> bool:
        return self.exists_only or (not self.text and not self.attributes)


@dataclass(frozen=True)
class TechnologyRule:
    """One technology entry of the fingerprint database."""
    name: str
    script_src: Patterns = ()
    xhr: Patterns = ()
    meta: Dict[str, Patterns] = field(default_factory=dict)
    js: Dict[str, Patterns] = field(default_factory=dict)
    html: Patterns = ()
    headers: Dict[str, Patterns] = field(default_factory=dict)
    cookies: Dict[str, Patterns] = field(default_factory=dict)
    dom: Dict[str, DomCheck] = field(default_factory=dict)
    implies: Tuple[str, ...] = ()
    categories: Tuple[int, ...] = ()
    website: Optional[str] = None
    icon: Optional[str] = None

    def signals(self, signal_type: SignalType) -> Any:
        """Return the rule's signatures for one signal kind (empty if unset)."""
        return {
            SignalType.SCRIPT_SRC: self.script_src,
            SignalType.XHR: self.xhr,
            SignalType.META: self.meta,
            SignalType.JS: self.js,
            SignalType.HTML: self.html,
            SignalType.HEADERS: self.headers,
            SignalType.COOKIES: self.cookies,
            SignalType.DOM: self.dom,
        }[signal_type]

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "TechnologyRule":
        """Build a rule from its fingerprint-database record."""
        cats = data.get("cats", data.get("categories")) or []
        if not isinstance(cats, list):
            cats = [cats]
        categories = []
        for cat in cats:
            try:
                categories.append(int(cat))
            except (TypeError, ValueError):
                continue

        return cls(
            name=name,
            script_src=_as_patterns(data.get("scriptSrc") or data.get("scripts")),
            xhr=_as_patterns(data.get("xhr")),
            meta=_as_pattern_map(data.get("meta"), lower_keys=True),
            js=_as_pattern_map(data.get("js")),
            html=_as_patterns(data.get("html")),
            headers=_as_pattern_map(data.get("headers"), lower_keys=True),
            cookies=_as_pattern_map(data.get("cookies"), lower_keys=True),
            dom=_as_dom_checks(data.get("dom")),
            implies=tuple(s for s in _as_patterns(data.get("implies")) if s),
            categories=tuple(categories),
            website=data.get("website") or None,
            icon=data.get("icon") or None,
        )


def _as_patterns(value: Union[str, List[str], None]) -> Patterns:
    if value is None:
        return ()
    items = value if isinstance(value, list) else [value]
    return tuple(item for item in items if isinstance(item, str))


def _as_pattern_map(value: Optional[Dict[str, Any]], lower_keys: bool = False) -> Dict[str, Patterns]:
    if not isinstance(value, dict):
        return {}
    result: Dict[str, Patterns] = {}
    for key, patterns in value.items():
        # YAML shards can produce non-string keys
        key = str(key)
        key = key.lower() if lower_keys else key
        # An empty list is treated like an empty string: presence alone matches
        result[key] = _as_patterns(patterns) or ("",)
    return result


def _as_dom_checks(value: Union[str, List[str], Dict[str, Any], None]) -> Dict[str, DomCheck]:
    if value is None:
        return {}
    if isinstance(value, str):
        return {value: DomCheck()}
    if isinstance(value, list):
        return {selector: DomCheck() for selector in value if isinstance(selector, str)}
    if not isinstance(value, dict):
        return {}

    checks: Dict[str, DomCheck] = {}
    for selector, spec in value.items():
        if not isinstance(spec, dict):
            checks[selector] = DomCheck()
            continue
        attributes = spec.get("attributes") if isinstance(spec.get("attributes"), dict) else {}
        checks[selector] = DomCheck(
            text=_as_patterns(spec.get("text")),
            attributes={attr: _as_patterns(p) or ("",) for attr, p in attributes.items()},
            exists_only=spec.get("exists") == "",
        )
    return checks
