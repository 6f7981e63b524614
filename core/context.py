from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union, Any, Optional

# Collectors cap the outerHTML before it reaches the engine
MAX_HTML_LENGTH = 100_000
MAX_DOM_TEXT_LENGTH = 500

JsValue = Union[str, bool, int, float, None]


@dataclass(frozen=True)
class Cookie:
    name: str
    value: str = ""


@dataclass(frozen=True)
class DomResult:
    """First element matched by a selector on the rendered page."""
    exists: bool
    text: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SignalSnapshot:
    """Everything observed on one page, read-only to the engine."""
    # De-duplicated, in the order the collector observed them
    script_urls: Tuple[str, ...] = ()
    xhr_urls: Tuple[str, ...] = ()
    meta: Dict[str, str] = field(default_factory=dict)
    js_globals: Dict[str, JsValue] = field(default_factory=dict)
    html: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: List[Cookie] = field(default_factory=list)
    dom_results: Dict[str, DomResult] = field(default_factory=dict)

    def find_cookie(self, name: str) -> Optional[Cookie]:
        lowered = name.lower()
        for cookie in self.cookies:
            if cookie.name.lower() == lowered:
                return cookie
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignalSnapshot":
        """Build a snapshot from the collector's JSON shape (camelCase keys)."""
        cookies = []
        for item in data.get("cookies") or []:
            if isinstance(item, dict) and item.get("name"):
                cookies.append(Cookie(name=item["name"], value=str(item.get("value", ""))))

        dom_results = {}
        for selector, result in (data.get("domResults") or {}).items():
            if not isinstance(result, dict):
                continue
            dom_results[selector] = DomResult(
                exists=bool(result.get("exists")),
                text=(result.get("text") or "")[:MAX_DOM_TEXT_LENGTH],
                attributes={k: str(v) for k, v in (result.get("attributes") or {}).items()},
            )

        return cls(
            script_urls=_unique(data.get("scriptUrls")),
            xhr_urls=_unique(data.get("xhrUrls")),
            meta={k.lower(): v for k, v in (data.get("meta") or {}).items()},
            js_globals=dict(data.get("jsGlobals") or {}),
            html=(data.get("html") or "")[:MAX_HTML_LENGTH],
            headers={k.lower(): v for k, v in (data.get("headers") or {}).items()},
            cookies=cookies,
            dom_results=dom_results,
        )


def _unique(urls) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(u for u in (urls or []) if isinstance(u, str) and u))


def lookup(mapping: Dict[str, str], name: str) -> Optional[str]:
    """Case-insensitive lookup; collectors normally lower-case keys already."""
    lowered = name.lower()
    if lowered in mapping:
        return mapping[lowered]
    for key, value in mapping.items():
        if key.lower() == lowered:
            return value
    return None
