"""
Browserless signal collection.

Fetches a page over HTTP and builds the SignalSnapshot the engine consumes.
Nothing is executed, so JavaScript globals and XHR traffic stay empty; DOM
selectors are answered from the served markup.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
from urllib.parse import urljoin

import httpx
from selectolax.lexbor import LexborHTMLParser

from core.context import Cookie, DomResult, SignalSnapshot, MAX_HTML_LENGTH, MAX_DOM_TEXT_LENGTH
from fetch.http_client import fetch_url
from rules.rules_loader import FingerprintStore

logger = logging.getLogger(__name__)

# Link types that never point at a third-party technology
EXCLUDED_LINK_RELS = ("stylesheet", "icon", "canonical", "apple-touch-icon", "manifest", "preconnect", "dns-prefetch", "shortcut")


@dataclass(frozen=True)
class PageCapture:
    url: str
    snapshot: SignalSnapshot
    # URL -> how it was seen (dom_script, iframe, link_<rel>)
    requests: Dict[str, List[str]] = field(default_factory=dict)


def _first_values(headers: httpx.Headers) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for name, value in headers.multi_items():
        values.setdefault(name.lower(), value)
    return values


def _meta_tags(parser: LexborHTMLParser) -> Dict[str, str]:
    meta = {}
    for node in parser.css("meta"):
        name = (node.attributes.get("name") or node.attributes.get("property") or "").lower()
        if name:
            meta[name] = node.attributes.get("content") or ""
    return meta


def _dom_results(parser: LexborHTMLParser, selectors: Iterable[str]) -> Dict[str, DomResult]:
    results = {}
    for selector in selectors:
        try:
            node = parser.css_first(selector)
        except Exception as e:
            logger.debug(f"Skipping selector {selector!r}: {e}")
            continue
        if node is None:
            continue
        results[selector] = DomResult(
            exists=True,
            text=(node.text() or "")[:MAX_DOM_TEXT_LENGTH],
            attributes={k: v or "" for k, v in node.attributes.items()},
        )
    return results


def _requests(parser: LexborHTMLParser, base_url: str) -> Dict[str, List[str]]:
    seen: Dict[str, List[str]] = {}

    def add(url: Optional[str], tag: str):
        if not url:
            return
        tags = seen.setdefault(urljoin(base_url, url), [])
        if tag not in tags:
            tags.append(tag)

    for node in parser.css("script[src]"):
        add(node.attributes.get("src"), "dom_script")
    for node in parser.css("iframe[src]"):
        add(node.attributes.get("src"), "iframe")
    for node in parser.css("link[href]"):
        rel = (node.attributes.get("rel") or "").lower()
        if any(excluded in rel for excluded in EXCLUDED_LINK_RELS):
            continue
        add(node.attributes.get("href"), f"link_{rel or 'unknown'}")
    return seen


def build_capture(response: httpx.Response, dom_selectors: Iterable[str] = ()) -> PageCapture:
    """Turn a fetched page into the engine's snapshot plus its outbound references."""
    page_url = str(response.url)
    html = response.text[:MAX_HTML_LENGTH]
    parser = LexborHTMLParser(response.text)

    requests = _requests(parser, page_url)
    script_urls = tuple(url for url, tags in requests.items() if "dom_script" in tags)
    cookies = [Cookie(name=c.name, value=c.value or "") for c in response.cookies.jar]

    snapshot = SignalSnapshot(
        script_urls=script_urls,
        meta=_meta_tags(parser),
        html=html,
        headers=_first_values(response.headers),
        cookies=cookies,
        dom_results=_dom_results(parser, dom_selectors),
    )
    return PageCapture(url=page_url, snapshot=snapshot, requests=requests)


class StaticCollector:
    """Collect page signals with a plain HTTP GET."""

    def __init__(self, store: FingerprintStore, headers: Dict[str, str] = None,
                 transport: httpx.AsyncBaseTransport = None, timeout: float = None):
        self.store = store
        self.headers = headers or {}
        self.transport = transport
        self.timeout = timeout

    async def capture(self, url: str) -> PageCapture:
        response = await fetch_url(url, timeout=self.timeout, headers=self.headers, transport=self.transport)
        capture = build_capture(response, sorted(self.store.required_dom_selectors()))
        logger.info(
            f"Collected {url}: status {response.status_code}, {len(capture.snapshot.script_urls)} scripts, "
            f"{len(capture.snapshot.cookies)} cookies"
        )
        return capture

    async def collect(self, url: str) -> SignalSnapshot:
        return (await self.capture(url)).snapshot
