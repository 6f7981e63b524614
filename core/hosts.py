"""Group third-party request URLs by hostname."""
from typing import Dict, Iterable, List, Any
from urllib.parse import urlparse

# Static assets say little about the technology behind a host
EXCLUDED_EXTENSIONS = (
    ".css", ".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico",
    ".woff", ".woff2", ".ttf", ".eot", ".mp4", ".webm", ".mp3", ".pdf",
)


def _bare_hostname(url: str) -> str:
    hostname = urlparse(url).hostname or ""
    return hostname[4:] if hostname.startswith("www.") else hostname


def is_excluded_extension(url: str) -> bool:
    try:
        path = urlparse(url).path.lower()
    except ValueError:
        return True
    return path.endswith(EXCLUDED_EXTENSIONS)


def is_same_origin(url: str, page_hostname: str) -> bool:
    try:
        return _bare_hostname(url) == page_hostname
    except ValueError:
        return True


def group_external_hosts(page_url: str, requests: Dict[str, Iterable[str]]) -> List[Dict[str, Any]]:
    """
    Collapse external request URLs into ``[{hostname, tags}]``.

    ``requests`` maps each URL to the tags describing how it was seen
    (e.g. ``network_script``, ``dom_script``, ``iframe``). Same-origin URLs,
    unparsable URLs and static assets are dropped.
    """
    page_hostname = _bare_hostname(page_url)
    grouped: Dict[str, Dict[str, None]] = {}

    for url, tags in requests.items():
        if not url or is_same_origin(url, page_hostname) or is_excluded_extension(url):
            continue
        try:
            hostname = urlparse(url).hostname
        except ValueError:
            continue
        if not hostname:
            continue
        # dict keeps tag insertion order without duplicates
        bucket = grouped.setdefault(hostname, {})
        for tag in tags:
            bucket[tag] = None

    return [{"hostname": hostname, "tags": list(tags)} for hostname, tags in grouped.items()]
