"""
Fingerprint database: category names and technology rules.

The database lives on disk as one category file and technology shards named
after the leading character of the technology (``_``, ``a`` .. ``z``)::

    <path>/categories.json
    <path>/technologies/a.json
    <path>/technologies/b.yaml
    ...

Shards may be JSON or YAML. Not every shard need exist; missing or unreadable
shards are skipped and simply shrink the set of detectable technologies.
"""
import json
import logging
import os
import string
import threading
from typing import Any, Dict, Iterator, Optional, Set, Tuple

import yaml

from models.technology import Category, TechnologyRule

logger = logging.getLogger(__name__)

FINGERPRINTS_PATH = os.environ.get("FINGERPRINTS_PATH", "fingerprints")
SHARD_NAMES = ["_"] + list(string.ascii_lowercase)
SHARD_EXTENSIONS = (".json", ".yaml", ".yml")
UNKNOWN_CATEGORY = "Unknown"


def _read_data_file(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        if path.endswith(".json"):
            return json.load(f)
        return yaml.safe_load(f)


def _find_data_file(directory: str, stem: str) -> Optional[str]:
    for ext in SHARD_EXTENSIONS:
        candidate = os.path.join(directory, stem + ext)
        if os.path.exists(candidate):
            return candidate
    return None


class FingerprintStore:
    """
    Read-only view of the fingerprint database, loaded at most once.

    Construct one explicitly and pass it to the engine; ``ensure_loaded`` is
    safe to call from any number of threads.
    """

    def __init__(self, path: str = None):
        self.path = path or FINGERPRINTS_PATH
        self._categories: Dict[int, Category] = {}
        self._technologies: Dict[str, TechnologyRule] = {}
        self._loaded = False
        self._lock = threading.Lock()

    @classmethod
    def from_dicts(cls, categories: Dict[Any, Any], technologies: Dict[str, Dict[str, Any]]) -> "FingerprintStore":
        """Build an already-loaded store from in-memory database records."""
        store = cls(path="<memory>")
        store._install(categories, technologies)
        return store

    @property
    def loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> "FingerprintStore":
        if self._loaded:
            return self
        with self._lock:
            # Another thread may have finished the load while we waited
            if not self._loaded:
                self._load_from_disk()
        return self

    load = ensure_loaded

    def _load_from_disk(self):
        logger.info(f"Loading fingerprint database from {self.path}")
        categories: Dict[Any, Any] = {}
        category_file = _find_data_file(self.path, "categories")
        if category_file is None:
            logger.warning(f"No categories file under {self.path}; category names will be '{UNKNOWN_CATEGORY}'")
        else:
            try:
                categories = _read_data_file(category_file) or {}
            except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
                logger.warning(f"Could not read {category_file}: {e}")

        technologies: Dict[str, Dict[str, Any]] = {}
        shard_dir = os.path.join(self.path, "technologies")
        for shard in SHARD_NAMES:
            shard_file = _find_data_file(shard_dir, shard)
            if shard_file is None:
                logger.debug(f"Shard {shard} not present, skipping")
                continue
            try:
                data = _read_data_file(shard_file)
            except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
                logger.debug(f"Skipping unreadable shard {shard_file}: {e}")
                continue
            if isinstance(data, dict):
                technologies.update(data)

        self._install(categories, technologies)
        logger.info(f"Loaded {len(self._technologies)} technologies in {len(self._categories)} categories")

    def _install(self, categories: Dict[Any, Any], technologies: Dict[str, Dict[str, Any]]):
        parsed_categories: Dict[int, Category] = {}
        for key, value in (categories or {}).items():
            try:
                cat_id = int(key)
            except (TypeError, ValueError):
                logger.debug(f"Skipping category with non-numeric id {key!r}")
                continue
            name = value.get("name") if isinstance(value, dict) else value
            parsed_categories[cat_id] = Category(id=cat_id, name=str(name or UNKNOWN_CATEGORY))

        parsed_technologies: Dict[str, TechnologyRule] = {}
        for name, record in (technologies or {}).items():
            if not isinstance(record, dict):
                logger.debug(f"Skipping technology {name!r}: record is not a mapping")
                continue
            try:
                parsed_technologies[name] = TechnologyRule.from_dict(name, record)
            except (TypeError, ValueError, AttributeError) as e:
                logger.debug(f"Skipping malformed technology {name!r}: {e}")

        self._categories = parsed_categories
        self._technologies = parsed_technologies
        self._loaded = True

    def get(self, name: str) -> Optional[TechnologyRule]:
        self.ensure_loaded()
        return self._technologies.get(name)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def all(self) -> Iterator[Tuple[str, TechnologyRule]]:
        self.ensure_loaded()
        return iter(self._technologies.items())

    def category(self, category_id: int) -> Category:
        self.ensure_loaded()
        return self._categories.get(category_id) or Category(id=category_id, name=UNKNOWN_CATEGORY)

    def category_name(self, category_id: int) -> str:
        return self.category(category_id).name

    def categories(self) -> Dict[int, Category]:
        self.ensure_loaded()
        return dict(self._categories)

    def size(self) -> int:
        self.ensure_loaded()
        return len(self._technologies)

    def required_js_globals(self) -> Set[str]:
        """Global paths a collector must resolve for this database."""
        return {path for _, rule in self.all() for path in rule.js}

    def required_dom_selectors(self) -> Set[str]:
        """CSS selectors a collector must query for this database."""
        return {selector for _, rule in self.all() for selector in rule.dom}


# Default store instance
_default_store = FingerprintStore()


def get_default_store() -> FingerprintStore:
    """Get the process-wide store (loaded lazily from FINGERPRINTS_PATH)."""
    return _default_store

