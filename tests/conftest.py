import os
import sys
import pytest

# Ensure project root is on sys.path for imports like `core.*`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

FIXTURE_FINGERPRINTS = os.path.join(os.path.dirname(__file__), "fixtures", "fingerprints")


@pytest.fixture
def fingerprints_path():
    return FIXTURE_FINGERPRINTS


@pytest.fixture
def categories():
    return {
        "1": {"name": "CMS"},
        "6": {"name": "Ecommerce"},
        "27": {"name": "Programming languages"},
        "59": {"name": "JavaScript libraries"},
    }
