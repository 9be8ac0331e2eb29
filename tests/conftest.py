# tests/conftest.py
import sys, pathlib

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))  # run from a checkout without installing

from path_selector import Rule
from path_selector.capabilities import CapabilitySet
from path_selector.selector import PathMatcher


@pytest.fixture
def matcher():
    return PathMatcher()


@pytest.fixture
def lamp():
    """Entity exposing the 'light' capability."""
    return CapabilitySet.of("light")


@pytest.fixture
def plain():
    return CapabilitySet()


@pytest.fixture
def body_rules():
    return [
        Rule(pattern="body.*[light]", payload="dim", order=0),
        Rule(pattern="body.**", payload="default", order=1),
    ]
