"""
Shared fixtures for flight capture tests.

Loads the sample FetchFlights payload from data/ and provides a virtual
clock. Test doubles live in fakes.py.
"""

import json
import os
import sys

import pytest

# Add scripts/ to path so we can import the flightcapture package
_scripts_dir = os.path.join(os.path.dirname(__file__), "..", "..", "scripts")
if _scripts_dir not in sys.path:
    sys.path.insert(0, _scripts_dir)

from fakes import FakeClock  # noqa: E402

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "data")


def _load_fixture(filename: str):
    path = os.path.join(DATA_DIR, filename)
    if not os.path.exists(path):
        pytest.skip(f"Fixture file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def sample_payload():
    return _load_fixture("fetchflights-sample.json")


@pytest.fixture
def clock():
    return FakeClock()
