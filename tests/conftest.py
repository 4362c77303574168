"""
Shared test fixtures for the Ripple test suite.

Sample decodable types live in ``sample_models.py``.
"""

from types import MappingProxyType

import pytest

from ripple.decoding import AccessorTable, DecodeEngine


@pytest.fixture(autouse=True)
def _fresh_accessor_tables():
    AccessorTable.clear_cache()
    yield
    AccessorTable.clear_cache()


@pytest.fixture
def container():
    return MappingProxyType({"status": "ok", "items": [{"id": 1}, {"id": 2}]})


@pytest.fixture
def engine():
    return DecodeEngine()


@pytest.fixture
def journal():
    return []
