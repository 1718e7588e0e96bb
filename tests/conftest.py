"""Shared fixtures for depqueue tests."""

import pytest

from resolution import PackageCatalog, RequestQueue, Session


@pytest.fixture
def make_session():
    """Build a session over an in-memory catalog mapping."""
    def _make(packages, search_private=False):
        return Session(PackageCatalog(packages), search_private=search_private)
    return _make


@pytest.fixture
def make_queue():
    """Build a request queue from a list of atoms."""
    def _make(*requests):
        queue = RequestQueue()
        for request in requests:
            queue.push(request)
        return queue
    return _make


@pytest.fixture
def chain_catalog():
    """A -> B -> C -> D."""
    return {
        "a": {"version": "1.0", "requires": "b"},
        "b": {"version": "1.0", "requires": "c"},
        "c": {"version": "1.0", "requires": "d"},
        "d": {"version": "1.0"},
    }
