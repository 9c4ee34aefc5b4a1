"""Testing fixtures – pytest fixtures for the fake doubles.

Enable them in your ``conftest.py``::

    pytest_plugins = ["querycache.testing.fixtures"]
"""
from querycache.testing.fixtures.client import fake_fetch, fake_metrics, query_client
from querycache.testing.fixtures.clock import fake_clock

__all__ = ["fake_clock", "fake_fetch", "fake_metrics", "query_client"]
