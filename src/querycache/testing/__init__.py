"""Testing support – fakes and hypothesis strategies for the query cache.

Pytest fixtures live in :mod:`querycache.testing.fixtures`; import them in
your ``conftest.py``::

    pytest_plugins = ["querycache.testing.fixtures"]
"""

from querycache.testing.fakes import FakeClock, FakeMetricsRegistry, FakeRemoteFetch, FetchCall
from querycache.testing.generators import json_args, json_values, tags

__all__ = [
    "FakeClock",
    "FakeMetricsRegistry",
    "FakeRemoteFetch",
    "FetchCall",
    "json_args",
    "json_values",
    "tags",
]
