"""
querycache – Resilient tagged query cache.

Import path convention::

    from querycache.application.query import QueryClient, configure_query_client
    from querycache.application.cache import Tag, serialize_key
    from querycache.resilience.fallback import FallbackSynthesizer
    from querycache.adapters.http import HttpxRemoteFetch, Route
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
