"""Job board – the job-search application's endpoints wired onto the cache.

Typical host setup::

    settings = EnvSettingsLoader().load(QueryCacheSettings)
    client = QueryClient.from_settings(settings, routes=jobboard.ROUTES)
    jobboard.install(client)
    configure_query_client(client)
"""
from querycache.jobboard.endpoints import MUTATIONS, QUERIES, ROUTES, TAG_TYPES, install
from querycache.jobboard.generators import GENERATORS, register_fallbacks

__all__ = [
    "GENERATORS",
    "MUTATIONS",
    "QUERIES",
    "ROUTES",
    "TAG_TYPES",
    "install",
    "register_fallbacks",
]
