"""Application query – executors, subscriptions and the QueryClient façade."""
from querycache.application.query.client import (
    MutationObserver,
    QueryClient,
    QueryObserver,
    configure_query_client,
    get_query_client,
    reset_query_client,
)
from querycache.application.query.endpoints import (
    EndpointDefinition,
    EndpointKind,
    EndpointRegistry,
)
from querycache.application.query.executor import QueryExecutor
from querycache.application.query.inflight import InFlightRegistry, InFlightRequest
from querycache.application.query.mutation import MutationExecutor, MutationResult
from querycache.application.query.ports import FetchMethod, RemoteFetch
from querycache.application.query.subscriptions import SubscriptionHandle, SubscriptionManager

__all__ = [
    "EndpointDefinition",
    "EndpointKind",
    "EndpointRegistry",
    "FetchMethod",
    "InFlightRegistry",
    "InFlightRequest",
    "MutationExecutor",
    "MutationObserver",
    "MutationResult",
    "QueryClient",
    "QueryExecutor",
    "QueryObserver",
    "RemoteFetch",
    "SubscriptionHandle",
    "SubscriptionManager",
    "configure_query_client",
    "get_query_client",
    "reset_query_client",
]
