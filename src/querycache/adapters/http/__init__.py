"""HTTP adapter – httpx-backed remote fetch with a route table."""
from querycache.adapters.http.fetch import DEFAULT_BASE_URL, HttpxRemoteFetch, Route

__all__ = ["DEFAULT_BASE_URL", "HttpxRemoteFetch", "Route"]
