"""Job board – endpoint declarations, tag relationships and HTTP routes."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from querycache.adapters.http import Route
from querycache.application.cache import Tag
from querycache.jobboard import generators

if TYPE_CHECKING:
    from querycache.application.query import QueryClient

TAG_TYPES: tuple[str, ...] = (
    "User",
    "Job",
    "Company",
    "Message",
    "Application",
    "SavedJob",
    "UserProfile",
)

ROUTES: dict[str, Route] = {
    "jobs": Route("GET", "/jobs"),
    "jobs.get": Route("GET", "/jobs/{id}"),
    "jobs.saved": Route("GET", "/jobs/user/saved"),
    "jobs.applied": Route("GET", "/jobs/user/applied"),
    "jobs.create": Route("POST", "/jobs"),
    "jobs.update": Route("PATCH", "/jobs/{id}", body="data"),
    "jobs.delete": Route("DELETE", "/jobs/{id}"),
    "jobs.apply": Route("POST", "/jobs/{id}/apply"),
    "jobs.save": Route("POST", "/jobs/{id}/save"),
    "applications": Route("GET", "/applications/my"),
    "applications.get": Route("GET", "/applications/{id}"),
    "applications.create": Route("POST", "/applications"),
    "applications.withdraw": Route("DELETE", "/applications/{id}"),
    "users": Route("GET", "/users"),
    "users.get": Route("GET", "/users/{id}"),
    "users.create": Route("POST", "/users"),
    "users.update": Route("PATCH", "/users/{id}", body="data"),
    "users.delete": Route("DELETE", "/users/{id}"),
    "users.profile.update": Route("PATCH", "/users/profile"),
    "profile": Route("GET", "/user/profile"),
    "profile.update": Route("PATCH", "/user/profile"),
    "profile.delete": Route("DELETE", "/user/account"),
}


def _by_id(tag_type: str):
    def provide(result: Any, error: Any, args: Any) -> list[Tag]:
        record_id = args.get("id") if isinstance(args, dict) else args
        return [Tag(tag_type, record_id)] if record_id is not None else [Tag(tag_type)]

    return provide


QUERIES: dict[str, Any] = {
    "jobs": ["Job"],
    "jobs.get": _by_id("Job"),
    "jobs.saved": ["SavedJob"],
    "jobs.applied": ["Application"],
    "applications": ["Application"],
    "applications.get": _by_id("Application"),
    "users": ["User"],
    "users.get": _by_id("User"),
    "profile": ["UserProfile"],
}

MUTATIONS: dict[str, Any] = {
    "jobs.create": ["Job"],
    "jobs.update": _by_id("Job"),
    "jobs.delete": ["Job"],
    "jobs.apply": ["Application"],
    "jobs.save": ["SavedJob"],
    "applications.create": ["Application"],
    "applications.withdraw": ["Application"],
    "users.create": ["User"],
    "users.update": _by_id("User"),
    "users.delete": ["User"],
    "users.profile.update": ["User"],
    "profile.update": ["UserProfile"],
    "profile.delete": ["UserProfile"],
}


def install(client: QueryClient) -> QueryClient:
    """Declare every job-board endpoint, with its fallback generator, on *client*."""
    for name, provides in QUERIES.items():
        client.define_query(name, provides=provides, fallback=generators.GENERATORS[name])
    for name, invalidates in MUTATIONS.items():
        client.define_mutation(name, invalidates=invalidates, fallback=generators.GENERATORS[name])
    return client


__all__ = ["MUTATIONS", "QUERIES", "ROUTES", "TAG_TYPES", "install"]
