"""Job board – fallback generators for every API endpoint.

List endpoints honor the same ``search``/filter/``page``/``limit`` arguments
as the server; detail endpoints fall back to the first record (jobs,
applications) or fail like a 404 (users). Records created offline get ids
derived from their arguments, never from the clock.
"""
from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import Any

from querycache.jobboard import fixtures
from querycache.kernel.errors import NotFoundError
from querycache.resilience.fallback import FallbackSynthesizer, list_generator, stable_id

_POSTING_WINDOW = timedelta(days=30)


def _find(records: list[dict[str, Any]], record_id: Any, field: str = "_id") -> dict[str, Any] | None:
    for record in records:
        if record[field] == str(record_id):
            return copy.deepcopy(record)
    return None


def _record_id(args: Any) -> Any:
    return args.get("id") if isinstance(args, dict) else args


def _deadline() -> str:
    posted = datetime.fromisoformat(fixtures.REFERENCE_TIME)
    return (posted + _POSTING_WINDOW).isoformat().replace("+00:00", "Z")


# ----------------------------------------------------------------------
# Jobs
# ----------------------------------------------------------------------

jobs = list_generator(
    fixtures.JOBS,
    search_fields=("title", "description"),
    substring_fields=("location",),
    equals_fields=("type",),
    envelope="jobs",
)

saved_jobs = list_generator(
    [job for job in fixtures.JOBS if job["_id"] in fixtures.SAVED_JOB_IDS],
    search_fields=("title",),
)

applied_jobs = list_generator(
    [job for job in fixtures.JOBS if job["_id"] in fixtures.APPLIED_JOB_IDS],
    search_fields=("title",),
)


def job_detail(args: Any) -> dict[str, Any]:
    return _find(fixtures.JOBS, _record_id(args)) or copy.deepcopy(fixtures.JOBS[0])


def create_job(args: dict[str, Any]) -> dict[str, Any]:
    return {
        **args,
        "_id": stable_id("jobs.create", args),
        "company": copy.deepcopy(fixtures.JOBS[0]["company"]),
        "postedAt": fixtures.REFERENCE_TIME,
        "deadline": _deadline(),
        "status": "ACTIVE",
        "createdAt": fixtures.REFERENCE_TIME,
        "updatedAt": fixtures.REFERENCE_TIME,
    }


def update_job(args: dict[str, Any]) -> dict[str, Any]:
    job = job_detail(args)
    return {**job, **(args.get("data") or {}), "updatedAt": fixtures.REFERENCE_TIME}


def delete_job(args: Any) -> None:
    return None


def apply_for_job(args: Any) -> dict[str, Any]:
    job_id = str(_record_id(args))
    return {
        "_id": stable_id("jobs.apply", job_id),
        "jobId": job_id,
        "status": "PENDING",
        "appliedAt": fixtures.REFERENCE_TIME,
    }


def save_job(args: Any) -> dict[str, Any]:
    job_id = str(_record_id(args))
    return {
        "_id": stable_id("jobs.save", job_id),
        "jobId": job_id,
        "savedAt": fixtures.REFERENCE_TIME,
    }


# ----------------------------------------------------------------------
# Applications
# ----------------------------------------------------------------------

applications = list_generator(
    fixtures.APPLICATIONS,
    search_fields=("jobTitle", "company"),
    equals_fields=("status",),
)


def application_detail(args: Any) -> dict[str, Any]:
    found = _find(fixtures.APPLICATIONS, _record_id(args), field="id")
    return found or copy.deepcopy(fixtures.APPLICATIONS[0])


def create_application(args: dict[str, Any]) -> dict[str, Any]:
    job = _find(fixtures.JOBS, args.get("jobId"))
    return {
        "id": stable_id("applications.create", args),
        "jobId": args.get("jobId"),
        "jobTitle": job["title"] if job else "Unknown position",
        "company": job["company"]["name"] if job else "Unknown company",
        "status": "pending",
        "appliedAt": fixtures.REFERENCE_TIME,
        "lastUpdated": fixtures.REFERENCE_TIME,
        "coverLetter": args.get("coverLetter"),
    }


def withdraw_application(args: Any) -> None:
    return None


# ----------------------------------------------------------------------
# Users and profile
# ----------------------------------------------------------------------

users = list_generator(
    fixtures.USERS,
    search_fields=("name", "email"),
    equals_fields=("role",),
    envelope="users",
)


def user_detail(args: Any) -> dict[str, Any]:
    user_id = _record_id(args)
    user = _find(fixtures.USERS, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def create_user(args: dict[str, Any]) -> dict[str, Any]:
    """Echo the new account back without its password."""
    fields = {name: value for name, value in (args or {}).items() if name != "password"}
    return {
        "role": "JOBSEEKER",
        **fields,
        "_id": stable_id("users.create", fields),
        "avatar": None,
        "isVerified": False,
        "createdAt": fixtures.REFERENCE_TIME,
        "updatedAt": fixtures.REFERENCE_TIME,
    }


def update_user(args: dict[str, Any]) -> dict[str, Any]:
    user = user_detail(args)
    return {**user, **(args.get("data") or {}), "updatedAt": fixtures.REFERENCE_TIME}


def delete_user(args: Any) -> None:
    return None


def update_own_user(args: dict[str, Any]) -> dict[str, Any]:
    # the signed-in user is the first seed user
    return {**copy.deepcopy(fixtures.USERS[0]), **(args or {}), "updatedAt": fixtures.REFERENCE_TIME}


def profile(args: Any) -> dict[str, Any]:
    return copy.deepcopy(fixtures.USER_PROFILE)


def update_profile(args: dict[str, Any]) -> dict[str, Any]:
    """Merge a partial profile section by section over the seed profile."""
    merged = copy.deepcopy(fixtures.USER_PROFILE)
    for section, values in (args or {}).items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def delete_account(args: Any) -> None:
    return None


GENERATORS = {
    "jobs": jobs,
    "jobs.get": job_detail,
    "jobs.saved": saved_jobs,
    "jobs.applied": applied_jobs,
    "jobs.create": create_job,
    "jobs.update": update_job,
    "jobs.delete": delete_job,
    "jobs.apply": apply_for_job,
    "jobs.save": save_job,
    "applications": applications,
    "applications.get": application_detail,
    "applications.create": create_application,
    "applications.withdraw": withdraw_application,
    "users": users,
    "users.get": user_detail,
    "users.create": create_user,
    "users.update": update_user,
    "users.delete": delete_user,
    "users.profile.update": update_own_user,
    "profile": profile,
    "profile.update": update_profile,
    "profile.delete": delete_account,
}


def register_fallbacks(synthesizer: FallbackSynthesizer) -> FallbackSynthesizer:
    """Register every job-board generator with *synthesizer* and return it."""
    for endpoint, generator in GENERATORS.items():
        synthesizer.register(endpoint, generator)
    return synthesizer


__all__ = ["GENERATORS", "register_fallbacks"]
