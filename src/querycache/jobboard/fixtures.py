"""Job board – deterministic seed records served while the API is offline.

Timestamps are fixed so synthesized responses are identical across calls.
"""
from __future__ import annotations

from typing import Any

REFERENCE_TIME = "2026-01-01T12:00:00Z"

COMPANIES: list[dict[str, Any]] = [
    {
        "_id": "comp1",
        "name": "Tech Corp",
        "description": "Product company focused on modern web front-ends.",
        "logo": "https://via.placeholder.com/100",
        "website": "https://example.com",
        "location": "Beijing, Chaoyang",
        "industry": "Internet",
        "size": "100-500",
        "founded": 2015,
        "createdAt": "2025-06-01T09:00:00Z",
        "updatedAt": "2025-06-01T09:00:00Z",
    },
    {
        "_id": "comp2",
        "name": "StartupXYZ",
        "description": "Cloud computing and big data solutions.",
        "logo": "https://via.placeholder.com/100",
        "website": "https://example2.com",
        "location": "Shanghai, Pudong",
        "industry": "Cloud computing",
        "size": "500-1000",
        "founded": 2012,
        "createdAt": "2025-06-01T09:00:00Z",
        "updatedAt": "2025-06-01T09:00:00Z",
    },
]


def _company_ref(company: dict[str, Any]) -> dict[str, Any]:
    return {
        "_id": company["_id"],
        "name": company["name"],
        "logo": "https://via.placeholder.com/50",
        "location": company["location"],
    }


JOBS: list[dict[str, Any]] = [
    {
        "_id": "1",
        "title": "Frontend Developer",
        "description": "Build and maintain our web products with React and Vue.js.",
        "company": _company_ref(COMPANIES[0]),
        "location": "Beijing, Chaoyang",
        "type": "FULL_TIME",
        "salaryMin": 15000,
        "salaryMax": 25000,
        "skills": ["React", "Vue.js", "JavaScript", "TypeScript"],
        "status": "ACTIVE",
        "postedAt": "2025-12-30T12:00:00Z",
        "deadline": "2026-01-31T12:00:00Z",
        "createdAt": "2025-12-30T12:00:00Z",
        "updatedAt": "2025-12-30T12:00:00Z",
    },
    {
        "_id": "2",
        "title": "Node.js Backend Developer",
        "description": "Design APIs, databases and microservices.",
        "company": _company_ref(COMPANIES[1]),
        "location": "Shanghai, Pudong",
        "type": "FULL_TIME",
        "salaryMin": 18000,
        "salaryMax": 30000,
        "skills": ["Node.js", "Express", "MongoDB", "Redis"],
        "status": "ACTIVE",
        "postedAt": "2025-12-31T12:00:00Z",
        "deadline": "2026-01-26T12:00:00Z",
        "createdAt": "2025-12-31T12:00:00Z",
        "updatedAt": "2025-12-31T12:00:00Z",
    },
    {
        "_id": "3",
        "title": "UI/UX Designer",
        "description": "Design product interfaces and improve the user experience.",
        "company": _company_ref(COMPANIES[0]),
        "location": "Shenzhen, Nanshan",
        "type": "CONTRACT",
        "salaryMin": 12000,
        "salaryMax": 20000,
        "skills": ["Figma", "Sketch", "Adobe XD"],
        "status": "ACTIVE",
        "postedAt": "2025-12-29T12:00:00Z",
        "deadline": "2026-01-21T12:00:00Z",
        "createdAt": "2025-12-29T12:00:00Z",
        "updatedAt": "2025-12-29T12:00:00Z",
    },
]

USERS: list[dict[str, Any]] = [
    {
        "_id": "1",
        "name": "Zhang San",
        "email": "zhangsan@example.com",
        "role": "JOBSEEKER",
        "phone": "13800138001",
        "location": "Beijing",
        "bio": "Senior frontend engineer working with React and Vue.js.",
        "avatar": "https://via.placeholder.com/100",
        "createdAt": "2025-06-01T09:00:00Z",
        "updatedAt": "2025-06-01T09:00:00Z",
    },
    {
        "_id": "2",
        "name": "Li Si",
        "email": "lisi@example.com",
        "role": "EMPLOYER",
        "phone": "13800138002",
        "location": "Shanghai",
        "bio": "Engineering manager responsible for team and architecture.",
        "avatar": "https://via.placeholder.com/100",
        "createdAt": "2025-06-01T09:00:00Z",
        "updatedAt": "2025-06-01T09:00:00Z",
    },
]

APPLICATIONS: list[dict[str, Any]] = [
    {
        "id": "1",
        "jobId": "1",
        "jobTitle": "Frontend Developer",
        "company": "Tech Corp",
        "status": "pending",
        "appliedAt": "2025-12-15T10:00:00Z",
        "lastUpdated": "2025-12-15T10:00:00Z",
    },
    {
        "id": "2",
        "jobId": "2",
        "jobTitle": "Node.js Backend Developer",
        "company": "StartupXYZ",
        "status": "interview",
        "appliedAt": "2025-12-10T14:30:00Z",
        "lastUpdated": "2025-12-20T09:15:00Z",
    },
]

USER_PROFILE: dict[str, Any] = {
    "personalInfo": {
        "name": "John Doe",
        "email": "john.doe@example.com",
        "phone": "+1 (555) 123-4567",
        "location": "San Francisco, CA",
        "bio": "Experienced software developer with a passion for creating innovative solutions.",
    },
    "preferences": {
        "skills": ["JavaScript", "React", "Node.js", "TypeScript"],
        "preferredLocation": "San Francisco, CA",
        "salaryRange": {"min": 80000, "max": 120000},
        "experienceLevel": "mid",
        "jobTypes": ["full-time", "contract"],
        "remoteWork": True,
        "companySize": ["startup", "medium"],
        "industries": ["technology", "fintech"],
    },
    "privacy": {
        "profileVisibility": "public",
        "contactInfo": "registered",
        "jobAlerts": True,
        "marketingEmails": False,
    },
}

SAVED_JOB_IDS: tuple[str, ...] = ("1", "2")
APPLIED_JOB_IDS: tuple[str, ...] = ("2", "3")

__all__ = [
    "APPLICATIONS",
    "APPLIED_JOB_IDS",
    "COMPANIES",
    "JOBS",
    "REFERENCE_TIME",
    "SAVED_JOB_IDS",
    "USERS",
    "USER_PROFILE",
]
