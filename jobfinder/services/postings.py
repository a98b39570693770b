from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from jobfinder.models.enums import EmploymentType, ExperienceLevel, LocationType


class MalformedRecordError(ValueError):
    pass


def coerce_string_list(value: Any, *, field_name: str = "value") -> list[str]:
    """Read a stored JSON list of strings.

    Accepts ``None`` (empty), a list of strings, or a JSON-encoded list of strings.
    Anything else raises ``MalformedRecordError``.
    """

    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            value = json.loads(text)
        except ValueError as exc:
            raise MalformedRecordError(f"{field_name} is not valid JSON") from exc
    if not isinstance(value, (list, tuple)):
        raise MalformedRecordError(f"{field_name} must be a list, got {type(value).__name__}")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise MalformedRecordError(f"{field_name} entries must be strings, got {type(item).__name__}")
        items.append(item)
    return items


def lenient_string_list(value: Any) -> list[str]:
    try:
        return coerce_string_list(value)
    except MalformedRecordError:
        return []


@dataclass(frozen=True)
class JobPosting:
    """Detached, read-only snapshot of a job row.

    ``required_skills`` and ``required_qualifications`` hold the raw stored
    values; they are validated where they are scored.
    """

    id: int
    title: str
    description: str = ""
    company_name: str | None = None
    required_skills: Any = None
    required_qualifications: Any = None
    location: str | None = None
    location_type: LocationType = LocationType.ONSITE
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    experience_level: ExperienceLevel = ExperienceLevel.MID
    salary_min: int | None = None
    salary_max: int | None = None
    is_active: bool = True
    application_deadline: datetime | None = None
    created_at: datetime | None = None
    owner_id: int | None = field(default=None, compare=False)

    @classmethod
    def from_orm(cls, job: Any) -> "JobPosting":
        return cls(
            id=job.id,
            title=job.title or "",
            description=job.description or "",
            company_name=job.company_name,
            required_skills=job.required_skills,
            required_qualifications=job.required_qualifications,
            location=job.location,
            location_type=job.location_type,
            employment_type=job.employment_type,
            experience_level=job.experience_level,
            salary_min=job.salary_min,
            salary_max=job.salary_max,
            is_active=bool(job.is_active),
            application_deadline=job.application_deadline,
            created_at=job.created_at,
            owner_id=job.user_id,
        )

    def skill_names(self) -> list[str]:
        return lenient_string_list(self.required_skills)
