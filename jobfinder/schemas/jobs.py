from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from jobfinder.models.enums import EmploymentType, ExperienceLevel, LocationType
from jobfinder.schemas.match import MatchScoreOut


class JobRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    title: str
    description: str
    company_name: str | None = Field(default=None, alias="companyName")
    required_skills: list[str] | None = Field(default=None, alias="requiredSkills")
    required_qualifications: list[str] | None = Field(default=None, alias="requiredQualifications")
    location: str | None = None
    location_type: LocationType = Field(alias="locationType")
    employment_type: EmploymentType = Field(alias="employmentType")
    experience_level: ExperienceLevel = Field(alias="experienceLevel")
    salary_min: int | None = Field(default=None, alias="salaryMin")
    salary_max: int | None = Field(default=None, alias="salaryMax")
    application_deadline: datetime | None = Field(default=None, alias="applicationDeadline")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    match_score: MatchScoreOut | None = Field(default=None, alias="matchScore")


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")


class ParsedQueryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cleaned_query: str = Field(alias="cleanedQuery")
    location: str | None = None
    location_type: LocationType | None = Field(default=None, alias="locationType")
    employment_type: EmploymentType | None = Field(default=None, alias="employmentType")
    experience_level: ExperienceLevel | None = Field(default=None, alias="experienceLevel")
    salary_min: int | None = Field(default=None, alias="salaryMin")
    salary_max: int | None = Field(default=None, alias="salaryMax")


class JobListResponse(BaseModel):
    jobs: list[JobRead]
    pagination: Pagination
    parsed_query: ParsedQueryOut | None = Field(default=None, alias="parsedQuery")

    model_config = ConfigDict(populate_by_name=True)
