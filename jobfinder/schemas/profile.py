from __future__ import annotations

from datetime import date

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class SkillEntry(BaseModel):
    name: str
    level: str | None = None


class ExperienceEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    company: str | None = None
    start_date: date = Field(validation_alias=AliasChoices("start_date", "startDate"))
    end_date: date | None = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    current: bool = False


class EducationEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    degree: str = ""
    field_of_study: str = Field(default="", validation_alias=AliasChoices("field_of_study", "fieldOfStudy"))
    institution: str | None = None


class CandidateProfile(BaseModel):
    """Read-only view of a user's profile as consumed by fit scoring."""

    user_id: int | None = None
    skills: list[SkillEntry] = Field(default_factory=list)
    experiences: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)

    @field_validator("skills", mode="before")
    @classmethod
    def _coerce_plain_skill_names(cls, v):
        # Older profiles stored skills as ["python", "sql"].
        if v is None:
            return []
        if isinstance(v, list):
            return [{"name": item} if isinstance(item, str) else item for item in v]
        return v

    @field_validator("experiences", "education", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v
