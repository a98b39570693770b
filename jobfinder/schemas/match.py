from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MatchBreakdownOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    matched_skills: list[str] = Field(default_factory=list, alias="matchedSkills")
    missing_skills: list[str] = Field(default_factory=list, alias="missingSkills")
    experience_years: float = Field(default=0.0, alias="experienceYears")
    experience_level_match: bool = Field(default=False, alias="experienceLevelMatch")
    has_relevant_education: bool = Field(default=False, alias="hasRelevantEducation")


class MatchScoreOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    overall: int = Field(ge=0, le=100)
    skills_match: int = Field(ge=0, le=100, alias="skillsMatch")
    experience_match: int = Field(ge=0, le=100, alias="experienceMatch")
    education_match: int = Field(ge=0, le=100, alias="educationMatch")
    breakdown: MatchBreakdownOut


class BatchMatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_ids: list[int] = Field(min_length=1, alias="jobIds")


class BatchMatchResponse(BaseModel):
    matches: dict[str, MatchScoreOut]
