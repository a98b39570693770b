from __future__ import annotations

import enum


class LocationType(str, enum.Enum):
    ONSITE = "ONSITE"
    REMOTE = "REMOTE"
    HYBRID = "HYBRID"


class EmploymentType(str, enum.Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"
    FREELANCE = "FREELANCE"


class ExperienceLevel(str, enum.Enum):
    ENTRY = "ENTRY"
    MID = "MID"
    SENIOR = "SENIOR"
    EXECUTIVE = "EXECUTIVE"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {
    ExperienceLevel.ENTRY: 1,
    ExperienceLevel.MID: 2,
    ExperienceLevel.SENIOR: 3,
    ExperienceLevel.EXECUTIVE: 4,
}


class SortMode(str, enum.Enum):
    RECENT = "recent"
    SALARY = "salary"
    MATCH = "match"
