"""Phrase dictionaries used by the search query parser and fit scoring.

Each category is compiled once into a single word-bounded alternation. The
priority between categories of the same kind is the order of the tuples in
``LOCATION_TYPE_MATCHERS``, ``EMPLOYMENT_TYPE_MATCHERS`` and
``EXPERIENCE_LEVEL_MATCHERS``; the first category with a hit wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Generic, Iterable, TypeVar

from jobfinder.models.enums import EmploymentType, ExperienceLevel, LocationType


T = TypeVar("T")


REMOTE_KEYWORDS = (
    "remote", "work from home", "wfh", "telecommute", "virtual",
    "work remotely", "remote work", "distributed", "anywhere",
    "home based", "home-based", "remote first", "remote-first",
    "telework", "location independent", "work from anywhere",
)

HYBRID_KEYWORDS = (
    "hybrid", "flexible location", "part remote", "semi remote",
    "semi-remote", "flexible work", "mixed location", "hybrid work",
    "partly remote", "hybrid model",
)

ONSITE_KEYWORDS = (
    "onsite", "on-site", "office", "in-office", "on site",
    "office based", "office-based", "in person", "in-person",
    "physical location", "on location", "on-location",
)

FULL_TIME_KEYWORDS = (
    "full time", "full-time", "fulltime", "permanent",
    "ft", "full-time permanent", "permanent position",
    "regular employment", "regular position", "salaried",
)

PART_TIME_KEYWORDS = (
    "part time", "part-time", "parttime", "pt",
    "half time", "half-time", "hourly", "flexible hours",
    "part time hours", "reduced hours",
)

CONTRACT_KEYWORDS = (
    "contract", "contractor", "contractual", "c2c",
    "contract to hire", "contract-to-hire", "temporary",
    "temp", "project based", "project-based", "fixed term",
    "fixed-term", "consulting", "consultant",
)

INTERNSHIP_KEYWORDS = (
    "intern", "internship", "trainee", "apprentice",
    "apprenticeship", "student", "co-op", "coop",
    "graduate program", "graduate scheme", "learning opportunity",
)

FREELANCE_KEYWORDS = (
    "freelance", "freelancer", "gig", "independent",
    "self employed", "self-employed", "1099",
    "per project", "on demand", "on-demand",
)

SENIOR_KEYWORDS = (
    "senior", "sr", "lead", "principal", "staff",
    "expert", "advanced", "5+ years", "7+ years", "10+ years",
    "senior level", "senior-level", "leadership", "architect",
    "distinguished", "veteran", "highly experienced",
)

MID_KEYWORDS = (
    "mid level", "mid-level", "intermediate", "experienced",
    "mid", "middle", "2-5 years", "3-5 years", "3-7 years",
    "professional", "mid-career", "seasoned",
)

ENTRY_KEYWORDS = (
    "entry level", "entry-level", "junior", "fresher", "graduate",
    "jr", "beginner", "trainee", "associate", "entry",
    "0-2 years", "0-1 years", "1-2 years", "recent graduate",
    "new grad", "college graduate", "early career",
)

# Multi-word prepositions come first so "based in X" is not claimed by "in".
LOCATION_PREPOSITIONS = (
    "based in", "located in", "in", "at", "near", "around", "from", "location", "city",
)

FILLER_WORDS = (
    "job", "jobs", "position", "positions", "opening", "openings",
    "role", "roles", "with", "salary",
)

# Words that end a place name: comparison phrases, connectors and filler.
LOCATION_STOP_WORDS = frozenset(
    {
        "above", "below", "over", "under", "between", "minimum", "maximum", "min", "max",
        "least", "most", "more", "less", "greater", "than", "up", "to", "starting", "not",
        "and", "or", "for", "with", "salary", "paying", "pay", "per", "year", "month",
    }
    | set(FILLER_WORDS)
)

# Common abbreviations expanded before skill comparison.
SKILL_ALIASES = {
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "k8s": "kubernetes",
    "postgres": "postgresql",
    "ml": "machine learning",
    "ai": "artificial intelligence",
    "nlp": "natural language processing",
    "tf": "tensorflow",
    "rn": "react native",
    "gcp": "google cloud",
    "aws": "amazon web services",
}

DOCTORATE_MARKERS = ("phd", "ph.d", "doctorate", "doctor of")
MASTER_MARKERS = ("master", "m.", "ms", "ma", "mba")
BACHELOR_MARKERS = ("bachelor", "b.", "bs", "ba")


def _phrase_pattern(phrases: Iterable[str]) -> re.Pattern[str]:
    # Longest first so "remote work" wins over "remote" at the same position.
    ordered = sorted(set(phrases), key=lambda p: (-len(p), p))
    body = "|".join(r"\s+".join(re.escape(word) for word in p.split()) for p in ordered)
    return re.compile(rf"(?<![\w-])(?:{body})(?![\w-])", re.IGNORECASE)


@dataclass(frozen=True)
class KeywordMatcher:
    phrases: tuple[str, ...]
    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, phrases: Iterable[str]) -> "KeywordMatcher":
        phrases = tuple(phrases)
        return cls(phrases=phrases, pattern=_phrase_pattern(phrases))

    def search(self, text: str) -> re.Match[str] | None:
        return self.pattern.search(text)

    def strip(self, text: str) -> str:
        # Removing one phrase can join its neighbours into another.
        while True:
            stripped = self.pattern.sub(" ", text)
            if stripped == text:
                return stripped
            text = stripped


@dataclass(frozen=True)
class CategoryMatcherSet(Generic[T]):
    """Ordered (value, matcher) pairs; earlier entries have priority."""

    entries: tuple[tuple[T, KeywordMatcher], ...]

    def extract(self, text: str) -> tuple[T | None, str | None, str]:
        """Return ``(value, matched phrase, remaining text)``.

        Every phrase of the winning category is removed from the text, not
        only the first hit.
        """
        for value, matcher in self.entries:
            match = matcher.search(text)
            if match is not None:
                return value, match.group(0), matcher.strip(text)
        return None, None, text

    def matcher_for(self, value: T) -> KeywordMatcher | None:
        for entry_value, matcher in self.entries:
            if entry_value == value:
                return matcher
        return None


def _category_set(*entries: tuple[T, Iterable[str]]) -> CategoryMatcherSet[T]:
    return CategoryMatcherSet(tuple((value, KeywordMatcher.compile(phrases)) for value, phrases in entries))


LOCATION_TYPE_MATCHERS: CategoryMatcherSet[LocationType] = _category_set(
    (LocationType.REMOTE, REMOTE_KEYWORDS),
    (LocationType.HYBRID, HYBRID_KEYWORDS),
    (LocationType.ONSITE, ONSITE_KEYWORDS),
)

EMPLOYMENT_TYPE_MATCHERS: CategoryMatcherSet[EmploymentType] = _category_set(
    (EmploymentType.FULL_TIME, FULL_TIME_KEYWORDS),
    (EmploymentType.PART_TIME, PART_TIME_KEYWORDS),
    (EmploymentType.CONTRACT, CONTRACT_KEYWORDS),
    (EmploymentType.INTERNSHIP, INTERNSHIP_KEYWORDS),
    (EmploymentType.FREELANCE, FREELANCE_KEYWORDS),
)

EXPERIENCE_LEVEL_MATCHERS: CategoryMatcherSet[ExperienceLevel] = _category_set(
    (ExperienceLevel.SENIOR, SENIOR_KEYWORDS),
    (ExperienceLevel.MID, MID_KEYWORDS),
    (ExperienceLevel.ENTRY, ENTRY_KEYWORDS),
)

FILLER_MATCHER = KeywordMatcher.compile(FILLER_WORDS)
