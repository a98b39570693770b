"""Turn a free-text job search into structured filters plus residual text.

The parser is a fixed pipeline; every stage removes the text it consumed
before the next stage runs, so no phrase is claimed twice:

1. location type (remote > hybrid > onsite)
2. employment type (full time > part time > contract > internship > freelance)
3. experience level (senior > mid > entry)
4. location ("in Austin", "based in new york")
5. salary ("above 50k", "between 30k and 60k", "5lpa", ...); spans like "1-3 years" are dropped first
6. filler-word cleanup
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields, replace

from jobfinder.models.enums import EmploymentType, ExperienceLevel, LocationType
from jobfinder.services.search_keywords import (
    EMPLOYMENT_TYPE_MATCHERS,
    EXPERIENCE_LEVEL_MATCHERS,
    FILLER_MATCHER,
    LOCATION_PREPOSITIONS,
    LOCATION_STOP_WORDS,
    LOCATION_TYPE_MATCHERS,
)


logger = logging.getLogger(__name__)


_MIN_LOCATION_LENGTH = 3
_MIN_STANDALONE_SALARY = 10_000

_AMOUNT = r"[$₹€£]?\d[\d,]*(?:\.\d+)?(?:lpa|k|l)?"

_MIN_SALARY_RE = re.compile(
    r"(?:(?<![\w])(?<!not\s)(?:greater\s+than|more\s+than|at\s+least|starting\s+at|starting\s+from"
    r"|minimum|min|above|over|from)\s+|(?:>|\+)\s*)"
    rf"({_AMOUNT})(?![\w])",
    re.IGNORECASE,
)
_MAX_SALARY_RE = re.compile(
    r"(?:(?<![\w])(?:not\s+more\s+than|less\s+than|up\s+to|maximum|max|below|under)\s+|<\s*)"
    rf"({_AMOUNT})(?![\w])",
    re.IGNORECASE,
)
_BETWEEN_SALARY_RE = re.compile(
    rf"(?<![\w])between\s+({_AMOUNT})\s+(?:and|to|-)\s+({_AMOUNT})(?![\w])",
    re.IGNORECASE,
)
_RANGE_SALARY_RE = re.compile(
    rf"(?<![\w.])({_AMOUNT})(?:\s*[-–]\s*|\s+to\s+)({_AMOUNT})(?![\w])",
    re.IGNORECASE,
)
_EXACT_SALARY_RE = re.compile(
    rf"(?<![\w])(?:with\s+)?salary\s+({_AMOUNT})(?![\w])",
    re.IGNORECASE,
)
_STANDALONE_SALARY_RE = re.compile(r"(?<![\w.,$₹€£])([$₹€£]?(?:\d{1,3}(?:,\d{3})+|\d{5,}))(?![\w]|[.,]\d)")
# "1-3 years", "2 to 4 yrs", "3 years of experience": experience wording, never salary or search text.
_EXPERIENCE_SPAN_RE = re.compile(
    r"(?<![\w.])\d+(?:\.\d+)?(?:\s*(?:[-–]|to)\s*\d+(?:\.\d+)?)?\s*\+?\s*(?:years?|yrs?)"
    r"(?:\s+(?:of\s+)?experience)?(?![\w])",
    re.IGNORECASE,
)

_CAPITALIZED_WORD = r"[A-Z][\w.'-]*"
_ANY_CASE_WORD = r"[A-Za-z][A-Za-z.'-]*"
_WORD_RE = re.compile(r"\S+")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ParsedQuery:
    """Filters recognised in a search string plus the text left over."""

    cleaned_query: str = ""
    location: str | None = None
    location_type: LocationType | None = None
    employment_type: EmploymentType | None = None
    experience_level: ExperienceLevel | None = None
    salary_min: int | None = None
    salary_max: int | None = None

    def has_filters(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self) if f.name != "cleaned_query")


def parse_salary_amount(token: str) -> int:
    """Normalise a salary token: ``50k`` -> 50000, ``5lpa`` -> 500000, ``$45,000`` -> 45000."""
    cleaned = re.sub(r"[$₹€£,\s]", "", token.lower())
    if cleaned.endswith("lpa") or cleaned.endswith("l"):
        return int(round(float(cleaned.rstrip("lpa")) * 100_000))
    if cleaned.endswith("k"):
        return int(round(float(cleaned[:-1]) * 1_000))
    return int(float(cleaned))


def _remove_span(text: str, match: re.Match[str]) -> str:
    return f"{text[: match.start()]} {text[match.end():]}"


def _preposition_re(preposition: str, word: str) -> re.Pattern[str]:
    prep = r"\s+".join(re.escape(part) for part in preposition.split())
    # Preposition is case-insensitive; the place words keep the case rule of ``word``
    # and may be comma separated ("Austin, TX").
    return re.compile(rf"(?<![\w])(?i:{prep})\s+({word}(?:,?\s+{word}){{0,2}})(?![\w])")


_CAPITALIZED_LOCATION_RES = tuple(_preposition_re(p, _CAPITALIZED_WORD) for p in LOCATION_PREPOSITIONS)
_ANY_CASE_LOCATION_RES = tuple(_preposition_re(p, _ANY_CASE_WORD) for p in LOCATION_PREPOSITIONS)


def _place_words(candidate: re.Match[str]) -> list[re.Match[str]]:
    words: list[re.Match[str]] = []
    for word in _WORD_RE.finditer(candidate.group(1)):
        if word.group(0).lower().strip(",") in LOCATION_STOP_WORDS:
            break
        words.append(word)
    return words


def _extract_location_with(patterns: tuple[re.Pattern[str], ...], text: str) -> tuple[str | None, str]:
    for pattern in patterns:
        for match in pattern.finditer(text):
            words = _place_words(match)
            location = " ".join(w.group(0) for w in words).strip(" .,'-")
            if len(location) < _MIN_LOCATION_LENGTH:
                continue
            # Drop the preposition and the accepted place words; stop words stay for the salary stage.
            end = match.start(1) + words[-1].end()
            return location, f"{text[: match.start()]} {text[end:]}"
    return None, text


def extract_location(text: str) -> tuple[str | None, str]:
    """Find "<preposition> <1-3 place words>"; capitalised names are tried first."""
    location, remaining = _extract_location_with(_CAPITALIZED_LOCATION_RES, text)
    if location is None:
        location, remaining = _extract_location_with(_ANY_CASE_LOCATION_RES, text)
    return location, remaining


def extract_salary(text: str) -> tuple[int | None, int | None, str]:
    salary_min: int | None = None
    salary_max: int | None = None

    match = _MIN_SALARY_RE.search(text)
    if match:
        salary_min = parse_salary_amount(match.group(1))
        text = _remove_span(text, match)

    match = _MAX_SALARY_RE.search(text)
    if match:
        salary_max = parse_salary_amount(match.group(1))
        text = _remove_span(text, match)

    if salary_min is None and salary_max is None:
        match = _BETWEEN_SALARY_RE.search(text)
        if match:
            salary_min = parse_salary_amount(match.group(1))
            salary_max = parse_salary_amount(match.group(2))
            text = _remove_span(text, match)

    if salary_min is None and salary_max is None:
        match = _RANGE_SALARY_RE.search(text)
        if match:
            salary_min = parse_salary_amount(match.group(1))
            salary_max = parse_salary_amount(match.group(2))
            text = _remove_span(text, match)

    if salary_min is None and salary_max is None:
        match = _EXACT_SALARY_RE.search(text)
        if match:
            salary_min = parse_salary_amount(match.group(1))
            text = _remove_span(text, match)

    if salary_min is None and salary_max is None:
        for match in _STANDALONE_SALARY_RE.finditer(text):
            amount = parse_salary_amount(match.group(1))
            if amount >= _MIN_STANDALONE_SALARY:
                salary_min = amount
                text = _remove_span(text, match)
                break

    return salary_min, salary_max, text


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def parse_search_query(raw_query: str | None) -> ParsedQuery:
    """Parse a raw search string. Never raises; blank input gives an empty result."""
    if not raw_query or not raw_query.strip():
        return ParsedQuery()

    # Case is kept until cleanup so capitalised place names can be recognised.
    working = _collapse(raw_query)

    location_type, _, working = LOCATION_TYPE_MATCHERS.extract(working)
    employment_type, _, working = EMPLOYMENT_TYPE_MATCHERS.extract(working)
    experience_level, _, working = EXPERIENCE_LEVEL_MATCHERS.extract(working)
    location, working = extract_location(working)
    working = _EXPERIENCE_SPAN_RE.sub(" ", working)
    salary_min, salary_max, working = extract_salary(working)

    # Removing a location or salary can close the gap around an already consumed phrase.
    for matcher_set, value in (
        (LOCATION_TYPE_MATCHERS, location_type),
        (EMPLOYMENT_TYPE_MATCHERS, employment_type),
        (EXPERIENCE_LEVEL_MATCHERS, experience_level),
    ):
        if value is not None:
            working = matcher_set.matcher_for(value).strip(working)

    cleaned = _collapse(FILLER_MATCHER.strip(_collapse(working))).lower()

    parsed = ParsedQuery(
        cleaned_query=cleaned,
        location=location,
        location_type=location_type,
        employment_type=employment_type,
        experience_level=experience_level,
        salary_min=salary_min,
        salary_max=salary_max,
    )
    logger.debug("parsed search query %r -> %s", raw_query, parsed)
    return parsed


def merge_filters(parsed: ParsedQuery, **explicit) -> ParsedQuery:
    """Overlay caller-supplied filters; parser values only fill the gaps."""
    overrides = {name: value for name, value in explicit.items() if value is not None and value != ""}
    return replace(parsed, **overrides)
