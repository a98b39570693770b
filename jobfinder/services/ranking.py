from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer

from jobfinder.services.postings import JobPosting


logger = logging.getLogger(__name__)


# Field importance, highest first. Mirrors the A/B/C/D weight classes of a weighted text index.
FIELD_WEIGHTS: tuple[tuple[str, float], ...] = (
    ("title", 1.0),
    ("skills", 0.4),
    ("description", 0.2),
    ("company", 0.1),
)

TIER_ALL_TERMS = "all_terms"
TIER_ANY_TERM = "any_term"
TIER_SUBSTRING = "substring"

_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9+#.]*")


@dataclass(frozen=True)
class RankedResult:
    job_id: int
    rank: int
    tier: str
    relevance: float = 0.0
    match_score: int | None = None


def tokenize_text(text: str | None) -> list[str]:
    if not text:
        return []
    return [token.rstrip(".") for token in _TOKEN_RE.findall(text.lower()) if token.rstrip(".")]


def _field_texts(posting: JobPosting) -> dict[str, str]:
    return {
        "title": posting.title or "",
        "skills": " ".join(posting.skill_names()),
        "description": posting.description or "",
        "company": posting.company_name or "",
    }


def _contains_substring(query: str, posting: JobPosting) -> bool:
    texts = [posting.title, posting.description, posting.company_name, *posting.skill_names()]
    return any(query in text.lower() for text in texts if text)


def _prefix_hit(term: str, tokens: set[str]) -> bool:
    return any(token.startswith(term) for token in tokens)


def _relevance_scores(terms: list[str], documents: list[dict[str, str]]) -> np.ndarray:
    """Weighted TF-IDF mass of every vocabulary token that a query term prefixes."""
    n_docs = len(documents)
    field_names = [name for name, _ in FIELD_WEIGHTS]
    rows = [doc[name] for doc in documents for name in field_names]
    if not any(tokenize_text(row) for row in rows):
        return np.zeros(n_docs)

    vectorizer = TfidfVectorizer(analyzer=tokenize_text)
    matrix = vectorizer.fit_transform(rows)
    vocabulary = vectorizer.vocabulary_
    columns = sorted({idx for token, idx in vocabulary.items() if any(token.startswith(t) for t in terms)})
    if not columns:
        return np.zeros(n_docs)

    per_row = np.asarray(matrix[:, columns].sum(axis=1)).ravel().reshape(n_docs, len(field_names))
    weights = np.array([weight for _, weight in FIELD_WEIGHTS])
    return per_row @ weights


def _ordered(
    postings: list[JobPosting], scores: np.ndarray | None, tier: str
) -> list[RankedResult]:
    indices = list(range(len(postings)))
    if scores is not None:
        # Stable: equal relevance keeps storage order (newest first).
        indices.sort(key=lambda i: -float(scores[i]))
    return [
        RankedResult(
            job_id=postings[i].id,
            rank=position,
            tier=tier,
            relevance=float(scores[i]) if scores is not None else 0.0,
        )
        for position, i in enumerate(indices, start=1)
    ]


def rank_postings(cleaned_query: str, corpus: Sequence[JobPosting]) -> list[RankedResult]:
    """Rank postings against a cleaned free-text query.

    Tiers are tried in order and the first non-empty one wins:
    all terms as prefixes, any term as prefix (multi-term queries only),
    then a plain substring match of the whole query.
    """

    query = (cleaned_query or "").strip().lower()
    if not query or not corpus:
        return []

    terms = list(dict.fromkeys(tokenize_text(query)))
    documents = [_field_texts(p) for p in corpus]

    if terms:
        token_sets = [set(tokenize_text(" ".join(doc.values()))) for doc in documents]

        matched = [i for i, tokens in enumerate(token_sets) if all(_prefix_hit(t, tokens) for t in terms)]
        tier = TIER_ALL_TERMS
        if not matched and len(terms) > 1:
            matched = [i for i, tokens in enumerate(token_sets) if any(_prefix_hit(t, tokens) for t in terms)]
            tier = TIER_ANY_TERM

        if matched:
            subset = [corpus[i] for i in matched]
            scores = _relevance_scores(terms, [documents[i] for i in matched])
            logger.debug("ranking query=%r tier=%s matched=%d", query, tier, len(subset))
            return _ordered(subset, scores, tier)

    subset = [posting for posting in corpus if _contains_substring(query, posting)]
    logger.debug("ranking query=%r tier=%s matched=%d", query, TIER_SUBSTRING, len(subset))
    return _ordered(subset, None, TIER_SUBSTRING)


def rank(cleaned_query: str, corpus: Sequence[JobPosting]) -> list[int]:
    return [result.job_id for result in rank_postings(cleaned_query, corpus)]
