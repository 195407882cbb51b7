"""Lenient matching of category and document names.

Agents rarely know the exact directory or file name ("04_reference",
"cli-options.md"), so names are compared in a normalized form and, failing
that, by edit distance.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

_NUMERIC_PREFIX_RE = re.compile(r"^\s*\d+[_-]")
_SEPARATORS_RE = re.compile(r"[_-]+")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class MatchResult:
    match: str | None
    score: float
    suggestions: tuple[str, ...] = ()


def normalize_name(name: str) -> str:
    """Lowercase, drop a leading "04_"/"02-" prefix, and turn "_"/"-" into spaces."""
    out = name.lower().strip()
    out = _NUMERIC_PREFIX_RE.sub("", out)
    out = _SEPARATORS_RE.sub(" ", out)
    out = _WHITESPACE_RE.sub(" ", out)
    return out.strip()


def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def find_best_match(
    query: str,
    candidates: Sequence[str],
    *,
    threshold: int = 3,
    max_suggestions: int = 3,
) -> MatchResult:
    """Find the candidate that best matches query.

    An exact normalized match wins outright. Otherwise the closest candidate within
    `threshold` edits (fewer for short queries) is returned, with the other close
    candidates as suggestions.
    With no candidate that close, match is None and the nearest few are suggested.
    """
    norm_query = normalize_name(query)
    normalized = [(c, normalize_name(c)) for c in candidates]

    for original, norm in normalized:
        if norm == norm_query:
            return MatchResult(match=original, score=1.0)

    if not normalized:
        return MatchResult(match=None, score=0.0)

    # sorted() is stable, so ties keep source order.
    scored = sorted(
        ((original, norm, levenshtein(norm_query, norm)) for original, norm in normalized),
        key=lambda item: item[2],
    )

    # Short queries get a tighter bound so "xyz" does not match "cli".
    limit = min(threshold, max(1, len(norm_query) // 3))
    best_original, best_norm, best_distance = scored[0]
    if best_distance <= limit:
        longest = max(len(norm_query), len(best_norm)) or 1
        return MatchResult(
            match=best_original,
            score=1 - best_distance / longest,
            suggestions=tuple(original for original, _, distance in scored[1:] if distance <= limit),
        )

    return MatchResult(
        match=None,
        score=0.0,
        suggestions=tuple(original for original, _, _ in scored[:max_suggestions]),
    )
