"""Fuzzy ranking of indexed file paths against the typed query."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..ansi import clean_display_text

WORD_BOUNDARY_CHARS = "/_- ."


@dataclass(frozen=True)
class RankedMatch:
    score: int
    index: int
    path: str


def fuzzy_score(query: str, candidate: str) -> int | None:
    """Score ``candidate`` as a case-insensitive subsequence match of ``query``.

    Consecutive hits earn a growing run bonus, hits at the start of the string
    or right after a separator earn a boundary bonus, gaps cost points, and
    longer candidates lose a little. Returns ``None`` when some query character
    cannot be matched in order. An empty query matches everything with 0.
    """
    if not query:
        return 0
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in WORD_BOUNDARY_CHARS:
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def rank_paths(index: Sequence[str], query: str) -> list[RankedMatch]:
    """Return matching entries by descending score, ties in index order."""
    ranked: list[RankedMatch] = []
    for position, path in enumerate(index):
        score = fuzzy_score(query, path)
        if score is None:
            continue
        ranked.append(RankedMatch(score=score, index=position, path=path))
    ranked.sort(key=lambda item: (-item.score, item.index))
    return ranked


def filter_paths(index: Sequence[str], query: str) -> list[str]:
    """Return the display list for ``query``: ranked, then sanitized."""
    return [clean_display_text(match.path) for match in rank_paths(index, query)]
