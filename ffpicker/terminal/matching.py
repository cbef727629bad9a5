"""Fuzzy matching used by the line source when the filter input is non-empty."""

from __future__ import annotations

# Characters after which a match counts as a word start.
WORD_BOUNDARY_CHARS = "/_- ."


def fuzzy_positions(query: str, candidate: str) -> tuple[int, list[int]] | None:
    """Score ``candidate`` against ``query`` and return matched char offsets.

    Consecutive runs and word-start hits score higher; gaps and long
    candidates score lower. Returns ``None`` when some query character is
    missing.
    """
    if not query:
        return 0, []
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    positions: list[int] = []
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
        positions.append(idx)
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score, positions


def position_spans(positions: list[int]) -> list[tuple[int, int]]:
    """Collapse sorted offsets into ``(start, length)`` runs."""
    spans: list[tuple[int, int]] = []
    for pos in positions:
        if spans and spans[-1][0] + spans[-1][1] == pos:
            start, length = spans[-1]
            spans[-1] = (start, length + 1)
        else:
            spans.append((pos, 1))
    return spans
