"""Fuzzy matching of a query against a candidate label."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one query against one text."""
    matches: bool
    score: float


@dataclass(frozen=True)
class MatchWeights:
    """Weights of the subsequence score components."""
    match_ratio: float = 0.4
    consecutive: float = 0.4
    length: float = 0.2


DEFAULT_WEIGHTS = MatchWeights()

NO_MATCH = MatchResult(matches=False, score=0.0)


def fuzzy_match(query: str, text: str, weights: MatchWeights = DEFAULT_WEIGHTS) -> MatchResult:
    """
    Score text against query, case-insensitively.

    Scoring:
    - empty query matches everything with score 1
    - substring: len(query) / len(text), so shorter texts score higher
    - in-order subsequence:
        match_ratio * matched/|q| + consecutive * longest_run/|q|
        + length * max(0, 1 - (|t| - |q|) / |t|), clamped to [0, 1]
    - anything else does not match and scores 0
    """
    if not query:
        return MatchResult(matches=True, score=1.0)

    query_lower = query.lower()
    text_lower = text.lower()

    if query_lower in text_lower:
        return MatchResult(matches=True, score=len(query_lower) / len(text_lower))

    query_index = 0
    matched = 0
    run = 0
    longest_run = 0

    for char in text_lower:
        if query_index >= len(query_lower):
            break
        if char == query_lower[query_index]:
            query_index += 1
            matched += 1
            run += 1
            longest_run = max(longest_run, run)
        else:
            run = 0

    if query_index < len(query_lower):
        return NO_MATCH

    query_len = len(query_lower)
    text_len = len(text_lower)
    length_penalty = 1 - (text_len - query_len) / text_len

    score = (
        weights.match_ratio * (matched / query_len)
        + weights.consecutive * (longest_run / query_len)
        + weights.length * max(0.0, length_penalty)
    )
    return MatchResult(matches=True, score=max(0.0, min(1.0, score)))
