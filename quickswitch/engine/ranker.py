"""Ranking of candidates by fuzzy score and recency."""

from dataclasses import dataclass
from typing import List, Sequence

from .matcher import DEFAULT_WEIGHTS, MatchWeights, fuzzy_match
from .models import CandidateItem, RecentDestination, ScoredItem


@dataclass(frozen=True)
class RankingWeights:
    """Tunable ranking constants."""
    match: MatchWeights = DEFAULT_WEIGHTS
    secondary_discount: float = 0.8
    recency_boost: float = 1.1


class Ranker:
    """
    Orders candidates for the switcher.

    Empty query: recents (live ones only, most recent first), then the
    rest in aggregator order.

    Otherwise:
        score = max(match(label), match(secondary_label) * secondary_discount)
        score *= recency_boost if the candidate is a recent
    sorted descending with ties kept in aggregator order.
    """

    def __init__(self, weights: RankingWeights = RankingWeights()):
        self.weights = weights

    def rank(
        self,
        query: str,
        candidates: Sequence[CandidateItem],
        recents: Sequence[RecentDestination]
    ) -> List[ScoredItem]:
        if not query.strip():
            return self._rank_by_recency(candidates, recents)
        return self._rank_by_match(query, candidates, recents)

    def _rank_by_recency(
        self,
        candidates: Sequence[CandidateItem],
        recents: Sequence[RecentDestination]
    ) -> List[ScoredItem]:
        by_key = {c.key: c for c in candidates}

        results = []
        placed = set()
        for recent in recents:
            candidate = by_key.get(recent.key)
            if candidate is None or candidate.key in placed:
                continue
            placed.add(candidate.key)
            results.append(ScoredItem(item=candidate))

        results.extend(ScoredItem(item=c) for c in candidates if c.key not in placed)
        return results

    def _rank_by_match(
        self,
        query: str,
        candidates: Sequence[CandidateItem],
        recents: Sequence[RecentDestination]
    ) -> List[ScoredItem]:
        recent_keys = {r.key for r in recents}
        scored = []

        for candidate in candidates:
            primary = fuzzy_match(query, candidate.label, self.weights.match)
            matches = primary.matches
            score = primary.score

            if candidate.secondary_label:
                secondary = fuzzy_match(query, candidate.secondary_label, self.weights.match)
                matches = matches or secondary.matches
                score = max(score, secondary.score * self.weights.secondary_discount)

            if not matches:
                continue

            if candidate.key in recent_keys:
                score *= self.weights.recency_boost

            scored.append(ScoredItem(item=candidate, score=score))

        # sorted() is stable, including with reverse=True
        return sorted(scored, key=lambda s: s.score, reverse=True)
