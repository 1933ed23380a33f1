"""Unit tests for candidate ranking."""

import pytest

from quickswitch.engine.matcher import MatchWeights
from quickswitch.engine.models import CandidateItem, CandidateKind, RecentDestination
from quickswitch.engine.ranker import Ranker, RankingWeights


def space(space_id: str, label: str, secondary: str = None) -> CandidateItem:
    return CandidateItem(
        id=space_id,
        kind=CandidateKind.SPACE,
        label=label,
        destination=f"/servers/{space_id}",
        secondary_label=secondary,
    )


def recent(item_id: str, kind: CandidateKind = CandidateKind.SPACE, at: int = 0) -> RecentDestination:
    return RecentDestination(id=item_id, kind=kind, last_visited_at=at, destination=f"/x/{item_id}")


@pytest.fixture
def ranker():
    return Ranker()


class TestEmptyQuery:
    """Recents first, then everything else in original order."""

    def test_recent_first(self, ranker):
        candidates = [space("s1", "General Chat"), space("s2", "Gaming")]

        results = ranker.rank("", candidates, [recent("s2")])

        assert [r.id for r in results] == ["s2", "s1"]
        assert all(r.score is None for r in results)

    def test_recency_order_then_original_order(self, ranker):
        candidates = [space(f"s{i}", f"Space {i}") for i in range(5)]
        recents = [recent("s3", at=30), recent("s1", at=20)]

        results = ranker.rank("", candidates, recents)

        assert [r.id for r in results] == ["s3", "s1", "s0", "s2", "s4"]

    def test_recents_without_live_candidate_skipped(self, ranker):
        candidates = [space("s1", "One"), space("s2", "Two")]
        recents = [recent("gone"), recent("s2")]

        results = ranker.rank("", candidates, recents)

        assert [r.id for r in results] == ["s2", "s1"]

    def test_kind_must_match(self, ranker):
        candidates = [space("x", "Space X")]
        results = ranker.rank("", candidates, [recent("x", kind=CandidateKind.DIRECT_MESSAGE)])
        assert [r.id for r in results] == ["x"]
        assert len(results) == 1

    def test_whitespace_query_is_empty(self, ranker):
        candidates = [space("s1", "One"), space("s2", "Two")]
        results = ranker.rank("   ", candidates, [recent("s2")])
        assert [r.id for r in results] == ["s2", "s1"]

    def test_no_candidates(self, ranker):
        assert ranker.rank("", [], [recent("s1")]) == []


class TestQueryRanking:
    """Fuzzy scores, secondary labels and recency boost."""

    def test_non_matching_excluded(self, ranker):
        candidates = [space("s1", "General Chat"), space("s2", "Gaming")]

        results = ranker.rank("gen", candidates, [])

        assert [r.id for r in results] == ["s1"]
        assert results[0].score == pytest.approx(0.25)

    def test_sorted_descending(self, ranker):
        candidates = [
            space("long", "Gaming and other things"),
            space("exact", "Gaming"),
            space("sub", "gm nights"),
        ]

        results = ranker.rank("gam", candidates, [])

        assert [r.id for r in results][:2] == ["exact", "long"]
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_original_order(self, ranker):
        candidates = [space(f"s{i}", "Gaming") for i in range(6)]

        first = ranker.rank("gam", candidates, [])
        second = ranker.rank("gam", candidates, [])

        assert [r.id for r in first] == [f"s{i}" for i in range(6)]
        assert [r.id for r in first] == [r.id for r in second]

    def test_recency_boost(self, ranker):
        candidates = [space("s1", "Gaming"), space("s2", "Gaming")]

        results = ranker.rank("gam", candidates, [recent("s2")])

        assert [r.id for r in results] == ["s2", "s1"]
        assert results[0].score == pytest.approx(0.5 * 1.1)
        assert results[1].score == pytest.approx(0.5)

    def test_stronger_match_beats_recent(self, ranker):
        candidates = [space("weak", "Gaming Lounge"), space("strong", "Gam")]

        results = ranker.rank("gam", candidates, [recent("weak")])

        assert [r.id for r in results] == ["strong", "weak"]

    def test_secondary_label_discounted(self, ranker):
        candidates = [space("s1", "lobby", secondary="Dev")]

        results = ranker.rank("dev", candidates, [])

        assert len(results) == 1
        assert results[0].score == pytest.approx(0.8)

    def test_primary_preferred_over_secondary(self, ranker):
        candidates = [
            space("ctx", "lobby", secondary="Dev"),
            space("direct", "Dev"),
        ]

        results = ranker.rank("dev", candidates, [])

        assert [r.id for r in results] == ["direct", "ctx"]

    def test_max_of_primary_and_secondary(self, ranker):
        candidates = [space("s1", "Developers lounge", secondary="Dev")]

        results = ranker.rank("dev", candidates, [])

        assert results[0].score == pytest.approx(max(3 / 17, 1.0 * 0.8))

    def test_excluded_when_neither_label_matches(self, ranker):
        candidates = [space("s1", "lobby", secondary="Ops")]
        assert ranker.rank("dev", candidates, []) == []

    def test_custom_weights(self):
        ranker = Ranker(RankingWeights(
            match=MatchWeights(),
            secondary_discount=0.5,
            recency_boost=2.0,
        ))
        candidates = [space("s1", "lobby", secondary="Dev")]

        results = ranker.rank("dev", candidates, [recent("s1")])

        assert results[0].score == pytest.approx(1.0)
