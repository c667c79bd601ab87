"""
Ranking tests: factor computation, ordering, limits and exclusions.

All tests pin `now` so recency is deterministic.
"""

from datetime import datetime, timedelta, timezone

import pytest

from roro_engine.config import DEFAULT_CONFIG
from roro_engine.models.event import Event, ensure_events
from roro_engine.models.scoring import ScoringMode, WeightVector
from roro_engine.models.viewer import SubjectIdentity, ViewerContext
from roro_engine.reasons import ReasonTag
from roro_engine.scoring import (
    compute_factors,
    days_since,
    proximity_score,
    rank,
    recency_score,
    similarity_score,
)

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _scenario_candidates():
    return ensure_events(
        [
            {
                "id": 1,
                "name": "Tokyo Hotel Fair",
                "category": "hotel",
                "favorite_count": 10,
                "click_count": 5,
                "region": "Tokyo",
                "event_date": (NOW - timedelta(days=5)).isoformat(),
            },
            {
                "id": 2,
                "name": "Osaka Museum Night",
                "category": "museum",
                "favorite_count": 2,
                "click_count": 1,
                "region": "Osaka",
                "event_date": (NOW - timedelta(days=40)).isoformat(),
            },
        ]
    )


def _scenario_viewer(**kwargs):
    return ViewerContext(favorited_categories=["hotel"], home_region="Tokyo", **kwargs)


class TestFactors:
    def test_recency_decays_with_age(self):
        assert recency_score(0) == 1.0
        assert recency_score(30) == pytest.approx(0.5)
        assert recency_score(5) > recency_score(40)

    def test_recency_without_date_is_zero(self):
        assert recency_score(None) == 0.0
        assert days_since(None, NOW) is None

    def test_future_event_counts_as_fresh(self):
        assert recency_score(days_since(NOW + timedelta(days=3), NOW)) == 1.0

    def test_similarity(self):
        assert similarity_score("hotel", ["hotel", "spa"]) == 1.0
        assert similarity_score("museum", ["hotel"]) == 0.0
        assert similarity_score("", ["hotel"]) == 0.0
        assert similarity_score("hotel", []) == 0.0

    def test_proximity_ignores_case_and_whitespace(self):
        assert proximity_score(" tokyo ", "Tokyo") == 1.0
        assert proximity_score("Osaka", "Tokyo") == 0.0
        assert proximity_score("Tokyo", None) == 0.0
        assert proximity_score("", "Tokyo") == 0.0

    def test_factors_are_normalized_against_pool_max(self):
        ev = Event(id="1", favorite_count=5, click_count=2)
        f = compute_factors(ev, ViewerContext(), max_favorite=10, max_click=4, now=NOW, config=DEFAULT_CONFIG)
        assert f.popularity == pytest.approx(0.5)
        assert f.history == pytest.approx(0.5)
        assert f.recency == 0.0


class TestRankScenario:
    def test_hotel_ranks_above_museum(self):
        results = rank(_scenario_candidates(), _scenario_viewer(), now=NOW)
        assert [r.id for r in results] == ["1", "2"]

        hotel, museum = results
        for name, value in hotel.factors.as_dict().items():
            assert value > museum.factors.as_dict()[name], name

        # 0.2 * (1 + 1 + 1/(1+5/30) + 1 + 1)
        assert hotel.score == pytest.approx(0.9714, abs=1e-4)
        # 0.2 * (0 + 0.2 + 1/(1+40/30) + 0.2 + 0)
        assert museum.score == pytest.approx(0.1657, abs=1e-4)

    def test_reasons_for_anonymous_viewer(self):
        hotel, museum = rank(_scenario_candidates(), _scenario_viewer(), now=NOW)
        assert hotel.reasons == [
            ReasonTag.POPULAR.value,
            ReasonTag.FREQUENTLY_CLICKED.value,
            ReasonTag.NEW_EVENT.value,
            ReasonTag.NEARBY.value,
        ]
        assert museum.reasons == [ReasonTag.FALLBACK.value]
        assert museum.reason == "人気度と開催日からおすすめしています"
        assert hotel.reason.endswith("ためおすすめしています")

    def test_authenticated_viewer_gets_not_yet_favorited_first(self):
        viewer = _scenario_viewer(subject=SubjectIdentity(user_id="7"))
        results = rank(_scenario_candidates(), viewer, now=NOW)
        for r in results:
            assert r.reasons[0] == ReasonTag.NOT_YET_FAVORITED.value
        assert results[1].reasons == [ReasonTag.NOT_YET_FAVORITED.value, ReasonTag.FALLBACK.value]

    def test_english_locale(self):
        results = rank(_scenario_candidates(), _scenario_viewer(), now=NOW, locale="en")
        assert results[0].reason.startswith("Recommended because it is popular")

    def test_configurable_mode_only_weighted_factors_are_notable(self):
        weights = WeightVector(similarity=0, history=0, recency=0, popularity=1, proximity=0)
        results = rank(
            _scenario_candidates(), _scenario_viewer(), weights=weights, mode=ScoringMode.CONFIGURABLE, now=NOW,
        )
        hotel, museum = results
        assert hotel.reasons == [ReasonTag.POPULAR.value]
        assert hotel.score == pytest.approx(1.0)
        assert museum.reasons == [ReasonTag.FALLBACK.value]
        assert museum.score == pytest.approx(0.2)


class TestRankOrdering:
    def test_deterministic_for_identical_input(self):
        candidates = _scenario_candidates()
        first = rank(candidates, _scenario_viewer(), now=NOW)
        second = rank(candidates, _scenario_viewer(), now=NOW)
        assert [r.model_dump() for r in first] == [r.model_dump() for r in second]

    def test_ties_break_by_name_then_id(self):
        candidates = [
            Event(id="3", name="beta", favorite_count=1),
            Event(id="2", name="alpha", favorite_count=1),
            Event(id="10", name="alpha", favorite_count=1),
        ]
        results = rank(candidates, ViewerContext(), now=NOW)
        assert [r.id for r in results] == ["10", "2", "3"]

    def test_input_order_does_not_matter(self):
        candidates = _scenario_candidates()
        forward = rank(candidates, _scenario_viewer(), now=NOW)
        backward = rank(list(reversed(candidates)), _scenario_viewer(), now=NOW)
        assert [r.id for r in forward] == [r.id for r in backward]

    def test_scores_within_unit_interval(self):
        candidates = _scenario_candidates() + [Event(id="x"), Event(id="y", favorite_count=100)]
        for r in rank(candidates, _scenario_viewer(), now=NOW, limit=10):
            assert 0.0 <= r.score <= 1.0


class TestRankBounds:
    def test_limit_truncates(self):
        candidates = [Event(id=str(i), name=f"e{i:02d}", favorite_count=i) for i in range(20)]
        assert len(rank(candidates, ViewerContext(), now=NOW)) == DEFAULT_CONFIG.default_limit
        assert len(rank(candidates, ViewerContext(), limit=3, now=NOW)) == 3
        assert len(rank(candidates, ViewerContext(), limit=100, now=NOW)) == 20

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_returns_empty(self, limit):
        assert rank(_scenario_candidates(), _scenario_viewer(), limit=limit, now=NOW) == []

    def test_empty_candidates(self):
        assert rank([], _scenario_viewer(), now=NOW) == []

    def test_excluded_items_never_returned(self):
        viewer = _scenario_viewer(excluded_item_ids=[1])
        results = rank(_scenario_candidates(), viewer, now=NOW)
        assert [r.id for r in results] == ["2"]

    def test_everything_excluded(self):
        viewer = _scenario_viewer(excluded_item_ids=["1", "2"])
        assert rank(_scenario_candidates(), viewer, now=NOW) == []

    def test_zero_counts_do_not_divide_by_zero(self):
        candidates = [Event(id="a", name="a"), Event(id="b", name="b")]
        results = rank(candidates, ViewerContext(), now=NOW)
        assert all(r.factors.popularity == 0.0 and r.factors.history == 0.0 for r in results)
        assert all(r.score == 0.0 for r in results)

    def test_max_counts_recomputed_after_exclusion(self):
        candidates = _scenario_candidates()
        results = rank(candidates, _scenario_viewer(excluded_item_ids=["1"]), now=NOW)
        assert results[0].factors.popularity == 1.0


class TestEventModel:
    def test_numeric_id_coerced(self):
        assert Event(id=12).id == "12"

    def test_bad_date_becomes_none(self):
        assert Event(id="1", event_date="not a date").event_date is None

    def test_date_only_string_is_utc(self):
        ev = Event(id="1", event_date="2025-05-31")
        assert ev.event_date.tzinfo is not None

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            Event(id="1", favorite_count=-1)
