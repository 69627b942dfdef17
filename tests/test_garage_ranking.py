import pytest
from dataclasses import replace
from datetime import datetime, timedelta

from garages.models import Badge, GarageCandidate, SubscriptionTier
from garages.policy import GarageRankingPolicy, default_ranking_policy
from garages.ranking import (
    SORT_DISTANCE,
    SORT_RATING,
    calculate_garage_score,
    determine_badges,
    rank_garages,
    sort_rankings,
)
from garages import scoring
from garages.geo import round_distance_km

NOW = datetime(2026, 3, 2, 9, 0)


@pytest.fixture
def policy():
    return default_ranking_policy()


@pytest.fixture
def strong_free_garage():
    """
    Every signal except tier scores 100; no distance is supplied.
    """
    return GarageCandidate(
        garage_id="G-strong",
        garage_name="Strong Motors",
        subscription_tier=SubscriptionTier.FREE,
        average_rating=5.0,
        total_reviews=200,
        response_time_hours=0.5,
        completion_rate=1.0,
        cancellation_rate=0.0,
        distance_km=None,
        is_available=True,
        next_available_slot=NOW,
        last_active_at=NOW,
        total_bookings_completed=150,
    )


def badges_for(policy, **fields):
    candidate = GarageCandidate(garage_id="G-badge", **fields)
    return determine_badges(candidate, policy)


# --- badges ---------------------------------------------------------------


def test_top_rated_badge_thresholds(policy):
    assert Badge.TOP_RATED.value in badges_for(policy, average_rating=4.5, total_reviews=10)
    assert Badge.TOP_RATED.value not in badges_for(policy, average_rating=4.5, total_reviews=9)
    assert Badge.TOP_RATED.value not in badges_for(policy, average_rating=4.49999, total_reviews=10)


def test_quick_responder_badge_threshold(policy):
    assert Badge.QUICK_RESPONDER.value in badges_for(policy, response_time_hours=2.0)
    assert Badge.QUICK_RESPONDER.value not in badges_for(policy, response_time_hours=2.01)


def test_trusted_badge_threshold(policy):
    assert Badge.TRUSTED.value in badges_for(policy, total_reviews=50)
    assert Badge.TRUSTED.value not in badges_for(policy, total_reviews=49)


def test_reliable_badge_thresholds(policy):
    assert Badge.RELIABLE.value in badges_for(
        policy, total_bookings_completed=20, completion_rate=0.95
    )
    assert Badge.RELIABLE.value not in badges_for(
        policy, total_bookings_completed=19, completion_rate=0.95
    )
    assert Badge.RELIABLE.value not in badges_for(
        policy, total_bookings_completed=20, completion_rate=0.9499
    )


def test_premium_and_new_badges(policy):
    premium_newcomer = badges_for(
        policy, subscription_tier=SubscriptionTier.PREMIUM, total_reviews=9, total_bookings_completed=19
    )
    assert Badge.PREMIUM.value in premium_newcomer
    assert Badge.NEW.value in premium_newcomer

    established = badges_for(policy, total_reviews=10, total_bookings_completed=0)
    assert Badge.NEW.value not in established
    assert Badge.PREMIUM.value not in established


# --- scoring --------------------------------------------------------------


def test_few_perfect_reviews_do_not_beat_many_very_good_reviews(policy):
    """
    2 reviews at 5.0 must not outrank 200 reviews at 4.6 when nothing else differs.
    """
    lucky = GarageCandidate(garage_id="G-lucky", average_rating=5.0, total_reviews=2)
    proven = GarageCandidate(garage_id="G-proven", average_rating=4.6, total_reviews=200)

    ranked = rank_garages([lucky, proven], policy=policy, now=NOW)

    assert [r.garage_id for r in ranked] == ["G-proven", "G-lucky"]
    assert ranked[0].score > ranked[1].score


def test_rating_score_is_neutral_without_reviews(policy):
    assert scoring.rating_score(0.0, 0, policy) == 50.0
    assert scoring.rating_score(5.0, 0, policy) == 50.0


def test_rating_confidence_reaches_full_weight(policy):
    assert scoring.rating_confidence(5, policy) == pytest.approx(0.5)
    assert scoring.rating_confidence(10, policy) == 1.0
    assert scoring.rating_confidence(400, policy) == 1.0


def test_missing_distance_is_left_out_not_zeroed(policy, strong_free_garage):
    result = calculate_garage_score(strong_free_garage, policy=policy, now=NOW)

    assert result.breakdown.distance is None
    # tier 60 at weight 0.15 and 100 everywhere else, over the 0.87 of weight present
    assert result.score == pytest.approx(81 / 0.87, abs=0.01)


def test_nearby_distance_counts_in_full(policy, strong_free_garage):
    nearby = replace(strong_free_garage, distance_km=2.0)

    result = calculate_garage_score(nearby, policy=policy, now=NOW)

    assert result.breakdown.distance == 100.0
    assert result.score == pytest.approx(94.0, abs=0.01)


def test_featured_boost_is_additive(policy, strong_free_garage):
    plain = calculate_garage_score(strong_free_garage, policy=policy, now=NOW)
    featured = calculate_garage_score(
        replace(strong_free_garage, is_featured=True), policy=policy, now=NOW
    )

    assert featured.score - plain.score == pytest.approx(policy.featured_boost, abs=0.01)
    assert featured.is_featured
    assert not plain.is_featured


def test_organic_score_is_capped_before_featured_boost(policy, strong_free_garage):
    premium = replace(strong_free_garage, subscription_tier=SubscriptionTier.PREMIUM)

    organic = calculate_garage_score(premium, policy=policy, now=NOW)
    featured = calculate_garage_score(replace(premium, is_featured=True), policy=policy, now=NOW)

    assert organic.score == 100.0
    assert featured.score == 110.0


def test_premium_counts_as_featured_in_results(policy):
    result = calculate_garage_score(
        GarageCandidate(garage_id="G-p", subscription_tier=SubscriptionTier.PREMIUM),
        policy=policy,
        now=NOW,
    )

    assert result.is_featured


def test_higher_tier_ranks_higher_when_signals_match(policy):
    base = GarageCandidate(garage_id="G-free", average_rating=4.2, total_reviews=30)
    analytics = replace(base, garage_id="G-analytics", subscription_tier=SubscriptionTier.ANALYTICS)
    premium = replace(base, garage_id="G-premium", subscription_tier=SubscriptionTier.PREMIUM)

    ranked = rank_garages([base, analytics, premium], policy=policy, now=NOW)

    assert [r.garage_id for r in ranked] == ["G-premium", "G-analytics", "G-free"]


def test_rank_garages_keeps_input_order_on_ties(policy):
    twins = [GarageCandidate(garage_id=f"G-{i}") for i in range(5)]

    ranked = rank_garages(twins, policy=policy, now=NOW)

    assert [r.garage_id for r in ranked] == [g.garage_id for g in twins]


def test_rank_garages_empty(policy):
    assert rank_garages([], policy=policy, now=NOW) == []


def test_response_score_is_continuous_at_breakpoints():
    for edge in (1.0, 4.0, 12.0, 24.0):
        assert scoring.response_score(edge) == pytest.approx(scoring.response_score(edge + 1e-9), abs=1e-6)

    assert scoring.response_score(1.0) == 100.0
    assert scoring.response_score(4.0) == pytest.approx(80.0)
    assert scoring.response_score(12.0) == pytest.approx(60.0)
    assert scoring.response_score(24.0) == pytest.approx(40.0)
    assert scoring.response_score(1000.0) == 20.0


def test_availability_and_activity_scores():
    assert scoring.availability_score(False, None, NOW) == 20.0
    assert scoring.availability_score(True, None, NOW) == 80.0
    assert scoring.availability_score(True, NOW + timedelta(hours=30), NOW) == 90.0
    assert scoring.availability_score(True, NOW + timedelta(days=10), NOW) == 30.0

    assert scoring.activity_score(None, 0, NOW) == 50.0
    assert scoring.activity_score(NOW - timedelta(days=3), 60, NOW) == 85.0
    assert scoring.activity_score(NOW - timedelta(days=90), 0, NOW) == 40.0


# --- alternate sorts ------------------------------------------------------


def test_sort_by_rating_ignores_score(policy):
    candidates = [
        GarageCandidate(garage_id="G-a", subscription_tier=SubscriptionTier.PREMIUM, average_rating=3.9, total_reviews=40),
        GarageCandidate(garage_id="G-b", average_rating=4.8, total_reviews=40),
        GarageCandidate(garage_id="G-c", average_rating=4.1, total_reviews=40),
    ]
    rankings = rank_garages(candidates, policy=policy, now=NOW)

    ordered = sort_rankings(rankings, candidates, SORT_RATING)

    assert [r.garage_id for r in ordered] == ["G-b", "G-c", "G-a"]


def test_sort_by_distance_puts_unknown_last(policy):
    candidates = [
        GarageCandidate(garage_id="G-unknown", distance_km=None),
        GarageCandidate(garage_id="G-far", distance_km=25.0),
        GarageCandidate(garage_id="G-near", distance_km=1.5),
    ]
    rankings = rank_garages(candidates, policy=policy, now=NOW)

    ordered = sort_rankings(rankings, candidates, SORT_DISTANCE)

    assert [r.garage_id for r in ordered] == ["G-near", "G-far", "G-unknown"]


# --- policy ---------------------------------------------------------------


def test_policy_rejects_weights_not_summing_to_one():
    weights = dict(default_ranking_policy().weights)
    weights["rating"] = 0.5

    with pytest.raises(ValueError):
        GarageRankingPolicy(weights=weights).validate()


def test_policy_rejects_unknown_weight_names():
    weights = dict(default_ranking_policy().weights)
    weights["vibes"] = weights.pop("activity")

    with pytest.raises(ValueError):
        GarageRankingPolicy(weights=weights).validate()


def test_policy_from_env_overrides(monkeypatch):
    from garages.policy import policy_from_env

    monkeypatch.setenv("GARAGE_FEATURED_BOOST", "5")
    monkeypatch.setenv("GARAGE_MIN_REVIEWS_FOR_FULL_CONFIDENCE", "20")

    p = policy_from_env()

    assert p.featured_boost == 5.0
    assert p.min_reviews_for_full_confidence == 20


def test_sort_by_distance_uses_unrounded_distance(policy):
    candidates = [
        GarageCandidate(garage_id="G-104", distance_km=1.04),
        GarageCandidate(garage_id="G-101", distance_km=1.01),
    ]
    rankings = rank_garages(candidates, policy=policy, now=NOW)

    ordered = sort_rankings(rankings, candidates, SORT_DISTANCE)

    assert [r.garage_id for r in ordered] == ["G-101", "G-104"]
    # Both show as 1.0 km; the display value never breaks the tie.
    assert [round_distance_km(r.distance_km) for r in ordered] == [1.0, 1.0]
