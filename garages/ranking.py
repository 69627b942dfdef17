"""
Purpose: Rank garages for marketplace search.
What it does:

For each candidate:

weighted = Σ weight_i * score_i / Σ weight_i   (over the signals present)

organic = min(100, weighted * (1 + tier_boost))

score = organic + featured_boost (if featured)

Derives badges from exact (inclusive) thresholds on the same signals.

Orders results by score, descending. Equal scores keep input order.

sort_rankings offers the alternate total orders (rating, distance) that bypass
the composite score entirely.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .models import Badge, GarageCandidate, GarageRanking, ScoreBreakdown, SubscriptionTier
from .policy import GarageRankingPolicy, default_ranking_policy
from . import scoring

logger = logging.getLogger(__name__)

SORT_RELEVANCE = "relevance"
SORT_RATING = "rating"
SORT_DISTANCE = "distance"


def score_breakdown(
    candidate: GarageCandidate,
    policy: GarageRankingPolicy,
    now: datetime,
) -> ScoreBreakdown:
    return ScoreBreakdown(
        tier=scoring.tier_score(candidate.subscription_tier, policy),
        rating=scoring.rating_score(candidate.average_rating, candidate.total_reviews, policy),
        trust=scoring.trust_score(candidate.total_reviews),
        response=scoring.response_score(candidate.response_time_hours),
        completion=scoring.completion_score(candidate.completion_rate, candidate.cancellation_rate),
        distance=scoring.distance_score(candidate.distance_km),
        availability=scoring.availability_score(
            candidate.is_available, candidate.next_available_slot, now
        ),
        activity=scoring.activity_score(
            candidate.last_active_at, candidate.total_bookings_completed, now
        ),
    )


def weighted_score(breakdown: ScoreBreakdown, weights: Dict[str, float]) -> float:
    """
    Weighted mean over the signals that were scored. A missing distance drops
    out of both the numerator and the weight total.
    """
    total = 0.0
    weight_sum = 0.0
    for name, weight in weights.items():
        value = getattr(breakdown, name)
        if value is None:
            continue
        total += value * weight
        weight_sum += weight

    if weight_sum == 0:
        return 0.0
    return total / weight_sum


def determine_badges(candidate: GarageCandidate, policy: GarageRankingPolicy) -> List[str]:
    badges: List[str] = []

    if candidate.subscription_tier == SubscriptionTier.PREMIUM:
        badges.append(Badge.PREMIUM.value)

    if (
        candidate.average_rating >= policy.top_rated_min_rating
        and candidate.total_reviews >= policy.top_rated_min_reviews
    ):
        badges.append(Badge.TOP_RATED.value)

    if candidate.response_time_hours <= policy.quick_responder_max_hours:
        badges.append(Badge.QUICK_RESPONDER.value)

    if candidate.total_reviews >= policy.trusted_min_reviews:
        badges.append(Badge.TRUSTED.value)

    if (
        candidate.total_bookings_completed >= policy.reliable_min_completed
        and candidate.completion_rate >= policy.reliable_min_completion_rate
    ):
        badges.append(Badge.RELIABLE.value)

    if (
        candidate.total_reviews < policy.new_max_reviews
        and candidate.total_bookings_completed < policy.new_max_completed
    ):
        badges.append(Badge.NEW.value)

    return badges


def calculate_garage_score(
    candidate: GarageCandidate,
    policy: Optional[GarageRankingPolicy] = None,
    now: Optional[datetime] = None,
) -> GarageRanking:
    policy = policy or default_ranking_policy()
    now = now or datetime.now()

    breakdown = score_breakdown(candidate, policy, now)

    organic = weighted_score(breakdown, policy.weights)
    organic *= 1 + policy.tier_ranking_boost[candidate.subscription_tier]
    organic = min(policy.max_organic_score, organic)

    # Featured placement is paid for separately from tier, so it stacks on top.
    score = organic + (policy.featured_boost if candidate.is_featured else 0.0)

    return GarageRanking(
        garage_id=candidate.garage_id,
        garage_name=candidate.garage_name,
        score=round(score, 2),
        breakdown=breakdown,
        badges=determine_badges(candidate, policy),
        is_featured=candidate.is_featured or candidate.subscription_tier == SubscriptionTier.PREMIUM,
        distance_km=candidate.distance_km,
    )


def rank_garages(
    candidates: Sequence[GarageCandidate],
    policy: Optional[GarageRankingPolicy] = None,
    now: Optional[datetime] = None,
) -> List[GarageRanking]:
    """
    Score every candidate and order by score, highest first.
    """
    if not candidates:
        return []

    policy = policy or default_ranking_policy()
    now = now or datetime.now()

    results = [calculate_garage_score(candidate, policy, now) for candidate in candidates]
    results.sort(key=lambda result: result.score, reverse=True)

    logger.debug("Ranked %d garages; top=%s", len(results), results[0].garage_id)
    return results


def sort_rankings(
    rankings: Sequence[GarageRanking],
    candidates: Sequence[GarageCandidate],
    sort_by: str = SORT_RELEVANCE,
) -> List[GarageRanking]:
    """
    Alternate orders for explicit sortBy requests:
      - rating: average rating, highest first
      - distance: raw distance, closest first, unknown distances last
    Anything else keeps the relevance order.
    """
    by_id = {candidate.garage_id: candidate for candidate in candidates}

    if sort_by == SORT_RATING:
        return sorted(
            rankings,
            key=lambda r: by_id[r.garage_id].average_rating if r.garage_id in by_id else 0.0,
            reverse=True,
        )

    if sort_by == SORT_DISTANCE:
        return sorted(
            rankings,
            key=lambda r: (r.distance_km is None, r.distance_km if r.distance_km is not None else 0.0),
        )

    return list(rankings)
