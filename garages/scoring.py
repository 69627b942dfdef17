"""
Purpose: Per-signal scores for garage ranking.
What it does:

Maps each raw signal onto a comparable 0-100 scale:

tier -> fixed score per subscription tier

rating -> piecewise curve, pulled toward neutral when there are few reviews

trust -> review count

response -> hours to respond (faster is better)

completion -> completion rate minus a capped cancellation penalty

distance -> km from the searcher (only when a location was given)

availability / activity -> next open slot, recent activity and booking history

Also owns the response-time display buckets. The bucket edges and the response
score break points come from the same constants so display and ranking agree.

Rule: Scores only. Weighting and ordering live in ranking.py.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from .models import SubscriptionTier
from .policy import GarageRankingPolicy, NEUTRAL_SCORE

HOUR = 1.0
TWO_HOURS = 2.0
FOUR_HOURS = 4.0
TWELVE_HOURS = 12.0
ONE_DAY = 24.0

# (exclusive upper bound in hours, label); anything at or above ONE_DAY is "> 1 day".
RESPONSE_TIME_BUCKETS: Tuple[Tuple[float, str], ...] = (
    (HOUR, "< 1 hour"),
    (TWO_HOURS, "~1 hour"),
    (FOUR_HOURS, "2-4 hours"),
    (TWELVE_HOURS, "4-12 hours"),
    (ONE_DAY, "< 1 day"),
)
SLOWEST_RESPONSE_LABEL = "> 1 day"


def format_response_time(hours: float) -> str:
    for upper_bound, label in RESPONSE_TIME_BUCKETS:
        if hours < upper_bound:
            return label
    return SLOWEST_RESPONSE_LABEL


def tier_score(tier: SubscriptionTier, policy: GarageRankingPolicy) -> float:
    return policy.tier_scores[tier]


def raw_rating_score(rating: float) -> float:
    """
    1-5 stars onto 0-100:
      below 3.0 -> 0-40, 3.0-3.5 -> 40-60, 3.5-4.0 -> 60-75,
      4.0-4.5 -> 75-90, 4.5-5.0 -> 90-100
    """
    if rating < 3.0:
        return rating * 13.33
    if rating < 3.5:
        return 40 + (rating - 3.0) * 40
    if rating < 4.0:
        return 60 + (rating - 3.5) * 30
    if rating < 4.5:
        return 75 + (rating - 4.0) * 30
    return 90 + (rating - 4.5) * 20


def rating_confidence(total_reviews: int, policy: GarageRankingPolicy) -> float:
    if total_reviews <= 0:
        return 0.0
    return min(1.0, total_reviews / policy.min_reviews_for_full_confidence)


def rating_score(rating: float, total_reviews: int, policy: GarageRankingPolicy) -> float:
    """
    A handful of perfect reviews must not beat hundreds of very good ones,
    so the raw score is blended with neutral by review-count confidence.
    No reviews at all scores exactly neutral.
    """
    if rating <= 0 or total_reviews <= 0:
        return NEUTRAL_SCORE

    confidence = rating_confidence(total_reviews, policy)
    return NEUTRAL_SCORE + (raw_rating_score(rating) - NEUTRAL_SCORE) * confidence


def trust_score(total_reviews: int) -> float:
    """
    0 reviews = 30, 1-5 = 40-60, 5-20 = 60-80, 20-50 = 80-90, 50+ = 90-100
    """
    if total_reviews <= 0:
        return 30.0
    if total_reviews < 5:
        return 40 + (total_reviews / 5) * 20
    if total_reviews < 20:
        return 60 + ((total_reviews - 5) / 15) * 20
    if total_reviews < 50:
        return 80 + ((total_reviews - 20) / 30) * 10
    return min(100.0, 90 + ((total_reviews - 50) / 100) * 10)


def response_score(hours: float) -> float:
    """
    Up to an hour = 100, then linear down to 80 at four hours, 60 at twelve,
    40 at a day, floored at 20.
    """
    if hours <= HOUR:
        return 100.0
    if hours <= FOUR_HOURS:
        return 100 - ((hours - HOUR) / (FOUR_HOURS - HOUR)) * 20
    if hours <= TWELVE_HOURS:
        return 80 - ((hours - FOUR_HOURS) / (TWELVE_HOURS - FOUR_HOURS)) * 20
    if hours <= ONE_DAY:
        return 60 - ((hours - TWELVE_HOURS) / (ONE_DAY - TWELVE_HOURS)) * 20
    return max(20.0, 40 - ((hours - ONE_DAY) / ONE_DAY) * 20)


def completion_score(completion_rate: float, cancellation_rate: float) -> float:
    completion = completion_rate * 100
    cancellation_penalty = min(30.0, cancellation_rate * 100 * 3)
    return max(0.0, completion - cancellation_penalty)


def distance_score(distance_km: Optional[float]) -> Optional[float]:
    """
    None when there is no distance: the term is left out, not scored as zero.
    """
    if distance_km is None:
        return None
    if distance_km <= 5:
        return 100.0
    if distance_km <= 10:
        return 100 - ((distance_km - 5) / 5) * 20
    if distance_km <= 20:
        return 80 - ((distance_km - 10) / 10) * 20
    if distance_km <= 30:
        return 60 - ((distance_km - 20) / 10) * 20
    return max(20.0, 40 - ((distance_km - 30) / 20) * 20)


def availability_score(is_available: bool, next_slot: Optional[datetime], now: datetime) -> float:
    if not is_available:
        return 20.0
    if next_slot is None:
        return 80.0

    hours_until_slot = (next_slot - now).total_seconds() / 3600
    if hours_until_slot <= 24:
        return 100.0
    if hours_until_slot <= 48:
        return 90.0
    if hours_until_slot <= 72:
        return 70.0
    if hours_until_slot <= 168:
        return 50.0
    return 30.0


def activity_score(last_active_at: Optional[datetime], total_bookings: int, now: datetime) -> float:
    score = 50.0

    if last_active_at is not None:
        days_since_active = (now - last_active_at).total_seconds() / 86400
        if days_since_active <= 1:
            score += 30
        elif days_since_active <= 7:
            score += 20
        elif days_since_active <= 30:
            score += 10
        else:
            score -= 10

    if total_bookings >= 100:
        score += 20
    elif total_bookings >= 50:
        score += 15
    elif total_bookings >= 20:
        score += 10
    elif total_bookings >= 5:
        score += 5

    return min(100.0, max(0.0, score))
