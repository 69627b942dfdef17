"""
Purpose: Central configuration for garage ranking (single source of truth).
What it does:

Stores all tunable weights and thresholds:

signal weights (tier, rating, trust, response, completion, distance, availability, activity)

TIER_RANKING_BOOST = free 0, analytics 0.10, premium 0.25

FEATURED_BOOST = 10 points

badge cutoffs (top rated 4.5 / 10 reviews, quick responder 2 h, trusted 50 reviews,
reliable 20 completed at 95%)

Values can be overridden from the environment (.env supported):

GARAGE_FEATURED_BOOST, GARAGE_MIN_REVIEWS_FOR_FULL_CONFIDENCE

Rule: Parameters only. Scoring and ordering read them, never the other way round.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Dict

from dotenv import load_dotenv

from .models import SubscriptionTier

DEFAULT_WEIGHTS: Dict[str, float] = {
    "tier": 0.15,
    "rating": 0.25,
    "trust": 0.15,
    "response": 0.12,
    "completion": 0.10,
    "distance": 0.13,
    "availability": 0.05,
    "activity": 0.05,
}

TIER_SCORES: Dict[SubscriptionTier, float] = {
    SubscriptionTier.FREE: 60.0,
    SubscriptionTier.ANALYTICS: 80.0,
    SubscriptionTier.PREMIUM: 100.0,
}

TIER_RANKING_BOOST: Dict[SubscriptionTier, float] = {
    SubscriptionTier.FREE: 0.0,
    SubscriptionTier.ANALYTICS: 0.10,
    SubscriptionTier.PREMIUM: 0.25,
}

FEATURED_BOOST = 10.0
MAX_ORGANIC_SCORE = 100.0

# Below this many reviews the rating score is pulled toward neutral.
MIN_REVIEWS_FOR_FULL_CONFIDENCE = 10
NEUTRAL_SCORE = 50.0

TOP_RATED_MIN_RATING = 4.5
TOP_RATED_MIN_REVIEWS = 10
QUICK_RESPONDER_MAX_HOURS = 2.0
TRUSTED_MIN_REVIEWS = 50
RELIABLE_MIN_COMPLETED = 20
RELIABLE_MIN_COMPLETION_RATE = 0.95
NEW_MAX_REVIEWS = 10
NEW_MAX_COMPLETED = 20


@dataclass(frozen=True)
class GarageRankingPolicy:
    """
    Central configuration for garage ranking.

    Notes:
    - weights must sum to 1.0. When the searcher gives no location the distance
      weight is dropped and the rest are renormalised.
    - the tier boost multiplies the organic score; the featured boost is added
      afterwards, independently of tier.
    """

    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    tier_scores: Dict[SubscriptionTier, float] = field(default_factory=lambda: dict(TIER_SCORES))
    tier_ranking_boost: Dict[SubscriptionTier, float] = field(
        default_factory=lambda: dict(TIER_RANKING_BOOST)
    )

    featured_boost: float = FEATURED_BOOST
    max_organic_score: float = MAX_ORGANIC_SCORE

    min_reviews_for_full_confidence: int = MIN_REVIEWS_FOR_FULL_CONFIDENCE

    # --- Badge cutoffs (inclusive) ---
    top_rated_min_rating: float = TOP_RATED_MIN_RATING
    top_rated_min_reviews: int = TOP_RATED_MIN_REVIEWS
    quick_responder_max_hours: float = QUICK_RESPONDER_MAX_HOURS
    trusted_min_reviews: int = TRUSTED_MIN_REVIEWS
    reliable_min_completed: int = RELIABLE_MIN_COMPLETED
    reliable_min_completion_rate: float = RELIABLE_MIN_COMPLETION_RATE
    new_max_reviews: int = NEW_MAX_REVIEWS
    new_max_completed: int = NEW_MAX_COMPLETED

    def validate(self) -> None:
        """
        Basic sanity checks. Call once at startup if you want.
        """
        if set(self.weights) != set(DEFAULT_WEIGHTS):
            raise ValueError(f"weights must define exactly {sorted(DEFAULT_WEIGHTS)}")

        if any(weight < 0 for weight in self.weights.values()):
            raise ValueError("weights must be >= 0")

        if not math.isclose(sum(self.weights.values()), 1.0, abs_tol=1e-9):
            raise ValueError("weights must sum to 1.0")

        for tier in SubscriptionTier:
            if tier not in self.tier_scores or tier not in self.tier_ranking_boost:
                raise ValueError(f"missing tier configuration for {tier.value}")

        if self.featured_boost < 0:
            raise ValueError("featured_boost must be >= 0")

        if self.min_reviews_for_full_confidence < 1:
            raise ValueError("min_reviews_for_full_confidence must be >= 1")

        if not 0 <= self.reliable_min_completion_rate <= 1:
            raise ValueError("reliable_min_completion_rate must be within 0-1")


def default_ranking_policy() -> GarageRankingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = GarageRankingPolicy()
    p.validate()
    return p


def policy_from_env() -> GarageRankingPolicy:
    """
    Default policy with any GARAGE_* environment overrides applied.
    """
    load_dotenv()
    p = GarageRankingPolicy(
        featured_boost=float(os.getenv("GARAGE_FEATURED_BOOST", FEATURED_BOOST)),
        min_reviews_for_full_confidence=int(
            os.getenv("GARAGE_MIN_REVIEWS_FOR_FULL_CONFIDENCE", MIN_REVIEWS_FOR_FULL_CONFIDENCE)
        ),
    )
    p.validate()
    return p
