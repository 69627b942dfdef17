"""
Purpose: Domain models for garage marketplace ranking.
What it does:
- SubscriptionTier: closed ordered set free < analytics < premium, with an explicit ordinal
- GarageCandidate: per-search projection joined from garage, subscription, review and
  booking-history data
- ScoreBreakdown / GarageRanking: the ranker's output per garage

Rule: No scoring logic here. Models only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class SubscriptionTier(str, Enum):
    FREE = "free"
    ANALYTICS = "analytics"
    PREMIUM = "premium"

    @property
    def ordinal(self) -> int:
        return _TIER_ORDER[self]

    def is_upgrade_to(self, other: SubscriptionTier) -> bool:
        return other.ordinal > self.ordinal

    def is_downgrade_to(self, other: SubscriptionTier) -> bool:
        return other.ordinal < self.ordinal


_TIER_ORDER = {
    SubscriptionTier.FREE: 0,
    SubscriptionTier.ANALYTICS: 1,
    SubscriptionTier.PREMIUM: 2,
}


class Badge(str, Enum):
    PREMIUM = "premium"
    TOP_RATED = "top_rated"
    QUICK_RESPONDER = "quick_responder"
    TRUSTED = "trusted"
    RELIABLE = "reliable"
    NEW = "new"


BADGE_LABELS = {
    Badge.PREMIUM: "Premium Partner",
    Badge.TOP_RATED: "Top Rated",
    Badge.QUICK_RESPONDER: "Quick Responder",
    Badge.TRUSTED: "Highly Trusted",
    Badge.RELIABLE: "Reliable",
    Badge.NEW: "New",
}


@dataclass(frozen=True)
class GarageCandidate:
    """
    Ranking input for one garage. Built fresh per search request.
    """
    garage_id: str
    garage_name: str = ""

    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    is_featured: bool = False

    average_rating: float = 0.0     # 0-5
    total_reviews: int = 0

    response_time_hours: float = 24.0
    completion_rate: float = 0.5    # 0-1
    cancellation_rate: float = 0.0  # 0-1

    # None when the searcher gave no coordinates.
    distance_km: Optional[float] = None

    is_available: bool = True
    next_available_slot: Optional[datetime] = None
    last_active_at: Optional[datetime] = None

    total_bookings_completed: int = 0


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    Normalised 0-100 signal scores. distance is None when it was not scored.
    """
    tier: float
    rating: float
    trust: float
    response: float
    completion: float
    distance: Optional[float]
    availability: float
    activity: float


@dataclass(frozen=True)
class GarageRanking:
    garage_id: str
    garage_name: str
    score: float
    breakdown: ScoreBreakdown
    badges: List[str] = field(default_factory=list)
    is_featured: bool = False

    # Unrounded; only display code rounds it.
    distance_km: Optional[float] = None
