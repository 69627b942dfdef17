"""
Garages domain package.

Public API:
- Domain models: GarageCandidate, GarageRanking, SubscriptionTier, Badge
- Ranking: rank_garages, calculate_garage_score, sort_rankings
- Geo / display helpers: haversine_km, format_response_time
- Search entry: search_garages, SearchQuery
"""

from .models import Badge, GarageCandidate, GarageRanking, ScoreBreakdown, SubscriptionTier
from .geo import EARTH_RADIUS_KM, haversine_km, round_distance_km
from .policy import GarageRankingPolicy, default_ranking_policy
from .ranking import calculate_garage_score, determine_badges, rank_garages, sort_rankings
from .scoring import format_response_time
from .search import InvalidCoordinatesError, SearchPage, SearchQuery, search_garages

__all__ = [
    "Badge",
    "GarageCandidate",
    "GarageRanking",
    "ScoreBreakdown",
    "SubscriptionTier",
    "EARTH_RADIUS_KM",
    "haversine_km",
    "round_distance_km",
    "GarageRankingPolicy",
    "default_ranking_policy",
    "calculate_garage_score",
    "determine_badges",
    "rank_garages",
    "sort_rankings",
    "format_response_time",
    "InvalidCoordinatesError",
    "SearchPage",
    "SearchQuery",
    "search_garages",
]
