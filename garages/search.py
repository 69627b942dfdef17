"""
Purpose: The garage search "orchestrator" (single entry point).
What it does:

Coordinates a marketplace search end-to-end over already-fetched documents:

- normalises and validates the query (page, limit, rating, distance, coordinates)

- filters garages by location, text and service

- builds a GarageCandidate per garage by joining subscription, review and
  booking-history aggregates

- ranks (ranking.py), applies an explicit sort, paginates

- returns display rows with badges, response-time label, price range and
  rounded distance

Rule: Search never talks to a database. The caller fetches the pools.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from .geo import haversine_km, is_valid_coordinate, round_distance_km
from .models import GarageCandidate, GarageRanking, SubscriptionTier
from .policy import GarageRankingPolicy
from .ranking import SORT_DISTANCE, SORT_RELEVANCE, rank_garages, sort_rankings
from .scoring import format_response_time

Document = Dict[str, Any]

DEFAULT_MAX_DISTANCE_KM = 30
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50

# Used when a garage has no booking history yet.
DEFAULT_COMPLETION_RATE = 0.5
DEFAULT_RESPONSE_TIME_HOURS = 24.0


class InvalidCoordinatesError(ValueError):
    """Raised when search coordinates fall outside valid latitude/longitude ranges."""
    pass


@dataclass(frozen=True)
class SearchQuery:
    text: str = ""
    suburb: str = ""
    state: str = ""
    postcode: str = ""
    service: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM
    min_rating: float = 0.0
    sort_by: str = SORT_RELEVANCE
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None

    def normalized(self) -> SearchQuery:
        """
        Clamp paging and filters into their allowed ranges and reject invalid
        coordinates.
        """
        if self.has_location and not is_valid_coordinate(self.lat, self.lng):
            raise InvalidCoordinatesError(
                "Invalid coordinates. Latitude must be -90 to 90, longitude must be -180 to 180."
            )

        return SearchQuery(
            text=self.text,
            suburb=self.suburb,
            state=self.state,
            postcode=self.postcode,
            service=self.service,
            lat=self.lat,
            lng=self.lng,
            max_distance_km=max(1, self.max_distance_km or DEFAULT_MAX_DISTANCE_KM),
            min_rating=max(0.0, min(5.0, self.min_rating or 0.0)),
            sort_by=self.sort_by or SORT_RELEVANCE,
            page=max(1, self.page or 1),
            limit=max(1, min(self.limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)),
        )


@dataclass(frozen=True)
class GarageSearchResult:
    garage_id: str
    business_name: str
    linked_garage_name: str
    suburb: str
    state: str
    postcode: str
    services: List[str]
    average_rating: float
    total_reviews: int
    response_time: str
    badges: List[str]
    is_featured: bool
    is_premium: bool
    score: float
    price_range: Optional[Dict[str, float]] = None
    distance_km: Optional[float] = None


@dataclass(frozen=True)
class SearchPage:
    results: List[GarageSearchResult]
    total: int
    page: int
    total_pages: int
    query: SearchQuery = field(default_factory=SearchQuery)


def garage_coordinates(garage: Document) -> Optional[tuple]:
    """
    GeoJSON point stored as [lng, lat]; returned as (lat, lng).
    """
    location = garage.get("location") or {}
    coordinates = location.get("coordinates")
    if not coordinates or len(coordinates) < 2:
        return None
    return coordinates[1], coordinates[0]


def matches_query(garage: Document, query: SearchQuery) -> bool:
    address = garage.get("businessAddress") or {}

    if query.state and address.get("state") != query.state:
        return False
    if query.postcode and address.get("postcode") != query.postcode:
        return False
    if query.suburb and query.suburb.lower() not in (address.get("suburb") or "").lower():
        return False

    if query.text:
        needle = query.text.lower()
        names = (
            garage.get("businessName"),
            garage.get("linkedGarageName"),
            garage.get("tradingName"),
        )
        if not any(name and needle in name.lower() for name in names):
            return False

    return True


def offers_service(pricing: Optional[Document], service: str) -> bool:
    if not pricing:
        return False
    return any(
        s.get("category") == service and s.get("isActive", False)
        for s in pricing.get("services") or []
    )


def build_candidate(
    garage: Document,
    subscription: Optional[Document],
    review_stats: Optional[Document],
    booking_stats: Optional[Document],
    distance_km: Optional[float] = None,
) -> GarageCandidate:
    """
    Join one garage with its aggregates. Missing aggregates take neutral defaults.
    """
    subscription = subscription or {}
    review_stats = review_stats or {}
    booking_stats = booking_stats or {}

    total_bookings = booking_stats.get("totalBookings") or 0
    completed = booking_stats.get("completedBookings") or 0
    cancelled = booking_stats.get("cancelledBookings") or 0

    if total_bookings > 0:
        completion_rate = completed / total_bookings
        cancellation_rate = cancelled / total_bookings
    else:
        completion_rate = DEFAULT_COMPLETION_RATE
        cancellation_rate = 0.0

    avg_response_ms = booking_stats.get("avgResponseTime") or 0
    if avg_response_ms > 0:
        response_time_hours = avg_response_ms / (1000 * 60 * 60)
    else:
        response_time_hours = DEFAULT_RESPONSE_TIME_HOURS

    features = subscription.get("features") or {}

    return GarageCandidate(
        garage_id=str(garage["_id"]),
        garage_name=garage.get("businessName", ""),
        subscription_tier=SubscriptionTier(subscription.get("tier") or SubscriptionTier.FREE.value),
        is_featured=bool(features.get("featuredPlacement", False)),
        average_rating=review_stats.get("averageRating") or 0.0,
        total_reviews=review_stats.get("totalReviews") or 0,
        response_time_hours=response_time_hours,
        completion_rate=completion_rate,
        cancellation_rate=cancellation_rate,
        distance_km=distance_km,
        total_bookings_completed=completed,
    )


def price_range(pricing: Optional[Document]) -> Optional[Dict[str, float]]:
    """
    Lowest and highest "price from" across published services, cents -> dollars.
    """
    if not pricing:
        return None
    prices = [
        price["priceFrom"]
        for s in pricing.get("services") or []
        for price in s.get("prices") or []
        if price.get("priceFrom") is not None
    ]
    if not prices:
        return None
    return {"min": min(prices) / 100, "max": max(prices) / 100}


def search_garages(
    query: SearchQuery,
    garages: Sequence[Document],
    *,
    subscriptions: Optional[Dict[str, Document]] = None,
    review_stats: Optional[Dict[str, Document]] = None,
    booking_stats: Optional[Dict[str, Document]] = None,
    pricings: Optional[Dict[str, Document]] = None,
    policy: Optional[GarageRankingPolicy] = None,
    now: Optional[datetime] = None,
) -> SearchPage:
    """
    Main search entry point (pure).

    Aggregate maps are keyed by garage id. garages should already be restricted
    to approved garages.
    """
    query = query.normalized()
    subscriptions = subscriptions or {}
    review_stats = review_stats or {}
    booking_stats = booking_stats or {}
    pricings = pricings or {}

    by_id: Dict[str, Document] = {}
    candidates: List[GarageCandidate] = []

    for garage in garages:
        if not matches_query(garage, query):
            continue

        garage_id = str(garage["_id"])
        if query.service and not offers_service(pricings.get(garage_id), query.service):
            continue

        distance_km = None
        if query.has_location:
            coordinates = garage_coordinates(garage)
            if coordinates is None:
                # Location searches only return garages that can be placed on the map.
                continue
            distance_km = haversine_km(query.lat, query.lng, *coordinates)
            if distance_km > query.max_distance_km:
                continue

        candidate = build_candidate(
            garage,
            subscriptions.get(garage_id),
            review_stats.get(garage_id),
            booking_stats.get(garage_id),
            distance_km=distance_km,
        )
        if query.min_rating > 0 and candidate.average_rating < query.min_rating:
            continue

        by_id[garage_id] = garage
        candidates.append(candidate)

    rankings = rank_garages(candidates, policy=policy, now=now)

    sort_by = query.sort_by
    if sort_by == SORT_DISTANCE and not query.has_location:
        sort_by = SORT_RELEVANCE
    rankings = sort_rankings(rankings, candidates, sort_by)

    total = len(rankings)
    total_pages = math.ceil(total / query.limit)
    start = (query.page - 1) * query.limit
    page_rankings = rankings[start:start + query.limit]

    candidate_by_id = {candidate.garage_id: candidate for candidate in candidates}
    results = [
        _to_result(
            ranking,
            candidate_by_id[ranking.garage_id],
            by_id[ranking.garage_id],
            pricings.get(ranking.garage_id),
        )
        for ranking in page_rankings
    ]

    return SearchPage(results=results, total=total, page=query.page, total_pages=total_pages, query=query)


def _to_result(
    ranking: GarageRanking,
    candidate: GarageCandidate,
    garage: Document,
    pricing: Optional[Document],
) -> GarageSearchResult:
    address = garage.get("businessAddress") or {}

    if pricing and pricing.get("services"):
        services = [s.get("category") for s in pricing["services"]]
    else:
        services = list(garage.get("servicesOffered") or [])

    return GarageSearchResult(
        garage_id=ranking.garage_id,
        business_name=garage.get("businessName", ""),
        linked_garage_name=garage.get("linkedGarageName") or "",
        suburb=address.get("suburb") or "",
        state=address.get("state") or "",
        postcode=address.get("postcode") or "",
        services=services,
        average_rating=candidate.average_rating,
        total_reviews=candidate.total_reviews,
        response_time=format_response_time(candidate.response_time_hours),
        badges=list(ranking.badges),
        is_featured=ranking.is_featured,
        is_premium=candidate.subscription_tier == SubscriptionTier.PREMIUM,
        score=ranking.score,
        price_range=price_range(pricing),
        distance_km=round_distance_km(ranking.distance_km),
    )
