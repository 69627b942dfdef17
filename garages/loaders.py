"""
Purpose: Load garage candidate pools from CSV for simulations and tests.
What it does:
Reads a CSV export with pandas and builds one GarageCandidate per row.
Empty cells fall back to the GarageCandidate defaults; an empty distance stays None
so the distance term is left out of the score.
"""

from __future__ import annotations

from typing import List

import pandas as pd

from .models import GarageCandidate, SubscriptionTier

_DEFAULTS = GarageCandidate(garage_id="")


def load_garage_candidates(path: str) -> List[GarageCandidate]:
    df = pd.read_csv(path, dtype={"garage_id": str})

    garages = []
    for _, row in df.iterrows():
        garages.append(
            GarageCandidate(
                garage_id=str(row["garage_id"]),
                garage_name=_value(row, "garage_name", ""),
                subscription_tier=SubscriptionTier(
                    _value(row, "subscription_tier", SubscriptionTier.FREE.value)
                ),
                is_featured=_flag(row, "is_featured"),
                average_rating=float(_value(row, "average_rating", _DEFAULTS.average_rating)),
                total_reviews=int(_value(row, "total_reviews", _DEFAULTS.total_reviews)),
                response_time_hours=float(
                    _value(row, "response_time_hours", _DEFAULTS.response_time_hours)
                ),
                completion_rate=float(_value(row, "completion_rate", _DEFAULTS.completion_rate)),
                cancellation_rate=float(
                    _value(row, "cancellation_rate", _DEFAULTS.cancellation_rate)
                ),
                distance_km=_optional_float(row, "distance_km"),
                total_bookings_completed=int(
                    _value(row, "total_bookings_completed", _DEFAULTS.total_bookings_completed)
                ),
            )
        )
    return garages


def _value(row: pd.Series, column: str, default):
    value = row.get(column)
    if value is None or pd.isna(value):
        return default
    return value


def _optional_float(row: pd.Series, column: str):
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    return float(value)


def _flag(row: pd.Series, column: str) -> bool:
    value = _value(row, column, False)
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)
