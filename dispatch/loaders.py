"""
Purpose: Load driver pools and booking legs from CSV for simulations and tests.
What it does:
Reads CSV exports with pandas and turns each row into a DriverCandidate or JobLeg.
Empty cells take the same defaults as missing document fields.

preferred_areas cells hold several areas separated by ";".
"""

from __future__ import annotations

from typing import List

import pandas as pd

from .models import DEFAULT_MAX_JOBS_PER_DAY, DriverCandidate, JobLeg, Leg


def load_driver_candidates(path: str) -> List[DriverCandidate]:
    df = pd.read_csv(path, dtype={"driver_id": str})

    drivers = []
    for _, row in df.iterrows():
        drivers.append(
            DriverCandidate.new(
                driver_id=str(row["driver_id"]),
                name=_text(row.get("name")),
                preferred_areas=_split_areas(row.get("preferred_areas")),
                max_jobs_per_day=_int(row.get("max_jobs_per_day"), DEFAULT_MAX_JOBS_PER_DAY),
                todays_job_count=_int(row.get("todays_job_count"), 0),
                completed_jobs=_int(row.get("completed_jobs"), 0),
                is_clocked_in=_bool(row.get("is_clocked_in")),
            )
        )
    return drivers


def load_job_legs(path: str) -> List[JobLeg]:
    df = pd.read_csv(path, dtype={"booking_id": str})

    legs = []
    for _, row in df.iterrows():
        scheduled = row.get("scheduled_time")
        legs.append(
            JobLeg(
                booking_id=str(row["booking_id"]),
                leg=Leg(_text(row.get("leg")) or Leg.PICKUP.value),
                pickup_address=_text(row.get("pickup_address")) or None,
                scheduled_time=None if pd.isna(scheduled) else pd.Timestamp(scheduled).to_pydatetime(),
                is_manual=_bool(row.get("is_manual")),
            )
        )
    return legs


def _split_areas(value) -> List[str]:
    text = _text(value)
    if not text:
        return []
    return [area.strip() for area in text.split(";") if area.strip()]


def _text(value) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value)


def _int(value, default: int) -> int:
    if value is None or pd.isna(value):
        return default
    return int(value)


def _bool(value) -> bool:
    if value is None or pd.isna(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)
