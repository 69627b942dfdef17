import pytest
from datetime import datetime, timedelta

from dispatch.board import (
    build_dispatch_board,
    count_todays_jobs,
    leg_driver_state,
    todays_dispatched,
    unassigned_pickup_legs,
    unassigned_return_legs,
)
from dispatch.models import Leg
from dispatch.policy import DispatchPolicy, policy_from_env

NOW = datetime(2026, 3, 2, 14, 0)
TODAY = datetime(2026, 3, 2)
YESTERDAY = TODAY - timedelta(days=1)
TOMORROW = TODAY + timedelta(days=1)


def booking(booking_id, **fields):
    doc = {"_id": booking_id, "status": "pending", "pickupAddress": "1 King St, Newtown"}
    doc.update(fields)
    return doc


def driver(driver_id, **fields):
    doc = {
        "_id": driver_id,
        "firstName": driver_id,
        "status": "approved",
        "onboardingStatus": "active",
        "canAcceptJobs": True,
        "isActive": True,
        "isClockedIn": True,
        "contracts": {},
        "policeCheck": {},
    }
    doc.update(fields)
    return doc


@pytest.fixture
def bookings():
    return [
        booking("B1", createdAt=TODAY.replace(hour=8), pickupTime=TOMORROW.replace(hour=9)),
        booking("B2", createdAt=TODAY.replace(hour=9), pickupTime=TOMORROW.replace(hour=9)),
        booking("B3", createdAt=YESTERDAY, pickupTime=TODAY.replace(hour=16)),
        booking("B4", createdAt=TODAY.replace(hour=6)),
        booking("B5", createdAt=TODAY, pickupTime=TODAY.replace(hour=15), cancellation={"cancelledAt": TODAY}),
        booking(
            "B6",
            status="in_progress",
            assignedDriverId="D1",
            createdAt=TODAY.replace(hour=7),
            updatedAt=TODAY.replace(hour=10),
            dropoffTime=TODAY.replace(hour=17),
            pickupAddress="9 Enmore Rd, Newtown",
        ),
        booking(
            "B7",
            status="in_progress",
            assignedDriverId="D1",
            returnDriverId="D2",
            createdAt=TODAY.replace(hour=7),
            updatedAt=TODAY.replace(hour=11),
        ),
        booking(
            "B8",
            status="completed",
            assignedDriverId="D2",
            createdAt=YESTERDAY,
            updatedAt=YESTERDAY,
        ),
    ]


@pytest.fixture
def drivers():
    return [
        driver("D1", preferredAreas=["Newtown"], maxJobsPerDay=2, metrics={"completedJobs": 40}),
        driver("D2", isClockedIn=False),
        driver("D3", onboardingStatus="contracts_pending", canAcceptJobs=False),
        driver("D4", isActive=False),
    ]


def test_unassigned_pickups_order(bookings):
    legs = unassigned_pickup_legs(bookings)

    # Earliest pickup first; same pickup time -> newest booking first; no time -> last.
    assert [leg.booking_id for leg in legs] == ["B3", "B2", "B1", "B4"]
    assert all(leg.leg == Leg.PICKUP for leg in legs)


def test_unassigned_pickups_respects_limit(bookings):
    assert [leg.booking_id for leg in unassigned_pickup_legs(bookings, limit=2)] == ["B3", "B2"]


def test_unassigned_returns(bookings):
    legs = unassigned_return_legs(bookings)

    assert [leg.booking_id for leg in legs] == ["B6"]
    assert legs[0].leg == Leg.RETURN
    assert legs[0].scheduled_time == TODAY.replace(hour=17)


def test_todays_dispatched_newest_first(bookings):
    assert [b["_id"] for b in todays_dispatched(bookings, NOW)] == ["B7", "B6"]


def test_job_counts_cover_both_legs_of_todays_bookings(bookings):
    counts = count_todays_jobs(bookings, NOW)

    # B8 was created yesterday and is not counted.
    assert counts == {"D1": 2, "D2": 1}


def test_board_lists_only_eligible_drivers(bookings, drivers):
    board = build_dispatch_board(bookings, drivers, now=NOW)

    assert [d.id for d in board.available_drivers] == ["D1", "D2"]

    d1 = board.available_drivers[0]
    assert d1.todays_job_count == 2
    assert d1.at_capacity
    assert not d1.selectable
    assert d1.completed_jobs == 40

    d2 = board.available_drivers[1]
    assert d2.max_jobs_per_day == 10
    assert not d2.selectable


def test_board_ranks_every_unassigned_leg(bookings, drivers):
    board = build_dispatch_board(bookings, drivers, now=NOW)

    assert len(board.rankings) == len(board.unassigned_pickups) + len(board.unassigned_returns)

    ranked = board.ranking_for("B6", Leg.RETURN)
    assert ranked is not None
    # At capacity but clocked in with an area match: still ranked first.
    assert [d.id for d in ranked.drivers] == ["D1", "D2"]

    assert board.ranking_for("B6", Leg.PICKUP) is None
    assert board.generated_at == NOW


def test_board_uses_policy_defaults(bookings, drivers):
    policy = DispatchPolicy(default_max_jobs_per_day=4, board_limit=1)

    board = build_dispatch_board(bookings, drivers, now=NOW, policy=policy)

    assert [leg.booking_id for leg in board.unassigned_pickups] == ["B3"]
    assert board.available_drivers[1].max_jobs_per_day == 4


def test_leg_driver_state():
    assert leg_driver_state({}, Leg.PICKUP) is None
    assert leg_driver_state({"pickupDriver": {"assignedAt": NOW}}, Leg.PICKUP) == "assigned"
    assert leg_driver_state({"pickupDriver": {"startedAt": NOW, "collectedAt": NOW}}, Leg.PICKUP) == "collected"
    assert leg_driver_state({"returnDriver": {"startedAt": NOW, "arrivedAt": NOW}}, Leg.RETURN) == "delivering"
    assert leg_driver_state({"returnDriver": {"completedAt": NOW}}, Leg.RETURN) == "completed"


def test_policy_validation_and_env(monkeypatch):
    with pytest.raises(ValueError):
        DispatchPolicy(board_limit=0).validate()

    monkeypatch.setenv("DISPATCH_DEFAULT_MAX_JOBS_PER_DAY", "6")
    monkeypatch.setenv("DISPATCH_BOARD_LIMIT", "20")

    p = policy_from_env()

    assert p.default_max_jobs_per_day == 6
    assert p.board_limit == 20
