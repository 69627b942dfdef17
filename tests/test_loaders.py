from datetime import datetime
from pathlib import Path

from dispatch.loaders import load_driver_candidates, load_job_legs
from dispatch.models import Leg
from garages.loaders import load_garage_candidates
from garages.models import SubscriptionTier

SAMPLEDATA = Path(__file__).resolve().parent.parent / "sampledata"


def test_load_driver_candidates(tmp_path):
    path = tmp_path / "drivers.csv"
    path.write_text(
        "driver_id,name,preferred_areas,max_jobs_per_day,todays_job_count,completed_jobs,is_clocked_in\n"
        "D1,Aroha Ngata,Newtown; Marrickville ,8,2,50,true\n"
        "D2,Mei Chen,,,,,false\n"
    )

    drivers = load_driver_candidates(str(path))

    assert [d.id for d in drivers] == ["D1", "D2"]
    assert drivers[0].preferred_areas == ("Newtown", "Marrickville")
    assert drivers[0].max_jobs_per_day == 8
    assert drivers[0].is_clocked_in

    # Empty cells take the document defaults.
    assert drivers[1].preferred_areas == ()
    assert drivers[1].max_jobs_per_day == 10
    assert drivers[1].completed_jobs == 0
    assert not drivers[1].is_clocked_in


def test_load_job_legs(tmp_path):
    path = tmp_path / "legs.csv"
    path.write_text(
        "booking_id,leg,pickup_address,scheduled_time,is_manual\n"
        'BK-1,pickup,"12 King St, Newtown",2026-03-02 08:30,true\n'
        "BK-2,return,,,false\n"
    )

    legs = load_job_legs(str(path))

    assert legs[0].leg == Leg.PICKUP
    assert legs[0].pickup_address == "12 King St, Newtown"
    assert legs[0].scheduled_time == datetime(2026, 3, 2, 8, 30)
    assert legs[0].is_manual

    assert legs[1].leg == Leg.RETURN
    assert legs[1].pickup_address is None
    assert legs[1].scheduled_time is None


def test_load_garage_candidates(tmp_path):
    path = tmp_path / "garages.csv"
    path.write_text(
        "garage_id,garage_name,subscription_tier,is_featured,average_rating,total_reviews,"
        "response_time_hours,completion_rate,cancellation_rate,distance_km,total_bookings_completed\n"
        "G-1,Inner West Auto,premium,true,4.6,120,1.5,0.97,0.01,3.2,140\n"
        "G-2,Quiet Garage,,,,,,,,,\n"
    )

    garages = load_garage_candidates(str(path))

    assert garages[0].subscription_tier == SubscriptionTier.PREMIUM
    assert garages[0].is_featured
    assert garages[0].distance_km == 3.2

    assert garages[1].subscription_tier == SubscriptionTier.FREE
    assert garages[1].distance_km is None
    assert garages[1].response_time_hours == 24.0
    assert garages[1].completion_rate == 0.5


def test_sample_data_loads():
    assert len(load_driver_candidates(str(SAMPLEDATA / "drivers.csv"))) == 5
    assert len(load_job_legs(str(SAMPLEDATA / "legs.csv"))) == 4
    assert len(load_garage_candidates(str(SAMPLEDATA / "garages.csv"))) == 5
