import os
from dataclasses import replace
from typing import Dict

from dispatch.loaders import load_driver_candidates, load_job_legs
from dispatch.ranking import matches_preferred_area, rank_drivers

def run_simulation():
    print("=== STARTING DISPATCH BOARD SIMULATION ===")

    # Resolve the correct path depending on where the user runs the script from.
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    # 1. Load Data
    drivers = load_driver_candidates(os.path.join(base_dir, "sampledata/drivers.csv"))
    legs = load_job_legs(os.path.join(base_dir, "sampledata/legs.csv"))
    print(f"Loaded {len(legs)} Legs and {len(drivers)} Drivers.\n")

    # 2. Rank every leg and auto-pick the best selectable driver.
    # Picks feed back into today's job counts so later legs see the new load.
    extra_jobs: Dict[str, int] = {}
    assigned = 0

    for leg in legs:
        pool = [
            replace(driver, todays_job_count=driver.todays_job_count + extra_jobs.get(driver.id, 0))
            for driver in drivers
        ]
        ranked = rank_drivers(leg, pool)

        print(f"{leg.booking_id} ({leg.leg.value}) @ {leg.pickup_address or 'no address'}")
        for position, driver in enumerate(ranked, 1):
            flags = []
            if not driver.is_clocked_in:
                flags.append("off clock")
            if driver.at_capacity:
                flags.append("at limit")
            if matches_preferred_area(leg, driver):
                flags.append("area match")
            print(
                f"  {position}. {driver.id} {driver.name:<14} "
                f"jobs {driver.todays_job_count}/{driver.max_jobs_per_day} "
                f"completed {driver.completed_jobs:<4} {', '.join(flags)}"
            )

        winner = next((driver for driver in ranked if driver.selectable), None)
        if winner is None:
            print("  [FAILED] No selectable driver.\n")
            continue

        extra_jobs[winner.id] = extra_jobs.get(winner.id, 0) + 1
        assigned += 1
        print(f"  [SUCCESS] -> {winner.id}\n")

    print("=== SIMULATION COMPLETE ===")
    print(f"Legs Assigned: {assigned} / {len(legs)}")

if __name__ == "__main__":
    run_simulation()
