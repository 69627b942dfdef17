import csv
import random

SUBURBS = [
    "Newtown", "Surry Hills", "Parramatta", "Bondi", "Chatswood",
    "Marrickville", "Ryde", "Manly", "Hurstville", "Blacktown",
]

def generate_mock_drivers(filename="mock_drivers_100.csv", count=100):
    with open(filename, mode='w', newline='') as file:
        writer = csv.writer(file)
        writer.writerow([
            "driver_id", "name", "preferred_areas", "max_jobs_per_day",
            "todays_job_count", "completed_jobs", "is_clocked_in",
        ])

        for i in range(count):
            driver_id = f"DRV-{str(i+1).zfill(3)}"

            # One to three preferred suburbs, ";" separated
            areas = random.sample(SUBURBS, random.randint(1, 3))

            # 70% chance of being on the clock
            is_clocked_in = random.random() < 0.7

            max_jobs = random.choice([6, 8, 10])
            todays_jobs = random.randint(0, max_jobs)
            completed = random.randint(0, 400)

            writer.writerow([
                driver_id, f"Driver {i+1}", ";".join(areas), max_jobs,
                todays_jobs, completed, is_clocked_in,
            ])

    print(f"Successfully generated {count} mock drivers into '{filename}'.")

if __name__ == "__main__":
    generate_mock_drivers()
