import pandas as pd
import numpy as np
import uuid

from garages.geo import haversine_km

def generate_mock_garages(num_garages=60, output_file="mock_garages_60.csv"):
    """
    Generates a dataset of garage ranking inputs spread around a searcher in Sydney.
    Tiers, ratings and booking history are skewed so that every badge shows up
    and the tier/featured boosts have something to reorder.
    """
    # Searcher sits in the Sydney CBD
    SEARCH_LAT = -33.8688
    SEARCH_LON = 151.2093

    data = []
    for garage_index in range(num_garages):
        # Garages within roughly 40km (about 0.35 degrees)
        lat = SEARCH_LAT + np.random.uniform(-0.35, 0.35)
        lon = SEARCH_LON + np.random.uniform(-0.35, 0.35)

        tier = np.random.choice(["free", "analytics", "premium"], p=[0.6, 0.25, 0.15])
        total_reviews = int(np.random.choice([0, 3, 9, 10, 25, 60, 200]))
        completed = int(np.random.randint(0, 150))
        cancelled = int(np.random.randint(0, 5))
        total_bookings = completed + cancelled

        data.append({
            "garage_id": f"g_{str(uuid.uuid4())[:8]}",
            "garage_name": f"Garage {garage_index + 1}",
            "subscription_tier": tier,
            "is_featured": tier == "premium",
            "average_rating": np.round(np.random.uniform(3.0, 5.0), 2) if total_reviews else 0.0,
            "total_reviews": total_reviews,
            "response_time_hours": np.round(np.random.choice([0.5, 1.0, 2.0, 3.5, 8.0, 18.0, 30.0]), 1),
            "completion_rate": np.round(completed / total_bookings, 3) if total_bookings else 0.5,
            "cancellation_rate": np.round(cancelled / total_bookings, 3) if total_bookings else 0.0,
            "distance_km": np.round(haversine_km(SEARCH_LAT, SEARCH_LON, lat, lon), 3),
            "total_bookings_completed": completed,
        })

    df = pd.DataFrame(data)
    df.to_csv(output_file, index=False)
    print(f"Generated {num_garages} garages and saved to '{output_file}'")

    print("\nTier mix:")
    for tier, count in df["subscription_tier"].value_counts().items():
        print(f"  {tier}: {count} garages")

if __name__ == "__main__":
    generate_mock_garages(num_garages=60)
