import os
import sys

from garages.loaders import load_garage_candidates
from garages.ranking import rank_garages, sort_rankings
from garages.geo import round_distance_km
from garages.scoring import format_response_time

def run_search(sort_by="relevance"):
    print(f"=== GARAGE SEARCH (sortBy={sort_by}) ===")

    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    candidates = load_garage_candidates(os.path.join(base_dir, "sampledata/garages.csv"))
    by_id = {candidate.garage_id: candidate for candidate in candidates}

    rankings = sort_rankings(rank_garages(candidates), candidates, sort_by)

    for position, ranking in enumerate(rankings, 1):
        candidate = by_id[ranking.garage_id]
        distance = round_distance_km(ranking.distance_km)
        print(
            f"{position}. {ranking.garage_name:<22} score {ranking.score:>6.2f} "
            f"rating {candidate.average_rating:.1f} ({candidate.total_reviews}) "
            f"responds {format_response_time(candidate.response_time_hours):<10} "
            f"{'' if distance is None else f'{distance} km':<8} "
            f"{'FEATURED ' if ranking.is_featured else ''}{' '.join(ranking.badges)}"
        )

if __name__ == "__main__":
    run_search(sys.argv[1] if len(sys.argv) > 1 else "relevance")
