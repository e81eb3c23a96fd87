import argparse
import sys
import logging
from typing import List, Optional

import pandas as pd

from trackodds.api.repositories import NascarRepository, fetch_parallel
from trackodds.core.config import (
    DEFAULT_MARKET,
    DEFAULT_RACE_ID,
    DEFAULT_TRACK,
    MARKETS,
    TRACK_TYPES,
    ConfigurationError,
    require_store_settings,
)
from trackodds.core.odds import count_with_odds, format_implied_probability, format_odds, sort_odds_snapshots
from trackodds.core.stats import SORT_FIELDS, build_driver_stats_rows, search_rows, sort_stats_rows

DATE_FORMAT_LOG = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | REPORT | %(message)s",
    datefmt=DATE_FORMAT_LOG
)
logger = logging.getLogger("Report")


def odds_report(repository: NascarRepository, race_id: str, market: str, query: Optional[str] = None) -> pd.DataFrame:
    """
    Odds board as a table: favourites first, drivers without odds last.
    """
    snapshots = search_rows(sort_odds_snapshots(repository.get_current_odds_with_drivers(race_id, market)), query)
    logger.info(f"{count_with_odds(snapshots)}/{len(snapshots)} drivers with odds for {race_id} ({market})")

    return pd.DataFrame([
        {
            "#": s["driver_number"],
            "Driver": s["driver_name"],
            "Best": format_odds(s["best_odds"]),
            "Book": s["best_book"] or "",
            "Implied": format_implied_probability(s["best_odds"]),
        }
        for s in snapshots
    ])


def stats_report(
    repository: NascarRepository,
    years: Optional[List[int]] = None,
    track_type: Optional[str] = None,
    race_range: int = 10,
    sort: str = "avg_finish",
    query: Optional[str] = None,
) -> pd.DataFrame:
    """
    Stats grid as a table, one row per active driver.
    """
    fetched = fetch_parallel({
        "drivers": (repository.get_drivers, []),
        "results": (repository.get_all_results, []),
        "upcoming_track": (repository.get_upcoming_race_track, dict(DEFAULT_TRACK)),
    })
    rows = build_driver_stats_rows(
        fetched["drivers"],
        fetched["results"],
        years=years,
        track_type=track_type,
        race_range=race_range,
        upcoming_track_id=fetched["upcoming_track"]["track_id"],
    )
    rows = sort_stats_rows(search_rows(rows, query), sort)

    return pd.DataFrame([
        {
            "Driver": row["driver"]["name"],
            "Races": row["stats"]["races"],
            "Wins": row["stats"]["wins"],
            "Top 5 %": row["stats"]["top5_pct"],
            "Top 10 %": row["stats"]["top10_pct"],
            "Avg Finish": row["stats"]["avg_finish"],
            "Rating": row["stats"]["avg_rating"],
            "DNFs": row["stats"]["dnfs"],
        }
        for row in rows
    ])


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for the terminal report.
    """
    parser = argparse.ArgumentParser(description="TrackOdds terminal report")
    parser.add_argument("--view", required=True, choices=["odds", "stats"], help="Report to print")
    parser.add_argument("--race", default=DEFAULT_RACE_ID, help="Race id for the odds view")
    parser.add_argument("--market", default=DEFAULT_MARKET, choices=list(MARKETS), help="Odds market")
    parser.add_argument("--years", nargs="*", type=int, default=[], help="Seasons for the stats view")
    parser.add_argument("--track-type", choices=["all"] + TRACK_TYPES, default="all")
    parser.add_argument("--race-range", type=int, default=10, help="Most recent races per driver (0 = all)")
    parser.add_argument("--sort", choices=SORT_FIELDS, default="avg_finish")
    parser.add_argument("--search", default=None, help="Filter on driver name, number or team")

    args = parser.parse_args(argv)

    try:
        require_store_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    repository = NascarRepository()
    if args.view == "odds":
        table = odds_report(repository, args.race, args.market, args.search)
    else:
        table = stats_report(repository, args.years, args.track_type, args.race_range, args.sort, args.search)

    if table.empty:
        print("No results found")
    else:
        print(table.to_string(index=False))

if __name__ == "__main__":
    main()
