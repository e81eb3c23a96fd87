"""
Main entry point for the FastAPI application.
Serves the data behind the odds board, driver dashboards, schedule and stats grid.
"""
import logging
from typing import List, Dict, Optional, Any
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException, Query, status

from trackodds.api.schemas import (
    Driver,
    DriverDashboard,
    DriverProfile,
    DriverStatsRow,
    OddsBoard,
    Race,
    StatsPage,
    Track,
)
from trackodds.api.repositories import NascarRepository, fetch_parallel
from trackodds.core.config import (
    DEFAULT_MARKET,
    DEFAULT_RACE_ID,
    DEFAULT_TRACK,
    MARKETS,
    STATS_TRACK_TYPES,
    TRACK_TYPE_LABELS,
    ConfigurationError,
    require_store_settings,
)
from trackodds.core.database import SupabaseClient
from trackodds.core.odds import count_with_odds, sort_odds_snapshots
from trackodds.core.stats import (
    build_driver_stats_rows,
    calculate_aggregated_stats,
    filter_results,
    form_status,
    momentum_trend,
    search_rows,
    sort_stats_rows,
)

# Logger Configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("API")


# --- LIFESPAN: Store configuration ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Validates the store configuration on startup; the service refuses to start without it.
    """
    logger.info("Checking data store configuration...")
    try:
        require_store_settings()
    except ConfigurationError as exc:
        logger.critical(f"CRITICAL: {exc}")
        raise
    logger.info("Data store configured.")

    yield
    SupabaseClient().close_session()
    logger.info("Store session closed.")

app = FastAPI(title="TrackOdds API", lifespan=lifespan)


# --- DEPENDENCY INJECTION ---
def get_repository() -> NascarRepository:
    """Dependency provider for the NascarRepository."""
    return NascarRepository()


# --- ROUTES ---

@app.get("/", tags=["System"])
def health_check() -> Dict[str, str]:
    """Returns the operational status of the API."""
    return {"status": "online", "store": "configured"}


@app.get("/drivers", response_model=List[Driver], tags=["Drivers"])
def get_drivers(repository: NascarRepository = Depends(get_repository)) -> List[Dict[str, Any]]:
    """Active drivers ordered by name."""
    return repository.get_drivers()


@app.get("/drivers/slug/{slug}/profile", response_model=DriverProfile, tags=["Drivers"])
def get_driver_profile(
    slug: str,
    race_id: str = DEFAULT_RACE_ID,
    repository: NascarRepository = Depends(get_repository),
) -> Dict[str, Any]:
    """Driver profile with career, track-type and current-track stats."""
    profile = repository.get_driver_profile(slug, race_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Driver not found.")
    return profile


@app.get("/drivers/{driver_id}", response_model=DriverDashboard, tags=["Drivers"])
def get_driver_dashboard(
    driver_id: str,
    year: Optional[int] = None,
    track_type: Optional[str] = None,
    repository: NascarRepository = Depends(get_repository),
) -> Dict[str, Any]:
    """
    Data for a driver dashboard.
    `overall` and `filtered_results` follow the year / track type filters;
    `results`, `by_track_type`, form and momentum always cover every result.
    """
    driver = repository.get_driver(driver_id)
    if driver is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Driver not found.")

    fetched = fetch_parallel({
        "results": (lambda: repository.get_driver_results(driver_id, driver["name"]), []),
        "tracks": (repository.get_tracks, []),
        "years": (repository.get_result_years, []),
    })
    results = fetched["results"]

    filtered = filter_results(results, years=[year] if year else None, track_type=track_type)
    by_track_type = [
        {
            "track_type": track_type_key,
            "label": TRACK_TYPE_LABELS[track_type_key],
            "stats": calculate_aggregated_stats(filter_results(results, track_type=track_type_key)),
        }
        for track_type_key in STATS_TRACK_TYPES
    ]

    return {
        "driver": driver,
        "results": results,
        "filtered_results": filtered,
        "tracks": fetched["tracks"],
        "years": fetched["years"],
        "overall": calculate_aggregated_stats(filtered),
        "by_track_type": by_track_type,
        "form_status": form_status(results),
        "momentum": momentum_trend(results),
    }


@app.get("/tracks", response_model=List[Track], tags=["Schedule"])
def get_tracks(repository: NascarRepository = Depends(get_repository)) -> List[Dict[str, Any]]:
    return repository.get_tracks()


@app.get("/races", response_model=List[Race], tags=["Schedule"])
def get_races(repository: NascarRepository = Depends(get_repository)) -> List[Dict[str, Any]]:
    """The race schedule ordered by date."""
    return repository.get_races()


@app.get("/races/upcoming", response_model=Race, tags=["Schedule"])
def get_upcoming_race(repository: NascarRepository = Depends(get_repository)) -> Dict[str, Any]:
    race = repository.get_upcoming_race()
    if race is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No upcoming race.")
    return race


@app.get("/races/{race_id}/odds", response_model=OddsBoard, tags=["Odds"])
def get_race_odds(
    race_id: str,
    market: str = DEFAULT_MARKET,
    q: Optional[str] = None,
    repository: NascarRepository = Depends(get_repository),
) -> Dict[str, Any]:
    """
    Odds board for a race: one snapshot per active driver, favourites first,
    drivers without odds last.
    """
    if market not in MARKETS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown market '{market}'.")

    snapshots = sort_odds_snapshots(repository.get_current_odds_with_drivers(race_id, market))
    snapshots = search_rows(snapshots, q)

    return {
        "race_id": race_id,
        "market": market,
        "drivers_with_odds": count_with_odds(snapshots),
        "snapshots": snapshots,
    }


@app.get("/stats", response_model=StatsPage, tags=["Stats"])
def get_stats_page(repository: NascarRepository = Depends(get_repository)) -> Dict[str, Any]:
    """Everything the stats grid needs, fetched concurrently."""
    fetched = fetch_parallel({
        "drivers": (repository.get_drivers, []),
        "results": (repository.get_all_results, []),
        "tracks": (repository.get_tracks, []),
        "years": (repository.get_result_years, []),
        "upcoming_track": (repository.get_upcoming_race_track, dict(DEFAULT_TRACK)),
    })
    return fetched


@app.get("/stats/drivers", response_model=List[DriverStatsRow], tags=["Stats"])
def get_driver_stats_grid(
    years: List[int] = Query(default=[]),
    track_type: Optional[str] = None,
    track_id: List[str] = Query(default=[]),
    race_range: int = Query(default=10, ge=0),
    q: Optional[str] = None,
    sort: str = "avg_finish",
    direction: Optional[str] = Query(default=None, pattern="^(asc|desc)$"),
    repository: NascarRepository = Depends(get_repository),
) -> List[Dict[str, Any]]:
    """
    Aggregated stats per driver under the grid filters, searched and sorted.
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
        track_ids=track_id,
        race_range=race_range,
        upcoming_track_id=fetched["upcoming_track"]["track_id"],
    )
    rows = search_rows(rows, q)
    return sort_stats_rows(rows, sort, direction)
