"""
Data Access Layer.
Handles all reads against the hosted store for drivers, tracks, races, odds and results.
Every read degrades to an empty or default value on failure; nothing here writes.
"""
import datetime as dt
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple

from trackodds.core.config import (
    DEFAULT_MARKET,
    DEFAULT_RACE_ID,
    DEFAULT_TRACK,
    MAX_WORKERS,
    RESULTS_SINCE,
    STATS_TRACK_TYPES,
)
from trackodds.core.database import SupabaseClient, DataAccessError
from trackodds.core.odds import build_odds_snapshot
from trackodds.core.stats import (
    compute_at_track_stats,
    compute_overall_stats,
    compute_track_type_stats,
    form_status,
    momentum_trend,
    recent_form,
    sort_by_date,
)
from trackodds.core.tracks import classify_track_type, track_id_from_name

logger = logging.getLogger(__name__)

RESULT_SELECT = "*,race:races(id,name,scheduled_date,track:tracks(id,name,type,length))"
RACE_SELECT = "*,track:tracks(*)"


def _first(row: Dict[str, Any], *keys: str) -> Any:
    """Returns the first non-null column among several historical names."""
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _parse_datetime(value: Any) -> Optional[dt.datetime]:
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day)
    if not value:
        return None
    text = str(value).strip().replace("Z", "+00:00")
    try:
        return dt.datetime.fromisoformat(text)
    except ValueError:
        try:
            return dt.datetime.strptime(text[:10], "%Y-%m-%d")
        except ValueError:
            logger.warning(f"Unparseable date value: {value!r}")
            return None


def slugify(name: str) -> str:
    return "-".join(str(name).lower().split())


def name_from_slug(slug: str) -> str:
    return " ".join(word.capitalize() for word in slug.split("-") if word)


def fetch_parallel(calls: Dict[str, Tuple[Callable[[], Any], Any]]) -> Dict[str, Any]:
    """
    Issues independent reads concurrently.

    Args:
        calls: name -> (zero-argument callable, default used if the callable raises).

    Returns:
        Dict[str, Any]: name -> result. One failing read never affects the others.
    """
    results: Dict[str, Any] = {}
    with ThreadPoolExecutor(max_workers=MAX_WORKERS) as executor:
        futures = {name: executor.submit(func) for name, (func, _) in calls.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except Exception as exc:
                logger.error(f"Parallel read '{name}' failed: {exc}")
                results[name] = calls[name][1]
    return results


class NascarRepository:
    """
    Repository for reading NASCAR reference data, odds and results from the hosted store.
    """

    def __init__(self) -> None:
        self.client = SupabaseClient()

    # --- Normalization ---

    @staticmethod
    def _normalize_driver(row: Dict[str, Any]) -> Dict[str, Any]:
        name = str(row.get("name") or "").strip()
        parts = name.split(" ")
        return {
            "id": str(row.get("id")),
            "name": name,
            "first_name": parts[0] if parts else "",
            "last_name": " ".join(parts[1:]),
            "number": str(row.get("number") or ""),
            "team": row.get("team") or "",
            "manufacturer": row.get("manufacturer") or "",
            "is_active": bool(row.get("is_active", True)),
            "slug": slugify(name),
        }

    @staticmethod
    def _normalize_track(row: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        row = row or {}
        name = str(row.get("name") or "").strip()
        track_id = row.get("id") or (track_id_from_name(name) if name else "")
        length = row.get("length")
        return {
            "id": str(track_id),
            "name": name,
            "type": classify_track_type(row.get("type"), name),
            "length": _to_float(length) if length is not None else None,
            "location": row.get("location"),
        }

    def _normalize_race(self, row: Dict[str, Any]) -> Dict[str, Any]:
        track = self._normalize_track(row.get("track"))
        if not track["id"] and row.get("track_id"):
            track["id"] = str(row["track_id"])
        return {
            "id": str(row.get("id")),
            "name": row.get("name") or "",
            "scheduled_date": _parse_datetime(row.get("scheduled_date")),
            "track_id": track["id"] or None,
            "track": track,
        }

    def _normalize_result(self, row: Dict[str, Any]) -> Dict[str, Any]:
        race = row.get("race") or {}
        track = self._normalize_track(race.get("track"))
        scheduled = _parse_datetime(race.get("scheduled_date"))
        race_date = scheduled.date() if scheduled else None
        return {
            "id": str(_first(row, "id") or f"{row.get('driver_id')}-{row.get('race_id')}"),
            "driver_id": str(row.get("driver_id")),
            "race_id": str(_first(row, "race_id") or race.get("id")),
            "race_name": race.get("name") or "",
            "track_id": track["id"],
            "track_name": track["name"],
            "track_type": track["type"],
            "date": race_date,
            "year": race_date.year if race_date else None,
            "start_pos": _to_int(_first(row, "start_pos", "start_position")),
            "finish_pos": _to_int(_first(row, "finish_pos", "finish_position")),
            "laps_led": _to_int(row.get("laps_led")),
            "laps_completed": _to_int(row.get("laps_completed")),
            "driver_rating": _to_float(row.get("driver_rating")),
            "status": str(row.get("status") or ""),
        }

    # --- Drivers ---

    def get_drivers(self) -> List[Dict[str, Any]]:
        """
        Retrieves all active drivers ordered by name.
        """
        try:
            rows = self.client.select("drivers", {"is_active": "eq.true", "order": "name.asc"})
        except DataAccessError as exc:
            logger.error(f"Error fetching drivers: {exc}")
            return []
        return [self._normalize_driver(row) for row in rows]

    def get_driver(self, driver_id: str) -> Optional[Dict[str, Any]]:
        try:
            rows = self.client.select("drivers", {"id": f"eq.{driver_id}", "limit": 1})
        except DataAccessError as exc:
            logger.error(f"Error fetching driver {driver_id}: {exc}")
            return None
        return self._normalize_driver(rows[0]) if rows else None

    def get_driver_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        """
        Looks a driver up by URL slug ('kyle-larson' -> 'Kyle Larson', case-insensitive).
        """
        driver_name = name_from_slug(slug)
        try:
            rows = self.client.select("drivers", {"name": f"ilike.{driver_name}", "limit": 1})
        except DataAccessError as exc:
            logger.error(f"Error fetching driver by slug {slug}: {exc}")
            return None
        return self._normalize_driver(rows[0]) if rows else None

    # --- Tracks & Races ---

    def get_tracks(self) -> List[Dict[str, Any]]:
        try:
            rows = self.client.select("tracks", {"order": "name.asc"})
        except DataAccessError as exc:
            logger.error(f"Error fetching tracks: {exc}")
            return []
        return [self._normalize_track(row) for row in rows]

    def get_races(self) -> List[Dict[str, Any]]:
        """
        Retrieves the race schedule, ordered by date, with the track embedded.
        """
        try:
            rows = self.client.select("races", {"select": RACE_SELECT, "order": "scheduled_date.asc"})
        except DataAccessError as exc:
            logger.error(f"Error fetching races: {exc}")
            return []
        return [self._normalize_race(row) for row in rows]

    def get_upcoming_race(self) -> Optional[Dict[str, Any]]:
        now = dt.datetime.now(dt.timezone.utc).isoformat()
        try:
            rows = self.client.select(
                "races",
                {
                    "select": RACE_SELECT,
                    "scheduled_date": f"gte.{now}",
                    "order": "scheduled_date.asc",
                    "limit": 1,
                },
            )
        except DataAccessError as exc:
            logger.error(f"Error fetching upcoming race: {exc}")
            return None
        return self._normalize_race(rows[0]) if rows else None

    def get_upcoming_race_track(self) -> Dict[str, str]:
        """
        Track of the next race; falls back to Daytona when the schedule is unavailable.
        """
        race = self.get_upcoming_race()
        if not race or not race["track"]["name"]:
            return dict(DEFAULT_TRACK)
        return {
            "track_id": race["track"]["id"],
            "track_name": race["track"]["name"],
            "track_type": race["track"]["type"],
        }

    # --- Odds ---

    def get_odds_rows(self, race_id: str, driver_id: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"race_id": f"eq.{race_id}", "order": "created_at.desc"}
        if driver_id:
            params["driver_id"] = f"eq.{driver_id}"
        try:
            return self.client.select("odds", params)
        except DataAccessError as exc:
            logger.error(f"Error fetching odds for race {race_id}: {exc}")
            return []

    def get_current_odds_with_drivers(self, race_id: str, market: str = DEFAULT_MARKET) -> List[Dict[str, Any]]:
        """
        Builds one odds snapshot per active driver for a race.

        Drivers without quotes are kept with the no-odds sentinel; if the odds
        query fails every driver is returned that way.
        """
        drivers = self.get_drivers()
        if not drivers:
            return []

        odds_rows = self.get_odds_rows(race_id)
        return [build_odds_snapshot(driver, odds_rows, market) for driver in drivers]

    # --- Results ---

    def _select_results(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        query = {"select": RESULT_SELECT}
        query.update(params)
        rows = self.client.select("results", query)
        since = _parse_datetime(RESULTS_SINCE)
        normalized = [self._normalize_result(row) for row in rows]
        if since:
            normalized = [r for r in normalized if r["date"] is None or r["date"] >= since.date()]
        return sort_by_date(normalized)

    def get_all_results(self) -> List[Dict[str, Any]]:
        try:
            return self._select_results({})
        except DataAccessError as exc:
            logger.error(f"Error fetching results: {exc}")
            return []

    def get_driver_results(self, driver_id: str, driver_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Results for one driver, newest first.
        When nothing matches the id, retries on the driver_name column if a name is given.
        """
        try:
            results = self._select_results({"driver_id": f"eq.{driver_id}"})
            if not results and driver_name:
                logger.info(f"No results by id for {driver_id}, matching on name '{driver_name}'")
                results = self._select_results({"driver_name": f"ilike.{driver_name}"})
            return results
        except DataAccessError as exc:
            logger.error(f"Error fetching results for driver {driver_id}: {exc}")
            return []

    def get_result_years(self) -> List[int]:
        """Distinct seasons with results, newest first."""
        try:
            rows = self.client.select("results", {"select": "race:races(scheduled_date)"})
        except DataAccessError as exc:
            logger.error(f"Error fetching result years: {exc}")
            return []

        years = set()
        for row in rows:
            scheduled = _parse_datetime((row.get("race") or {}).get("scheduled_date"))
            if scheduled:
                years.add(scheduled.year)
        return sorted(years, reverse=True)

    # --- Profile ---

    def get_driver_profile(self, slug: str, race_id: str = DEFAULT_RACE_ID) -> Optional[Dict[str, Any]]:
        """
        Assembles a driver profile: current best odds, career stats,
        stats per track type, stats at the upcoming track and recent form.
        """
        driver = self.get_driver_by_slug(slug)
        if driver is None:
            return None

        fetched = fetch_parallel({
            "odds": (lambda: self.get_odds_rows(race_id, driver["id"]), []),
            "results": (lambda: self.get_driver_results(driver["id"], driver["name"]), []),
            "track": (self.get_upcoming_race_track, dict(DEFAULT_TRACK)),
        })
        results = fetched["results"]
        snapshot = build_odds_snapshot(driver, fetched["odds"])

        return {
            **driver,
            "current_odds": snapshot["best_odds"],
            "best_book": snapshot["best_book"],
            "stats": {
                "overall": compute_overall_stats(results, driver["id"]),
                "by_track_type": [compute_track_type_stats(results, t) for t in STATS_TRACK_TYPES],
                "at_current_track": compute_at_track_stats(results, fetched["track"]["track_id"], driver["id"]),
            },
            "recent_form": recent_form(results),
            "form_status": form_status(results),
            "momentum": momentum_trend(results),
            "current_track": fetched["track"],
        }
