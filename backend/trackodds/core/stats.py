"""
Aggregated driver statistics.
Pure reductions over lists of normalized race-result dicts (see NascarRepository._normalize_result).
"""
import datetime as dt
from typing import Any, Dict, Iterable, List, Optional, Sequence

from trackodds.core.config import DNF_FINISH_THRESHOLD

RUNNING_STATUSES = {"", "running", "finished", "active"}

SORT_FIELDS = ["name", "avg_finish", "avg_start", "avg_rating", "avg_laps_led", "races"]
DESCENDING_FIELDS = {"avg_rating", "avg_laps_led", "races"}

# Placeholder used when sorting drivers without data, so they end up last
MISSING_POSITION = 99


def _num(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _finish(result: Dict[str, Any]) -> int:
    return int(_num(result.get("finish_pos")))


def _mean(total: float, count: int) -> float:
    return total / count if count else 0.0


def is_dnf(result: Dict[str, Any]) -> bool:
    """
    A result counts as a DNF when its status is anything but running,
    or when the finishing position is beyond DNF_FINISH_THRESHOLD.
    """
    status = str(result.get("status") or "").strip().lower()
    if status not in RUNNING_STATUSES:
        return True
    return _finish(result) > DNF_FINISH_THRESHOLD


def sort_by_date(results: Iterable[Dict[str, Any]], newest_first: bool = True) -> List[Dict[str, Any]]:
    return sorted(
        results,
        key=lambda r: r.get("date") or dt.date.min,
        reverse=newest_first,
    )


def empty_aggregated_stats() -> Dict[str, Any]:
    return {
        "races": 0,
        "wins": 0,
        "top5": 0,
        "top10": 0,
        "dnfs": 0,
        "avg_finish": 0.0,
        "avg_start": 0.0,
        "avg_rating": 0.0,
        "avg_laps_led": 0.0,
        "win_pct": 0.0,
        "top5_pct": 0.0,
        "top10_pct": 0.0,
    }


def calculate_aggregated_stats(results: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Summary statistics for a slice of race results.

    Averages and percentages are unweighted and rounded to one decimal.
    An empty slice yields all-zero fields.
    """
    races = len(results)
    if races == 0:
        return empty_aggregated_stats()

    wins = sum(1 for r in results if _finish(r) == 1)
    top5 = sum(1 for r in results if 0 < _finish(r) <= 5)
    top10 = sum(1 for r in results if 0 < _finish(r) <= 10)

    return {
        "races": races,
        "wins": wins,
        "top5": top5,
        "top10": top10,
        "dnfs": sum(1 for r in results if is_dnf(r)),
        "avg_finish": round(_mean(sum(_num(r.get("finish_pos")) for r in results), races), 1),
        "avg_start": round(_mean(sum(_num(r.get("start_pos")) for r in results), races), 1),
        "avg_rating": round(_mean(sum(_num(r.get("driver_rating")) for r in results), races), 1),
        "avg_laps_led": round(_mean(sum(_num(r.get("laps_led")) for r in results), races), 1),
        "win_pct": round(wins / races * 100, 1),
        "top5_pct": round(top5 / races * 100, 1),
        "top10_pct": round(top10 / races * 100, 1),
    }


def compute_overall_stats(results: Sequence[Dict[str, Any]], driver_id: str) -> Dict[str, Any]:
    """Career totals and means for a driver."""
    races = len(results)
    if races == 0:
        return {
            "driver_id": driver_id,
            "races": 0,
            "wins": 0,
            "top5": 0,
            "top10": 0,
            "avg_finish": 0.0,
            "avg_start": 0.0,
            "laps_led": 0,
            "driver_rating": 0.0,
            "laps_completed": 0,
            "dnfs": 0,
        }

    return {
        "driver_id": driver_id,
        "races": races,
        "wins": sum(1 for r in results if _finish(r) == 1),
        "top5": sum(1 for r in results if 0 < _finish(r) <= 5),
        "top10": sum(1 for r in results if 0 < _finish(r) <= 10),
        "avg_finish": _mean(sum(_num(r.get("finish_pos")) for r in results), races),
        "avg_start": _mean(sum(_num(r.get("start_pos")) for r in results), races),
        "laps_led": int(sum(_num(r.get("laps_led")) for r in results)),
        "driver_rating": _mean(sum(_num(r.get("driver_rating")) for r in results), races),
        "laps_completed": int(sum(_num(r.get("laps_completed")) for r in results)),
        "dnfs": sum(1 for r in results if is_dnf(r)),
    }


def compute_track_type_stats(results: Sequence[Dict[str, Any]], track_type: str) -> Dict[str, Any]:
    """Aggregates over the results run on one track type; dnf_rate is a percentage."""
    filtered = [r for r in results if r.get("track_type") == track_type]
    races = len(filtered)
    if races == 0:
        return {
            "track_type": track_type,
            "races": 0,
            "avg_finish": 0.0,
            "avg_start": 0.0,
            "top5": 0,
            "top10": 0,
            "wins": 0,
            "laps_led": 0,
            "driver_rating": 0.0,
            "dnf_rate": 0.0,
        }

    dnfs = sum(1 for r in filtered if is_dnf(r))
    return {
        "track_type": track_type,
        "races": races,
        "avg_finish": _mean(sum(_num(r.get("finish_pos")) for r in filtered), races),
        "avg_start": _mean(sum(_num(r.get("start_pos")) for r in filtered), races),
        "top5": sum(1 for r in filtered if 0 < _finish(r) <= 5),
        "top10": sum(1 for r in filtered if 0 < _finish(r) <= 10),
        "wins": sum(1 for r in filtered if _finish(r) == 1),
        "laps_led": int(sum(_num(r.get("laps_led")) for r in filtered)),
        "driver_rating": _mean(sum(_num(r.get("driver_rating")) for r in filtered), races),
        "dnf_rate": dnfs / races * 100,
    }


def compute_at_track_stats(
    results: Sequence[Dict[str, Any]], track_id: str, driver_id: str
) -> Optional[Dict[str, Any]]:
    track_results = [r for r in results if r.get("track_id") == track_id]
    if not track_results:
        return None
    return compute_overall_stats(track_results, driver_id)


def recent_form(results: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Last race and the average finish of the five most recent races."""
    ordered = sort_by_date(results)
    last_race = ordered[0] if ordered else {}
    last5 = ordered[:5]
    return {
        "last_race": {
            "finish": _finish(last_race) if last_race else 0,
            "laps": int(_num(last_race.get("laps_completed"))),
            "track": last_race.get("track_name") or "",
        },
        "last5_avg": _mean(sum(_num(r.get("finish_pos")) for r in last5), len(last5)),
    }


def form_status(results: Sequence[Dict[str, Any]]) -> Optional[Dict[str, str]]:
    """
    Hot/warm/cold/neutral badge from the three most recent results.
    Returns None with fewer than three races.
    """
    last3 = sort_by_date(results)[:3]
    if len(last3) < 3:
        return None

    avg_last3 = sum(_finish(r) for r in last3) / 3
    top5_count = sum(1 for r in last3 if 0 < _finish(r) <= 5)
    top10_count = sum(1 for r in last3 if 0 < _finish(r) <= 10)

    if top5_count >= 2:
        return {"status": "hot", "label": f"Top 5 in {top5_count}/3"}
    if top10_count >= 2:
        return {"status": "warm", "label": f"Top 10 in {top10_count}/3"}
    if avg_last3 > 25:
        return {"status": "cold", "label": f"Avg {avg_last3:.0f}th last 3"}
    return {"status": "neutral", "label": f"Avg {avg_last3:.0f}th last 3"}


def momentum_trend(results: Sequence[Dict[str, Any]]) -> str:
    """
    Compares the older and newer halves of the last ten races.
    A swing of more than two positions in average finish is a trend.
    """
    last10 = list(reversed(sort_by_date(results)[:10]))
    if len(last10) < 3:
        return "neutral"

    half = len(last10) // 2
    first_half, second_half = last10[:half], last10[half:]
    first_avg = sum(_finish(r) for r in first_half) / len(first_half)
    second_avg = sum(_finish(r) for r in second_half) / len(second_half)

    if second_avg < first_avg - 2:
        return "improving"
    if second_avg > first_avg + 2:
        return "declining"
    return "neutral"


def filter_results(
    results: Iterable[Dict[str, Any]],
    years: Optional[Sequence[int]] = None,
    track_type: Optional[str] = None,
    track_ids: Optional[Sequence[str]] = None,
) -> List[Dict[str, Any]]:
    """Applies the year / track type / track filters; empty or 'all' disables a filter."""
    filtered = []
    for r in results:
        if years and r.get("year") not in years:
            continue
        if track_type and track_type != "all" and r.get("track_type") != track_type:
            continue
        if track_ids and r.get("track_id") not in track_ids:
            continue
        filtered.append(r)
    return filtered


def build_driver_stats_rows(
    drivers: Sequence[Dict[str, Any]],
    results: Sequence[Dict[str, Any]],
    years: Optional[Sequence[int]] = None,
    track_type: Optional[str] = None,
    track_ids: Optional[Sequence[str]] = None,
    race_range: int = 10,
    upcoming_track_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    One row per driver for the stats grid.

    Stats are computed over the `race_range` most recent filtered results (0 = all).
    Each row also carries the ten most recent filtered races and the last five
    results at the upcoming track.
    """
    by_driver: Dict[Any, List[Dict[str, Any]]] = {}
    for r in results:
        by_driver.setdefault(r.get("driver_id"), []).append(r)

    rows = []
    for driver in drivers:
        driver_results = by_driver.get(driver.get("id"), [])
        filtered = sort_by_date(filter_results(driver_results, years, track_type, track_ids))
        limited = filtered[:race_range] if race_range > 0 else filtered

        track_history = []
        if upcoming_track_id:
            track_history = sort_by_date(
                r for r in driver_results if r.get("track_id") == upcoming_track_id
            )[:5]

        rows.append({
            "driver": driver,
            "stats": calculate_aggregated_stats(limited),
            "recent_races": filtered[:10],
            "track_history": track_history,
            "total_races": len(limited),
        })
    return rows


def search_rows(rows: Sequence[Dict[str, Any]], query: Optional[str]) -> List[Dict[str, Any]]:
    """Case-insensitive match on driver name, car number or team."""
    if not query:
        return list(rows)
    needle = query.strip().lower()
    matched = []
    for row in rows:
        driver = row.get("driver", row)
        if (
            needle in str(driver.get("name") or driver.get("driver_name") or "").lower()
            or needle in str(driver.get("number") or driver.get("driver_number") or "")
            or needle in str(driver.get("team") or "").lower()
        ):
            matched.append(row)
    return matched


def default_sort_direction(field: str) -> str:
    """Lower is better for positions and names; higher is better for rating, laps led and volume."""
    return "desc" if field in DESCENDING_FIELDS else "asc"


def sort_stats_rows(
    rows: Sequence[Dict[str, Any]], field: str = "avg_finish", direction: Optional[str] = None
) -> List[Dict[str, Any]]:
    if field not in SORT_FIELDS:
        field = "avg_finish"
    direction = direction or default_sort_direction(field)
    reverse = direction == "desc"

    if field == "name":
        return sorted(rows, key=lambda row: str(row["driver"].get("name") or "").lower(), reverse=reverse)

    missing = MISSING_POSITION if field in ("avg_finish", "avg_start") else 0
    return sorted(rows, key=lambda row: row["stats"].get(field) or missing, reverse=reverse)
