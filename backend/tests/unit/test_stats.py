import pytest
import datetime as dt
from trackodds.core.stats import (
    build_driver_stats_rows,
    calculate_aggregated_stats,
    compute_at_track_stats,
    compute_overall_stats,
    compute_track_type_stats,
    default_sort_direction,
    empty_aggregated_stats,
    filter_results,
    form_status,
    is_dnf,
    momentum_trend,
    recent_form,
    search_rows,
    sort_stats_rows,
)


def _series(finishes, start=dt.date(2025, 6, 1), **extra):
    """Weekly results, newest first, for a single driver."""
    results = []
    for i, finish in enumerate(finishes):
        date = start - dt.timedelta(days=7 * i)
        result = {
            "driver_id": "kyle-larson",
            "track_id": "kansas",
            "track_name": "Kansas",
            "track_type": "intermediate",
            "date": date,
            "year": date.year,
            "start_pos": 10,
            "finish_pos": finish,
            "laps_led": 0,
            "laps_completed": 267,
            "driver_rating": 90.0,
            "status": "running",
        }
        result.update(extra)
        results.append(result)
    return results

# --- 1. AGGREGATED STATS ---

def test_empty_results_yield_zeros():
    stats = calculate_aggregated_stats([])
    assert stats == empty_aggregated_stats()
    assert all(value == 0 for value in stats.values())


def test_percentages_one_decimal():
    stats = calculate_aggregated_stats(_series([1, 5, 10]))
    assert stats["races"] == 3
    assert stats["wins"] == 1
    assert stats["win_pct"] == 33.3
    assert stats["top5_pct"] == 66.7
    assert stats["top10_pct"] == 100.0
    assert stats["avg_finish"] == 5.3


def test_twelfth_place_is_outside_top_ten():
    stats = calculate_aggregated_stats(_series([1, 5, 12]))
    assert stats["top10"] == 2
    assert stats["top10_pct"] == 66.7
    assert stats["avg_finish"] == 6.0


def test_counts_are_nested():
    stats = calculate_aggregated_stats(_series([1, 2, 7, 9, 15, 22, 40]))
    assert stats["wins"] <= stats["top5"] <= stats["top10"] <= stats["races"]


def test_missing_positions_do_not_count_as_top_finishes():
    stats = calculate_aggregated_stats(_series([0, 0]))
    assert stats["top5"] == 0
    assert stats["top10"] == 0


# --- 2. DNF RULE ---

@pytest.mark.parametrize("finish, status, expected", [
    (12, "running", False),
    (35, "running", False),
    (36, "running", True),
    (20, "Accident", True),
    (20, "ENGINE", True),
    (20, None, False),
    (20, "Finished", False),
])
def test_is_dnf(finish, status, expected):
    assert is_dnf({"finish_pos": finish, "status": status}) is expected


# --- 3. PROFILE STATS ---

def test_compute_overall_stats_totals_and_means():
    results = _series([1, 3], laps_led=50, driver_rating=120.0)
    overall = compute_overall_stats(results, "kyle-larson")
    assert overall["races"] == 2
    assert overall["avg_finish"] == pytest.approx(2.0)
    assert overall["laps_led"] == 100
    assert overall["laps_completed"] == 534
    assert overall["driver_rating"] == pytest.approx(120.0)


def test_compute_track_type_stats(sample_results):
    larson = [r for r in sample_results if r["driver_id"] == "kyle-larson"]
    hamlin = [r for r in sample_results if r["driver_id"] == "denny-hamlin"]

    short = compute_track_type_stats(larson, "short")
    assert short["races"] == 1
    assert short["top5"] == 1
    assert short["dnf_rate"] == 0.0

    ss = compute_track_type_stats(hamlin, "superspeedway")
    assert ss["dnf_rate"] == 100.0

    road = compute_track_type_stats(larson, "road")
    assert road["races"] == 0
    assert road["avg_finish"] == 0.0


def test_compute_at_track_stats(sample_results):
    assert compute_at_track_stats(sample_results, "daytona", "kyle-larson")["races"] == 2
    assert compute_at_track_stats(sample_results, "sonoma", "kyle-larson") is None


def test_recent_form_uses_newest_results():
    results = list(reversed(_series([2, 4, 6, 8, 10, 30])))  # oldest first on purpose
    form = recent_form(results)
    assert form["last_race"]["finish"] == 2
    assert form["last5_avg"] == pytest.approx(6.0)


def test_recent_form_without_results():
    form = recent_form([])
    assert form["last_race"] == {"finish": 0, "laps": 0, "track": ""}
    assert form["last5_avg"] == 0.0


# --- 4. FORM & MOMENTUM ---

@pytest.mark.parametrize("finishes, status, label", [
    ([2, 4, 30], "hot", "Top 5 in 2/3"),
    ([8, 9, 30], "warm", "Top 10 in 2/3"),
    ([28, 30, 32], "cold", "Avg 30th last 3"),
    ([15, 18, 21], "neutral", "Avg 18th last 3"),
])
def test_form_status(finishes, status, label):
    assert form_status(_series(finishes)) == {"status": status, "label": label}


def test_form_status_needs_three_races():
    assert form_status(_series([1, 1])) is None


@pytest.mark.parametrize("finishes, expected", [
    # newest first
    ([2, 3, 4, 20, 22, 25], "improving"),
    ([25, 22, 20, 4, 3, 2], "declining"),
    ([10, 11, 10, 11], "neutral"),
    ([1, 30], "neutral"),
])
def test_momentum_trend(finishes, expected):
    assert momentum_trend(_series(finishes)) == expected


# --- 5. STATS GRID ---

def test_filter_results(sample_results):
    assert len(filter_results(sample_results, years=[2024])) == 2
    assert len(filter_results(sample_results, track_type="superspeedway")) == 2
    assert len(filter_results(sample_results, track_type="all")) == 5
    assert len(filter_results(sample_results, track_ids=["martinsville", "kansas"])) == 3


def test_build_driver_stats_rows_race_range(sample_drivers, result_factory):
    results = [result_factory("kyle-larson", f, dt.date(2025, 6, 1) - dt.timedelta(days=7 * i))
               for i, f in enumerate([1, 2, 3, 30, 30, 30])]

    rows = build_driver_stats_rows(sample_drivers, results, race_range=3)
    larson, hamlin = rows
    assert larson["total_races"] == 3
    assert larson["stats"]["avg_finish"] == 2.0
    assert len(larson["recent_races"]) == 6
    assert hamlin["stats"]["races"] == 0

    all_rows = build_driver_stats_rows(sample_drivers, results, race_range=0)
    assert all_rows[0]["total_races"] == 6


def test_build_driver_stats_rows_track_history(sample_drivers, sample_results):
    rows = build_driver_stats_rows(sample_drivers, sample_results, years=[2025],
                                   upcoming_track_id="daytona")
    # History at the upcoming track ignores the grid filters
    assert [r["finish_pos"] for r in rows[0]["track_history"]] == [12]
    assert rows[0]["stats"]["races"] == 2


def _grid_rows():
    return [
        {"driver": {"name": "Kyle Larson", "number": "5", "team": "Hendrick Motorsports"},
         "stats": {"avg_finish": 8.2, "avg_rating": 110.0, "races": 10}},
        {"driver": {"name": "Denny Hamlin", "number": "11", "team": "Joe Gibbs Racing"},
         "stats": {"avg_finish": 9.5, "avg_rating": 104.0, "races": 10}},
        {"driver": {"name": "Zane Smith", "number": "38", "team": "Front Row Motorsports"},
         "stats": {"avg_finish": 0.0, "avg_rating": 0.0, "races": 0}},
    ]


def test_sort_rows_missing_finish_goes_last():
    ordered = [r["driver"]["name"] for r in sort_stats_rows(_grid_rows(), "avg_finish")]
    assert ordered == ["Kyle Larson", "Denny Hamlin", "Zane Smith"]


def test_sort_rows_rating_defaults_descending():
    ordered = [r["driver"]["name"] for r in sort_stats_rows(_grid_rows(), "avg_rating")]
    assert ordered == ["Kyle Larson", "Denny Hamlin", "Zane Smith"]
    reverse = [r["driver"]["name"] for r in sort_stats_rows(_grid_rows(), "avg_rating", "asc")]
    assert reverse[0] == "Zane Smith"


def test_sort_rows_by_name():
    ordered = [r["driver"]["name"] for r in sort_stats_rows(_grid_rows(), "name")]
    assert ordered == ["Denny Hamlin", "Kyle Larson", "Zane Smith"]


@pytest.mark.parametrize("field, direction", [
    ("name", "asc"), ("avg_finish", "asc"), ("avg_start", "asc"),
    ("avg_rating", "desc"), ("avg_laps_led", "desc"), ("races", "desc"),
])
def test_default_sort_direction(field, direction):
    assert default_sort_direction(field) == direction


@pytest.mark.parametrize("query, expected", [
    ("larson", ["Kyle Larson"]),
    ("GIBBS", ["Denny Hamlin"]),
    ("38", ["Zane Smith"]),
    ("motorsports", ["Kyle Larson", "Zane Smith"]),
    ("", ["Kyle Larson", "Denny Hamlin", "Zane Smith"]),
])
def test_search_rows(query, expected):
    assert [r["driver"]["name"] for r in search_rows(_grid_rows(), query)] == expected
