import pytest
import streamlit as st
from unittest.mock import patch

# --- DATA FIXTURES ---
# We return Lists of Dicts (JSON style) because that is what the API Client
# usually returns. The Streamlit App typically converts this to a DataFrame.

@pytest.fixture
def mock_races_data():
    """Returns a sample List[Dict] mimicking the /races API response."""
    return [
        {
            "id": "daytona-500-2026",
            "name": "Daytona 500",
            "scheduled_date": "2026-02-15T19:30:00+00:00",
            "track_id": "daytona",
            "track": {"id": "daytona", "name": "Daytona International Speedway",
                      "type": "superspeedway", "length": 2.5, "location": "Daytona Beach, FL"},
        },
        {
            "id": "martinsville-2026",
            "name": "Cook Out 400",
            "scheduled_date": "2026-10-25T18:00:00+00:00",
            "track_id": "martinsville",
            "track": {"id": "martinsville", "name": "Martinsville Speedway",
                      "type": "short", "length": 0.526, "location": None},
        },
    ]

@pytest.fixture
def mock_odds_board():
    """Returns a sample Dict mimicking the /races/{race_id}/odds API response."""
    return {
        "race_id": "daytona-500-2026",
        "market": "race_winner",
        "drivers_with_odds": 2,
        "snapshots": [
            {"driver_id": "kyle-larson", "driver_name": "Kyle Larson", "driver_number": "5",
             "team": "Hendrick Motorsports", "manufacturer": "Chevrolet",
             "odds": {"draftkings": 450, "fanduel": 500}, "best_odds": 500, "best_book": "fanduel",
             "implied_probability": 100 / 600},
            {"driver_id": "denny-hamlin", "driver_name": "Denny Hamlin", "driver_number": "11",
             "team": "Joe Gibbs Racing", "manufacturer": "Toyota",
             "odds": {"draftkings": 700}, "best_odds": 700, "best_book": "draftkings",
             "implied_probability": 0.125},
            {"driver_id": "zane-smith", "driver_name": "Zane Smith", "driver_number": "38",
             "team": "Front Row Motorsports", "manufacturer": "Ford",
             "odds": {}, "best_odds": 0, "best_book": None, "implied_probability": None},
        ],
    }

def _result(finish, date, track_id="kansas", track_type="intermediate"):
    return {
        "id": f"kyle-larson-{date}", "driver_id": "kyle-larson", "race_id": f"race-{date}",
        "race_name": "Test 400", "track_id": track_id, "track_name": track_id.title(),
        "track_type": track_type, "date": date, "year": int(date[:4]), "start_pos": 4,
        "finish_pos": finish, "laps_led": 12, "laps_completed": 267, "driver_rating": 110.5,
        "status": "running",
    }

@pytest.fixture
def mock_stats_rows():
    """Returns a sample List[Dict] mimicking the /stats/drivers API response."""
    return [
        {
            "driver": {"id": "kyle-larson", "name": "Kyle Larson", "number": "5",
                       "team": "Hendrick Motorsports", "manufacturer": "Chevrolet", "slug": "kyle-larson"},
            "stats": {"races": 3, "wins": 1, "top5": 2, "top10": 2, "dnfs": 0, "avg_finish": 6.0,
                      "avg_start": 4.0, "avg_rating": 110.5, "avg_laps_led": 12.0,
                      "win_pct": 33.3, "top5_pct": 66.7, "top10_pct": 66.7},
            "recent_races": [_result(1, "2025-05-11"), _result(5, "2025-04-06"), _result(12, "2024-02-19")],
            "track_history": [_result(12, "2024-02-19", "daytona", "superspeedway")],
            "total_races": 3,
        },
    ]

@pytest.fixture
def mock_dashboard():
    """Returns a sample Dict mimicking the /drivers/{driver_id} API response."""
    empty = {"races": 0, "wins": 0, "top5": 0, "top10": 0, "dnfs": 0, "avg_finish": 0.0,
             "avg_start": 0.0, "avg_rating": 0.0, "avg_laps_led": 0.0,
             "win_pct": 0.0, "top5_pct": 0.0, "top10_pct": 0.0}
    return {
        "driver": {"id": "kyle-larson", "name": "Kyle Larson", "number": "5",
                   "team": "Hendrick Motorsports", "manufacturer": "Chevrolet", "slug": "kyle-larson"},
        "results": [_result(1, "2025-05-11"), _result(5, "2025-04-06"),
                    _result(12, "2024-02-19", "daytona", "superspeedway")],
        "filtered_results": [_result(1, "2025-05-11"), _result(5, "2025-04-06"),
                             _result(12, "2024-02-19", "daytona", "superspeedway")],
        "tracks": [],
        "years": [2025, 2024],
        "overall": dict(empty, races=3, wins=1, top5=2, top10=2, avg_finish=6.0,
                        win_pct=33.3, top5_pct=66.7, top10_pct=66.7),
        "by_track_type": [
            {"track_type": "superspeedway", "label": "Superspeedway", "stats": dict(empty, races=1, avg_finish=12.0)},
            {"track_type": "intermediate", "label": "Intermediate", "stats": dict(empty, races=2, avg_finish=3.0)},
            {"track_type": "short", "label": "Short Track", "stats": empty},
            {"track_type": "road", "label": "Road Course", "stats": empty},
        ],
        "form_status": {"status": "hot", "label": "Top 5 in 2/3"},
        "momentum": "improving",
    }

# --- CACHE ---

@pytest.fixture(autouse=True)
def clear_streamlit_cache():
    """st.cache_data persists across tests in the same process."""
    st.cache_data.clear()
    yield
    st.cache_data.clear()

# --- SESSION STATE FIXTURE ---

@pytest.fixture
def mock_session_state():
    """
    Mocks st.session_state for UNIT tests only.
    """
    # Create a real dict to act as state
    mock_state = {}

    # Patch the session_state object on the streamlit module
    with patch.object(st, 'session_state', mock_state):
        yield mock_state
