import streamlit as st
from trackodds.core.config import DEFAULT_MARKET, DEFAULT_RACE_ID
from trackodds.core.stats import default_sort_direction

PAGES = ["Odds", "Stats", "Driver", "Schedule"]
RACE_RANGES = [5, 10, 20, 0]  # 0 = all races

# State Keys
KEY_PAGE = "page"
KEY_RACE_ID = "selected_race_id"
KEY_MARKET = "selected_market"
KEY_ODDS_SEARCH = "odds_search_query"
KEY_STATS_SEARCH = "stats_search_query"
KEY_YEARS = "selected_years"
KEY_TRACK_TYPE = "selected_track_type"
KEY_TRACK_IDS = "selected_track_ids"
KEY_RACE_RANGE = "race_range"
KEY_SORT_FIELD = "sort_field"
KEY_SORT_DIRECTION = "sort_direction"
KEY_DRIVER_ID = "selected_driver_id"
KEY_DRIVER_YEAR = "driver_year"
KEY_DRIVER_TRACK_TYPE = "driver_track_type"

DEFAULTS = {
    KEY_PAGE: "Odds",
    KEY_RACE_ID: DEFAULT_RACE_ID,
    KEY_MARKET: DEFAULT_MARKET,
    KEY_ODDS_SEARCH: "",
    KEY_STATS_SEARCH: "",
    KEY_YEARS: [],
    KEY_TRACK_TYPE: "all",
    KEY_TRACK_IDS: [],
    KEY_RACE_RANGE: 10,
    KEY_SORT_FIELD: "avg_finish",
    KEY_SORT_DIRECTION: "asc",
    KEY_DRIVER_ID: None,
    KEY_DRIVER_YEAR: None,
    KEY_DRIVER_TRACK_TYPE: "all",
}

def init_session():
    """Initialize session state variables if they don't exist."""
    for key, value in DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = list(value) if isinstance(value, list) else value

# --- Navigation ---

def get_page() -> str:
    return st.session_state[KEY_PAGE]

def set_page(page: str):
    if page in PAGES:
        st.session_state[KEY_PAGE] = page

# --- Odds board ---

def get_selected_race():
    return st.session_state[KEY_RACE_ID]

def set_selected_race(race_id):
    """Updates the race and clears the odds search."""
    if st.session_state[KEY_RACE_ID] != race_id:
        st.session_state[KEY_RACE_ID] = race_id
        st.session_state[KEY_ODDS_SEARCH] = ""

def get_market() -> str:
    return st.session_state[KEY_MARKET]

def set_market(market: str):
    st.session_state[KEY_MARKET] = market

def get_odds_search() -> str:
    return st.session_state[KEY_ODDS_SEARCH]

def set_odds_search(query: str):
    st.session_state[KEY_ODDS_SEARCH] = (query or "").strip()

# --- Stats grid filters ---

def get_years():
    return st.session_state[KEY_YEARS]

def set_years(years):
    st.session_state[KEY_YEARS] = sorted(set(years), reverse=True)

def get_track_type() -> str:
    return st.session_state[KEY_TRACK_TYPE]

def set_track_type(track_type: str):
    """Updates the track type and resets the selected tracks."""
    if st.session_state[KEY_TRACK_TYPE] != track_type:
        st.session_state[KEY_TRACK_TYPE] = track_type
        st.session_state[KEY_TRACK_IDS] = []

def get_track_ids():
    return st.session_state[KEY_TRACK_IDS]

def set_track_ids(track_ids):
    st.session_state[KEY_TRACK_IDS] = list(track_ids)

def get_stats_search() -> str:
    return st.session_state[KEY_STATS_SEARCH]

def set_stats_search(query: str):
    st.session_state[KEY_STATS_SEARCH] = (query or "").strip()

def get_race_range() -> int:
    return st.session_state[KEY_RACE_RANGE]

def set_race_range(race_range: int):
    if race_range in RACE_RANGES:
        st.session_state[KEY_RACE_RANGE] = race_range

def get_sort():
    return st.session_state[KEY_SORT_FIELD], st.session_state[KEY_SORT_DIRECTION]

def set_sort(field: str):
    """
    Selecting the active column flips the direction;
    selecting another column applies that column's natural direction.
    """
    if st.session_state[KEY_SORT_FIELD] == field:
        current = st.session_state[KEY_SORT_DIRECTION]
        st.session_state[KEY_SORT_DIRECTION] = "desc" if current == "asc" else "asc"
    else:
        st.session_state[KEY_SORT_FIELD] = field
        st.session_state[KEY_SORT_DIRECTION] = default_sort_direction(field)

def reset_stats_filters():
    for key in (KEY_YEARS, KEY_TRACK_TYPE, KEY_TRACK_IDS, KEY_RACE_RANGE, KEY_STATS_SEARCH):
        value = DEFAULTS[key]
        st.session_state[key] = list(value) if isinstance(value, list) else value

# --- Driver dashboard ---

def get_selected_driver():
    return st.session_state[KEY_DRIVER_ID]

def set_selected_driver(driver_id):
    """Updates the driver and resets the dashboard filters."""
    if st.session_state[KEY_DRIVER_ID] != driver_id:
        st.session_state[KEY_DRIVER_ID] = driver_id
        st.session_state[KEY_DRIVER_YEAR] = None
        st.session_state[KEY_DRIVER_TRACK_TYPE] = "all"

def get_driver_year():
    return st.session_state[KEY_DRIVER_YEAR]

def set_driver_year(year):
    st.session_state[KEY_DRIVER_YEAR] = year

def get_driver_track_type() -> str:
    return st.session_state[KEY_DRIVER_TRACK_TYPE]

def set_driver_track_type(track_type: str):
    st.session_state[KEY_DRIVER_TRACK_TYPE] = track_type
