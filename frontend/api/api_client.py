import logging
import requests
import pandas as pd
import streamlit as st
import os
from typing import List, Dict, Any, Optional, Tuple

# Logger Setup
logger = logging.getLogger(__name__)

EMPTY_BOARD: Dict[str, Any] = {"race_id": None, "market": None, "drivers_with_odds": 0, "snapshots": []}


class APIClient:
    """
    Singleton-style API client to handle all backend communication.
    Uses requests.Session for connection pooling.
    """
    def __init__(self):
        self.base_url = os.getenv("API_URL", "http://127.0.0.1:8000")
        self.session = requests.Session()
        self.timeout = 10

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Internal helper for GET requests with error handling."""
        try:
            url = f"{self.base_url}{endpoint}"
            logger.debug(f"GET {url} {params or ''}")
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"API Request Failed: {e}")
            return None

# Instantiate a global client (stateless regarding user data, stateful regarding TCP)
client = APIClient()


@st.cache_data(ttl=120)
def fetch_odds_board(race_id: str, market: str, query: str = "") -> Dict[str, Any]:
    """Odds board for a race; an empty board when the backend is unavailable."""
    params = {"market": market}
    if query:
        params["q"] = query
    data = client._get(f"/races/{race_id}/odds", params=params)
    if not data:
        return dict(EMPTY_BOARD, race_id=race_id, market=market)
    return data

@st.cache_data(ttl=300)
def fetch_races() -> pd.DataFrame:
    data = client._get("/races")
    if not data:
        return pd.DataFrame()
    return pd.DataFrame(data)

@st.cache_data(ttl=300)
def fetch_upcoming_race() -> Optional[Dict[str, Any]]:
    return client._get("/races/upcoming")

@st.cache_data(ttl=300)
def fetch_drivers() -> List[Dict[str, Any]]:
    data = client._get("/drivers")
    return data if data else []

@st.cache_data(ttl=300)
def fetch_stats_filters() -> Dict[str, Any]:
    """Filter options for the stats grid: seasons, tracks and the upcoming track."""
    data = client._get("/stats")
    if not data:
        return {"years": [], "tracks": [], "upcoming_track": None}
    return {
        "years": data.get("years", []),
        "tracks": data.get("tracks", []),
        "upcoming_track": data.get("upcoming_track"),
    }

@st.cache_data(ttl=300)
def fetch_driver_stats(
    years: Tuple[int, ...],
    track_type: str,
    track_ids: Tuple[str, ...],
    race_range: int,
    sort: str,
    direction: str,
    query: str = "",
) -> List[Dict[str, Any]]:
    params: Dict[str, Any] = {
        "years": list(years),
        "track_id": list(track_ids),
        "race_range": race_range,
        "sort": sort,
        "direction": direction,
    }
    if track_type and track_type != "all":
        params["track_type"] = track_type
    if query:
        params["q"] = query

    data = client._get("/stats/drivers", params=params)
    return data if data else []

@st.cache_data(ttl=300)
def fetch_driver_dashboard(driver_id: str, year: Optional[int] = None,
                           track_type: Optional[str] = None) -> Optional[Dict[str, Any]]:
    params: Dict[str, Any] = {}
    if year:
        params["year"] = year
    if track_type and track_type != "all":
        params["track_type"] = track_type
    return client._get(f"/drivers/{driver_id}", params=params)

@st.cache_data(ttl=300)
def fetch_driver_profile(slug: str) -> Optional[Dict[str, Any]]:
    return client._get(f"/drivers/slug/{slug}/profile")
