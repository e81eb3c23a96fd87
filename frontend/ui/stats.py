import streamlit as st
import pandas as pd
from typing import Any, Dict, List, Optional
from api.api_client import fetch_stats_filters, fetch_driver_stats
from trackodds.core.config import TRACK_TYPES
from trackodds.core.stats import SORT_FIELDS
from ui.formatting import average_cell, finishes_cell, pct_cell, race_range_label, track_type_label
import state.store as store

SORT_LABELS = {
    "name": "Driver",
    "avg_finish": "Avg Finish",
    "avg_start": "Avg Start",
    "avg_rating": "Rating",
    "avg_laps_led": "Laps Led",
    "races": "Races",
}


def build_stats_table(rows: List[Dict[str, Any]], track_name: Optional[str] = None) -> pd.DataFrame:
    history_col = f"Last 5 at {track_name}" if track_name else "Track History"
    records = []
    for row in rows:
        driver = row.get("driver", {})
        stats = row.get("stats", {})
        records.append({
            "#": driver.get("number", ""),
            "Driver": driver.get("name", ""),
            "Team": driver.get("team", ""),
            "Races": stats.get("races", 0),
            "Wins": stats.get("wins", 0),
            "Top 5 %": pct_cell(stats.get("top5_pct")),
            "Top 10 %": pct_cell(stats.get("top10_pct")),
            "Avg Finish": average_cell(stats.get("avg_finish")),
            "Avg Start": average_cell(stats.get("avg_start")),
            "Rating": average_cell(stats.get("avg_rating")),
            "Laps Led": average_cell(stats.get("avg_laps_led")),
            "DNFs": stats.get("dnfs", 0),
            "Recent": finishes_cell(row.get("recent_races", [])[:5]),
            history_col: finishes_cell(row.get("track_history", [])),
        })
    return pd.DataFrame(records)


def _sort_button_label(field: str, active_field: str, direction: str) -> str:
    label = SORT_LABELS[field]
    if field != active_field:
        return label
    return f"{label} {'▲' if direction == 'asc' else '▼'}"


def render_filters(filters: Dict[str, Any]):
    """Year, track type, track and race-range filters."""
    c1, c2, c3, c4 = st.columns(4)

    years = c1.multiselect("Season", filters.get("years", []), default=store.get_years())
    store.set_years(years)

    type_options = ["all"] + TRACK_TYPES
    current_type = store.get_track_type()
    track_type = c2.selectbox(
        "Track type",
        type_options,
        index=type_options.index(current_type) if current_type in type_options else 0,
        format_func=track_type_label,
    )
    store.set_track_type(track_type)

    # Track choices follow the selected track type
    tracks = filters.get("tracks", [])
    if store.get_track_type() != "all":
        tracks = [t for t in tracks if t.get("type") == store.get_track_type()]
    track_names = {t["id"]: t["name"] for t in tracks}
    selected = [t for t in store.get_track_ids() if t in track_names]
    track_ids = c3.multiselect(
        "Tracks",
        list(track_names),
        default=selected,
        format_func=lambda track_id: track_names.get(track_id, track_id),
    )
    store.set_track_ids(track_ids)

    race_range = c4.selectbox(
        "Races",
        store.RACE_RANGES,
        index=store.RACE_RANGES.index(store.get_race_range()),
        format_func=race_range_label,
    )
    store.set_race_range(race_range)


def render_sort_controls():
    """Clickable column headers: a second click on the active column reverses it."""
    active_field, direction = store.get_sort()
    cols = st.columns(len(SORT_FIELDS))
    for col, field in zip(cols, SORT_FIELDS):
        if col.button(_sort_button_label(field, active_field, direction), key=f"sort_{field}"):
            store.set_sort(field)
            st.rerun()


def render_stats_page():
    st.markdown("## 📊 Driver Stats")

    with st.spinner("Loading filters..."):
        filters = fetch_stats_filters()

    render_filters(filters)

    query = st.text_input("Search drivers", value=store.get_stats_search(), placeholder="Name, number or team")
    store.set_stats_search(query)

    render_sort_controls()

    field, direction = store.get_sort()
    with st.spinner("Crunching numbers..."):
        rows = fetch_driver_stats(
            tuple(store.get_years()),
            store.get_track_type(),
            tuple(store.get_track_ids()),
            store.get_race_range(),
            field,
            direction,
            store.get_stats_search(),
        )

    if not rows:
        st.info("No results found")
        return

    upcoming = filters.get("upcoming_track") or {}
    st.caption(
        f"{len(rows)} drivers • {race_range_label(store.get_race_range())} • "
        f"{track_type_label(store.get_track_type())}"
    )
    st.dataframe(
        build_stats_table(rows, upcoming.get("track_name")),
        width="stretch",
        hide_index=True,
    )
