import streamlit as st
import pandas as pd
from typing import Any, Dict, List, Optional
from api.api_client import fetch_driver_dashboard, fetch_driver_profile
from trackodds.core.config import TRACK_TYPES
from ui.formatting import (
    average_cell,
    form_badge,
    momentum_label,
    odds_cell,
    pct_cell,
    position_cell,
    sportsbook_name,
    track_type_label,
)
import state.store as store


def build_results_table(results: List[Dict[str, Any]]) -> pd.DataFrame:
    rows = []
    for r in results:
        rows.append({
            "Date": r.get("date"),
            "Race": r.get("race_name", ""),
            "Track": r.get("track_name", ""),
            "Type": track_type_label(r.get("track_type")),
            "Start": position_cell(r.get("start_pos")),
            "Finish": position_cell(r.get("finish_pos")),
            "Laps Led": r.get("laps_led", 0),
            "Rating": r.get("driver_rating", 0.0),
            "Status": r.get("status", ""),
        })
    return pd.DataFrame(rows)


def build_track_type_frame(by_track_type: List[Dict[str, Any]]) -> pd.DataFrame:
    """Average finish per track type, for types the driver has raced on."""
    rows = [
        {"Track Type": item["label"], "Avg Finish": item["stats"]["avg_finish"]}
        for item in by_track_type
        if item.get("stats", {}).get("races")
    ]
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).set_index("Track Type")


def build_finish_trend(results: List[Dict[str, Any]]) -> pd.DataFrame:
    """Finishing position over time, oldest first."""
    points = [
        {"Date": pd.to_datetime(r["date"]), "Finish": r["finish_pos"]}
        for r in results
        if r.get("date") and r.get("finish_pos")
    ]
    if not points:
        return pd.DataFrame()
    return pd.DataFrame(points).sort_values("Date").set_index("Date")


def render_metric_cards(overall: Dict[str, Any]):
    m1, m2, m3, m4, m5, m6 = st.columns(6)
    m1.metric("Races", overall.get("races", 0))
    m2.metric("Wins", overall.get("wins", 0), pct_cell(overall.get("win_pct")), delta_color="off")
    m3.metric("Top 5", overall.get("top5", 0), pct_cell(overall.get("top5_pct")), delta_color="off")
    m4.metric("Top 10", overall.get("top10", 0), pct_cell(overall.get("top10_pct")), delta_color="off")
    m5.metric("Avg Finish", average_cell(overall.get("avg_finish")))
    m6.metric("DNFs", overall.get("dnfs", 0))


def render_next_race(profile: Optional[Dict[str, Any]]):
    """Best current price and record at the upcoming track."""
    if not profile:
        return
    track = profile.get("current_track", {})
    st.markdown(f"### 🎯 Next up: {track.get('track_name', '')}")

    at_track = profile.get("stats", {}).get("at_current_track")
    c1, c2, c3 = st.columns(3)
    c1.metric("Best odds", odds_cell(profile.get("current_odds")), sportsbook_name(profile.get("best_book")),
              delta_color="off")
    c2.metric("Races here", at_track["races"] if at_track else 0)
    c3.metric("Avg finish here", average_cell(at_track["avg_finish"]) if at_track else "—")


def render_driver_page():
    driver_id = store.get_selected_driver()
    if not driver_id:
        st.info("👈 Please select a driver from the sidebar.")
        return

    year = store.get_driver_year()
    track_type = store.get_driver_track_type()

    with st.spinner("Loading driver..."):
        dashboard = fetch_driver_dashboard(driver_id, year, track_type)

    if not dashboard:
        st.warning("Driver not found.")
        return

    driver = dashboard["driver"]
    st.markdown(f"## #{driver.get('number', '')} {driver['name']}")
    st.caption(f"{driver.get('team', '')} • {driver.get('manufacturer', '')}")

    badge = form_badge(dashboard.get("form_status"))
    if badge:
        st.markdown(f"**Form:** {badge} &nbsp; **Momentum:** {momentum_label(dashboard.get('momentum'))}")

    # Filters for the overall cards and the results table
    f1, f2 = st.columns(2)
    year_options = [None] + dashboard.get("years", [])
    selected_year = f1.selectbox(
        "Season",
        year_options,
        index=year_options.index(year) if year in year_options else 0,
        format_func=lambda y: "All seasons" if y is None else str(y),
    )
    type_options = ["all"] + TRACK_TYPES
    selected_type = f2.selectbox(
        "Track type",
        type_options,
        index=type_options.index(track_type) if track_type in type_options else 0,
        format_func=track_type_label,
    )
    if selected_year != year or selected_type != track_type:
        store.set_driver_year(selected_year)
        store.set_driver_track_type(selected_type)
        st.rerun()

    render_metric_cards(dashboard.get("overall", {}))
    render_next_race(fetch_driver_profile(driver.get("slug") or driver_id))

    results = dashboard.get("results", [])
    if not results:
        st.info("No results found")
        return

    chart_col, trend_col = st.columns(2)
    with chart_col:
        st.markdown("#### Avg finish by track type")
        by_type = build_track_type_frame(dashboard.get("by_track_type", []))
        if by_type.empty:
            st.info("No results found")
        else:
            st.bar_chart(by_type)
    with trend_col:
        st.markdown("#### Finishing position")
        trend = build_finish_trend(results)
        if trend.empty:
            st.info("No results found")
        else:
            st.line_chart(trend)

    st.markdown("#### Race results")
    filtered = dashboard.get("filtered_results", [])
    st.caption(f"Showing {len(filtered)} races")
    if filtered:
        st.dataframe(build_results_table(filtered), width="stretch", hide_index=True)
    else:
        st.info("No results found")
