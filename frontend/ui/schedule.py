import streamlit as st
import pandas as pd
from api.api_client import fetch_races, fetch_upcoming_race
from trackodds.core.schedule import race_status
from ui.formatting import track_type_label


def build_schedule_table(races_df: pd.DataFrame, now: pd.Timestamp = None) -> pd.DataFrame:
    """Flattens the race list (embedded track) into display columns."""
    now = now if now is not None else pd.Timestamp.now(tz="UTC")
    dates = pd.to_datetime(races_df["scheduled_date"], errors="coerce", utc=True)
    tracks = races_df["track"].apply(lambda t: t if isinstance(t, dict) else {})

    return pd.DataFrame({
        "Date": dates.dt.strftime("%a %b %d, %Y").fillna("TBD"),
        "Race": races_df["name"],
        "Track": tracks.apply(lambda t: t.get("name", "")),
        "Type": tracks.apply(lambda t: track_type_label(t.get("type"))),
        "Length (mi)": tracks.apply(lambda t: t.get("length")),
        "Status": [race_status(d if pd.notna(d) else None, now) for d in dates],
    })


def render_schedule_page():
    st.markdown("## 📅 Schedule")

    upcoming = fetch_upcoming_race()
    if upcoming:
        track = upcoming.get("track", {})
        st.success(f"Next race: **{upcoming['name']}** at {track.get('name', 'TBD')}")

    with st.spinner("Loading schedule..."):
        races_df = fetch_races()

    if races_df.empty:
        st.info("No results found")
        return

    st.dataframe(build_schedule_table(races_df), width="stretch", hide_index=True)
