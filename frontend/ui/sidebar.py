import streamlit as st
import pandas as pd
from api.api_client import fetch_races, fetch_drivers
from trackodds.core.config import MARKETS
from ui.formatting import market_label
import state.store as store


def _race_label(races_df: pd.DataFrame, race_id: str) -> str:
    match = races_df[races_df["id"] == race_id]
    if match.empty:
        return race_id
    race = match.iloc[0]
    date = pd.to_datetime(race.get("scheduled_date"), errors="coerce")
    date_str = date.strftime("%b %d") if not pd.isna(date) else "TBD"
    return f"{date_str} - {race['name']}"


def render_race_picker():
    """Race and market selection for the odds board."""
    st.subheader("🏁 Race")

    with st.spinner("Loading schedule..."):
        races_df = fetch_races()

    current_race = store.get_selected_race()
    if not races_df.empty and "id" in races_df.columns:
        race_ids = races_df["id"].tolist()
        if current_race not in race_ids:
            race_ids.insert(0, current_race)
        selected_race = st.selectbox(
            "Choose a race:",
            race_ids,
            index=race_ids.index(current_race),
            format_func=lambda race_id: _race_label(races_df, race_id),
        )
        store.set_selected_race(selected_race)
    else:
        st.caption(f"Race: {current_race}")

    markets = list(MARKETS)
    current_market = store.get_market()
    selected_market = st.selectbox(
        "Market",
        markets,
        index=markets.index(current_market) if current_market in markets else 0,
        format_func=market_label,
    )
    store.set_market(selected_market)


def render_driver_picker():
    """Driver selection for the dashboard page."""
    st.subheader("👤 Driver")

    drivers = fetch_drivers()
    if not drivers:
        st.warning("No drivers available.")
        return

    driver_ids = [d["id"] for d in drivers]
    names = {d["id"]: f"#{d.get('number', '')} {d['name']}" for d in drivers}

    current_driver = store.get_selected_driver()
    if current_driver not in driver_ids:
        current_driver = driver_ids[0]
        store.set_selected_driver(current_driver)

    selected_driver = st.selectbox(
        "Choose a driver:",
        driver_ids,
        index=driver_ids.index(current_driver),
        format_func=lambda driver_id: names.get(driver_id, driver_id),
    )
    store.set_selected_driver(selected_driver)


def render_sidebar():
    with st.sidebar:
        st.title("🏁 TrackOdds")
        st.markdown("---")

        current_page = store.get_page()
        selected_page = st.radio(
            "Navigate",
            store.PAGES,
            index=store.PAGES.index(current_page) if current_page in store.PAGES else 0,
        )
        store.set_page(selected_page)

        st.markdown("---")
        if store.get_page() == "Odds":
            render_race_picker()
        elif store.get_page() == "Driver":
            render_driver_picker()

        st.markdown("---")
        st.caption("NASCAR Cup Series • odds & stats")
