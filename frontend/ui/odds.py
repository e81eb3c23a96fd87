import streamlit as st
import pandas as pd
from typing import Any, Dict, List, Optional
from api.api_client import fetch_odds_board, fetch_races
from trackodds.core.config import SPORTSBOOKS
from trackodds.core.odds import NO_ODDS_DISPLAY
from trackodds.core.schedule import format_countdown, format_race_date, format_race_time, get_countdown
from ui.formatting import market_label, odds_cell, probability_cell, sportsbook_name
import state.store as store

BEST_BOOK_STYLE = "background-color: #dcfce7; font-weight: bold;"


def build_odds_table(snapshots: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    One row per driver, one column per sportsbook, plus best price and implied probability.
    Books without any quote on the board are left out.
    """
    books = [book for book in SPORTSBOOKS if any(book in s.get("odds", {}) for s in snapshots)]

    rows = []
    for snap in snapshots:
        row = {
            "#": snap.get("driver_number", ""),
            "Driver": snap.get("driver_name", ""),
            "Team": snap.get("team", ""),
        }
        for book in books:
            row[sportsbook_name(book)] = odds_cell(snap.get("odds", {}).get(book))
        row["Best"] = odds_cell(snap.get("best_odds"))
        row["Book"] = sportsbook_name(snap.get("best_book"))
        row["Implied %"] = probability_cell(snap.get("implied_probability"))
        rows.append(row)
    return pd.DataFrame(rows)


def highlight_best_book(row: pd.Series) -> List[str]:
    """Highlights every sportsbook cell matching the best price of the row (ties included)."""
    best = row.get("Best")
    book_columns = {sportsbook_name(book) for book in SPORTSBOOKS}
    return [
        BEST_BOOK_STYLE if col in book_columns and best != NO_ODDS_DISPLAY and row[col] == best else ""
        for col in row.index
    ]


def _find_race(race_id: str) -> Optional[Dict[str, Any]]:
    races_df = fetch_races()
    if not races_df.empty and "id" in races_df.columns:
        match = races_df[races_df["id"] == race_id]
        if not match.empty:
            return match.iloc[0].to_dict()
    return None


def render_race_header(race_id: str):
    """Race name, start date and time, and the countdown to the green flag."""
    race = _find_race(race_id)
    if race is None:
        st.markdown(f"## 🏁 {race_id}")
        return

    st.markdown(f"## 🏁 {race['name']}")
    track = race.get("track") if isinstance(race.get("track"), dict) else {}
    if track.get("name"):
        st.caption(f"📍 {track['name']}")

    scheduled = pd.to_datetime(race.get("scheduled_date"), errors="coerce", utc=True)
    if pd.isna(scheduled):
        return

    h1, h2, h3 = st.columns(3)
    h1.metric("Date", format_race_date(scheduled))
    h2.metric("Green flag", format_race_time(scheduled))
    h3.metric("Countdown", format_countdown(get_countdown(scheduled)))


def render_odds_page():
    race_id = store.get_selected_race()
    market = store.get_market()

    render_race_header(race_id)
    st.caption(f"{market_label(market)} odds across {len(SPORTSBOOKS)} sportsbooks")

    query = st.text_input("Search drivers", value=store.get_odds_search(), placeholder="Name, number or team")
    store.set_odds_search(query)

    with st.spinner("Loading odds..."):
        board = fetch_odds_board(race_id, market, store.get_odds_search())

    snapshots = board.get("snapshots", [])
    if not snapshots:
        st.info("No results found")
        return

    m1, m2, m3 = st.columns(3)
    m1.metric("Drivers", len(snapshots))
    m2.metric("Drivers with odds", board.get("drivers_with_odds", 0))
    favourite = snapshots[0] if snapshots[0].get("best_odds") else None
    m3.metric("Favourite", favourite["driver_name"] if favourite else "—",
              odds_cell(favourite["best_odds"]) if favourite else None)

    table = build_odds_table(snapshots)
    st.dataframe(
        table.style.apply(highlight_best_book, axis=1),
        width="stretch",
        hide_index=True,
        column_config={
            "Best": st.column_config.TextColumn("Best", help="Best price across sportsbooks"),
            "Implied %": st.column_config.TextColumn("Implied %", help="Break-even win probability of the best price"),
        },
    )
