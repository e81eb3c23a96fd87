import logging
import streamlit as st
from ui.sidebar import render_sidebar
from ui.odds import render_odds_page
from ui.stats import render_stats_page
from ui.driver import render_driver_page
from ui.schedule import render_schedule_page
from state.store import init_session, get_page

# --- CONFIGURATION ---
logging.basicConfig(level=logging.INFO)
st.set_page_config(
    page_title="TrackOdds",
    layout="wide",
    page_icon="🏁",
    initial_sidebar_state="expanded"
)

# --- CSS INJECTION ---
st.markdown("""
    <style>
    .stApp { background-color: #f8f9fa !important; color: #1e293b !important; }
    h1, h2, h3, h4, h5, h6, p, span, div { color: #1e293b; }
    div[data-testid="stMetric"] {
        background-color: #ffffff !important;
        border: 1px solid #e0e0e0; padding: 15px; border-radius: 8px;
        box-shadow: 0 2px 4px rgba(0,0,0,0.05);
    }
    </style>
""", unsafe_allow_html=True)

PAGE_RENDERERS = {
    "Odds": render_odds_page,
    "Stats": render_stats_page,
    "Driver": render_driver_page,
    "Schedule": render_schedule_page,
}

def main():
    # 1. Initialize State
    init_session()

    # 2. Render Sidebar (Handling Inputs)
    render_sidebar()

    # 3. Render Main Content (Reading State)
    PAGE_RENDERERS.get(get_page(), render_odds_page)()

if __name__ == "__main__":
    main()
