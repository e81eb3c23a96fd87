"""
Display helpers shared by the dashboard pages.
"""
from typing import Any, Dict, Iterable, Optional

from trackodds.core.config import MARKETS, SPORTSBOOKS, TRACK_TYPE_LABELS
from trackodds.core.odds import NO_ODDS_DISPLAY, format_odds

FORM_BADGES = {
    "hot": "🔥",
    "warm": "📈",
    "cold": "🧊",
    "neutral": "➖",
}

MOMENTUM_LABELS = {
    "improving": "↗ Improving",
    "declining": "↘ Declining",
    "neutral": "→ Steady",
}


def odds_cell(value: Optional[int]) -> str:
    """American odds for a table cell; missing quotes render as a dash."""
    if value is None:
        return NO_ODDS_DISPLAY
    return format_odds(int(value))


def probability_cell(prob: Optional[float]) -> str:
    if prob is None:
        return NO_ODDS_DISPLAY
    return f"{prob * 100:.1f}%"


def average_cell(value: Optional[float]) -> str:
    """Averages of 0 mean 'no races' and are shown as a dash."""
    if not value:
        return NO_ODDS_DISPLAY
    return f"{value:.1f}"


def pct_cell(value: Optional[float]) -> str:
    return f"{(value or 0):.1f}%"


def position_cell(position: Optional[int]) -> str:
    if not position:
        return NO_ODDS_DISPLAY
    return f"P{position}"


def finishes_cell(results: Iterable[Dict[str, Any]]) -> str:
    """Compact finishing history, newest first: '1 · 5 · 12'."""
    finishes = [str(r.get("finish_pos")) for r in results if r.get("finish_pos")]
    return " · ".join(finishes) if finishes else NO_ODDS_DISPLAY


def sportsbook_name(book: Optional[str]) -> str:
    if not book:
        return NO_ODDS_DISPLAY
    return SPORTSBOOKS.get(book, {}).get("name", book)


def market_label(market: str) -> str:
    return MARKETS.get(market, market)


def track_type_label(track_type: Optional[str]) -> str:
    if not track_type or track_type == "all":
        return "All Track Types"
    return TRACK_TYPE_LABELS.get(track_type, track_type.title())


def form_badge(form: Optional[Dict[str, str]]) -> Optional[str]:
    if not form:
        return None
    return f"{FORM_BADGES.get(form.get('status'), '')} {form.get('label', '')}".strip()


def momentum_label(momentum: Optional[str]) -> str:
    return MOMENTUM_LABELS.get(momentum or "neutral", MOMENTUM_LABELS["neutral"])


def race_range_label(race_range: int) -> str:
    return "All races" if race_range == 0 else f"Last {race_range}"
