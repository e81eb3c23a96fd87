"""
American-odds helpers.
Best-price selection across sportsbooks, implied probability and display formatting.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from trackodds.core.config import NO_ODDS, DEFAULT_MARKET

NO_ODDS_DISPLAY = "—"


def find_best_odds(quotes: Mapping[str, Optional[int]]) -> Tuple[int, Optional[str]]:
    """
    Selects the quote most favorable to the bettor.

    American odds are totally ordered by their signed value: +500 beats +200
    and -110 beats -200. On a tie the first book in iteration order is kept.

    Args:
        quotes (Mapping[str, Optional[int]]): Sportsbook -> American odds.

    Returns:
        Tuple[int, Optional[str]]: (best odds, best book), or (NO_ODDS, None) when empty.
    """
    best_odds: Optional[int] = None
    best_book: Optional[str] = None
    for book, odds in quotes.items():
        if odds is None or odds == NO_ODDS:
            continue
        if best_odds is None or odds > best_odds:
            best_odds = odds
            best_book = book

    if best_odds is None:
        return NO_ODDS, None
    return best_odds, best_book


def implied_probability(odds: int) -> Optional[float]:
    """
    Break-even win probability for an American-odds quote (0-1).
    Returns None for the no-odds sentinel.
    """
    if odds == NO_ODDS:
        return None
    if odds > 0:
        return 100 / (odds + 100)
    return abs(odds) / (abs(odds) + 100)


def format_implied_probability(odds: int) -> str:
    prob = implied_probability(odds)
    if prob is None:
        return NO_ODDS_DISPLAY
    return f"{prob * 100:.1f}%"


def format_odds(odds: int) -> str:
    """Formats American odds as '+450' / '-110'."""
    if odds == NO_ODDS:
        return NO_ODDS_DISPLAY
    if odds > 0:
        return f"+{odds}"
    return str(odds)


def parse_odds(text: str) -> int:
    """
    Parses a display string such as '+450' or '-110' back to an integer.

    Raises:
        ValueError: If the text is not a signed integer or is the no-odds placeholder.
    """
    cleaned = str(text).strip()
    if not cleaned or cleaned == NO_ODDS_DISPLAY:
        raise ValueError(f"No odds to parse: {text!r}")
    value = int(cleaned)
    if value == NO_ODDS:
        raise ValueError("0 is not a valid American odds quote")
    return value


def calculate_payout(odds: int, stake: float) -> Optional[float]:
    """Profit (stake excluded) returned by a winning bet; `None` without odds."""
    if odds == NO_ODDS:
        return None
    if odds > 0:
        return (odds / 100) * stake
    return (100 / abs(odds)) * stake


def calculate_edge(odds: int, true_prob: float) -> Optional[float]:
    """Edge in percent of an estimated probability over the implied one."""
    implied = implied_probability(odds)
    if not implied:
        return None
    return ((true_prob - implied) / implied) * 100


def build_odds_snapshot(
    driver: Mapping[str, Any],
    odds_rows: Iterable[Mapping[str, Any]],
    market: Optional[str] = DEFAULT_MARKET,
) -> Dict[str, Any]:
    """
    Reduces raw odds rows for one driver to one quote per sportsbook plus the best price.

    Rows are expected newest first; only the first row seen for each book is kept.
    Rows without a market column are accepted for any market.
    """
    driver_odds: Dict[str, int] = {}
    for row in odds_rows:
        if row.get("driver_id") != driver.get("id"):
            continue
        row_market = row.get("market")
        if market and row_market and row_market != market:
            continue
        book = row.get("sportsbook")
        value = row.get("odds")
        if not book or book in driver_odds or value is None:
            continue
        try:
            driver_odds[book] = int(value)
        except (TypeError, ValueError):
            continue

    best_odds, best_book = find_best_odds(driver_odds)

    return {
        "driver_id": driver.get("id"),
        "driver_name": driver.get("name") or "",
        "driver_number": str(driver.get("number") or ""),
        "team": driver.get("team") or "",
        "manufacturer": driver.get("manufacturer"),
        "odds": driver_odds,
        "best_odds": best_odds,
        "best_book": best_book,
        "implied_probability": implied_probability(best_odds),
    }


def sort_odds_snapshots(snapshots: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Favourites first (ascending signed odds), drivers without odds last by name.
    """
    def sort_key(snapshot: Dict[str, Any]):
        best = snapshot.get("best_odds", NO_ODDS)
        if best == NO_ODDS:
            return (1, 0, snapshot.get("driver_name", ""))
        return (0, best, snapshot.get("driver_name", ""))

    return sorted(snapshots, key=sort_key)


def count_with_odds(snapshots: Iterable[Mapping[str, Any]]) -> int:
    return sum(1 for s in snapshots if s.get("best_odds", NO_ODDS) != NO_ODDS)
