import os
from pathlib import Path
from dotenv import load_dotenv

env_path = Path(__file__).resolve().parent.parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


class ConfigurationError(RuntimeError):
    """Raised when a required setting for the data store is missing."""


SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or ""

MAX_WORKERS = 4
REQUEST_TIMEOUT = 10

DEFAULT_RACE_ID = os.getenv("DEFAULT_RACE_ID", "daytona-500-2026")
DEFAULT_MARKET = "race_winner"

# Only results from this date onwards are loaded (last three seasons)
RESULTS_SINCE = os.getenv("RESULTS_SINCE", "2023-01-01")

# Finishing positions beyond this count as a DNF even without a status flag
DNF_FINISH_THRESHOLD = int(os.getenv("DNF_FINISH_THRESHOLD", "35"))

# Sentinel for "no odds available"
NO_ODDS = 0

TRACK_TYPES = ["superspeedway", "intermediate", "short", "road", "dirt"]
STATS_TRACK_TYPES = ["superspeedway", "intermediate", "short", "road"]
DEFAULT_TRACK_TYPE = "intermediate"

TRACK_TYPE_LABELS = {
    "superspeedway": "Superspeedway",
    "intermediate": "Intermediate",
    "short": "Short Track",
    "road": "Road Course",
    "dirt": "Dirt",
}

# Upcoming-race fallback when the schedule query fails
DEFAULT_TRACK = {
    "track_id": "daytona",
    "track_name": "Daytona International Speedway",
    "track_type": "superspeedway",
}

SPORTSBOOKS = {
    "draftkings": {"name": "DraftKings", "short_name": "DK"},
    "fanduel": {"name": "FanDuel", "short_name": "FD"},
    "betmgm": {"name": "BetMGM", "short_name": "MGM"},
    "caesars": {"name": "Caesars", "short_name": "CZR"},
    "betrivers": {"name": "BetRivers", "short_name": "BR"},
    "pointsbet": {"name": "PointsBet", "short_name": "PB"},
}

MARKETS = {
    "race_winner": "Race Winner",
    "top_3": "Top 3",
    "top_5": "Top 5",
    "top_10": "Top 10",
    "stage_1_winner": "Stage 1 Winner",
    "stage_2_winner": "Stage 2 Winner",
    "head_to_head": "Head to Head",
    "manufacturer_winner": "Manufacturer Winner",
}

# Synonyms matched against the raw `type` column
TRACK_TYPE_SYNONYMS = [
    ("super speedway", "superspeedway"),
    ("superspeedway", "superspeedway"),
    ("drafting", "superspeedway"),
    ("intermediate", "intermediate"),
    ("mile and a half", "intermediate"),
    ("1.5", "intermediate"),
    ("short", "short"),
    ("street", "road"),
    ("road", "road"),
    ("roval", "road"),
    ("dirt", "dirt"),
]

# Fallback when the `type` column is missing or garbled: lowered name fragment -> type.
# Road-course variants are listed before the oval sharing the same name.
TRACK_NAME_MAP = [
    ("daytona international speedway (road", "road"),
    ("daytona road", "road"),
    ("indianapolis motor speedway (road", "road"),
    ("indy road", "road"),
    ("charlotte roval", "road"),
    ("roval", "road"),
    ("circuit of the americas", "road"),
    ("cota", "road"),
    ("sonoma", "road"),
    ("sears point", "road"),
    ("infineon", "road"),
    ("watkins glen", "road"),
    ("road america", "road"),
    ("chicago street", "road"),
    ("mexico city", "road"),
    ("autodromo", "road"),
    ("bristol dirt", "dirt"),
    ("eldora", "dirt"),
    ("daytona", "superspeedway"),
    ("talladega", "superspeedway"),
    ("atlanta", "superspeedway"),
    ("martinsville", "short"),
    ("bristol", "short"),
    ("richmond", "short"),
    ("phoenix", "short"),
    ("iowa", "short"),
    ("north wilkesboro", "short"),
    ("new hampshire", "short"),
    ("loudon", "short"),
    ("dover", "short"),
    ("monster mile", "short"),
    ("la coliseum", "short"),
    ("los angeles memorial coliseum", "short"),
    ("bowman gray", "short"),
    ("gateway", "short"),
    ("world wide technology", "short"),
    ("las vegas", "intermediate"),
    ("texas", "intermediate"),
    ("kansas", "intermediate"),
    ("charlotte", "intermediate"),
    ("homestead", "intermediate"),
    ("miami", "intermediate"),
    ("darlington", "intermediate"),
    ("nashville", "intermediate"),
    ("michigan", "intermediate"),
    ("pocono", "superspeedway"),
    ("auto club", "intermediate"),
    ("fontana", "intermediate"),
    ("indianapolis", "intermediate"),
    ("chicagoland", "intermediate"),
    ("kentucky", "intermediate"),
]


def require_store_settings() -> None:
    """
    Verifies that the data store endpoint and key are configured.
    The service cannot do anything useful without them, so this is fatal at startup.
    """
    missing = []
    if not SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not SUPABASE_ANON_KEY:
        missing.append("SUPABASE_ANON_KEY")
    if missing:
        raise ConfigurationError(
            f"Missing data store settings: {', '.join(missing)}. "
            "Create a .env file with SUPABASE_URL and SUPABASE_ANON_KEY."
        )
