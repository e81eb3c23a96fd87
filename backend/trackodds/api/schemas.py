"""
Pydantic schemas for API responses.
Defines the data contract for drivers, tracks, races, odds snapshots and statistics.
"""
import datetime as dt
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class Driver(BaseModel):
    """
    An active Cup Series driver.
    """
    id: str
    name: str
    first_name: str = ""
    last_name: str = ""
    number: str = ""
    team: str = ""
    manufacturer: str = ""
    is_active: bool = True
    slug: str = ""


class Track(BaseModel):
    id: str
    name: str
    type: str = Field(..., description="One of superspeedway, intermediate, short, road, dirt.")
    length: Optional[float] = Field(None, description="Track length in miles.")
    location: Optional[str] = None


class Race(BaseModel):
    id: str
    name: str
    scheduled_date: Optional[dt.datetime] = None
    track_id: Optional[str] = None
    track: Track


class UpcomingTrack(BaseModel):
    track_id: str
    track_name: str
    track_type: str


class OddsSnapshot(BaseModel):
    """
    Per-driver quotes across sportsbooks with the best available price.
    """
    driver_id: str
    driver_name: str
    driver_number: str = ""
    team: str = ""
    manufacturer: Optional[str] = None
    odds: Dict[str, int] = Field(default_factory=dict, description="Sportsbook -> American odds.")
    best_odds: int = Field(0, description="Best American odds; 0 means no odds available.")
    best_book: Optional[str] = None
    implied_probability: Optional[float] = Field(None, description="Implied probability of best_odds (0-1).")


class OddsBoard(BaseModel):
    race_id: str
    market: str
    drivers_with_odds: int
    snapshots: List[OddsSnapshot]


class RaceResult(BaseModel):
    id: str
    driver_id: str
    race_id: str
    race_name: str = ""
    track_id: str = ""
    track_name: str = ""
    track_type: str
    date: Optional[dt.date] = None
    year: Optional[int] = None
    start_pos: int = 0
    finish_pos: int = 0
    laps_led: int = 0
    laps_completed: int = 0
    driver_rating: float = 0.0
    status: str = ""


class AggregatedStats(BaseModel):
    """
    Derived view over a slice of race results. Never persisted.
    """
    races: int = 0
    wins: int = 0
    top5: int = 0
    top10: int = 0
    dnfs: int = 0
    avg_finish: float = 0.0
    avg_start: float = 0.0
    avg_rating: float = 0.0
    avg_laps_led: float = 0.0
    win_pct: float = 0.0
    top5_pct: float = 0.0
    top10_pct: float = 0.0


class DriverStats(BaseModel):
    driver_id: str
    races: int
    wins: int
    top5: int
    top10: int
    avg_finish: float
    avg_start: float
    laps_led: int
    driver_rating: float
    laps_completed: int
    dnfs: int


class TrackTypeStats(BaseModel):
    track_type: str
    races: int
    avg_finish: float
    avg_start: float
    top5: int
    top10: int
    wins: int
    laps_led: int
    driver_rating: float
    dnf_rate: float = Field(..., description="Percentage of races ending in a DNF.")


class TrackTypeSummary(BaseModel):
    track_type: str
    label: str
    stats: AggregatedStats


class FormStatus(BaseModel):
    status: str
    label: str


class DriverDashboard(BaseModel):
    driver: Driver
    results: List[RaceResult]
    filtered_results: List[RaceResult] = []
    tracks: List[Track]
    years: List[int]
    overall: AggregatedStats
    by_track_type: List[TrackTypeSummary]
    form_status: Optional[FormStatus] = None
    momentum: str = "neutral"


class LastRace(BaseModel):
    finish: int
    laps: int
    track: str


class RecentForm(BaseModel):
    last_race: LastRace
    last5_avg: float


class ProfileStats(BaseModel):
    overall: DriverStats
    by_track_type: List[TrackTypeStats]
    at_current_track: Optional[DriverStats] = None


class DriverProfile(Driver):
    current_odds: int = 0
    best_book: Optional[str] = None
    stats: ProfileStats
    recent_form: RecentForm
    form_status: Optional[FormStatus] = None
    momentum: str = "neutral"
    current_track: UpcomingTrack


class StatsPage(BaseModel):
    drivers: List[Driver]
    results: List[RaceResult]
    tracks: List[Track]
    years: List[int]
    upcoming_track: UpcomingTrack


class DriverStatsRow(BaseModel):
    driver: Driver
    stats: AggregatedStats
    recent_races: List[RaceResult]
    track_history: List[RaceResult]
    total_races: int
