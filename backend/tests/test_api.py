import pytest
import datetime as dt
from unittest.mock import patch
from fastapi.testclient import TestClient
from trackodds.api.main import app, get_repository
from trackodds.core.config import ConfigurationError

# --- 1. MOCK CLASSES ---

class MockNascarRepository:
    """Simulates the store reads with already-normalized rows."""

    def get_drivers(self):
        return [
            {"id": "kyle-larson", "name": "Kyle Larson", "number": "5",
             "team": "Hendrick Motorsports", "manufacturer": "Chevrolet", "slug": "kyle-larson"},
            {"id": "chase-elliott", "name": "Chase Elliott", "number": "9",
             "team": "Hendrick Motorsports", "manufacturer": "Chevrolet", "slug": "chase-elliott"},
            {"id": "ty-gibbs", "name": "Ty Gibbs", "number": "54",
             "team": "Joe Gibbs Racing", "manufacturer": "Toyota", "slug": "ty-gibbs"},
        ]

    def get_current_odds_with_drivers(self, race_id, market):
        return [
            {"driver_id": "ty-gibbs", "driver_name": "Ty Gibbs", "driver_number": "54",
             "team": "Joe Gibbs Racing", "odds": {}, "best_odds": 0, "best_book": None,
             "implied_probability": None},
            {"driver_id": "kyle-larson", "driver_name": "Kyle Larson", "driver_number": "5",
             "team": "Hendrick Motorsports", "odds": {"draftkings": 450, "fanduel": 500},
             "best_odds": 500, "best_book": "fanduel", "implied_probability": 100 / 600},
            {"driver_id": "chase-elliott", "driver_name": "Chase Elliott", "driver_number": "9",
             "team": "Hendrick Motorsports", "odds": {"draftkings": 900},
             "best_odds": 900, "best_book": "draftkings", "implied_probability": 0.1},
        ]

    def get_races(self):
        return [
            {"id": "daytona-500-2026", "name": "Daytona 500",
             "scheduled_date": dt.datetime(2026, 2, 15, 19, 30), "track_id": "daytona",
             "track": {"id": "daytona", "name": "Daytona International Speedway",
                       "type": "superspeedway", "length": 2.5}},
        ]

    def get_upcoming_race(self):
        return self.get_races()[0]

    def get_tracks(self):
        return [{"id": "daytona", "name": "Daytona International Speedway", "type": "superspeedway"}]

    def get_result_years(self):
        return [2025, 2024]

    def get_upcoming_race_track(self):
        return {"track_id": "daytona", "track_name": "Daytona International Speedway",
                "track_type": "superspeedway"}

    def get_all_results(self):
        return []

    def get_driver(self, driver_id):
        return None

    def get_driver_profile(self, slug, race_id):
        return None

# --- 2. FIXTURES ---

@pytest.fixture
def client():
    app.dependency_overrides[get_repository] = MockNascarRepository

    with patch("trackodds.api.main.require_store_settings"):
        with TestClient(app) as c:
            yield c

    # Cleanup
    app.dependency_overrides.clear()

# --- 3. TESTS ---

def test_health_check(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "online"

def test_get_drivers(client):
    response = client.get("/drivers")
    assert response.status_code == 200
    assert response.json()[0]["name"] == "Kyle Larson"

def test_race_odds_sorted_favourites_first(client):
    response = client.get("/races/daytona-500-2026/odds")
    assert response.status_code == 200
    board = response.json()

    assert board["market"] == "race_winner"
    assert board["drivers_with_odds"] == 2
    names = [s["driver_name"] for s in board["snapshots"]]
    # +500 before +900, no-odds driver last
    assert names == ["Kyle Larson", "Chase Elliott", "Ty Gibbs"]
    assert board["snapshots"][0]["best_book"] == "fanduel"

def test_race_odds_search(client):
    response = client.get("/races/daytona-500-2026/odds", params={"q": "gibbs"})
    assert response.status_code == 200
    snapshots = response.json()["snapshots"]
    assert [s["driver_id"] for s in snapshots] == ["ty-gibbs"]

def test_race_odds_unknown_market(client):
    response = client.get("/races/daytona-500-2026/odds", params={"market": "pole_position"})
    assert response.status_code == 400

def test_get_races(client):
    response = client.get("/races")
    assert response.status_code == 200
    data = response.json()
    assert data[0]["track"]["type"] == "superspeedway"

def test_get_upcoming_race(client):
    response = client.get("/races/upcoming")
    assert response.status_code == 200
    assert response.json()["name"] == "Daytona 500"

def test_driver_not_found(client):
    response = client.get("/drivers/nobody")
    assert response.status_code == 404

def test_driver_profile_not_found(client):
    response = client.get("/drivers/slug/nobody/profile")
    assert response.status_code == 404

def test_stats_page(client):
    response = client.get("/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["years"] == [2025, 2024]
    assert data["upcoming_track"]["track_id"] == "daytona"

def test_startup_fails_without_store_settings():
    with patch("trackodds.api.main.require_store_settings", side_effect=ConfigurationError("missing")):
        with pytest.raises(ConfigurationError):
            with TestClient(app):
                pass
