import pytest
import datetime as dt
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient

# Import the FastAPI app
from trackodds.api.main import app, get_repository


@pytest.fixture
def mock_store_client():
    """
    Mock for the SupabaseClient used by the repository, so no HTTP call is ever made.
    `select` returns [] unless a test configures it.
    """
    with patch("trackodds.api.repositories.SupabaseClient") as MockClient:
        instance = MockClient.return_value
        instance.select.return_value = []
        yield instance


@pytest.fixture
def sample_drivers():
    return [
        {"id": "kyle-larson", "name": "Kyle Larson", "number": "5", "team": "Hendrick Motorsports",
         "manufacturer": "Chevrolet", "is_active": True, "slug": "kyle-larson"},
        {"id": "denny-hamlin", "name": "Denny Hamlin", "number": "11", "team": "Joe Gibbs Racing",
         "manufacturer": "Toyota", "is_active": True, "slug": "denny-hamlin"},
    ]


def make_result(driver_id, finish, date, track_type="intermediate", track_id="kansas", **extra):
    """Builds a normalized race result as produced by NascarRepository."""
    result = {
        "id": f"{driver_id}-{date.isoformat()}",
        "driver_id": driver_id,
        "race_id": f"race-{date.isoformat()}",
        "race_name": "Test 400",
        "track_id": track_id,
        "track_name": track_id.title(),
        "track_type": track_type,
        "date": date,
        "year": date.year,
        "start_pos": 10,
        "finish_pos": finish,
        "laps_led": 0,
        "laps_completed": 267,
        "driver_rating": 90.0,
        "status": "running",
    }
    result.update(extra)
    return result


@pytest.fixture
def result_factory():
    return make_result


@pytest.fixture
def sample_results():
    return [
        make_result("kyle-larson", 1, dt.date(2025, 5, 11), laps_led=120, driver_rating=140.2),
        make_result("kyle-larson", 5, dt.date(2025, 4, 6), track_type="short", track_id="martinsville"),
        make_result("kyle-larson", 12, dt.date(2024, 2, 19), track_type="superspeedway", track_id="daytona"),
        make_result("denny-hamlin", 3, dt.date(2025, 5, 11)),
        make_result("denny-hamlin", 38, dt.date(2024, 2, 19), track_type="superspeedway",
                    track_id="daytona", status="accident"),
    ]


@pytest.fixture
def client():
    """FastAPI Test Client with the store configuration check bypassed."""
    with patch("trackodds.api.main.require_store_settings"):
        with TestClient(app) as c:
            yield c
    app.dependency_overrides.clear()


@pytest.fixture
def override_repository():
    """Installs a repository double for the duration of a test."""
    def _install(repository):
        app.dependency_overrides[get_repository] = lambda: repository
        return repository

    yield _install
    app.dependency_overrides.clear()


@pytest.fixture
def mock_repository():
    repo = MagicMock()
    repo.get_drivers.return_value = []
    repo.get_all_results.return_value = []
    repo.get_tracks.return_value = []
    repo.get_result_years.return_value = []
    repo.get_upcoming_race_track.return_value = {
        "track_id": "daytona",
        "track_name": "Daytona International Speedway",
        "track_type": "superspeedway",
    }
    return repo
