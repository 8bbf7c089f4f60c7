from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from index import app
from next_prayer import parse_time
from prayer_times import compute_prayer_times

PARIS = {"lat": 48.8566, "lng": 2.3522}


@pytest.fixture
def client():
    return TestClient(app)


class TestRoot:
    def test_status(self, client):
        """Test that the service reports itself online"""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "online"
        assert "/api/timesForGPS" in response.json()["endpoints"]


class TestMethods:
    def test_lists_fifteen_methods(self, client):
        """Test the method listing with angle and interval entries"""
        methods = client.get("/api/methods").json()["methods"]
        assert len(methods) == 15
        by_id = {m["id"]: m for m in methods}
        assert by_id[3] == {"id": 3, "name": "Muslim World League", "fajrAngle": 18, "ishaAngle": 17}
        assert by_id[4]["ishaMinutes"] == 90
        assert "ishaAngle" not in by_id[4]


class TestTimesForGPS:
    def test_single_day_matches_calculator(self, client):
        """Test that the endpoint returns the calculator's times in array order"""
        response = client.get(
            "/api/timesForGPS",
            params={**PARIS, "date": "2024-03-20", "timezoneOffset": 60, "calculationMethod": 2},
        )
        assert response.status_code == 200
        expected = compute_prayer_times(date(2024, 3, 20), PARIS["lat"], PARIS["lng"], 1.0, 2)
        assert response.json()["times"] == {
            "2024-03-20": [
                expected["fajr"],
                expected["sunrise"],
                expected["dhuhr"],
                expected["asr"],
                expected["maghrib"],
                expected["isha"],
            ]
        }

    def test_multiple_days(self, client):
        """Test that consecutive days are returned"""
        response = client.get("/api/timesForGPS", params={**PARIS, "date": "2024-02-28", "days": 3})
        assert response.status_code == 200
        times = response.json()["times"]
        assert list(times) == ["2024-02-28", "2024-02-29", "2024-03-01"]
        assert all(len(day) == 6 for day in times.values())

    def test_unsolvable_times_use_sentinel(self, client):
        """Test that polar geometry is returned as '--:--' rather than an error"""
        response = client.get(
            "/api/timesForGPS", params={"lat": 70, "lng": 25, "date": "2024-06-21", "timezoneOffset": 120}
        )
        assert response.status_code == 200
        day = response.json()["times"]["2024-06-21"]
        assert day[0] == "--:--"
        assert day[2] != "--:--"

    def test_default_method_from_environment(self, client, monkeypatch):
        """Test that the configured default method is used when none is given"""
        monkeypatch.setenv("PRAYER_DEFAULT_METHOD", "4")
        response = client.get("/api/timesForGPS", params={"lat": 21.4225, "lng": 39.8262, "date": "2024-06-21", "timezoneOffset": 180})
        expected = compute_prayer_times(date(2024, 6, 21), 21.4225, 39.8262, 3.0, 4)
        assert response.json()["times"]["2024-06-21"][5] == expected["isha"]

    def test_invalid_date_returns_400(self, client):
        """Test that a malformed date is rejected"""
        response = client.get("/api/timesForGPS", params={**PARIS, "date": "21/06/2024"})
        assert response.status_code == 400
        assert response.json()["detail"] == "date must be YYYY-MM-DD"

    @pytest.mark.parametrize("days", [0, 32])
    def test_days_out_of_range_returns_400(self, client, days):
        """Test the day count limits"""
        response = client.get("/api/timesForGPS", params={**PARIS, "date": "2024-06-21", "days": days})
        assert response.status_code == 400

    def test_latitude_out_of_range_returns_422(self, client):
        """Test query validation of coordinates"""
        response = client.get("/api/timesForGPS", params={"lat": 100, "lng": 0, "date": "2024-06-21"})
        assert response.status_code == 422


class TestNextPrayer:
    def test_next_prayer_and_urgency(self, client):
        """Test that a prayer five minutes away is red"""
        times = compute_prayer_times(date(2024, 6, 21), PARIS["lat"], PARIS["lng"], 2.0, 3)
        now = parse_time(times["dhuhr"], datetime(2024, 6, 21)) - timedelta(minutes=5)

        response = client.get(
            "/api/nextPrayer",
            params={**PARIS, "now": now.isoformat(), "timezoneOffset": 120, "calculationMethod": 3},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["prayer"] == "dhuhr"
        assert body["time"] == times["dhuhr"]
        assert body["urgency"] == "red"
        assert body["times"] == dict(times)

    def test_twelve_hour_display(self, client):
        """Test the display string for 12h clocks"""
        response = client.get(
            "/api/nextPrayer",
            params={**PARIS, "now": "2024-06-21T15:00:00", "timezoneOffset": 120, "use24h": False},
        )
        body = response.json()
        assert body["prayer"] == "asr"
        assert body["display"].endswith("PM")
        assert body["urgency"] in {"green", "orange", "red"}

    def test_isha_after_midnight_is_next_before_midnight(self, client):
        """Test that a night prayer past midnight is still selected late in the evening"""
        times = compute_prayer_times(date(2024, 6, 21), PARIS["lat"], PARIS["lng"], 2.0, 3)

        response = client.get(
            "/api/nextPrayer",
            params={**PARIS, "now": "2024-06-21T23:00:00", "timezoneOffset": 120, "calculationMethod": 3},
        )
        body = response.json()
        assert body["prayer"] == "isha"
        assert body["time"] == times["isha"]
        assert body["at"].startswith("2024-06-22T01:")
        assert body["urgency"] == "green"

    def test_after_isha_wraps_to_fajr(self, client):
        """Test wrap-around late at night"""
        response = client.get(
            "/api/nextPrayer",
            params={"lat": 21.4225, "lng": 39.8262, "now": "2024-06-21T23:30:00", "timezoneOffset": 180},
        )
        body = response.json()
        assert body["prayer"] == "fajr"
        assert body["urgency"] == "green"
