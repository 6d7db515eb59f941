"""Tests for slot_finder/cli.py

Drives the typer app with CliRunner. Offline runs read events from a JSON
file; calendar runs have calendar_find_availability patched out.
"""

import json

import pytest
from typer.testing import CliRunner

from slot_finder import __version__, cli


runner = CliRunner()

MONDAY = ["--start", "2024-03-18T09:00", "--timezone", "America/New_York"]


@pytest.fixture
def events_file(tmp_path):
    def _write(payload) -> str:
        path = tmp_path / "events.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)
    return _write


# ─────────────────────────────────────────────────────────────────────────────
# Offline (events file)
# ─────────────────────────────────────────────────────────────────────────────


class TestSlotsFromFile:
    """slots -f events.json"""

    def test_empty_calendar_table(self, events_file):
        result = runner.invoke(cli.app, ["slots", "-f", events_file([]), "-n", "1", *MONDAY])
        assert result.exit_code == 0, result.output
        assert "16 slots found" in result.output

    def test_items_wrapper(self, events_file):
        payload = {
            "items": [{
                "start": {"dateTime": "2024-03-18T10:00:00-04:00"},
                "end": {"dateTime": "2024-03-18T11:00:00-04:00"},
                "attendees": [{"email": "colleague@example.com"}],
                "location": "Room 1",
            }],
        }
        result = runner.invoke(cli.app, ["slots", "-f", events_file(payload), "-n", "1", *MONDAY])
        assert result.exit_code == 0, result.output
        assert "14 slots found" in result.output

    def test_diversified_limit(self, events_file):
        args = ["slots", "-f", events_file([]), "-n", "5", "-m", "3", "--diversify", *MONDAY]
        result = runner.invoke(cli.app, args)
        assert result.exit_code == 0, result.output
        assert "3 slots found" in result.output

    def test_message_output(self, events_file):
        args = [
            "slots", "-f", events_file([]), "-n", "1", "-m", "2", "--message",
            "--booking-link", "https://cal.example.com/me", *MONDAY,
        ]
        result = runner.invoke(cli.app, args)
        assert result.exit_code == 0, result.output
        assert "Would any of these time windows work for a 30 minute meeting (America/New_York)?" in result.output
        assert "• Mon Mar 18, 9:00 AM - 9:30 AM EDT" in result.output
        assert "https://cal.example.com/me" in result.output

    def test_no_availability(self, events_file):
        result = runner.invoke(cli.app, ["slots", "-f", events_file([]), "-d", "600", *MONDAY])
        assert result.exit_code == 0, result.output
        assert "No availability found" in result.output

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(cli.app, ["slots", "-f", str(path), *MONDAY])
        assert result.exit_code != 0

    def test_unknown_timezone(self, events_file):
        args = ["slots", "-f", events_file([]), "--timezone", "Mars/Olympus_Mons"]
        result = runner.invoke(cli.app, args)
        assert result.exit_code == 1
        assert "Unknown timezone" in result.output

    def test_bad_start(self, events_file):
        args = ["slots", "-f", events_file([]), "--start", "next tuesday"]
        result = runner.invoke(cli.app, args)
        assert result.exit_code == 1

    def test_zero_duration_rejected(self, events_file):
        result = runner.invoke(cli.app, ["slots", "-f", events_file([]), "-d", "0", *MONDAY])
        assert result.exit_code != 0


# ─────────────────────────────────────────────────────────────────────────────
# Calendar-backed
# ─────────────────────────────────────────────────────────────────────────────


class TestSlotsFromCalendar:
    """slots without -f goes through calendar_find_availability."""

    def test_passes_options_through(self, monkeypatch):
        seen = {}

        def fake_find(**kwargs):
            seen.update(kwargs)
            return {"slots": ["Mon Mar 18, 9:00 AM - 9:30 AM EDT"], "windows": [], "count": 1}

        monkeypatch.setattr(cli, "calendar_find_availability", fake_find)
        result = runner.invoke(cli.app, ["slots", "-c", "team", "-d", "45", *MONDAY])

        assert result.exit_code == 0, result.output
        assert "1 slot found" in result.output
        assert seen["calendar_ids"] == ["team"]
        assert seen["duration_minutes"] == 45

    def test_error_exits_nonzero(self, monkeypatch):
        monkeypatch.setattr(
            cli, "calendar_find_availability",
            lambda **kwargs: {"error": "Google Calendar token not found", "slots": []},
        )
        result = runner.invoke(cli.app, ["slots", *MONDAY])
        assert result.exit_code == 1
        assert "token not found" in result.output


    def test_no_calendars_hints_at_flag(self, monkeypatch):
        monkeypatch.setattr(cli.settings, "selected_calendars", [])
        monkeypatch.setattr(
            cli, "calendar_find_availability",
            lambda **kwargs: {"error": "No calendars selected. Set SELECTED_CALENDARS.", "slots": []},
        )
        result = runner.invoke(cli.app, ["slots", *MONDAY])
        assert result.exit_code == 1
        assert "No calendars selected" in result.output
        assert "--calendar" in result.output


class TestCalendarsCommand:
    """calendars lists what the token can see."""

    def test_marks_selected(self, monkeypatch):
        monkeypatch.setattr(cli, "calendar_list_calendars", lambda: {
            "calendars": [
                {"id": "me@example.com", "summary": "Me", "primary": True, "access_role": "owner"},
            ],
            "count": 1,
        })
        result = runner.invoke(cli.app, ["calendars"])
        assert result.exit_code == 0, result.output
        assert "me@example.com" in result.output

    def test_error_exits_nonzero(self, monkeypatch):
        monkeypatch.setattr(cli, "calendar_list_calendars", lambda: {"error": "boom"})
        result = runner.invoke(cli.app, ["calendars"])
        assert result.exit_code == 1


def test_version():
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output
