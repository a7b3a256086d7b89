from datetime import date, datetime, time

import pytest

from conftest import NOW
from extraction import rules

TODAY = NOW.date()  # Tuesday


@pytest.mark.parametrize(
    "text, expected",
    [
        ("lunch tomorrow", date(2025, 7, 30)),
        ("gym next week", date(2025, 8, 5)),
        ("dentist friday", date(2025, 8, 1)),
        ("standup tuesday", date(2025, 8, 5)),
        ("call mom today", TODAY),
        ("flight on 2025-09-01", date(2025, 9, 1)),
    ],
)
def test_resolve_date(text, expected):
    day, explicit = rules.resolve_date(text, TODAY)
    assert day == expected
    assert explicit


def test_resolve_date_defaults_to_today():
    assert rules.resolve_date("buy milk", TODAY) == (TODAY, False)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("meeting at 3pm", time(15, 0)),
        ("meeting at 9:30am", time(9, 30)),
        ("standup at 14:15", time(14, 15)),
        ("call at 3", time(15, 0)),
        ("lunch at noon", time(12, 0)),
        ("12am feed", time(0, 0)),
    ],
)
def test_parse_clock_time(text, expected):
    assert rules.parse_clock_time(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("team meeting 2-4pm", (time(14, 0), time(16, 0))),
        ("lunch break 12:30 to 1:30", (time(12, 30), time(13, 30))),
        ("workshop 11-1pm", (time(11, 0), time(13, 0))),
        ("shift 9am to 5pm", (time(9, 0), time(17, 0))),
    ],
)
def test_parse_time_range(text, expected):
    assert rules.parse_time_range(text) == expected


def test_bare_numbers_are_not_a_range():
    assert rules.parse_time_range("read pages 10-20") is None


@pytest.mark.parametrize(
    "text, minutes",
    [
        ("conference call for 2 hours", 120),
        ("workout 45 mins", 45),
        ("nap for half an hour", 30),
        ("walk for an hour", 60),
        ("1.5 hour review", 90),
        ("buy milk", None),
    ],
)
def test_parse_duration(text, minutes):
    assert rules.parse_duration(text) == minutes


@pytest.mark.parametrize(
    "text, category",
    [
        ("Team meeting", "Work"),
        ("Doctor checkup", "Health"),
        ("Dinner with friends", "Social"),
        ("Family visit", "Personal"),
        ("Flight to Lisbon", "Travel"),
        ("Water the plants", "General"),
    ],
)
def test_infer_category(text, category):
    assert rules.infer_category(text) == category


def test_next_weekday_is_never_today():
    assert rules.next_weekday(TODAY, TODAY.weekday()) == date(2025, 8, 5)


def test_next_reasonable_start():
    assert rules.next_reasonable_start(TODAY, NOW) == datetime(2025, 7, 29, 11, 0)
    late = datetime(2025, 7, 29, 20, 15)
    assert rules.next_reasonable_start(TODAY, late) == datetime(2025, 7, 30, 9, 0)
    early = datetime(2025, 7, 29, 6, 10)
    assert rules.next_reasonable_start(TODAY, early) == datetime(2025, 7, 29, 9, 0)
    assert rules.next_reasonable_start(date(2025, 8, 1), NOW) == datetime(2025, 8, 1, 9, 0)


def test_read_event_team_meeting():
    reading = rules.read_event("Team meeting tomorrow 2-4pm", NOW)
    assert reading.title == "Team meeting"
    assert reading.start == datetime(2025, 7, 30, 14, 0)
    assert reading.end == datetime(2025, 7, 30, 16, 0)
    assert reading.category == "Work"
    assert not reading.is_all_day
    assert reading.confidence == rules.CONFIDENCE_EXPLICIT


def test_read_event_meal_window():
    reading = rules.read_event("Dinner with Ana friday", NOW)
    assert reading.start == datetime(2025, 8, 1, 18, 0)
    assert reading.duration_min == 90
    assert reading.category == "Social"
    assert reading.confidence == rules.CONFIDENCE_PARTIAL


def test_read_event_default_block():
    reading = rules.read_event("Write report", NOW)
    assert reading.start == datetime(2025, 7, 29, 11, 0)
    assert reading.duration_min == rules.DEFAULT_BLOCK_MIN
    assert reading.confidence == rules.CONFIDENCE_GUESSED


def test_read_event_all_day():
    reading = rules.read_event("Offsite all day friday", NOW)
    assert reading.is_all_day
    assert reading.start.date() == date(2025, 8, 1)
    assert reading.title == "Offsite"


def test_schedule_signal():
    assert rules.has_schedule_signal("Meeting at 3pm", TODAY)
    assert rules.has_schedule_signal("Buy groceries tomorrow", TODAY)
    assert not rules.has_schedule_signal("Remember something", TODAY)
    assert not rules.has_schedule_signal("Project ideas to think about", TODAY)
