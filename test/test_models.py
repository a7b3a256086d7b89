from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from routing import responses
from violet.models import (
    CalendarEvent,
    CalendarEventDraft,
    CapturedThought,
    MutationResult,
    Note,
    all_day_window,
)


def test_captured_thought_rejects_blank_text():
    with pytest.raises(ValidationError):
        CapturedThought(text="   ")


def test_captured_thought_is_frozen():
    thought = CapturedThought(text="idea")
    with pytest.raises(ValidationError):
        thought.text = "other"


def test_event_end_defaults_to_one_hour():
    event = CalendarEvent(title="Call", start_at=datetime(2026, 1, 1, 9, 0))
    assert event.end_at == datetime(2026, 1, 1, 10, 0)
    assert event.duration_hours == 1.0


def test_draft_rejects_inverted_window():
    with pytest.raises(ValidationError):
        CalendarEventDraft(
            title="X", start_at=datetime(2026, 1, 1, 9, 0), end_at=datetime(2026, 1, 1, 8, 0)
        )


def test_draft_confidence_is_bounded():
    with pytest.raises(ValidationError):
        CalendarEventDraft(
            title="X", start_at=datetime(2026, 1, 1, 9), end_at=datetime(2026, 1, 1, 10), confidence=1.5
        )


def test_note_blank_title():
    assert Note(title=" ", content="x").title == "Untitled Note"


def test_all_day_window():
    assert all_day_window(date(2026, 1, 1)) == (datetime(2026, 1, 1), datetime(2026, 1, 2))


def test_mutation_result():
    assert MutationResult.success().ok
    failed = MutationResult.failure("disk full")
    assert not failed.ok and failed.error == "disk full"


def test_calendar_message_all_day():
    start, end = all_day_window(date(2025, 8, 1))
    event = CalendarEvent(title="Offsite", start_at=start, end_at=end, is_all_day=True)
    assert responses.calendar_message(event, 0.9) == (
        "I've confidently scheduled 'Offsite' for Aug 1, 2025 (all day)"
    )


def test_calendar_message_tentative_morning():
    event = CalendarEvent(
        title="Run", start_at=datetime(2025, 8, 1, 7, 5), end_at=datetime(2025, 8, 1, 7, 35)
    )
    assert responses.calendar_message(event, 0.8) == (
        "I've tentatively scheduled 'Run' for Aug 1, 2025 at 7:05 AM (0.5 hours)"
    )


def test_mixed_naive_and_aware_window_is_compared_in_local_time():
    start = datetime(2026, 1, 1, 9, 0)
    end = datetime(2026, 1, 1, 10, 0).astimezone(timezone.utc)

    event = CalendarEvent(title="Call", start_at=start, end_at=end)

    assert event.end_at == datetime(2026, 1, 1, 10, 0)
    assert event.end_at.tzinfo is None
    earlier = start.astimezone(timezone.utc) - timedelta(hours=1)
    with pytest.raises(ValidationError):
        CalendarEventDraft(title="X", start_at=start, end_at=earlier)


def test_all_day_draft_keeps_its_own_calendar_date():
    tz = timezone(timedelta(hours=-10))
    draft = CalendarEventDraft(
        title="Holiday",
        start_at=datetime(2026, 1, 1, 20, 0, tzinfo=tz),
        end_at=datetime(2026, 1, 1, 21, 0, tzinfo=tz),
        is_all_day=True,
    )
    assert (draft.start_at, draft.end_at) == all_day_window(date(2026, 1, 1))
