from datetime import date, datetime, timedelta, timezone

import pytest

from storage.blob_store import CALENDAR_KEY
from storage.calendar_store import CalendarCollection
from violet.errors import ValidationError
from violet.models import CalendarEvent, CalendarEventDraft


def test_create_defaults_end_to_one_hour(blobs):
    calendar = CalendarCollection(blobs)
    event = calendar.create("Standup", datetime(2025, 7, 30, 9, 0)).item
    assert event.end_at == datetime(2025, 7, 30, 10, 0)
    assert event.duration_hours == 1.0


def test_create_rejects_end_before_start(blobs):
    calendar = CalendarCollection(blobs)
    with pytest.raises(ValidationError):
        calendar.create("Backwards", datetime(2025, 7, 30, 9, 0), datetime(2025, 7, 30, 8, 0))
    assert len(calendar) == 0


def test_create_all_day(blobs):
    calendar = CalendarCollection(blobs)
    event = calendar.create_all_day("Offsite", date(2025, 8, 1), category="Work").item
    assert event.is_all_day
    assert event.start_at == datetime(2025, 8, 1, 0, 0)
    assert event.end_at == datetime(2025, 8, 2, 0, 0)


def test_add_from_draft(blobs):
    calendar = CalendarCollection(blobs)
    draft = CalendarEventDraft(
        title="Team meeting",
        start_at=datetime(2025, 7, 30, 14, 0),
        end_at=datetime(2025, 7, 30, 16, 0),
        category="Work",
        confidence=0.9,
    )
    event = calendar.add_from_draft(draft).item
    assert calendar.get(event.id) == event
    assert event.category == "Work"
    assert event.duration_hours == 2.0


def test_add_rejects_duplicate_identity(blobs):
    calendar = CalendarCollection(blobs)
    event = CalendarEvent(title="Gym", start_at=datetime(2025, 7, 30, 7, 0))
    assert calendar.add(event).ok
    assert not calendar.add(event).ok


def test_update_moves_event_and_keeps_duration(blobs):
    calendar = CalendarCollection(blobs)
    event = calendar.create(
        "Review", datetime(2025, 7, 30, 14, 0), datetime(2025, 7, 30, 15, 30)
    ).item

    updated = calendar.update(event.id, start_at=datetime(2025, 7, 31, 9, 0), category="Work").item

    assert updated.id == event.id
    assert updated.end_at == datetime(2025, 7, 31, 10, 30)
    assert updated.category == "Work"
    assert CalendarCollection(blobs).get(event.id) == updated


def test_update_to_all_day_snaps_window(blobs):
    calendar = CalendarCollection(blobs)
    event = calendar.create("Trip", datetime(2025, 8, 2, 13, 0)).item
    updated = calendar.update(event.id, is_all_day=True).item
    assert updated.start_at == datetime(2025, 8, 2, 0, 0)
    assert updated.end_at == datetime(2025, 8, 3, 0, 0)


def test_update_unknown_id_fails(blobs):
    calendar = CalendarCollection(blobs)
    result = calendar.update("missing", title="x")
    assert not result.ok
    assert "not found" in result.error


def test_update_rejects_invalid_changes(blobs):
    calendar = CalendarCollection(blobs)
    event = calendar.create("Gym", datetime(2025, 7, 30, 7, 0)).item
    with pytest.raises(ValidationError):
        calendar.update(event.id, end_at=datetime(2025, 7, 30, 6, 0))
    with pytest.raises(ValidationError):
        calendar.update(event.id, id="other")
    assert calendar.get(event.id) == event


def test_remove_is_idempotent(blobs):
    calendar = CalendarCollection(blobs)
    event = calendar.create("Gym", datetime(2025, 7, 30, 7, 0)).item
    assert calendar.remove(event.id).item == event
    assert calendar.remove(event.id).ok
    assert calendar.list() == []


def test_list_is_ordered_by_start(blobs):
    calendar = CalendarCollection(blobs)
    late = calendar.create("Late", datetime(2025, 7, 30, 18, 0)).item
    early = calendar.create("Early", datetime(2025, 7, 29, 8, 0)).item
    assert [e.id for e in calendar.list()] == [early.id, late.id]


def test_events_on_filters_and_orders(blobs):
    calendar = CalendarCollection(blobs)
    dinner = calendar.create("Dinner", datetime(2025, 7, 30, 18, 0)).item
    calendar.create("Other day", datetime(2025, 7, 31, 9, 0))
    standup = calendar.create("Standup", datetime(2025, 7, 30, 9, 0)).item
    calendar.create("Night before", datetime(2025, 7, 29, 23, 59))

    assert [e.id for e in calendar.events_on(date(2025, 7, 30))] == [standup.id, dinner.id]
    assert calendar.events_on(date(2025, 8, 15)) == []


def test_events_on_uses_the_given_zone(blobs):
    calendar = CalendarCollection(blobs)
    tz = timezone(timedelta(hours=2))
    event = calendar.create("Call", datetime(2025, 7, 29, 23, 0, tzinfo=timezone.utc)).item

    assert calendar.events_on(datetime(2025, 7, 30, tzinfo=tz)) == [event]
    assert calendar.events_on(datetime(2025, 7, 29, tzinfo=timezone.utc)) == [event]


def test_round_trip_and_corrupt_blob(blobs):
    calendar = CalendarCollection(blobs)
    calendar.create("Gym", datetime(2025, 7, 30, 7, 0), category="Health")
    calendar.create_all_day("Holiday", date(2025, 8, 4))

    assert CalendarCollection.deserialize(calendar.serialize()) == calendar.snapshot()
    assert CalendarCollection(blobs).list() == calendar.list()

    blobs.save(CALENDAR_KEY, b"\x00garbage")
    assert CalendarCollection(blobs).list() == []


def test_failed_write_is_rolled_back(blobs):
    calendar = CalendarCollection(blobs)
    event = calendar.create("Gym", datetime(2025, 7, 30, 7, 0)).item
    blobs.failing_keys.add(CALENDAR_KEY)

    assert not calendar.create("Swim", datetime(2025, 7, 30, 8, 0)).ok
    assert not calendar.update(event.id, title="Run").ok
    assert not calendar.remove(event.id).ok
    assert calendar.list() == [event]


def test_add_snaps_all_day_events_to_midnight(blobs):
    calendar = CalendarCollection(blobs)
    event = CalendarEvent(title="Offsite", start_at=datetime(2025, 8, 1, 13, 0), is_all_day=True)

    calendar.add(event)

    stored = CalendarCollection(blobs).list()[0]
    assert stored.start_at == datetime(2025, 8, 1, 0, 0)
    assert stored.end_at == datetime(2025, 8, 2, 0, 0)


def test_naive_and_aware_starts_can_share_the_calendar(blobs):
    calendar = CalendarCollection(blobs)
    aware_start = datetime(2025, 7, 30, 10, 0, tzinfo=timezone.utc)
    naive = calendar.create("naive", datetime(2025, 7, 30, 9, 0)).item
    aware = calendar.create("aware", aware_start).item

    assert aware.start_at.tzinfo is None
    assert aware.start_at == aware_start.astimezone().replace(tzinfo=None)
    assert {e.id for e in calendar.list()} == {naive.id, aware.id}
    assert aware in calendar.events_on(aware.start_at.date())
    assert len(CalendarCollection(blobs).list()) == 2


def test_update_with_aware_start_keeps_duration(blobs):
    calendar = CalendarCollection(blobs)
    event = calendar.create("Review", datetime(2025, 7, 30, 14, 0), datetime(2025, 7, 30, 15, 30)).item
    new_start = datetime(2025, 7, 31, 9, 0, tzinfo=timezone.utc)

    updated = calendar.update(event.id, start_at=new_start).item

    assert updated.start_at == new_start.astimezone().replace(tzinfo=None)
    assert updated.duration == timedelta(hours=1, minutes=30)
    assert len(calendar.list()) == 1
