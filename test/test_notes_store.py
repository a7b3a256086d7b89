from datetime import datetime, timedelta

from storage.blob_store import NOTES_KEY
from storage.notes_store import NotesCollection


class TickingClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


def test_add_and_get(blobs, clock):
    notes = NotesCollection(blobs, clock=clock)
    note = notes.add("Groceries", "milk, eggs").item
    assert notes.get(note.id) == note
    assert note.created_at == note.last_modified_at == clock()


def test_blank_title_becomes_untitled(blobs):
    notes = NotesCollection(blobs)
    assert notes.add("   ", "body").item.title == "Untitled Note"


def test_update_refreshes_modified_time_only(blobs):
    ticking = TickingClock(datetime(2025, 7, 29, 10, 0))
    notes = NotesCollection(blobs, clock=ticking)
    note = notes.add("Draft", "v1").item

    updated = notes.update(note.id, content="v2").item

    assert updated.title == "Draft"
    assert updated.content == "v2"
    assert updated.created_at == note.created_at
    assert updated.last_modified_at > note.last_modified_at


def test_update_unknown_id_fails(blobs):
    assert not NotesCollection(blobs).update("missing", title="x").ok


def test_list_is_most_recently_modified_first(blobs):
    notes = NotesCollection(blobs, clock=TickingClock(datetime(2025, 7, 29, 10, 0)))
    a = notes.add("A", "").item
    b = notes.add("B", "").item
    assert [n.id for n in notes.list()] == [b.id, a.id]

    notes.update(a.id, title="A2")
    assert [n.id for n in notes.list()] == [a.id, b.id]


def test_remove_is_idempotent(blobs):
    notes = NotesCollection(blobs)
    note = notes.add("Temp", "").item
    assert notes.remove(note.id).ok
    assert notes.remove(note.id).ok
    assert len(notes) == 0


def test_round_trip_and_missing_blob(blobs, clock):
    notes = NotesCollection(blobs, clock=clock)
    notes.add("One", "first")
    notes.add("Two", "second")
    assert NotesCollection(blobs).snapshot() == notes.snapshot()
    assert NotesCollection.deserialize(None) == []


def test_failed_write_is_rolled_back(blobs):
    notes = NotesCollection(blobs)
    note = notes.add("Keep", "me").item
    blobs.failing_keys.add(NOTES_KEY)

    assert not notes.add("Lost", "").ok
    assert not notes.update(note.id, title="Changed").ok
    assert notes.list() == [note]


def test_update_without_changes_keeps_modified_time(blobs):
    notes = NotesCollection(blobs, clock=TickingClock(datetime(2025, 7, 29, 10, 0)))
    note = notes.add("Draft", "v1").item

    result = notes.update(note.id)

    assert result.ok
    assert result.item == note
    assert notes.get(note.id).last_modified_at == note.last_modified_at


def test_search_matches_title_or_content_ignoring_case(blobs):
    notes = NotesCollection(blobs, clock=TickingClock(datetime(2025, 7, 29, 10, 0)))
    groceries = notes.add("Groceries", "Milk and eggs").item
    call = notes.add("Call mom", "about dinner and MILK").item
    notes.add("Ideas", "garden shed")

    assert [n.id for n in notes.search("milk")] == [call.id, groceries.id]
    assert [n.id for n in notes.search("GROC")] == [groceries.id]
    assert notes.search("piano") == []
    assert len(notes.search("  ")) == 3
