from violet.models import CalendarEvent, Note

CONFIDENT_THRESHOLD = 0.8


def _day(dt) -> str:
    return f"{dt:%b} {dt.day}, {dt.year}"


def _clock(dt) -> str:
    return dt.strftime("%I:%M %p").lstrip("0")


def calendar_message(event: CalendarEvent, confidence: float) -> str:
    tone = "confidently" if confidence > CONFIDENT_THRESHOLD else "tentatively"
    if event.is_all_day:
        when = f"{_day(event.start_at)} (all day)"
    else:
        when = f"{_day(event.start_at)} at {_clock(event.start_at)} ({event.duration_hours:.1f} hours)"
    return f"I've {tone} scheduled '{event.title}' for {when}"


def deferred_message(text: str) -> str:
    return (
        f"I've added '{text}' to your Touch Later list. You can organize it when "
        "you're ready by swiping left for Calendar or right for Notes."
    )


def error_message(message: str) -> str:
    return f"Sorry, I encountered an error: {message}"


def note_message(note: Note) -> str:
    return f"Saved '{note.title}' to your notes."
