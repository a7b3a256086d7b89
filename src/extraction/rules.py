"""
Deterministic date/time/duration/category rules for calendar extraction.

The same table is written into the extraction prompt, so the oracle and the
offline rule-based provider agree on what "tomorrow", "dinner" or
"meeting" mean. Everything here is a pure function of (text, now).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from violet.models import EventCategory


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

NAMED_PERIODS = {
    "morning": time(9, 0),
    "afternoon": time(14, 0),
    "evening": time(18, 0),
    "night": time(20, 0),
    "tonight": time(20, 0),
}

# start, duration in minutes
MEAL_WINDOWS = {
    "lunch": (time(12, 0), 60),
    "dinner": (time(18, 0), 90),
}

# first match wins
DEFAULT_DURATIONS = (
    ("meeting", 60),
    ("call", 30),
    ("appointment", 60),
    ("breakfast", 60),
    ("brunch", 60),
    ("lunch", 60),
    ("dinner", 90),
)

CATEGORY_KEYWORDS: dict[EventCategory, tuple[str, ...]] = {
    "Work": ("meeting", "conference", "presentation"),
    "Health": ("doctor", "gym", "workout", "medical"),
    "Social": ("dinner", "lunch", "party", "friends"),
    "Personal": ("family", "personal", "shopping", "errands"),
    "Travel": ("flight", "trip", "hotel", "airport"),
}

EVENT_KEYWORDS = ("meeting", "appointment", "call", "conference", "presentation", "class")

DEFAULT_BLOCK_MIN = 120
DAY_START = time(9, 0)
DAY_END = time(20, 0)
ALL_DAY_WINDOW = (time(9, 0), time(17, 0))

CONFIDENCE_EXPLICIT = 0.9
CONFIDENCE_PARTIAL = 0.7
CONFIDENCE_GUESSED = 0.5

_ISO_DATE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
_RANGE = re.compile(
    r"(?<![\d:/-])(?:from\s+)?(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\s*(?:-|–|to|until|till)\s*"
    r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?(?![\d:])",
    re.IGNORECASE,
)
_CLOCK_MERIDIEM = re.compile(
    r"(?<![\d:/-])(?:at\s+)?(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b", re.IGNORECASE
)
_CLOCK_24H = re.compile(r"(?<![\d:/-])(?:at\s+)?(\d{1,2}):(\d{2})(?![\d:])", re.IGNORECASE)
_AT_HOUR = re.compile(r"\bat\s+(\d{1,2})\b(?![:\d])", re.IGNORECASE)
_NOON = re.compile(r"\b(?:at\s+)?noon\b", re.IGNORECASE)
_DURATION = re.compile(
    r"(?:\bfor\s+)?(\d+(?:\.\d+)?)[\s-]*(hours?|hrs?|minutes?|mins?)\b", re.IGNORECASE
)
_HALF_HOUR = re.compile(r"(?:\bfor\s+)?\bhalf an hour\b", re.IGNORECASE)
_AN_HOUR = re.compile(r"\bfor\s+an\s+hour\b", re.IGNORECASE)
_ALL_DAY = re.compile(r"\ball[\s-]day\b", re.IGNORECASE)
_WEEKDAY = re.compile(
    r"\b(?:on\s+|next\s+|this\s+)?(" + "|".join(WEEKDAYS) + r")s?\b", re.IGNORECASE
)
_RELATIVE_DAY = re.compile(r"\b(?:today|tomorrow|tonight|next week)\b", re.IGNORECASE)
_PERIOD_PHRASE = re.compile(r"\b(?:in the|this)\s+(?:morning|afternoon|evening)\b", re.IGNORECASE)

_TITLE_NOISE = (
    _ISO_DATE, _RANGE, _CLOCK_MERIDIEM, _CLOCK_24H, _AT_HOUR, _NOON, _DURATION,
    _HALF_HOUR, _AN_HOUR, _ALL_DAY, _WEEKDAY, _RELATIVE_DAY, _PERIOD_PHRASE,
)
_LEADING_NOISE = {"at", "on", "from", "for", "by", "this", "next", "the", "in"}
_DANGLING = _LEADING_NOISE | {"morning", "afternoon", "evening", "night"}


@dataclass
class RuleReading:
    """Structured reading of a piece of text, in the oracle's JSON shape."""

    title: str
    start: datetime
    end: datetime
    is_all_day: bool
    category: EventCategory
    confidence: float
    duration_min: int

    def to_payload(self) -> dict:
        return {
            "title": self.title,
            "startDate": self.start.strftime("%Y-%m-%d"),
            "startTime": self.start.strftime("%H:%M"),
            "endDate": self.end.strftime("%Y-%m-%d"),
            "endTime": self.end.strftime("%H:%M"),
            "duration": self.duration_min,
            "isAllDay": self.is_all_day,
            "category": self.category,
            "description": None,
            "confidence": self.confidence,
        }


def _has_word(text: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}", text) is not None


def infer_category(text: str) -> EventCategory:
    lower = text.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(_has_word(lower, kw) for kw in keywords):
            return category
    return "General"


def default_duration(text: str) -> Optional[int]:
    lower = text.lower()
    for keyword, minutes in DEFAULT_DURATIONS:
        if _has_word(lower, keyword):
            return minutes
    return None


def next_weekday(today: date, weekday: int) -> date:
    """Next occurrence of ``weekday`` strictly after ``today``."""
    delta = (weekday - today.weekday()) % 7
    return today + timedelta(days=delta or 7)


def resolve_date(text: str, today: date) -> tuple[date, bool]:
    """Return (day, explicit) for the date mentioned in ``text``."""
    lower = text.lower()

    m = _ISO_DATE.search(lower)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3))), True
        except ValueError:
            pass

    if _has_word(lower, "tomorrow"):
        return today + timedelta(days=1), True
    if re.search(r"\bnext week\b", lower):
        return today + timedelta(days=7), True

    m = _WEEKDAY.search(lower)
    if m:
        return next_weekday(today, WEEKDAYS.index(m.group(1).lower())), True

    if _has_word(lower, "today") or _has_word(lower, "tonight"):
        return today, True

    return today, False


def _to_24h(hour: int, minute: int, meridiem: Optional[str]) -> Optional[time]:
    if meridiem:
        meridiem = meridiem.lower()
        if not 1 <= hour <= 12:
            return None
        if meridiem == "pm" and hour < 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0
    elif 1 <= hour <= 7:
        # bare "at 3" or "12:30 to 1:30" means the afternoon
        hour += 12
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return time(hour, minute)


def parse_time_range(text: str) -> Optional[tuple[time, time]]:
    for m in _RANGE.finditer(text):
        h1, m1, mer1, h2, m2, mer2 = m.groups()
        if not (mer1 or mer2 or m1 or m2):
            continue
        end = _to_24h(int(h2), int(m2 or 0), mer2)
        start_mer = mer1 or mer2
        start = _to_24h(int(h1), int(m1 or 0), start_mer)
        if start is None or end is None:
            continue
        if not mer1 and mer2 and start > end:
            # "11-1pm": the start is in the morning
            start = _to_24h(int(h1), int(m1 or 0), "am")
            if start is None:
                continue
        return start, end
    return None


def parse_clock_time(text: str) -> Optional[time]:
    m = _CLOCK_MERIDIEM.search(text)
    if m:
        return _to_24h(int(m.group(1)), int(m.group(2) or 0), m.group(3))
    m = _CLOCK_24H.search(text)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return time(hour, minute)
    if _NOON.search(text):
        return time(12, 0)
    m = _AT_HOUR.search(text)
    if m:
        return _to_24h(int(m.group(1)), 0, None)
    return None


def parse_duration(text: str) -> Optional[int]:
    """Explicit duration in minutes ("2 hour meeting", "for 30 mins")."""
    m = _DURATION.search(text)
    if m:
        amount = float(m.group(1))
        unit = m.group(2).lower()
        minutes = amount * 60 if unit.startswith("h") else amount
        if minutes > 0:
            return int(round(minutes))
    if _HALF_HOUR.search(text):
        return 30
    if _AN_HOUR.search(text):
        return 60
    return None


def next_reasonable_start(day: date, now: datetime) -> datetime:
    """Start of the default block: next full hour, kept inside 09:00-20:00."""
    tz = now.tzinfo
    if day != now.date():
        return datetime.combine(day, DAY_START, tzinfo=tz)

    candidate = now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
    if candidate.time() < DAY_START and candidate.date() == now.date():
        return datetime.combine(now.date(), DAY_START, tzinfo=tz)
    if candidate.date() > now.date() or candidate.time() > DAY_END:
        return datetime.combine(now.date() + timedelta(days=1), DAY_START, tzinfo=tz)
    return candidate


def clean_title(text: str) -> str:
    title = text
    for pattern in _TITLE_NOISE:
        title = pattern.sub(" ", title)
    words = title.split()
    while words and words[-1].lower().strip(",.;:-") in _DANGLING:
        words.pop()
    while words and words[0].lower().strip(",.;:-") in _LEADING_NOISE:
        words.pop(0)
    title = " ".join(words).strip(" ,.;:-")
    if not title:
        return text.strip()
    return title[0].upper() + title[1:]


def has_schedule_signal(text: str, today: date) -> bool:
    """Whether the text reads like something that belongs on a calendar."""
    lower = text.lower()
    _, date_explicit = resolve_date(lower, today)
    return (
        date_explicit
        or parse_time_range(lower) is not None
        or parse_clock_time(lower) is not None
        or _ALL_DAY.search(lower) is not None
        or any(_has_word(lower, w) for w in (*NAMED_PERIODS, *MEAL_WINDOWS, *EVENT_KEYWORDS))
    )


def read_event(text: str, now: datetime) -> RuleReading:
    """Apply the full rule table to ``text`` as of ``now``."""
    lower = text.lower()
    tz = now.tzinfo
    day, date_explicit = resolve_date(lower, now.date())
    explicit_duration = parse_duration(lower)
    time_explicit = False
    duration_explicit = explicit_duration is not None
    is_all_day = _ALL_DAY.search(lower) is not None

    if is_all_day:
        start_t, end_t = ALL_DAY_WINDOW
        start = datetime.combine(day, start_t, tzinfo=tz)
        end = datetime.combine(day, end_t, tzinfo=tz)
        time_explicit = duration_explicit = True
    else:
        span = parse_time_range(lower)
        clock = parse_clock_time(lower) if span is None else None
        meal = next((m for m in MEAL_WINDOWS if _has_word(lower, m)), None)
        period = next((p for p in NAMED_PERIODS if _has_word(lower, p)), None)
        typed_duration = default_duration(lower)

        if span is not None:
            start = datetime.combine(day, span[0], tzinfo=tz)
            end = datetime.combine(day, span[1], tzinfo=tz)
            if end <= start:
                end += timedelta(days=1)
            time_explicit = duration_explicit = True
        else:
            if clock is not None:
                start = datetime.combine(day, clock, tzinfo=tz)
                time_explicit = True
                minutes = explicit_duration or typed_duration or 60
            elif meal is not None:
                meal_start, meal_minutes = MEAL_WINDOWS[meal]
                start = datetime.combine(day, meal_start, tzinfo=tz)
                minutes = explicit_duration or meal_minutes
            elif period is not None:
                start = datetime.combine(day, NAMED_PERIODS[period], tzinfo=tz)
                minutes = explicit_duration or typed_duration or DEFAULT_BLOCK_MIN
            else:
                start = next_reasonable_start(day, now)
                minutes = explicit_duration or DEFAULT_BLOCK_MIN
            end = start + timedelta(minutes=minutes)

    explicit = (date_explicit, time_explicit, duration_explicit)
    if all(explicit):
        confidence = CONFIDENCE_EXPLICIT
    elif any(explicit):
        confidence = CONFIDENCE_PARTIAL
    else:
        confidence = CONFIDENCE_GUESSED

    return RuleReading(
        title=clean_title(text),
        start=start,
        end=end,
        is_all_day=is_all_day,
        category=infer_category(lower),
        confidence=confidence,
        duration_min=int((end - start).total_seconds() // 60),
    )
