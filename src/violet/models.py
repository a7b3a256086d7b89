from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta
from typing import Generic, Literal, Optional, TypeVar, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


EventCategory = Literal["General", "Work", "Personal", "Health", "Social", "Travel"]
EVENT_CATEGORIES: tuple[str, ...] = get_args(EventCategory)

DraftSource = Literal["oracle", "fallback"]
OutcomeKind = Literal["calendar", "deferred", "error"]

UNTITLED_NOTE = "Untitled Note"
DEFAULT_EVENT_DURATION = timedelta(hours=1)


def new_id() -> str:
    return str(uuid.uuid4())


def all_day_window(day: date) -> tuple[datetime, datetime]:
    """Local midnight to the following midnight."""
    start = datetime.combine(day, time(0, 0))
    return start, start + timedelta(days=1)


def to_local(dt: datetime) -> datetime:
    """Naive local time. Aware values are converted first."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


class CapturedThought(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    text: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("text must not be blank")
        return v


class ClassificationOutcome(BaseModel):
    """Result of one classification call. Never persisted."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    message: Optional[str] = None

    @classmethod
    def calendar(cls) -> "ClassificationOutcome":
        return cls(kind="calendar")

    @classmethod
    def deferred(cls) -> "ClassificationOutcome":
        return cls(kind="deferred")

    @classmethod
    def error(cls, message: str) -> "ClassificationOutcome":
        return cls(kind="error", message=message)

    @property
    def is_error(self) -> bool:
        return self.kind == "error"


def _normalise_window(
    start_at: datetime, end_at: datetime, is_all_day: bool
) -> tuple[datetime, datetime]:
    # all-day events keep the calendar date they were given, in its own zone
    if is_all_day:
        return all_day_window(start_at.date())
    start_at, end_at = to_local(start_at), to_local(end_at)
    if end_at < start_at:
        raise ValueError("end_at must not be earlier than start_at")
    return start_at, end_at


class CalendarEventDraft(BaseModel):
    title: str = Field(..., min_length=1)
    start_at: datetime
    end_at: datetime
    description: Optional[str] = None
    category: EventCategory = "General"
    is_all_day: bool = False
    confidence: float = Field(0.5, ge=0.0, le=1.0)
    source: DraftSource = "oracle"

    @model_validator(mode="after")
    def normalise_window(self) -> "CalendarEventDraft":
        self.start_at, self.end_at = _normalise_window(self.start_at, self.end_at, self.is_all_day)
        return self


class CalendarEvent(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1)
    start_at: datetime
    # None means "one hour after start_at"
    end_at: Optional[datetime] = None
    description: Optional[str] = None
    category: Optional[EventCategory] = None
    is_all_day: bool = False

    @model_validator(mode="after")
    def default_and_normalise_window(self) -> "CalendarEvent":
        end_at = self.end_at if self.end_at is not None else self.start_at + DEFAULT_EVENT_DURATION
        self.start_at, self.end_at = _normalise_window(self.start_at, end_at, self.is_all_day)
        return self

    @property
    def duration(self) -> timedelta:
        return self.end_at - self.start_at

    @property
    def duration_hours(self) -> float:
        return self.duration.total_seconds() / 3600

    @classmethod
    def from_draft(cls, draft: CalendarEventDraft) -> "CalendarEvent":
        return cls(
            title=draft.title,
            start_at=draft.start_at,
            end_at=draft.end_at,
            description=draft.description,
            category=draft.category,
            is_all_day=draft.is_all_day,
        )


class Note(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str = UNTITLED_NOTE
    content: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    last_modified_at: datetime = Field(default_factory=datetime.now)

    @field_validator("title")
    @classmethod
    def title_or_placeholder(cls, v: str) -> str:
        v2 = v.strip()
        return v2 if v2 else UNTITLED_NOTE


class NoteDraft(BaseModel):
    """Pre-filled note shown to the user before a Touch Later item becomes a note."""

    title: str
    content: str


T = TypeVar("T")


class MutationResult(BaseModel, Generic[T]):
    """Outcome of a collection mutation and its paired persistence write."""

    ok: bool
    item: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, item: Optional[T] = None) -> "MutationResult[T]":
        return cls(ok=True, item=item)

    @classmethod
    def failure(cls, error: str, item: Optional[T] = None) -> "MutationResult[T]":
        return cls(ok=False, item=item, error=error)
