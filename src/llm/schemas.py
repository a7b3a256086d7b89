from __future__ import annotations
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from violet.models import EVENT_CATEGORIES


class ExtractedEvent(BaseModel):
    """Oracle extraction payload. Field names follow the JSON the prompt asks for."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(..., min_length=1)
    start_date: Optional[str] = Field(default=None, alias="startDate")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    duration: Optional[int] = None
    is_all_day: bool = Field(default=False, alias="isAllDay")
    category: Optional[str] = None
    description: Optional[str] = None
    confidence: float = 0.5

    @field_validator("title", mode="before")
    @classmethod
    def title_is_text(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("title must be a non-empty string")
        return v.strip()

    @field_validator("start_date", "start_time", "end_date", "end_time", "description", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if not isinstance(v, str):
            return None
        v = v.strip()
        if not v or v.lower() in {"null", "none"}:
            return None
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def duration_minutes(cls, v: Any) -> Optional[int]:
        try:
            minutes = int(float(v))
        except (TypeError, ValueError, OverflowError):
            return None
        return minutes if minutes > 0 else None

    @field_validator("is_all_day", mode="before")
    @classmethod
    def truthy(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in {"true", "yes", "1"}
        return bool(v)

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, v: Any) -> Optional[str]:
        if not isinstance(v, str):
            return None
        for name in EVENT_CATEGORIES:
            if v.strip().lower() == name.lower():
                return name
        return None

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> float:
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.5
        if value != value:  # NaN
            return 0.5
        return min(max(value, 0.0), 1.0)
