"""
Event extraction: free text -> CalendarEventDraft.

The oracle does the language work; this module turns its JSON into a draft
and guarantees that *something* actionable comes back. Transport errors,
bad envelopes and unusable payloads all degrade to the fallback draft, so
``EventExtractor.extract`` never raises.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from extraction import rules
from llm.llm_client import LLMClient
from llm.prompts import EXTRACTION_MAX_TOKENS, extraction_prompt
from llm.schemas import ExtractedEvent
from violet.errors import NetworkError, ParseError, ProtocolError
from violet.models import DEFAULT_EVENT_DURATION, CalendarEventDraft

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.3
UNTITLED_EVENT = "Untitled Event"

_DATE_FORMAT = "%Y-%m-%d"
_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, _DATE_FORMAT).date()
    except ValueError:
        return None


def _parse_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    return None


def combine_date_time(
    date_str: Optional[str], time_str: Optional[str], tz: Optional[tzinfo] = None
) -> Optional[datetime]:
    """Combine ``YYYY-MM-DD`` and ``HH:MM`` into one local timestamp.

    A date whose time does not parse lands on midnight. No usable date -> None.
    """
    day = _parse_date(date_str)
    if day is None:
        return None
    clock = _parse_time(time_str) or time(0, 0)
    return datetime.combine(day, clock, tzinfo=tz)


def fallback_draft(text: str, now: datetime) -> CalendarEventDraft:
    title = text.strip() or UNTITLED_EVENT
    return CalendarEventDraft(
        title=title,
        start_at=now + timedelta(hours=1),
        end_at=now + timedelta(hours=2),
        description=f"Parsed from: {text}",
        category="General",
        is_all_day=False,
        confidence=FALLBACK_CONFIDENCE,
        source="fallback",
    )


def _resolve_end(fields: ExtractedEvent, start: datetime) -> datetime:
    duration = timedelta(minutes=fields.duration) if fields.duration else DEFAULT_EVENT_DURATION

    if fields.end_date:
        end = combine_date_time(fields.end_date, fields.end_time, start.tzinfo)
        if end is None:
            raise ParseError(f"unparseable endDate {fields.end_date!r}")
    else:
        end_clock = _parse_time(fields.end_time)
        if end_clock is not None:
            end = datetime.combine(start.date(), end_clock, tzinfo=start.tzinfo)
        else:
            end = start + duration

    if end < start:
        if end.date() == start.date():
            # 22:00-01:00 written against a single date
            end += timedelta(days=1)
        else:
            end = start + duration
    return end


def build_draft(payload: dict[str, Any], text: str, now: datetime) -> CalendarEventDraft:
    """Turn an oracle payload into a draft, or raise ParseError."""
    try:
        fields = ExtractedEvent.model_validate(payload)
    except PydanticValidationError as e:
        raise ParseError(f"unusable extraction payload ({e.error_count()} errors)") from e

    start = combine_date_time(fields.start_date, fields.start_time, now.tzinfo)
    if start is None:
        raise ParseError(f"missing or unparseable startDate {fields.start_date!r}")
    end = _resolve_end(fields, start)

    try:
        return CalendarEventDraft(
            title=fields.title,
            start_at=start,
            end_at=end,
            description=fields.description,
            category=fields.category or rules.infer_category(text),
            is_all_day=fields.is_all_day,
            confidence=fields.confidence,
            source="oracle",
        )
    except PydanticValidationError as e:
        raise ParseError(f"draft failed validation: {e}") from e


class EventExtractor:

    def __init__(self, llm_client: LLMClient, clock: Callable[[], datetime] = datetime.now):
        self.llm = llm_client
        self.clock = clock

    async def extract(self, text: str, now: Optional[datetime] = None) -> CalendarEventDraft:
        now = now or self.clock()

        if not text or not text.strip():
            logger.warning("Extraction called with empty text, using fallback draft")
            return fallback_draft(text or "", now)

        try:
            payload = await self.llm.complete_json(
                extraction_prompt(text, now), max_tokens=EXTRACTION_MAX_TOKENS
            )
            draft = build_draft(payload, text, now)
        except (NetworkError, ProtocolError) as e:
            logger.warning(f"Extraction oracle call failed, using fallback draft: {e}")
            return fallback_draft(text, now)
        except ParseError as e:
            logger.warning(f"Could not parse extraction payload, using fallback draft: {e}")
            return fallback_draft(text, now)
        except Exception:
            logger.exception("Unexpected extraction failure, using fallback draft")
            return fallback_draft(text, now)

        logger.info(
            f"Extracted '{draft.title}' {draft.start_at.isoformat()} -> {draft.end_at.isoformat()} "
            f"({draft.category}, confidence {draft.confidence:.2f})"
        )
        return draft
