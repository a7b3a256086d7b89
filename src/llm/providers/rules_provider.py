from __future__ import annotations
import json
import logging
import re
from datetime import datetime
from typing import Callable, Optional

from extraction import rules
from llm.providers.base import LLMProvider

logger = logging.getLogger(__name__)

_CLASSIFY_INPUT = re.compile(r'User input: "(.*)"\s*Respond with exactly one word', re.S)
_EXTRACT_INPUT = re.compile(r'Text: "(.*)"\s*Extract and format as JSON', re.S)
_TODAY = re.compile(r"Today is \w+, (\d{4}-\d{2}-\d{2}) at (\d{2}:\d{2})\.")


class RuleBasedProvider(LLMProvider):
    """
    Offline oracle: answers the classification and extraction prompts by
    applying the rule table in ``extraction.rules`` instead of calling a model.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.clock = clock

    async def generate(
        self,
        *,
        user: str,
        system: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: int = 300,
    ) -> str:
        m = _CLASSIFY_INPUT.search(user)
        if m:
            text = m.group(1)
            today = self.clock().date()
            return "CALENDAR" if rules.has_schedule_signal(text, today) else "TOUCH"

        m = _EXTRACT_INPUT.search(user)
        if m:
            text = m.group(1)
            reading = rules.read_event(text, self._now_from_prompt(user))
            return json.dumps(reading.to_payload())

        logger.warning("Rule-based provider received an unrecognised prompt")
        return "{}"

    def _now_from_prompt(self, prompt: str) -> datetime:
        m = _TODAY.search(prompt)
        if m:
            try:
                parsed = datetime.strptime(f"{m.group(1)} {m.group(2)}", "%Y-%m-%d %H:%M")
                now = self.clock()
                return parsed.replace(tzinfo=now.tzinfo)
            except ValueError:
                pass
        return self.clock()
