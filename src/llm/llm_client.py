from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from llm.providers.base import LLMProvider
from violet.errors import ParseError

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def extract_json_object(text: str) -> dict[str, Any]:
    """Pull a single JSON object out of oracle text.

    Tolerates markdown code fences and chatter around the object, which models
    add despite being told not to. Raises ParseError when nothing usable is found.
    """
    if not text or not text.strip():
        raise ParseError("empty oracle output")

    cleaned = _FENCE.sub("", text.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ParseError("no JSON object in oracle output")
        try:
            data = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError as e:
            raise ParseError(f"invalid JSON in oracle output: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(f"expected a JSON object, got {type(data).__name__}")
    return data


class LLMClient:
    """Facade over one oracle provider, shared by classification and extraction."""

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    async def complete(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        max_tokens: int = 300,
        temperature: float = 0.1,
    ) -> str:
        return await self.provider.generate(
            user=prompt,
            system=system,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    async def complete_json(self, prompt: str, *, max_tokens: int = 300) -> dict[str, Any]:
        text = await self.complete(prompt, max_tokens=max_tokens)
        return extract_json_object(text)

    async def aclose(self) -> None:
        await self.provider.aclose()
