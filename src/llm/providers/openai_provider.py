from __future__ import annotations
import json
import logging
from typing import Optional

import httpx

from violet.errors import ConfigurationError, NetworkError, ProtocolError
from .base import LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Chat-completions provider. One POST per call, no retries."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        base_url: str = "https://api.openai.com/v1",
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is missing")

        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    @property
    def url(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def generate(
        self,
        *,
        user: str,
        system: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: int = 300,
    ) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": user})
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            r = await self._client.post(self.url, headers=headers, json=payload)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise ProtocolError("Invalid URL") from e
        except httpx.RequestError as e:
            logger.warning(f"Oracle transport failure: {e!r}")
            raise NetworkError(f"Network error: {e}") from e

        if r.status_code != 200:
            logger.warning(f"Oracle returned HTTP {r.status_code}")
            raise ProtocolError(
                f"API error: Status code {r.status_code}", status_code=r.status_code
            )

        if not r.content:
            raise ProtocolError("No data received", status_code=r.status_code)

        try:
            data = r.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProtocolError(f"JSON parsing error: {e}", status_code=r.status_code) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProtocolError("Failed to parse response", status_code=r.status_code) from e

        if not isinstance(content, str):
            raise ProtocolError("Failed to parse response", status_code=r.status_code)

        return content

    async def aclose(self) -> None:
        await self._client.aclose()
