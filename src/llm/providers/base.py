from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

class LLMProvider(ABC):
    @abstractmethod
    async def generate(
        self,
        *,
        user: str,
        system: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: int = 300,
    ) -> str:
        """
        Must return the model output as TEXT (callers parse/validate it).

        Raises NetworkError on transport failure and ProtocolError on anything
        the endpoint sends back that is not a usable completion.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
