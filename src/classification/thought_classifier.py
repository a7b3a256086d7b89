import logging

from llm.llm_client import LLMClient
from llm.prompts import CLASSIFICATION_MAX_TOKENS, CLASSIFICATION_SYSTEM, classification_prompt
from violet.errors import NetworkError, ProtocolError, ValidationError
from violet.models import ClassificationOutcome

logger = logging.getLogger(__name__)


def interpret_label(content: str) -> ClassificationOutcome:
    """Map the oracle's one-word answer onto an outcome.

    Exact CALENDAR / TOUCH first. Anything else that mentions CALENDAR or EVENT
    goes to the calendar; all remaining replies are deferred to the inbox.
    """
    label = content.strip().upper()
    if label == "CALENDAR":
        return ClassificationOutcome.calendar()
    if label == "TOUCH":
        return ClassificationOutcome.deferred()
    if "CALENDAR" in label or "EVENT" in label:
        return ClassificationOutcome.calendar()
    return ClassificationOutcome.deferred()


class ThoughtClassifier:

    def __init__(self, llm_client: LLMClient):
        self.llm = llm_client

    async def classify(self, text: str) -> ClassificationOutcome:
        if not text or not text.strip():
            raise ValidationError("Cannot classify empty text")

        try:
            content = await self.llm.complete(
                classification_prompt(text),
                system=CLASSIFICATION_SYSTEM,
                max_tokens=CLASSIFICATION_MAX_TOKENS,
            )
        except (NetworkError, ProtocolError) as e:
            logger.warning(f"Classification failed: {e}")
            return ClassificationOutcome.error(str(e))
        except Exception as e:
            logger.exception("Unexpected classification failure")
            return ClassificationOutcome.error(str(e) or type(e).__name__)

        outcome = interpret_label(content)
        logger.info(f"Classified input as {outcome.kind} (oracle said {content.strip()[:20]!r})")
        return outcome
