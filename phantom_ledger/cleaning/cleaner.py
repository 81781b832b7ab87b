"""
Description cleaners.

The cleaning strategy is picked once, at construction time: the rule
catalog alone, or an LLM pass that falls back to the catalog item by item.
"""

import asyncio
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import httpx
import structlog

from ..config import Settings, get_settings
from ..integrations.groq import GroqClient, GroqError
from ..models import CleanerKind
from .rules import apply_aliases, apply_rules

logger = structlog.get_logger()

SYSTEM_PROMPT = """You clean bank transaction descriptions. For each numbered line I send, return ONLY the clean merchant or payee name on the same numbered line.

Rules:
- Extract the person, company, or merchant name only
- Remove bank codes, reference numbers, dates, card numbers, confirmation numbers
- Remove prefixes like "FUNDS TRANSFER WIRE FROM", "MISC DEPOSIT", "DEBIT CARD PURCH", etc.
- Keep it short, just the name and nothing else
- If the input is already a clean name, return it unchanged
- If it's a fee or service charge, return a short label like "Wire Fee", "Service Fee", "Overdraft Fee"
- Never return empty lines; if unsure, return the input unchanged
- Return exactly the same number of lines as the input

Example input:
1. RICA RDO EL JAU HARI ABDEL
2. INCOMING WIRE FEE
3. WMT PLUS JEANETTE M

Example output:
1. Rica Rdo El Jau Hari Abdel
2. Incoming Wire Fee
3. WMT Plus Jeanette M"""

_NUMBERED_LINE = re.compile(r"^(\d+)\.\s*(.+)")


def _rule_clean(description: str) -> str:
    return apply_rules(description) if description else description


def number_lines(descriptions: List[str]) -> str:
    return "\n".join(f"{i + 1}. {d}" for i, d in enumerate(descriptions))


def parse_numbered_lines(content: str, batch_length: int) -> Dict[int, str]:
    """Map zero-based batch index -> cleaned text; out-of-range and empty answers are dropped."""
    answers: Dict[int, str] = {}
    for line in content.split("\n"):
        if not line.strip():
            continue
        match = _NUMBERED_LINE.match(line)
        if not match:
            continue
        index = int(match.group(1)) - 1
        cleaned = match.group(2).strip()
        if 0 <= index < batch_length and cleaned:
            answers[index] = cleaned
    return answers


class DescriptionCleaner(ABC):
    """Turns sanitized statement memos into short payee names."""

    kind: CleanerKind

    @abstractmethod
    async def clean_many(self, descriptions: List[str]) -> List[str]:
        """Clean every description; the result is aligned with the input."""

    async def close(self) -> None:
        return None


class RuleBasedCleaner(DescriptionCleaner):
    """Rule catalog followed by the merchant alias table."""

    kind = CleanerKind.RULES

    async def clean_many(self, descriptions: List[str]) -> List[str]:
        return [apply_aliases(_rule_clean(d)) for d in descriptions]


class AIAssistedCleaner(DescriptionCleaner):
    """
    Cleans in numbered batches through the Groq chat API.

    Every item starts from its rule-based result and is replaced only by a
    usable numbered answer. A batch that times out, fails or comes back
    malformed keeps the rule results. Aliases are applied last either way.
    """

    kind = CleanerKind.AI_ASSISTED

    def __init__(
        self,
        client: Optional[GroqClient] = None,
        batch_size: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.client = client or GroqClient()
        self.batch_size = max(1, batch_size or settings.ai_clean_batch_size)
        self.timeout_seconds = (
            settings.ai_clean_timeout_seconds if timeout_seconds is None else timeout_seconds
        )

    async def clean_many(self, descriptions: List[str]) -> List[str]:
        results = [_rule_clean(d) for d in descriptions]
        if not descriptions:
            return results

        batch_count = (len(descriptions) + self.batch_size - 1) // self.batch_size
        improved = 0

        for batch_index in range(batch_count):
            offset = batch_index * self.batch_size
            batch = descriptions[offset:offset + self.batch_size]
            answers = await self._clean_batch(batch, batch_index, batch_count)
            for index, cleaned in answers.items():
                results[offset + index] = cleaned
            improved += len(answers)

        logger.info(
            "AI cleaning finished",
            descriptions=len(descriptions),
            batches=batch_count,
            answered=improved,
        )
        return [apply_aliases(r) for r in results]

    async def _clean_batch(
        self,
        batch: List[str],
        batch_index: int,
        batch_count: int,
    ) -> Dict[int, str]:
        try:
            content = await asyncio.wait_for(
                self.client.complete(SYSTEM_PROMPT, number_lines(batch)),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "AI cleaning batch timed out",
                batch=batch_index + 1,
                batches=batch_count,
                timeout=self.timeout_seconds,
            )
            return {}
        except GroqError as e:
            logger.warning(
                "AI cleaning batch failed",
                batch=batch_index + 1,
                batches=batch_count,
                status=e.status_code,
            )
            return {}
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.warning(
                "AI cleaning batch error",
                batch=batch_index + 1,
                batches=batch_count,
                error=str(e),
            )
            return {}

        return parse_numbered_lines(content, len(batch))

    async def close(self) -> None:
        await self.client.close()


def build_cleaner(settings: Optional[Settings] = None) -> DescriptionCleaner:
    """AI-assisted cleaning only when an API key is configured."""
    settings = settings or get_settings()
    if settings.ai_cleaning_enabled:
        logger.info("Using AI-assisted description cleaning", model=settings.groq_model)
        return AIAssistedCleaner(
            client=GroqClient(
                api_key=settings.groq_api_key,
                api_url=settings.groq_api_url,
                model=settings.groq_model,
            ),
            batch_size=settings.ai_clean_batch_size,
            timeout_seconds=settings.ai_clean_timeout_seconds,
        )
    return RuleBasedCleaner()
