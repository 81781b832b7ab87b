"""
Groq chat-completions client (OpenAI-compatible API).
"""

from typing import Any, Dict, Optional

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import get_settings

logger = structlog.get_logger()


class GroqError(Exception):
    """Non-success answer from the Groq API."""
    def __init__(self, message: str, status_code: int = 0, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class GroqClient:
    """
    Minimal async client for a single chat completion.

    Transport failures are retried with exponential backoff; HTTP error
    statuses are raised immediately as GroqError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = get_settings()
        self.api_key = api_key or self.settings.groq_api_key
        self.api_url = api_url or self.settings.groq_api_url
        self.model = model or self.settings.groq_model
        self.max_attempts = max(1, self.settings.ai_clean_max_attempts)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=30.0,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        client = await self._get_client()
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        ):
            with attempt:
                return await client.post(self.api_url, json=payload)

    async def complete(self, system_prompt: str, user_content: str) -> str:
        """
        Run one chat completion and return the assistant message text.

        Raises:
            GroqError: the API answered with an error status.
            httpx.HTTPError: the request could not be delivered.
            ValueError / KeyError: the body is not a chat completion.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            "temperature": 0,
            "max_tokens": 4096,
        }

        response = await self._post(payload)

        if response.status_code >= 400:
            raise GroqError(
                f"API error: {response.status_code}",
                status_code=response.status_code,
                details=response.text,
            )

        data = response.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (IndexError, TypeError) as e:
            raise KeyError("choices") from e
        return content or ""
