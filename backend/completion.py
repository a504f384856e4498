import logging
from typing import Optional

import anthropic

from config import Settings
from errors import MalformedCompletion, UpstreamFailure

logger = logging.getLogger(__name__)


class CompletionClient:
    """Sends one user-role prompt to the Claude Messages API and returns the reply text."""

    def __init__(self, settings: Settings, client: Optional[anthropic.AsyncAnthropic] = None):
        self.model = settings.completion_model
        self.max_tokens = settings.completion_max_tokens
        if client is None and settings.anthropic_api_key:
            # No automatic retries; the timeout bounds each request.
            client = anthropic.AsyncAnthropic(
                api_key=settings.anthropic_api_key,
                timeout=settings.completion_timeout_s,
                max_retries=0,
            )
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def complete(self, prompt: str) -> str:
        if self._client is None:
            raise UpstreamFailure("API key not configured")

        logger.info("completion event=request model=%s prompt_chars=%d", self.model, len(prompt))
        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}]
            )
        except anthropic.APIError as e:
            logger.warning("completion event=failed model=%s error=%s", self.model, e)
            raise UpstreamFailure(f"API error: {e}") from e

        if not response.content or response.content[0].type != "text":
            raise MalformedCompletion("Bad AI response: empty reply")

        ai_text = response.content[0].text
        logger.debug("completion event=reply text=%r", ai_text)
        return ai_text
