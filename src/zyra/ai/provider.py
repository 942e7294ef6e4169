"""Text generation provider adapters."""

import json
from abc import ABC, abstractmethod
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from zyra.common.config import ZyraSettings
from zyra.common.exceptions import ServiceUnavailableError, UpstreamServiceError
from zyra.common.logging import get_logger

logger = get_logger("ai.provider")


class TextProvider(ABC):
    """Sends one prompt and returns the model's JSON object reply."""

    @abstractmethod
    async def complete_json(self, prompt: str) -> dict[str, Any]: ...


class OpenAIProvider(TextProvider):
    """Chat-completions provider for any OpenAI-compatible endpoint."""

    def __init__(self, settings: ZyraSettings, client: AsyncOpenAI | None = None):
        self.model_name = settings.openai_model
        self._configured = bool(settings.openai_api_key) or client is not None
        if client is None and self._configured:
            client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url or None,
            )
        self.client = client

    async def complete_json(self, prompt: str) -> dict[str, Any]:
        if not self._configured:
            raise ServiceUnavailableError("AI provider not configured")

        logger.info("Sending completion request with model: %s", self.model_name)
        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content or "{}"
            result = json.loads(content)
        except OpenAIError as e:
            logger.error("Completion request failed: %s", e)
            raise UpstreamServiceError("AI provider request failed", service="openai") from e
        except (json.JSONDecodeError, IndexError) as e:
            logger.error("Unparseable completion: %s", e)
            raise UpstreamServiceError("AI provider returned malformed output", service="openai") from e

        if not isinstance(result, dict):
            raise UpstreamServiceError("AI provider returned malformed output", service="openai")
        return result
