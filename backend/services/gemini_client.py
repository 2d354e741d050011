"""Google Gemini API wrapper for query embeddings and reasoning calls."""

import asyncio
import logging
import re

from google import genai
from google.genai import errors, types

from config import Settings
from models.requests import ModelTier
from services.errors import (
    ConfigurationError,
    RateLimitedError,
    UpstreamServiceError,
    bounded,
)

logger = logging.getLogger(__name__)

_RETRY_DELAY = re.compile(r"(\d+(?:\.\d+)?)s")

# Output budget per tier; the light tier is told to be brief as well.
MAX_OUTPUT_TOKENS = {
    ModelTier.FULL: 8192,
    ModelTier.LIGHT: 4096,
}


class GeminiClient:
    """Thin async wrapper over ``google.genai`` with typed error mapping.

    The underlying SDK client is created on first use so that an app without a
    key can still start and report itself as unconfigured.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._client: genai.Client | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.gemini_api_key)

    def _get_client(self) -> genai.Client:
        if not self.settings.gemini_api_key:
            raise ConfigurationError("Missing GEMINI_API_KEY")
        if self._client is None:
            self._client = genai.Client(api_key=self.settings.gemini_api_key)
        return self._client

    def model_for(self, tier: ModelTier) -> str:
        if tier is ModelTier.FULL:
            return self.settings.reasoning_model_full
        return self.settings.reasoning_model_light

    def timeout_for(self, tier: ModelTier) -> float:
        if tier is ModelTier.FULL:
            return self.settings.reasoning_timeout_full
        return self.settings.reasoning_timeout_light

    async def embed(self, text: str) -> list[float]:
        """Embed a single retrieval query."""
        client = self._get_client()
        config = types.EmbedContentConfig(
            task_type="RETRIEVAL_QUERY",
            output_dimensionality=self.settings.embedding_dimensions,
        )
        try:
            response = await bounded(
                client.aio.models.embed_content(
                    model=self.settings.embedding_model,
                    contents=text,
                    config=config,
                ),
                service="embedding",
                timeout=self.settings.embedding_timeout,
            )
        except errors.APIError as e:
            raise self._map_api_error("embedding", e) from e

        if not response.embeddings or response.embeddings[0].values is None:
            raise UpstreamServiceError("embedding", "response contained no embedding")
        return list(response.embeddings[0].values)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed independent queries concurrently, preserving input order."""
        return list(await asyncio.gather(*(self.embed(text) for text in texts)))

    async def complete(
        self,
        system_instruction: str,
        payload: str,
        tier: ModelTier,
    ) -> str:
        """Send one reasoning request and return the raw response text."""
        client = self._get_client()
        model = self.model_for(tier)
        logger.debug("Sending %d-char payload to %s", len(payload), model)
        try:
            response = await bounded(
                client.aio.models.generate_content(
                    model=model,
                    contents=payload,
                    config=types.GenerateContentConfig(
                        system_instruction=system_instruction,
                        temperature=0.0,
                        max_output_tokens=MAX_OUTPUT_TOKENS[tier],
                    ),
                ),
                service="reasoning",
                timeout=self.timeout_for(tier),
            )
        except errors.APIError as e:
            raise self._map_api_error("reasoning", e) from e

        text = response.text
        if not text:
            raise UpstreamServiceError("reasoning", f"{model} returned an empty response")
        return text

    def _map_api_error(self, service: str, error: errors.APIError) -> Exception:
        if error.code == 429:
            retry_after = _retry_after_hint(error) or self.settings.rate_limit_retry_after
            logger.warning("%s service rate limited, retry after %ss", service, retry_after)
            return RateLimitedError(service, retry_after)
        if error.code in (401, 403):
            return ConfigurationError(f"{service} service rejected credentials: {error.message}")
        logger.error("%s service error %s: %s", service, error.code, error.message)
        return UpstreamServiceError(service, f"{error.code} {error.message}")


def _retry_after_hint(error: errors.APIError) -> int | None:
    """Extract RetryInfo.retryDelay (e.g. ``"17s"``) from the error details."""
    details = error.details if isinstance(error.details, dict) else {}
    body = details.get("error", details)
    for item in body.get("details", []) if isinstance(body, dict) else []:
        if isinstance(item, dict) and str(item.get("@type", "")).endswith("RetryInfo"):
            match = _RETRY_DELAY.fullmatch(str(item.get("retryDelay", "")))
            if match:
                return max(1, round(float(match.group(1))))
    return None
