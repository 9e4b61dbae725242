"""Text-completion client backed by pydantic-ai.

One call per request, plain text out: the reply is handed to the extractor
and validator rather than to pydantic-ai's structured output, because the
contract with the front end is the JSON text the model writes. Provider
imports are lazy to avoid import-time errors when credentials are missing.
"""

from __future__ import annotations

from typing import Optional, Protocol

from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError

from app.core.config import CompletionSettings
from app.core.errors import UpstreamError
from app.core.logging import get_logger

logger = get_logger(__name__)


class TextCompleter(Protocol):
    async def complete(self, prompt: str) -> str: ...


def _build_google_model(cfg: CompletionSettings):
    """Build Google Gemini model for pydantic-ai (lazy import)."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    provider = GoogleProvider(api_key=cfg.gemini_api_key)
    return GoogleModel(cfg.gemini_model, provider=provider)


def _build_openrouter_model(cfg: CompletionSettings):
    """Build OpenRouter model via OpenAI-compatible provider (lazy import)."""
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    provider = OpenAIProvider(
        api_key=cfg.openrouter_api_key,
        base_url="https://openrouter.ai/api/v1",
    )
    return OpenAIChatModel(cfg.openrouter_model, provider=provider)


def _api_key_for(cfg: CompletionSettings) -> Optional[str]:
    if (cfg.model_provider or "google").lower() == "openrouter":
        return cfg.openrouter_api_key
    return cfg.gemini_api_key


def build_model_by_settings(cfg: CompletionSettings):
    provider = (cfg.model_provider or "google").lower()
    if provider == "openrouter":
        return _build_openrouter_model(cfg)
    return _build_google_model(cfg)


class CompletionClient:
    """Submits a composed prompt and returns the raw reply text."""

    def __init__(self, cfg: CompletionSettings) -> None:
        self.cfg = cfg
        self._agent: Optional[Agent[None, str]] = None

    @property
    def configured(self) -> bool:
        return bool(_api_key_for(self.cfg))

    def _get_agent(self) -> Agent[None, str]:
        if self._agent is None:
            model = build_model_by_settings(self.cfg)
            self._agent = Agent[None, str](model=model, output_type=str)
        return self._agent

    async def complete(self, prompt: str) -> str:
        if not self.configured:
            raise UpstreamError(
                "The completion service is not configured.",
                detail=f"no API key for provider {self.cfg.model_provider!r}",
            )

        try:
            res = await self._get_agent().run(prompt)
        except ModelHTTPError as e:
            raise UpstreamError(
                detail=f"{e.model_name} returned HTTP {e.status_code}",
                upstream_status=e.status_code,
            ) from e
        except AgentRunError as e:
            raise UpstreamError(detail=f"agent run failed: {e}") from e
        except Exception as e:  # noqa: BLE001
            # Transport errors and timeouts from the provider SDK
            raise UpstreamError(detail=f"{type(e).__name__}: {e}") from e

        text = res.output
        if not text or not text.strip():
            raise UpstreamError(detail="completion service returned no text")

        logger.debug("Completion returned %d chars", len(text))
        return text
