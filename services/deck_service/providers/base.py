"""Text generation via LiteLLM.

Chat translation, the shopping assistant and video-script generation go
through ``call_llm`` so the model can be switched with ``AI_DEFAULT_MODEL``
without touching callers.
"""

import json
import time
from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.deck_service.errors import ExternalServiceError

logger = get_logger(__name__)


class AIProviderResponse:
    """Standardized response from any AI provider."""

    def __init__(
        self,
        content: str,
        model: str,
        provider: str,
        input_tokens: int = 0,
        output_tokens: int = 0,
        latency_ms: int = 0,
        raw_response: Optional[dict] = None,
    ):
        self.content = content
        self.model = model
        self.provider = provider
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.latency_ms = latency_ms
        self.raw_response = raw_response

    def parse_json(self):
        """Parse the content as JSON. Handles markdown code blocks."""
        text = self.content.strip()
        if text.startswith("```"):
            lines = [line for line in text.split("\n") if not line.strip().startswith("```")]
            text = "\n".join(lines).strip()
        return json.loads(text)


def provider_for(model: str) -> str:
    if "gemini" in model:
        return "google"
    if "gpt" in model or "o1" in model or "o3" in model:
        return "openai"
    if "claude" in model:
        return "anthropic"
    return "unknown"


async def call_llm(
    system_prompt: str,
    user_prompt: str,
    model: Optional[str] = None,
    temperature: float = 0.2,
    max_tokens: int = 2048,
    response_format: Optional[dict] = None,
    history: Optional[list[dict]] = None,
) -> AIProviderResponse:
    """
    Call an LLM via LiteLLM.

    Args:
        system_prompt: System message
        user_prompt: User message
        model: LiteLLM model string; defaults to ``AI_DEFAULT_MODEL``
        temperature: Sampling temperature
        max_tokens: Max output tokens
        response_format: Optional JSON schema for structured output
        history: Earlier turns as {"role", "content"} dicts, placed between the
            system message and the user message

    Raises:
        ExternalServiceError: the provider call failed
    """
    import litellm

    settings = get_settings()
    model = model or settings.AI_DEFAULT_MODEL
    provider = provider_for(model)

    kwargs = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            *(history or []),
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if response_format:
        kwargs["response_format"] = response_format
    if settings.AI_API_KEY:
        kwargs["api_key"] = settings.AI_API_KEY

    start = time.monotonic()
    try:
        response = await litellm.acompletion(**kwargs)
    except Exception as e:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.error(
            "LLM call failed: %s",
            e,
            extra={"extra_fields": {"model": model, "latency_ms": elapsed_ms}},
        )
        raise ExternalServiceError(f"LLM call failed: {e}") from e

    elapsed_ms = int((time.monotonic() - start) * 1000)
    content = response.choices[0].message.content or ""
    usage = getattr(response, "usage", None)
    return AIProviderResponse(
        content=content,
        model=model,
        provider=provider,
        input_tokens=usage.prompt_tokens if usage else 0,
        output_tokens=usage.completion_tokens if usage else 0,
        latency_ms=elapsed_ms,
        raw_response=response.model_dump() if hasattr(response, "model_dump") else None,
    )
