# backend/vidquiz/services/llm_client.py
import logging
from functools import lru_cache
from typing import Callable, Optional, Protocol

from google import genai
from google.genai import types
from openai import AsyncOpenAI

from ..core.config import Settings, get_settings

logger = logging.getLogger("vidquiz.services.llm_client")


class LLMClient(Protocol):
    model: str

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        ...


class OpenAIChatClient:
    """Chat completions against OpenAI or any API speaking the same protocol."""

    def __init__(self, api_key: Optional[str], base_url: Optional[str], model: str):
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model = model

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
        )
        return completion.choices[0].message.content


class GeminiChatClient:
    def __init__(self, api_key: Optional[str], base_url: Optional[str], model: str):
        http_options = types.HttpOptions(base_url=base_url) if base_url else None
        self.client = genai.Client(api_key=api_key, http_options=http_options)
        self.model = model

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=user_prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                response_mime_type="application/json",
            ),
        )
        return response.text


def create_llm_client(settings: Settings) -> LLMClient:
    if settings.LLM_PROVIDER == "gemini":
        if not settings.GEMINI_API_KEY:
            logger.warning("GEMINI_API_KEY is not set")
        client = GeminiChatClient(settings.GEMINI_API_KEY, settings.GEMINI_BASE_URL, settings.GEMINI_MODEL)
    else:
        if not settings.OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY is not set")
        client = OpenAIChatClient(settings.OPENAI_API_KEY, settings.OPENAI_BASE_URL, settings.OPENAI_MODEL)
    logger.info(f"Initialized {settings.LLM_PROVIDER} client with model: {client.model}")
    return client


@lru_cache
def get_llm_client() -> LLMClient:
    """Process-wide generation client, built once from the settings."""
    return create_llm_client(get_settings())


# Deferred so a missing API key cannot fail requests rejected before generation
LLMProvider = Callable[[], LLMClient]


def get_llm_provider() -> LLMProvider:
    return get_llm_client


def clean_json_response(text: str) -> str:
    """Strip markdown code fences and extract JSON content."""
    text = text.strip()

    if "```json" in text:
        parts = text.split("```json", 1)[1].split("```", 1)
        text = parts[0].strip()
    elif "```" in text:
        parts = text.split("```", 1)[1].split("```", 1)
        text = parts[0].strip()

    return text
