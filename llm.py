# llm.py
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

import httpx
import openai
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from config import Settings
from errors import BackendUnavailable
from models import Backend

logger = logging.getLogger(__name__)


# --- response shapes ---
@dataclass
class TextResponse:
    text: str


@dataclass
class BlocksResponse:
    blocks: List[Any] = field(default_factory=list)


LLMResponse = Union[TextResponse, BlocksResponse]


# --- backends ---
class OpenAIBackend:
    name = "openai"

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[openai.AsyncOpenAI] = None

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                max_retries=self.settings.llm_max_retries,
                timeout=self.settings.llm_timeout_seconds,
            )
        return self._client

    async def invoke(self, prompt: str) -> LLMResponse:
        logger.debug("OpenAI request (model=%s, %d chars)", self.settings.openai_model, len(prompt))
        try:
            resp = await self._get_client().chat.completions.create(
                model=self.settings.openai_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.settings.openai_temperature,
            )
        except openai.OpenAIError as e:
            raise BackendUnavailable(f"OpenAI request failed: {e}") from e
        if not resp.choices:
            return TextResponse("")
        return TextResponse(resp.choices[0].message.content or "")


class GeminiBackend:
    name = "gemini"

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            http_options = genai_types.HttpOptions(
                timeout=int(self.settings.llm_timeout_seconds * 1000),
                retry_options=genai_types.HttpRetryOptions(attempts=self.settings.llm_max_retries + 1),
            )
            self._client = genai.Client(api_key=self.settings.gemini_api_key, http_options=http_options)
        return self._client

    async def invoke(self, prompt: str) -> LLMResponse:
        logger.debug("Gemini request (model=%s, %d chars)", self.settings.gemini_model, len(prompt))
        try:
            resp = await self._get_client().aio.models.generate_content(
                model=self.settings.gemini_model,
                contents=prompt,
                config=genai_types.GenerateContentConfig(temperature=self.settings.gemini_temperature),
            )
        except (genai_errors.APIError, httpx.HTTPError, ValueError) as e:
            raise BackendUnavailable(f"Gemini request failed: {e}") from e
        if resp.candidates and resp.candidates[0].content and resp.candidates[0].content.parts:
            return BlocksResponse(list(resp.candidates[0].content.parts))
        return TextResponse(resp.text or "")


def build_backends(settings: Settings) -> dict:
    return {Backend.OPENAI: OpenAIBackend(settings), Backend.GEMINI: GeminiBackend(settings)}
