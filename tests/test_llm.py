import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from config import Settings
from errors import BackendUnavailable
from llm import BlocksResponse, GeminiBackend, OpenAIBackend, TextResponse, build_backends
from models import Backend


def run(coro):
    return asyncio.run(coro)


def fake_openai_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def fake_gemini_client(generate_content):
    return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))


def test_build_backends():
    backends = build_backends(Settings())
    assert isinstance(backends[Backend.OPENAI], OpenAIBackend)
    assert isinstance(backends[Backend.GEMINI], GeminiBackend)


def test_openai_returns_message_content(monkeypatch):
    calls = []

    async def create(**kwargs):
        calls.append(kwargs)
        message = SimpleNamespace(content='{"intent": "High"}')
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    backend = OpenAIBackend(Settings(openai_model="gpt-test"))
    monkeypatch.setattr(backend, "_get_client", lambda: fake_openai_client(create))

    assert run(backend.invoke("prompt")) == TextResponse('{"intent": "High"}')
    assert calls[0]["model"] == "gpt-test"
    assert calls[0]["messages"] == [{"role": "user", "content": "prompt"}]


def test_openai_empty_choices(monkeypatch):
    async def create(**kwargs):
        return SimpleNamespace(choices=[])

    backend = OpenAIBackend(Settings())
    monkeypatch.setattr(backend, "_get_client", lambda: fake_openai_client(create))

    assert run(backend.invoke("prompt")) == TextResponse("")


def test_openai_connection_error(monkeypatch):
    async def create(**kwargs):
        raise openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))

    backend = OpenAIBackend(Settings())
    monkeypatch.setattr(backend, "_get_client", lambda: fake_openai_client(create))

    with pytest.raises(BackendUnavailable, match="OpenAI request failed"):
        run(backend.invoke("prompt"))


def test_openai_missing_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(BackendUnavailable):
        run(OpenAIBackend(Settings(openai_api_key=None)).invoke("prompt"))


def test_gemini_parts_become_blocks(monkeypatch):
    parts = [SimpleNamespace(text="```json"), SimpleNamespace(text='{"intent": "Low"}'), SimpleNamespace(text="```")]

    async def generate_content(**kwargs):
        candidate = SimpleNamespace(content=SimpleNamespace(parts=parts))
        return SimpleNamespace(candidates=[candidate], text=None)

    backend = GeminiBackend(Settings())
    monkeypatch.setattr(backend, "_get_client", lambda: fake_gemini_client(generate_content))

    assert run(backend.invoke("prompt")) == BlocksResponse(parts)


def test_gemini_without_candidates_uses_text(monkeypatch):
    async def generate_content(**kwargs):
        return SimpleNamespace(candidates=[], text="plain")

    backend = GeminiBackend(Settings())
    monkeypatch.setattr(backend, "_get_client", lambda: fake_gemini_client(generate_content))

    assert run(backend.invoke("prompt")) == TextResponse("plain")


def test_gemini_transport_error(monkeypatch):
    async def generate_content(**kwargs):
        raise httpx.ConnectError("connection refused")

    backend = GeminiBackend(Settings())
    monkeypatch.setattr(backend, "_get_client", lambda: fake_gemini_client(generate_content))

    with pytest.raises(BackendUnavailable, match="Gemini request failed"):
        run(backend.invoke("prompt"))


def test_gemini_missing_key(monkeypatch):
    for var in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "GOOGLE_GENAI_USE_VERTEXAI"):
        monkeypatch.delenv(var, raising=False)
    with pytest.raises(BackendUnavailable):
        run(GeminiBackend(Settings(gemini_api_key=None)).invoke("prompt"))
