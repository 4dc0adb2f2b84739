import os

# main builds a module-level app on import; keep it off the working directory
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from config import Settings
from llm import TextResponse
from models import Backend, Lead, Offer
from storage import Store


class StubBackend:
    """Records prompts and replays canned responses."""

    name = "stub"

    def __init__(self, *responses):
        self.responses = list(responses) or [TextResponse('{"intent": "Medium", "reasoning": "stub"}')]
        self.prompts = []

    async def invoke(self, prompt):
        self.prompts.append(prompt)
        response = self.responses[min(len(self.prompts), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def store(tmp_path):
    return Store.from_url(f"sqlite:///{tmp_path / 'leads.db'}")


@pytest.fixture
def offer():
    return Offer(id=1, name="X", value_props=["a"], ideal_use_cases=["B2B SaaS mid-market"], created_at="2024-01-01T00:00:00")


@pytest.fixture
def full_lead():
    return Lead(
        id=1,
        name="Ava Patel",
        role="Founder",
        company="FlowMetrics",
        industry="B2B SaaS",
        location="New York",
        linkedin_bio="Scaling SaaS products.",
    )


@pytest.fixture
def stub_backend():
    return StubBackend()


@pytest.fixture
def client(tmp_path, store, stub_backend):
    from main import create_app

    settings = Settings(database_url=f"sqlite:///{tmp_path / 'leads.db'}", upload_dir=str(tmp_path / "uploads"))
    app = create_app(settings=settings, store=store, backends={Backend.OPENAI: stub_backend, Backend.GEMINI: stub_backend})
    with TestClient(app) as c:
        yield c
