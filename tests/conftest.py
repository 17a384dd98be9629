"""Shared test fixtures."""

from datetime import datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from expense_insights.api.deps import get_optional_provider
from expense_insights.config import Settings
from expense_insights.core.exceptions import ProviderError
from expense_insights.main import app
from expense_insights.schemas.expense import BudgetConfig, ExpenseRecord
from expense_insights.services.llm_provider import LLMProviderBase

NOW = datetime(2026, 10, 15, 12, 0, 0)


class FakeProvider(LLMProviderBase):
    """Records calls and answers with a canned reply (or raises)."""

    model = "fake-model"

    def __init__(self, reply: str = "[]", error: ProviderError | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    async def is_available(self) -> bool:
        return True

    async def chat(self, system_prompt, messages, temperature=0.3) -> str:
        self.calls.append({
            "system_prompt": system_prompt,
            "messages": messages,
            "temperature": temperature,
        })
        if self.error is not None:
            raise self.error
        return self.reply


def make_expense(
    id: str,
    amount: str,
    category: str = "food",
    date: datetime = NOW,
    description: str | None = None,
) -> ExpenseRecord:
    return ExpenseRecord(
        id=id,
        description=description or f"expense {id}",
        amount=Decimal(amount),
        category=category,
        date=date,
    )


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, groq_api_key="test-key")


@pytest.fixture
def budget():
    return BudgetConfig(monthly=Decimal("2000"), weekly=Decimal("500"), savings_goal=Decimal("500"))


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
async def client(fake_provider):
    """Async test client for the FastAPI app, wired to the fake provider."""
    app.dependency_overrides[get_optional_provider] = lambda: fake_provider
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def unconfigured_client():
    """Async test client whose LLM provider has no credential."""
    app.dependency_overrides[get_optional_provider] = lambda: None
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
