"""Tests for AI expense categorization."""

import pytest

from expense_insights.core.exceptions import ProviderError
from expense_insights.schemas.expense import ExpenseCategory
from expense_insights.services.categorization_service import CategorizationService
from expense_insights.services.prompts import CATEGORIZATION_SYSTEM_PROMPT

from conftest import FakeProvider


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply,expected",
    [
        ("transport", ExpenseCategory.TRANSPORT),
        ("  Food\n", ExpenseCategory.FOOD),
        ("medical.", ExpenseCategory.MEDICAL),
        ('"rent"', ExpenseCategory.RENT),
        ("groceries", ExpenseCategory.OTHER),
        ("", ExpenseCategory.OTHER),
    ],
)
async def test_categorize(reply, expected):
    service = CategorizationService(FakeProvider(reply=reply))
    assert await service.categorize("Uber to airport") == expected


@pytest.mark.asyncio
async def test_categorize_uses_low_temperature():
    provider = FakeProvider(reply="transport")
    await CategorizationService(provider, temperature=0.1).categorize("Bus ticket")
    call = provider.calls[0]
    assert call["temperature"] == 0.1
    assert call["system_prompt"] == CATEGORIZATION_SYSTEM_PROMPT
    assert call["messages"][0]["content"] == 'Expense description: "Bus ticket"'


@pytest.mark.asyncio
async def test_categorize_propagates_provider_error():
    service = CategorizationService(FakeProvider(error=ProviderError("down", reason="network")))
    with pytest.raises(ProviderError):
        await service.categorize("Coffee")
