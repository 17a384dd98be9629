"""Tests for AIInsightsService with a fake LLM provider."""

import json

import pytest

from expense_insights.core.exceptions import ProviderError
from expense_insights.services.insight_parser import FALLBACK_BUDGET_EXPLANATION
from expense_insights.services.insights_service import AIInsightsService
from expense_insights.services.prompts import BUDGET_SYSTEM_PROMPT, INSIGHTS_SYSTEM_PROMPT

from conftest import NOW, FakeProvider, make_expense

REPLY = json.dumps([
    {"type": "budget_alert", "title": "Rent is big", "message": "Rent is 77% of spending.",
     "severity": "high", "actionable": True, "category": "rent"},
    {"type": "financial_health", "title": "On track", "message": "You are within budget.",
     "severity": "low", "actionable": False},
    {"type": "recommendation", "title": "Cook more", "message": "Cook at home twice a week.",
     "severity": "medium", "actionable": True},
])


@pytest.mark.asyncio
async def test_generate_insights(test_settings, budget):
    provider = FakeProvider(reply=REPLY)
    service = AIInsightsService(provider, test_settings)

    insights = await service.generate_insights(
        [make_expense("1", "1000", category="rent"), make_expense("2", "300")],
        budget,
        now=NOW,
    )

    assert [i.title for i in insights] == ["Rent is big", "On track", "Cook more"]
    assert len(provider.calls) == 1
    call = provider.calls[0]
    assert call["system_prompt"] == INSIGHTS_SYSTEM_PROMPT
    assert call["temperature"] == test_settings.insights_temperature
    assert "- Rent: ₹1,000" in call["messages"][0]["content"]


@pytest.mark.asyncio
async def test_same_input_sends_same_prompt(test_settings, budget):
    provider = FakeProvider(reply=REPLY)
    service = AIInsightsService(provider, test_settings)
    expenses = [make_expense("1", "42")]

    await service.generate_insights(expenses, budget, now=NOW)
    await service.generate_insights(expenses, budget, now=NOW)

    assert provider.calls[0] == provider.calls[1]


@pytest.mark.asyncio
async def test_unparseable_reply_gives_empty_list(test_settings, budget):
    service = AIInsightsService(FakeProvider(reply="I cannot help with that."), test_settings)
    assert await service.generate_insights([], budget, now=NOW) == []


@pytest.mark.asyncio
async def test_provider_error_propagates(test_settings, budget):
    error = ProviderError("rate limited", reason="rate_limit")
    service = AIInsightsService(FakeProvider(error=error), test_settings)
    with pytest.raises(ProviderError) as exc_info:
        await service.generate_insights([], budget, now=NOW)
    assert exc_info.value.reason == "rate_limit"
    assert exc_info.value.retryable


@pytest.mark.asyncio
async def test_quick_insights_are_capped(test_settings, budget):
    service = AIInsightsService(FakeProvider(reply=REPLY), test_settings)
    insights = await service.generate_quick_insights([], budget, now=NOW)
    assert [i.title for i in insights] == ["Rent is big", "On track"]


@pytest.mark.asyncio
async def test_suggest_budget_uses_llm_answer(test_settings):
    reply = '{"monthlySpend": 3000, "savingsGoal": 2000, "explanation": "Save 40% while you can."}'
    provider = FakeProvider(reply=reply)
    service = AIInsightsService(provider, test_settings)

    suggestion = await service.suggest_budget(5000)

    assert suggestion.monthly_spend == 3000
    assert suggestion.savings_goal == 2000
    assert suggestion.explanation == "Save 40% while you can."
    assert provider.calls[0]["system_prompt"] == BUDGET_SYSTEM_PROMPT
    assert provider.calls[0]["temperature"] == test_settings.budget_suggestion_temperature


@pytest.mark.asyncio
async def test_suggest_budget_falls_back_on_provider_error(test_settings):
    service = AIInsightsService(FakeProvider(error=ProviderError("boom")), test_settings)
    suggestion = await service.suggest_budget(5000)
    assert suggestion.monthly_spend == 4000
    assert suggestion.savings_goal == 1000
    assert suggestion.explanation == FALLBACK_BUDGET_EXPLANATION


@pytest.mark.asyncio
async def test_suggest_budget_zero_income_skips_llm(test_settings):
    provider = FakeProvider(reply='{"monthlySpend": 999}')
    service = AIInsightsService(provider, test_settings)

    suggestion = await service.suggest_budget(0)

    assert suggestion.monthly_spend == 0
    assert suggestion.savings_goal == 0
    assert suggestion.explanation
    assert provider.calls == []
