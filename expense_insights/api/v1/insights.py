"""AI insights API routes."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends

from expense_insights.api.deps import (
    get_insights_service,
    get_optional_provider,
    get_settings,
)
from expense_insights.config import Settings
from expense_insights.core.exceptions import ProviderError, provider_error_to_http
from expense_insights.schemas.expense import BudgetConfig, ExpenseRecord
from expense_insights.schemas.insight import (
    BudgetSuggestion,
    BudgetSuggestionRequest,
    InsightsRequest,
    InsightsResponse,
    QuickInsightsRequest,
)
from expense_insights.services.insight_parser import fallback_budget_suggestion
from expense_insights.services.insights_service import AIInsightsService
from expense_insights.services.llm_provider import LLMProviderBase

logger = structlog.get_logger()
router = APIRouter()


def _default_budget(app_settings: Settings) -> BudgetConfig:
    return BudgetConfig(
        monthly=app_settings.default_monthly_budget,
        weekly=app_settings.default_weekly_budget,
        savings_goal=app_settings.default_savings_goal,
    )


def _most_recent(expenses: list[ExpenseRecord], limit: int) -> list[ExpenseRecord]:
    return sorted(expenses, key=lambda e: e.date.timestamp(), reverse=True)[:limit]


@router.post("", response_model=InsightsResponse)
async def generate_insights(
    payload: InsightsRequest,
    service: AIInsightsService = Depends(get_insights_service),
    app_settings: Settings = Depends(get_settings),
):
    """Generate AI insights for the current month's expenses.

    Only the most recent ``max_context_expenses`` records are analysed. When
    no budget is sent, the configured defaults are used.
    """
    expenses = _most_recent(payload.expenses, app_settings.max_context_expenses)
    budget = payload.budget or _default_budget(app_settings)
    try:
        insights = await service.generate_insights(expenses, budget)
    except ProviderError as e:
        logger.error("ai_insights_error", error=str(e), reason=e.reason)
        raise provider_error_to_http(e) from e

    return InsightsResponse(
        insights=insights,
        timestamp=datetime.now(timezone.utc),
        expense_count=len(expenses),
    )


@router.post("/quick", response_model=InsightsResponse)
async def generate_quick_insights(
    payload: QuickInsightsRequest,
    service: AIInsightsService = Depends(get_insights_service),
):
    """Generate only the top insights, for dashboard widgets."""
    try:
        insights = await service.generate_quick_insights(payload.expenses, payload.budget)
    except ProviderError as e:
        logger.error("quick_insight_error", error=str(e), reason=e.reason)
        raise provider_error_to_http(e) from e

    return InsightsResponse(insights=insights, timestamp=datetime.now(timezone.utc))


@router.post("/suggest-budget", response_model=BudgetSuggestion)
async def suggest_budget(
    payload: BudgetSuggestionRequest,
    provider: LLMProviderBase | None = Depends(get_optional_provider),
    app_settings: Settings = Depends(get_settings),
):
    """Suggest a monthly budget for an income. Always answers, even without AI."""
    if provider is None:
        return fallback_budget_suggestion(payload.income)
    service = AIInsightsService(provider, app_settings)
    return await service.suggest_budget(payload.income)
