"""Expense categorization API route."""

import structlog
from fastapi import APIRouter, Depends

from expense_insights.api.deps import get_optional_provider, get_settings
from expense_insights.config import Settings
from expense_insights.core.exceptions import ProviderError
from expense_insights.schemas.expense import (
    CategorizeRequest,
    CategorizeResponse,
    ExpenseCategory,
)
from expense_insights.services.categorization_service import CategorizationService
from expense_insights.services.llm_provider import LLMProviderBase

logger = structlog.get_logger()
router = APIRouter()

AI_CONFIDENCE = 0.9


@router.post("", response_model=CategorizeResponse)
async def categorize_expense(
    payload: CategorizeRequest,
    provider: LLMProviderBase | None = Depends(get_optional_provider),
    app_settings: Settings = Depends(get_settings),
):
    """Suggest a category for an expense description.

    Falls back to ``other`` (method "fallback") when the AI is not configured
    or the call fails.
    """
    if provider is None:
        return CategorizeResponse(category=ExpenseCategory.OTHER, method="fallback")

    service = CategorizationService(provider, temperature=app_settings.categorization_temperature)
    try:
        category = await service.categorize(payload.description)
    except ProviderError as e:
        logger.warning("ai_categorization_failed", error=str(e), reason=e.reason)
        return CategorizeResponse(category=ExpenseCategory.OTHER, method="fallback")

    return CategorizeResponse(category=category, method="ai", confidence=AI_CONFIDENCE)
