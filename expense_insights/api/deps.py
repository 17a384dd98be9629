"""Shared API dependencies."""

import structlog
from fastapi import Depends

from expense_insights.config import Settings, settings
from expense_insights.core.exceptions import ConfigurationError, ServiceNotConfiguredError
from expense_insights.services.insights_service import AIInsightsService
from expense_insights.services.llm_provider import LLMProviderBase, get_llm_provider

logger = structlog.get_logger()


def get_settings() -> Settings:
    return settings


def get_optional_provider(
    app_settings: Settings = Depends(get_settings),
) -> LLMProviderBase | None:
    """The configured LLM provider, or None when it lacks its credential."""
    try:
        return get_llm_provider(app_settings)
    except ConfigurationError as e:
        logger.warning("llm_not_configured", error=str(e))
        return None


def get_provider(
    provider: LLMProviderBase | None = Depends(get_optional_provider),
) -> LLMProviderBase:
    """The configured LLM provider; 503 when it cannot be built."""
    if provider is None:
        raise ServiceNotConfiguredError()
    return provider


def get_insights_service(
    provider: LLMProviderBase = Depends(get_provider),
    app_settings: Settings = Depends(get_settings),
) -> AIInsightsService:
    return AIInsightsService(provider, app_settings)


__all__ = [
    "get_settings",
    "get_optional_provider",
    "get_provider",
    "get_insights_service",
]
