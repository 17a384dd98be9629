"""AI insights service.

Turns a user's expenses and budget into spending insights:

    expenses + budget
      → prepare_expense_analysis   (current-month summary)
      → build_insights_prompt      (system instruction + user prompt)
      → LLM provider               (one chat completion)
      → parse_insights             (normalized Insight list)

Also suggests a monthly budget from an income figure. That path is
fallback-safe: whatever fails, an 80/20 split is returned.

The service is stateless; concurrent calls are fully independent.
"""

from datetime import datetime

import structlog

from expense_insights.config import Settings
from expense_insights.core.exceptions import ProviderError
from expense_insights.schemas.expense import BudgetConfig, ExpenseRecord
from expense_insights.schemas.insight import BudgetSuggestion, Insight
from expense_insights.services.expense_analysis import prepare_expense_analysis
from expense_insights.services.insight_parser import (
    fallback_budget_suggestion,
    parse_budget_suggestion,
    parse_insights,
)
from expense_insights.services.llm_provider import LLMProviderBase
from expense_insights.services.prompts import build_budget_prompt, build_insights_prompt

logger = structlog.get_logger()


class AIInsightsService:
    def __init__(self, provider: LLMProviderBase, settings: Settings):
        self.provider = provider
        self.settings = settings

    # ── Public API ─────────────────────────────────────

    async def generate_insights(
        self,
        expenses: list[ExpenseRecord],
        budget: BudgetConfig,
        now: datetime | None = None,
    ) -> list[Insight]:
        """Generate insights for the current month's spending.

        Returns [] when the LLM answers with something unparseable.

        Raises:
            ProviderError: the LLM call failed.
        """
        summary = prepare_expense_analysis(expenses, budget, now=now)
        prompt = build_insights_prompt(
            summary, budget, currency=self.settings.currency_symbol
        )

        response_text = await self.provider.chat(
            system_prompt=prompt.system_prompt,
            messages=prompt.as_messages(),
            temperature=self.settings.insights_temperature,
        )
        insights = parse_insights(response_text)

        logger.info(
            "ai_insights_generated",
            model=self.provider.get_model_name(),
            month_expenses=summary.total_expenses,
            insights_count=len(insights),
        )
        return insights

    async def generate_quick_insights(
        self,
        expenses: list[ExpenseRecord],
        budget: BudgetConfig,
        now: datetime | None = None,
    ) -> list[Insight]:
        """The first few insights only, for compact views."""
        insights = await self.generate_insights(expenses, budget, now=now)
        return insights[: self.settings.quick_insights_count]

    async def suggest_budget(self, income: float) -> BudgetSuggestion:
        """Suggest monthly spend and savings for an income. Never raises."""
        if income <= 0:
            return fallback_budget_suggestion(income)

        prompt = build_budget_prompt(income, currency=self.settings.currency_symbol)
        try:
            response_text = await self.provider.chat(
                system_prompt=prompt.system_prompt,
                messages=prompt.as_messages(),
                temperature=self.settings.budget_suggestion_temperature,
            )
        except ProviderError as e:
            logger.warning("budget_suggestion_fallback", reason=e.reason, error=str(e))
            return fallback_budget_suggestion(income)

        return parse_budget_suggestion(response_text, income)
