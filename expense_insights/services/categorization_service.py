"""AI expense categorization.

Asks the LLM for a single category name for an expense description. Runs at
a low temperature so the same description keeps getting the same answer.
"""

import structlog

from expense_insights.schemas.expense import ExpenseCategory
from expense_insights.services.llm_provider import LLMProviderBase
from expense_insights.services.prompts import build_categorization_prompt

logger = structlog.get_logger()

_VALID_CATEGORIES = {c.value: c for c in ExpenseCategory}


class CategorizationService:
    def __init__(self, provider: LLMProviderBase, temperature: float = 0.1):
        self.provider = provider
        self.temperature = temperature

    async def categorize(self, description: str) -> ExpenseCategory:
        """Return the category for a description; unknown answers map to ``other``.

        Raises:
            ProviderError: the LLM call failed.
        """
        prompt = build_categorization_prompt(description)
        response_text = await self.provider.chat(
            system_prompt=prompt.system_prompt,
            messages=prompt.as_messages(),
            temperature=self.temperature,
        )

        answer = response_text.strip().strip(".\"'").lower()
        category = _VALID_CATEGORIES.get(answer)
        if category is None:
            logger.warning("ai_invalid_category", answer=answer[:50], description=description[:80])
            return ExpenseCategory.OTHER

        logger.info("ai_categorization", description=description[:80], category=category.value)
        return category
