"""Prompt builders for the LLM calls.

Every builder is deterministic: the same inputs always give the same text,
so the LLM boundary can be mocked with exact prompts in tests.
"""

import math
from dataclasses import dataclass

from expense_insights.schemas.expense import BudgetConfig, ExpenseCategory
from expense_insights.services.expense_analysis import AnalysisSummary, percent_of

BIGGEST_EXPENSES_IN_PROMPT = 3


@dataclass(frozen=True)
class Prompt:
    """A system instruction plus the user message sent with it."""
    system_prompt: str
    user_prompt: str

    def as_messages(self) -> list[dict]:
        return [{"role": "user", "content": self.user_prompt}]


# ---------------------------------------------------------------------------
# System prompts (fixed, not data-dependent)
# ---------------------------------------------------------------------------

INSIGHTS_SYSTEM_PROMPT = """\
You are a helpful financial advisor who explains things in simple, clear English. \
Analyze spending data and provide easy-to-understand insights that anyone can follow.

CRITICAL: Respond ONLY with a valid JSON array - no other text before or after.

JSON format:
[
  {
    "type": "spending_pattern|budget_alert|savings_opportunity|financial_health|recommendation",
    "title": "Simple, clear title (max 25 chars)",
    "message": "Easy to understand advice in plain English (max 120 chars)",
    "severity": "low|medium|high",
    "actionable": true/false,
    "category": "optional category name"
  }
]

Rules for insights:
- Give 4-5 insights
- Use simple, everyday language that anyone can understand
- Avoid financial jargon and technical terms
- Give practical, actionable advice
- Be encouraging and positive
- Use specific numbers and examples when helpful

Examples of good language:
- "You're spending too much on..." instead of "expenditure velocity indicates..."
- "You could save money by..." instead of "cost optimization through..."
- "Your budget looks good" instead of "capital allocation efficiency..."
"""

BUDGET_SYSTEM_PROMPT = """\
You are a professional financial planner. Based on the user's monthly income, \
suggest a balanced budget using the 50/30/20 rule or an optimized variation \
for students and low-income earners.

CRITICAL: Respond ONLY with valid JSON - no other text.

JSON format:
{
  "monthlySpend": number,
  "savingsGoal": number,
  "explanation": "A short, friendly sentence explaining the recommendation (max 100 chars)"
}
"""

_CATEGORY_NAMES = ", ".join(c.value for c in ExpenseCategory)

CATEGORIZATION_SYSTEM_PROMPT = f"""\
You are an expense categorization assistant.

Read an expense description and choose the most appropriate category based on \
the meaning and context of the text.

Available categories:
{_CATEGORY_NAMES}.

Use general real-world understanding, not keyword matching.
If the description is unclear or does not clearly fit any category, choose "other".

Respond with ONLY the category name.
No explanations.
No punctuation.
No extra text.
"""


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def _is_finite(value: float) -> bool:
    return not (math.isnan(value) or math.isinf(value))


def format_amount(value: float) -> str:
    """Thousands-separated amount with at most 2 decimals: 1234.5 -> '1,234.5'."""
    if not _is_finite(value):
        return "N/A"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def format_fixed(value: float, digits: int) -> str:
    """Fixed-point rendering; non-finite figures become 'N/A'."""
    if not _is_finite(value):
        return "N/A"
    return f"{value:.{digits}f}"


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_insights_prompt(
    summary: AnalysisSummary,
    budget: BudgetConfig,
    currency: str = "₹",
) -> Prompt:
    """Render an analysis summary as the insights prompt."""
    monthly = float(budget.monthly)
    burn_rate = summary.total_spent / summary.current_day
    projected_spend = burn_rate * summary.days_in_month
    savings_rate = percent_of(monthly - summary.total_spent, monthly)

    category_lines = []
    for category, amount in summary.top_categories:
        share = percent_of(amount, summary.total_spent)
        category_lines.append(
            f"- {_capitalize(category)}: {currency}{format_amount(amount)} "
            f"({format_fixed(share, 1)}% of spending)"
        )

    expense_lines = [
        f"- {currency}{format_amount(float(e.amount))} on {e.description} ({e.category})"
        for e in summary.high_expenses[:BIGGEST_EXPENSES_IN_PROMPT]
    ]
    categories_block = "\n".join(category_lines) or "- No spending recorded this month"
    expenses_block = "\n".join(expense_lines) or "- None yet"

    user_prompt = f"""\
Look at this person's spending and give 4-5 helpful money tips in simple English. \
Make it easy to understand and actionable.

SPENDING SUMMARY:
- Monthly budget: {currency}{format_amount(monthly)}
- Spent so far: {currency}{format_amount(summary.total_spent)} ({format_fixed(summary.budget_used_percent, 1)}% of budget)
- Day {summary.current_day} of {summary.days_in_month} this month
- Spending about {currency}{format_fixed(burn_rate, 0)} per day
- If this continues, will spend {currency}{format_fixed(projected_spend, 0)} this month
- Could save {format_fixed(savings_rate, 1)}% of budget
- Made {summary.total_expenses} purchases
- Average purchase: {currency}{format_fixed(summary.average_expense, 0)}

WHERE THE MONEY GOES:
{categories_block}

BIGGEST EXPENSES:
{expenses_block}

Give advice like:
- "You're doing great with your budget!"
- "Try to spend less on [category] to save more money"
- "You could save {currency}X by doing Y"
- "Your [category] spending is higher than usual"
- "Good job staying within your budget!"

Make it sound like helpful advice from a friend who's good with money. \
Use simple words and be encouraging!"""

    return Prompt(system_prompt=INSIGHTS_SYSTEM_PROMPT, user_prompt=user_prompt)


def build_budget_prompt(income: float, currency: str = "₹") -> Prompt:
    return Prompt(
        system_prompt=BUDGET_SYSTEM_PROMPT,
        user_prompt=(
            f"My monthly income is {currency}{format_amount(income)}. "
            "What budget do you suggest?"
        ),
    )


def build_categorization_prompt(description: str) -> Prompt:
    return Prompt(
        system_prompt=CATEGORIZATION_SYSTEM_PROMPT,
        user_prompt=f'Expense description: "{description}"',
    )
