"""AI insight schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from expense_insights.schemas.expense import BudgetConfig, ExpenseRecord


class InsightType(str, Enum):
    SPENDING_PATTERN = "spending_pattern"
    BUDGET_ALERT = "budget_alert"
    SAVINGS_OPPORTUNITY = "savings_opportunity"
    FINANCIAL_HEALTH = "financial_health"
    RECOMMENDATION = "recommendation"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Insight(BaseModel):
    """A single normalized piece of spending advice."""
    type: InsightType
    title: str  # aim: <= 25 chars, not enforced
    message: str  # aim: <= 120 chars, not enforced
    severity: Severity
    actionable: bool = True
    category: str | None = None


class BudgetSuggestion(BaseModel):
    monthly_spend: float
    savings_goal: float
    explanation: str


# ── Requests / responses ───────────────────────────


class InsightsRequest(BaseModel):
    expenses: list[ExpenseRecord] = []
    budget: BudgetConfig | None = None  # None = configured defaults


class QuickInsightsRequest(BaseModel):
    expenses: list[ExpenseRecord]
    budget: BudgetConfig


class InsightsResponse(BaseModel):
    success: bool = True
    insights: list[Insight]
    timestamp: datetime
    expense_count: int | None = None
    source: str = "ai"


class BudgetSuggestionRequest(BaseModel):
    income: float = Field(ge=0)
