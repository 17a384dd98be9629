"""Expense and budget schemas for request validation."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class ExpenseCategory(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    EDUCATION = "education"
    RENT = "rent"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    UTILITIES = "utilities"
    MEDICAL = "medical"
    OTHER = "other"


class ExpenseRecord(BaseModel):
    id: str
    description: str
    amount: Decimal = Field(gt=0)
    category: str
    date: datetime
    note: str | None = None


class BudgetConfig(BaseModel):
    monthly: Decimal = Field(default=Decimal(0), ge=0)
    weekly: Decimal = Field(default=Decimal(0), ge=0)
    savings_goal: Decimal = Field(default=Decimal(0), ge=0)


class CategorizeRequest(BaseModel):
    description: str = Field(min_length=1)


class CategorizeResponse(BaseModel):
    category: ExpenseCategory
    method: str  # "ai" or "fallback"
    confidence: float | None = None  # only set for "ai"
