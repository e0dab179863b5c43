"""Pydantic schemas for budgets."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BudgetCategory(str, Enum):
    """Spending categories shared by budgets and transactions."""

    housing = "housing"
    transportation = "transportation"
    food = "food"
    utilities = "utilities"
    insurance = "insurance"
    healthcare = "healthcare"
    savings = "savings"
    personal = "personal"
    entertainment = "entertainment"
    debt = "debt"
    education = "education"
    gifts = "gifts"
    other = "other"


class BudgetPeriod(str, Enum):
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


class BudgetCreate(BaseModel):
    """Schema for creating a budget."""

    name: str = Field(min_length=1)
    category: BudgetCategory
    amount: Decimal = Field(ge=0, decimal_places=2)
    period: BudgetPeriod = BudgetPeriod.monthly
    start_date: date = Field(default_factory=date.today)
    end_date: Optional[date] = None
    is_recurring: bool = True

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class BudgetUpdate(BaseModel):
    """Schema for updating a budget. ``spent`` is not editable."""

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[BudgetCategory] = None
    amount: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    period: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_recurring: Optional[bool] = None


class BudgetResponse(BaseModel):
    """Schema for Budget API response."""

    id: str
    name: str
    category: str
    amount: Decimal
    spent: Decimal
    remaining: Decimal
    period: str
    start_date: date
    end_date: Optional[date] = None
    is_recurring: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
