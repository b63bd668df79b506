"""
Report Models for PaisaPal

Read-only results of aggregating the transaction log for one month.
These are what the presentation layer renders; nothing here is persisted.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class MonthTotals(BaseModel):
    """Income, expenses and net for one month."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


class BudgetLine(BaseModel):
    """Budget versus spend for one category in one month."""
    model_config = ConfigDict(frozen=True)

    category: str
    limit: Decimal = Field(
        default=Decimal("0"),
        description="Budget limit; zero when none was set"
    )
    spent: Decimal = Decimal("0")
    percent: int = Field(
        default=0,
        ge=0,
        le=100,
        description="Share of the limit used, capped at 100"
    )

    @property
    def over_budget(self) -> bool:
        return self.spent > self.limit

    @property
    def remaining(self) -> Decimal:
        return self.limit - self.spent


class MonthSummary(BaseModel):
    """Everything the dashboard shows for a month."""
    model_config = ConfigDict(frozen=True)

    month: str
    transaction_count: int = Field(ge=0)
    totals: MonthTotals
    category_spend: dict[str, Decimal] = Field(default_factory=dict)
    mood_spend: dict[str, Decimal] = Field(default_factory=dict)
    budget_lines: list[BudgetLine] = Field(default_factory=list)


class MonthOption(BaseModel):
    """An entry in the month picker."""
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
