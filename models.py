"""Value types shared by the aggregator, the forecast engine and the server."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import IntEnum
from typing import Optional

EXPENSE = "expense"
INCOME = "income"


@dataclass(frozen=True)
class TransactionRecord:
    id: Optional[int]
    amount: float
    type: str
    date: Optional[date]
    category_name: Optional[str]
    description: Optional[str] = None


class Season(IntEnum):
    WINTER = 1
    SPRING = 2
    SUMMER = 3
    FALL = 4


@dataclass(frozen=True)
class MonthlyExpenseBucket:
    year: int
    month: int
    category_name: str
    total_amount: float
    trailing_three_month_average: float
    season: Season

    @property
    def month_key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class CategoryForecast:
    category_name: str
    predicted_amount: float
    confidence: float
    historical_average: float
    is_heuristic: bool

    @property
    def confidence_level(self) -> str:
        if self.confidence >= 0.8:
            return "high"
        if self.confidence >= 0.6:
            return "medium"
        return "low"


@dataclass(frozen=True)
class ForecastSummary:
    """Totals and readiness figures that accompany a batch of forecasts."""

    target_year: int
    target_month: int
    total_predicted: float
    months_of_data: int
    months_required: int
    is_heuristic: bool

    @property
    def months_until_model(self) -> int:
        return max(self.months_required - self.months_of_data, 0)
