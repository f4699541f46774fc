"""
forecasting.py
--------------

Next-month expense forecast per category.

The tier is picked from the number of distinct months of expense history:

* none        -> ``NotEnoughData``
* 1-2 months  -> heuristic: plain mean of each category's monthly totals
* 3+ months   -> model-backed: the external regression model, fed the
                 trailing three-month average and season of the target month

The model is loaded once when the engine is built.  A failed load is kept as
the reason the model tier is unavailable and is never retried.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

from aggregator import (
    MIN_MONTHS_FOR_MODEL,
    ExpenseDataAggregator,
    count_distinct_months,
    totals_from_buckets,
    trailing_three_month_average,
)
from calendar_utils import next_month, season_for_month
from errors import ModelUnavailable, NotEnoughData
from ml_models import ExpenseForecastModel, ForecastInput
from models import CategoryForecast, ForecastSummary, MonthlyExpenseBucket

logger = logging.getLogger(__name__)

NEUTRAL_CONFIDENCE = 0.5
MIN_MODEL_CONFIDENCE = 0.5


def confidence_from_deviation(predicted: float, historical_average: float) -> float:
    """Map the relative gap between prediction and history onto [0.5, 1.0].

    A zero gap scores 1.0 and every 1% of deviation costs half a point, with a
    floor at 0.5.  No positive history gives the neutral 0.5.
    """
    if historical_average <= 0:
        return NEUTRAL_CONFIDENCE

    deviation = abs(predicted - historical_average) / historical_average
    return max(MIN_MODEL_CONFIDENCE, 1.0 - deviation * 0.5)


def heuristic_confidence(months_of_data: int) -> float:
    if months_of_data == 1:
        return 0.3
    if months_of_data == 2:
        return 0.5
    return 0.6


def summarize(forecasts: List[CategoryForecast], months_of_data: int, target: tuple) -> ForecastSummary:
    target_year, target_month = target
    return ForecastSummary(
        target_year=target_year,
        target_month=target_month,
        total_predicted=sum(f.predicted_amount for f in forecasts),
        months_of_data=months_of_data,
        months_required=MIN_MONTHS_FOR_MODEL,
        is_heuristic=any(f.is_heuristic for f in forecasts),
    )


def _sorted_by_amount(forecasts: Iterable[CategoryForecast]) -> List[CategoryForecast]:
    return sorted(forecasts, key=lambda f: f.predicted_amount, reverse=True)


class ForecastEngine:
    def __init__(
        self,
        aggregator: ExpenseDataAggregator,
        model_loader: Optional[Callable[[], ExpenseForecastModel]] = None,
        today: Callable[[], date] = date.today,
    ):
        self.aggregator = aggregator
        self.today = today
        self.model: Optional[ExpenseForecastModel] = None
        self.unavailable_reason: Optional[str] = None

        if model_loader is None:
            self.unavailable_reason = "no forecast model configured"
            return

        try:
            self.model = model_loader()
        except Exception as exc:
            self.unavailable_reason = str(exc) or type(exc).__name__
            logger.warning(f"Failed to load forecast model: {self.unavailable_reason}")

    @property
    def model_available(self) -> bool:
        return self.model is not None

    def target_month(self) -> tuple:
        """Calendar month following today, as (year, month)."""
        now = self.today()
        return next_month(now.year, now.month)

    def forecast_next_month(self) -> List[CategoryForecast]:
        forecasts, _ = self._forecast(self.aggregator.aggregate_monthly_expenses())
        return forecasts

    def forecast_for_category(self, category_name: str) -> CategoryForecast:
        for forecast in self.forecast_next_month():
            if forecast.category_name == category_name:
                return forecast
        raise NotEnoughData(f"No forecast available for category '{category_name}'.")

    def forecast_with_summary(self) -> Tuple[List[CategoryForecast], ForecastSummary]:
        """Forecasts plus the readiness summary, computed from one snapshot."""
        forecasts, months = self._forecast(self.aggregator.aggregate_monthly_expenses())
        return forecasts, summarize(forecasts, months, self.target_month())

    def _forecast(self, buckets: List[MonthlyExpenseBucket]):
        months = count_distinct_months(buckets)
        if months == 0:
            raise NotEnoughData()
        if months < MIN_MONTHS_FOR_MODEL:
            return self._heuristic_forecast(buckets, months), months
        return self._model_forecast(buckets), months

    def _heuristic_forecast(self, buckets: List[MonthlyExpenseBucket], months: int) -> List[CategoryForecast]:
        by_category = defaultdict(list)
        for bucket in buckets:
            by_category[bucket.category_name].append(bucket.total_amount)

        confidence = heuristic_confidence(months)
        forecasts = []
        for category, amounts in by_category.items():
            average = sum(amounts) / len(amounts)
            forecasts.append(
                CategoryForecast(
                    category_name=category,
                    predicted_amount=max(0.0, average),
                    confidence=confidence,
                    historical_average=average,
                    is_heuristic=True,
                )
            )
        return _sorted_by_amount(forecasts)

    def _model_forecast(self, buckets: List[MonthlyExpenseBucket]) -> List[CategoryForecast]:
        if self.model is None:
            raise ModelUnavailable(self.unavailable_reason or "forecast model not loaded")

        year, month = self.target_month()
        season = season_for_month(month)
        totals = totals_from_buckets(buckets)

        forecasts = []
        for category in sorted({b.category_name for b in buckets}):
            average = trailing_three_month_average(totals, category, year, month)
            features = ForecastInput(
                year=year,
                month=month,
                category=category,
                average_last_three_months=average,
                season=int(season),
            )
            try:
                predicted = self.model.predict(features)
            except Exception as exc:
                logger.error(f"Error predicting for category {category}: {exc}")
                continue

            forecasts.append(
                CategoryForecast(
                    category_name=category,
                    predicted_amount=max(0.0, predicted),
                    confidence=confidence_from_deviation(predicted, average),
                    historical_average=average,
                    is_heuristic=False,
                )
            )
        return _sorted_by_amount(forecasts)
