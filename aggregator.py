"""
aggregator.py
-------------

Turn raw transaction records into a monthly, per-category expense series.

Every bucket carries the trailing three-month average of the same category
(the three calendar months strictly before the bucket's month, skipping
months in which the category has no spend) and the season code of its
month.  Buckets are recomputed from the store on every call so that added
or deleted transactions are always reflected.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from calendar_utils import preceding_months, season_for_month
from errors import AggregationFailed, NotEnoughData, StoreError
from models import EXPENSE, MonthlyExpenseBucket, TransactionRecord

logger = logging.getLogger(__name__)

MIN_MONTHS_FOR_MODEL = 3
DEFAULT_EXPORT_FILENAME = "expense_training_data.csv"

# Column order of the training table; the first five are the model features.
TRAINING_COLUMNS = ["year", "month", "category", "averageLastThreeMonths", "season", "totalAmount"]
FEATURE_COLUMNS = TRAINING_COLUMNS[:-1]

MonthlyTotals = Dict[Tuple[int, int, str], float]


def records_to_frame(records: Iterable[TransactionRecord]) -> pd.DataFrame:
    """One row per record, with year and month read from the record's own date."""
    rows = [
        {
            "Year": r.date.year if r.date is not None else None,
            "Month": r.date.month if r.date is not None else None,
            "Amount": r.amount,
            "Type": r.type,
            "Category": r.category_name,
        }
        for r in records
    ]
    if not rows:
        return pd.DataFrame(columns=["Year", "Month", "Amount", "Type", "Category"])

    df = pd.DataFrame(rows)
    df["Amount"] = pd.to_numeric(df["Amount"], errors="coerce").fillna(0)
    return df


def monthly_totals(records: Iterable[TransactionRecord]) -> MonthlyTotals:
    """Sum expense amounts per (year, month, category)."""
    df = records_to_frame(records)
    expenses = df[df["Type"] == EXPENSE].dropna(subset=["Year", "Month", "Category"])
    expenses = expenses[expenses["Category"] != ""]
    if expenses.empty:
        return {}

    grouped = expenses.groupby(["Year", "Month", "Category"])["Amount"].sum()
    return {
        (int(year), int(month), str(category)): float(total)
        for (year, month, category), total in grouped.items()
    }


def trailing_three_month_average(totals: MonthlyTotals, category: str, year: int, month: int) -> float:
    """Mean of the category's totals over the three months before (year, month)."""
    amounts = [
        totals[(y, m, category)]
        for y, m in preceding_months(year, month, 3)
        if (y, m, category) in totals
    ]
    if not amounts:
        return 0.0
    return sum(amounts) / len(amounts)


def count_distinct_months(buckets: Iterable[MonthlyExpenseBucket]) -> int:
    return len({(b.year, b.month) for b in buckets})


def totals_from_buckets(buckets: Iterable[MonthlyExpenseBucket]) -> MonthlyTotals:
    return {(b.year, b.month, b.category_name): b.total_amount for b in buckets}


def training_frame(buckets: Iterable[MonthlyExpenseBucket]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "year": b.year,
                "month": b.month,
                "category": b.category_name,
                "averageLastThreeMonths": b.trailing_three_month_average,
                "season": int(b.season),
                "totalAmount": b.total_amount,
            }
            for b in buckets
        ],
        columns=TRAINING_COLUMNS,
    )


class ExpenseDataAggregator:
    def __init__(self, store):
        self.store = store

    def aggregate_monthly_expenses(self) -> List[MonthlyExpenseBucket]:
        try:
            records = self.store.fetch_all()
        except StoreError as exc:
            logger.error(f"Transaction fetch failed during aggregation: {exc}")
            raise AggregationFailed() from exc

        totals = monthly_totals(records)
        buckets = []
        for (year, month, category) in sorted(totals):
            buckets.append(
                MonthlyExpenseBucket(
                    year=year,
                    month=month,
                    category_name=category,
                    total_amount=totals[(year, month, category)],
                    trailing_three_month_average=trailing_three_month_average(totals, category, year, month),
                    season=season_for_month(month),
                )
            )
        return buckets

    def months_of_data_count(self) -> int:
        """Distinct (year, month) keys across all categories."""
        return count_distinct_months(self.aggregate_monthly_expenses())

    def has_enough_data_for_forecasting(self) -> bool:
        return self.months_of_data_count() >= MIN_MONTHS_FOR_MODEL

    def has_any_data(self) -> bool:
        return self.months_of_data_count() > 0

    def export_training_table(self, path: Optional[str | Path] = None) -> Path:
        """Write the buckets as a CSV training table and return its location.

        Args:
            path: Destination file.  Defaults to ``expense_training_data.csv``
                in the system temp directory.  Parent directories are created
                if necessary.

        Raises:
            NotEnoughData: fewer than three distinct months of expenses exist.
            AggregationFailed: the transaction store could not be read.
        """
        buckets = self.aggregate_monthly_expenses()
        months = count_distinct_months(buckets)
        if months < MIN_MONTHS_FOR_MODEL:
            raise NotEnoughData(
                f"Not enough historical data: {months} month(s) found, at least {MIN_MONTHS_FOR_MODEL} required."
            )

        output = Path(path) if path else Path(tempfile.gettempdir()) / DEFAULT_EXPORT_FILENAME
        output.parent.mkdir(parents=True, exist_ok=True)
        training_frame(buckets).to_csv(output, index=False)
        logger.info(f"Exported {len(buckets)} rows covering {months} months to {output}")
        return output
