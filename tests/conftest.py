"""
Shared pytest fixtures for the expense forecaster test suite.

Most tests run the core against an in-memory FakeStore and stub models so
that tier selection and confidence math are deterministic.  Store tests use
an in-memory SQLite database shared through a StaticPool.
"""
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import init_db
from errors import StoreError
from ml_models import Classification
from models import EXPENSE, INCOME, TransactionRecord


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------

def expense(amount, year, month, category, day=15):
    return TransactionRecord(
        id=None,
        amount=amount,
        type=EXPENSE,
        date=date(year, month, day),
        category_name=category,
        description=f"{category} purchase",
    )


def income(amount, year, month, category="Salary", day=1):
    return TransactionRecord(
        id=None,
        amount=amount,
        type=INCOME,
        date=date(year, month, day),
        category_name=category,
        description="Paycheck",
    )


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------

class FakeStore:
    def __init__(self, records=None, error=None):
        self.records = list(records or [])
        self.error = error
        self.fetch_count = 0

    def fetch_all(self):
        self.fetch_count += 1
        if self.error:
            raise self.error
        return list(self.records)

    def fetch_all_expense_like(self, type=EXPENSE):
        return [r for r in self.fetch_all() if r.type == type]


class FakeForecastModel:
    """Returns a fixed value per category; Exceptions in the map are raised."""

    def __init__(self, predictions=None, default=100.0):
        self.predictions = predictions or {}
        self.default = default
        self.inputs = []

    def predict(self, features):
        self.inputs.append(features)
        value = self.predictions.get(features.category, self.default)
        if isinstance(value, Exception):
            raise value
        return value


class FakeClassifier:
    def __init__(self, probabilities=None, error=None):
        self.probabilities = probabilities or {}
        self.error = error
        self.texts = []

    def classify(self, text):
        self.texts.append(text)
        if self.error:
            raise self.error
        label = max(self.probabilities, key=self.probabilities.get)
        return Classification(label=label, label_probabilities=dict(self.probabilities))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def three_month_records():
    """Jan-Mar 2025 with Food at 100/200/300 and Transport at 50 each month."""
    return [
        expense(100.0, 2025, 1, "Food"),
        expense(120.0, 2025, 2, "Food"),
        expense(80.0, 2025, 2, "Food", day=20),
        expense(300.0, 2025, 3, "Food"),
        expense(50.0, 2025, 1, "Transport"),
        expense(50.0, 2025, 2, "Transport"),
        expense(50.0, 2025, 3, "Transport"),
    ]


@pytest.fixture
def failing_store():
    return FakeStore(error=StoreError("database is locked"))


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
