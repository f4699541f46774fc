"""
ml_models.py
------------

Adapters around the externally trained scikit-learn estimators.

The forecasting core and the categorization gateway only depend on the two
narrow protocols defined here, so tests can hand them fakes.  The pickled
adapters are the production implementations: the forecast regressor is
expected to accept a frame with the training-table feature columns, and the
classifier a list of ``"{type}: {description}"`` strings.
"""

from __future__ import annotations

import logging
import pickle
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Protocol

import pandas as pd

from aggregator import FEATURE_COLUMNS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastInput:
    year: int
    month: int
    category: str
    average_last_three_months: float
    season: int


@dataclass(frozen=True)
class Classification:
    label: str
    label_probabilities: Dict[str, float] = field(default_factory=dict)


class ExpenseForecastModel(Protocol):
    def predict(self, features: ForecastInput) -> float:
        ...


class TextClassifier(Protocol):
    def classify(self, text: str) -> Classification:
        ...


class PickledForecastModel:
    """Regression model predicting a category's monthly total."""

    def __init__(self, estimator):
        self.estimator = estimator

    def predict(self, features: ForecastInput) -> float:
        frame = pd.DataFrame(
            [[
                features.year,
                features.month,
                features.category,
                features.average_last_three_months,
                features.season,
            ]],
            columns=FEATURE_COLUMNS,
        )
        return float(self.estimator.predict(frame)[0])


class PickledTextClassifier:
    """Text pipeline (vectorizer + classifier) exposing label probabilities."""

    def __init__(self, estimator):
        self.estimator = estimator

    def classify(self, text: str) -> Classification:
        if not hasattr(self.estimator, "predict_proba"):
            label = str(self.estimator.predict([text])[0])
            return Classification(label=label, label_probabilities={label: 1.0})

        probs = self.estimator.predict_proba([text])[0]
        labels = [str(c) for c in self.estimator.classes_]
        probabilities = {label: float(p) for label, p in zip(labels, probs)}
        label = max(probabilities, key=probabilities.get)
        return Classification(label=label, label_probabilities=probabilities)


def _load_pickle(model_path: str | Path):
    path = Path(model_path)
    if not path.exists():
        raise FileNotFoundError(f"Model not found at {path}")
    with open(path, "rb") as f:
        model = pickle.load(f)
    logger.info(f"Loaded {type(model).__name__} from {path}")
    return model


def load_forecast_model(model_path: str | Path) -> PickledForecastModel:
    return PickledForecastModel(_load_pickle(model_path))


def load_classifier(model_path: str | Path) -> PickledTextClassifier:
    return PickledTextClassifier(_load_pickle(model_path))
