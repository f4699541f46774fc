"""
categorization.py
-----------------

Suggest a category for a transaction from its free-form description.

The classifier is trained on ``"{type}: {description}"`` strings, so the
transaction type is always folded into the text before prediction.  A
suggestion is only accepted when the top label's probability reaches the
configured minimum confidence.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from ml_models import Classification, TextClassifier
from models import EXPENSE

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONFIDENCE = 0.5


def compose_input(description: str, transaction_type: str) -> str:
    return f"{transaction_type}: {description}"


class CategorizationGateway:
    def __init__(self, classifier: TextClassifier, minimum_confidence: float = DEFAULT_MIN_CONFIDENCE):
        if not 0.0 <= minimum_confidence <= 1.0:
            raise ValueError(f"minimum_confidence must be between 0 and 1, got {minimum_confidence}")
        self.classifier = classifier
        self.minimum_confidence = minimum_confidence

    def predict(self, description: str, transaction_type: str = EXPENSE) -> Optional[str]:
        result = self._classify(description, transaction_type)
        return result.label if result else None

    def predict_with_confidence(
        self, description: str, transaction_type: str = EXPENSE
    ) -> Optional[Tuple[str, float]]:
        result = self._classify(description, transaction_type)
        if result is None:
            return None

        confidence = result.label_probabilities.get(result.label)
        if confidence is None or confidence < self.minimum_confidence:
            return None
        return result.label, confidence

    def all_predictions(self, description: str, transaction_type: str = EXPENSE) -> Optional[Dict[str, float]]:
        result = self._classify(description, transaction_type)
        if result is None:
            return None
        return dict(result.label_probabilities)

    def top_predictions(
        self, description: str, transaction_type: str = EXPENSE, limit: int = 3
    ) -> List[Tuple[str, float]]:
        """Most likely categories, highest probability first."""
        probabilities = self.all_predictions(description, transaction_type)
        if not probabilities:
            return []

        ranked = sorted(probabilities.items(), key=lambda item: item[1], reverse=True)
        return ranked[:max(limit, 0)]

    def _classify(self, description: str, transaction_type: str) -> Optional[Classification]:
        if not description or not description.strip():
            return None

        try:
            return self.classifier.classify(compose_input(description, transaction_type))
        except Exception as exc:
            logger.warning(f"Category prediction failed for '{description}': {exc}")
            return None
