"""Lightweight MCP-aligned server exposing forecasting and categorization tools over FastAPI."""

import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from aggregator import MIN_MONTHS_FOR_MODEL, ExpenseDataAggregator
from categorization import CategorizationGateway
from config import API_NAME, CATEGORY_MIN_CONFIDENCE, CLASSIFIER_MODEL_PATH, FORECAST_MODEL_PATH
from database import TransactionStore, init_db
from errors import AggregationFailed, ModelUnavailable, NotEnoughData
from forecasting import ForecastEngine
from logging_config import setup_logging
from ml_models import load_classifier, load_forecast_model
from models import EXPENSE, CategoryForecast

logger = logging.getLogger(__name__)

app = FastAPI(title=API_NAME, version="0.1.0")


@lru_cache
def get_store() -> TransactionStore:
    init_db()
    return TransactionStore()


@lru_cache
def get_aggregator() -> ExpenseDataAggregator:
    return ExpenseDataAggregator(get_store())


@lru_cache
def get_forecast_engine() -> ForecastEngine:
    return ForecastEngine(get_aggregator(), model_loader=lambda: load_forecast_model(FORECAST_MODEL_PATH))


@lru_cache
def get_categorizer() -> Optional[CategorizationGateway]:
    try:
        classifier = load_classifier(CLASSIFIER_MODEL_PATH)
    except Exception as exc:
        # Cached like a loaded gateway, so a bad model file is read only once.
        logger.warning(f"Categorization disabled: {exc or type(exc).__name__}")
        return None
    return CategorizationGateway(classifier, minimum_confidence=CATEGORY_MIN_CONFIDENCE)


class CategoryForecastOut(BaseModel):
    category: str
    predicted_amount: float
    confidence: float = Field(..., ge=0, le=1)
    confidence_level: str
    historical_average: float
    is_heuristic: bool

    @classmethod
    def from_forecast(cls, forecast: CategoryForecast) -> "CategoryForecastOut":
        return cls(
            category=forecast.category_name,
            predicted_amount=round(forecast.predicted_amount, 2),
            confidence=forecast.confidence,
            confidence_level=forecast.confidence_level,
            historical_average=round(forecast.historical_average, 2),
            is_heuristic=forecast.is_heuristic,
        )


class ForecastResponse(BaseModel):
    status: str = Field(..., description="ok, no_data or unavailable")
    target_month: str
    months_of_data: Optional[int] = None
    months_required: int = MIN_MONTHS_FOR_MODEL
    is_heuristic: bool = False
    total_predicted: float = 0.0
    forecasts: List[CategoryForecastOut] = []
    note: Optional[str] = None


@app.post("/tools/forecast_next_month", response_model=ForecastResponse)
def forecast_next_month(engine: ForecastEngine = Depends(get_forecast_engine)):
    year, month = engine.target_month()
    target = f"{year:04d}-{month:02d}"

    try:
        forecasts, summary = engine.forecast_with_summary()
    except NotEnoughData:
        return ForecastResponse(
            status="no_data",
            target_month=target,
            months_of_data=0,
            note="No expenses recorded yet. Add transactions to unlock forecasting.",
        )
    except ModelUnavailable as exc:
        logger.warning(f"Model-backed forecast unavailable: {exc.reason}")
        return ForecastResponse(
            status="unavailable",
            target_month=target,
            note="Forecast is temporarily unavailable. Please try again later.",
        )
    except AggregationFailed as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    if summary.is_heuristic:
        note = (
            f"Estimated from {summary.months_of_data} month(s) of history. "
            f"{summary.months_until_model} more month(s) needed for model forecasts."
        )
    else:
        note = "Forecast generated using the trained expense model."

    return ForecastResponse(
        status="ok",
        target_month=target,
        months_of_data=summary.months_of_data,
        months_required=summary.months_required,
        is_heuristic=summary.is_heuristic,
        total_predicted=round(summary.total_predicted, 2),
        forecasts=[CategoryForecastOut.from_forecast(f) for f in forecasts],
        note=note,
    )


class CategoryForecastRequest(BaseModel):
    category: str = Field(..., min_length=1)


@app.post("/tools/forecast_category", response_model=CategoryForecastOut)
def forecast_category(req: CategoryForecastRequest, engine: ForecastEngine = Depends(get_forecast_engine)):
    try:
        forecast = engine.forecast_for_category(req.category)
    except NotEnoughData as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (ModelUnavailable, AggregationFailed) as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return CategoryForecastOut.from_forecast(forecast)


class DataReadinessResponse(BaseModel):
    months_of_data: int
    months_required: int
    has_any_data: bool
    has_enough_data: bool


@app.get("/tools/data_readiness", response_model=DataReadinessResponse)
def data_readiness(aggregator: ExpenseDataAggregator = Depends(get_aggregator)):
    try:
        months = aggregator.months_of_data_count()
    except AggregationFailed as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return DataReadinessResponse(
        months_of_data=months,
        months_required=MIN_MONTHS_FOR_MODEL,
        has_any_data=months > 0,
        has_enough_data=months >= MIN_MONTHS_FOR_MODEL,
    )


class CategorizeRequest(BaseModel):
    description: str
    type: str = Field(EXPENSE, pattern="^(expense|income)$")
    limit: int = Field(3, ge=1, le=20)


class CategoryScore(BaseModel):
    category: str
    confidence: float


class CategorizeResponse(BaseModel):
    category: Optional[str] = None
    confidence: Optional[float] = None
    alternatives: List[CategoryScore] = []


@app.post("/tools/categorize_transaction", response_model=CategorizeResponse)
def categorize_transaction(
    req: CategorizeRequest,
    gateway: Optional[CategorizationGateway] = Depends(get_categorizer),
):
    if gateway is None:
        return CategorizeResponse()

    accepted = gateway.predict_with_confidence(req.description, req.type)
    alternatives = [
        CategoryScore(category=category, confidence=confidence)
        for category, confidence in gateway.top_predictions(req.description, req.type, limit=req.limit)
    ]
    if accepted is None:
        return CategorizeResponse(alternatives=alternatives)

    category, confidence = accepted
    return CategorizeResponse(category=category, confidence=confidence, alternatives=alternatives)


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    uvicorn.run("mcp_server:app", host="0.0.0.0", port=8001, reload=True)
