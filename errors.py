"""Failure types raised by the forecasting core and the record store."""


class StoreError(Exception):
    """The transaction store could not be read or written."""


class ForecastError(Exception):
    """Base class for expected forecasting failures."""


class NotEnoughData(ForecastError):
    def __init__(self, message: str = "Not enough expense history to forecast."):
        super().__init__(message)


class ModelUnavailable(ForecastError):
    def __init__(self, reason: str):
        super().__init__(f"Forecast model unavailable: {reason}")
        self.reason = reason


class AggregationFailed(ForecastError):
    def __init__(self, message: str = "Failed to aggregate transaction history."):
        super().__init__(message)
