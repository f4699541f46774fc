import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

API_NAME = os.getenv("API_NAME", "Expense Forecast Server")

# Default to local SQLite, but allow override for a hosted Postgres
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///finance_tracker.db")

# Pickled scikit-learn estimators produced by the offline training tooling
FORECAST_MODEL_PATH = os.getenv("FORECAST_MODEL_PATH", "models/expense_forecast_model.pkl")
CLASSIFIER_MODEL_PATH = os.getenv("CLASSIFIER_MODEL_PATH", "models/transaction_classifier.pkl")

# Minimum top-label probability for an automatic category suggestion
CATEGORY_MIN_CONFIDENCE = float(os.getenv("CATEGORY_MIN_CONFIDENCE", "0.5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
