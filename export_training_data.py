"""
export_training_data.py
-----------------------

Write the monthly expense table used to retrain the forecast model offline.

Each row is one (year, month, category) bucket with its trailing
three-month average and season code.  At least three distinct months of
expenses must be stored before anything is written.

Usage:

    python export_training_data.py [--output data/expense_training_data.csv] [--database-url sqlite:///finance_tracker.db]

Without ``--output`` the table goes to ``expense_training_data.csv`` in the
system temp directory.
"""

import argparse
import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from aggregator import ExpenseDataAggregator
from config import DATABASE_URL
from database import TransactionStore, init_db
from errors import ForecastError
from logging_config import setup_logging


def build_aggregator(database_url: str) -> ExpenseDataAggregator:
    engine = create_engine(database_url)
    init_db(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return ExpenseDataAggregator(TransactionStore(session_factory))


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Export the monthly expense training table as CSV")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path of the CSV file to write. Defaults to the system temp directory.",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=DATABASE_URL,
        help="SQLAlchemy URL of the transaction database.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    aggregator = build_aggregator(args.database_url)

    try:
        path = aggregator.export_training_table(args.output)
    except ForecastError as exc:
        print(f"Export failed: {exc}", file=sys.stderr)
        return 1

    print(f"Training table written to {path}")
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(main())
