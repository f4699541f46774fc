import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import create_engine, Column, Integer, String, Float, Date
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base

from config import DATABASE_URL
from errors import StoreError
from models import EXPENSE, TransactionRecord

logger = logging.getLogger(__name__)

# Database Setup
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in DATABASE_URL else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# --- Models ---

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, index=True)
    description = Column(String)
    amount = Column(Float)                        # always positive, direction lives in `type`
    type = Column(String, default=EXPENSE)        # 'expense' or 'income'
    category = Column(String)

    def to_record(self) -> TransactionRecord:
        return TransactionRecord(
            id=self.id,
            amount=float(self.amount or 0.0),
            type=self.type,
            date=self.date,
            category_name=self.category,
            description=self.description,
        )

# --- Init DB ---
def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)


class TransactionStore:
    """Read/write access to stored transactions, returned as immutable records."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def fetch_all(self) -> List[TransactionRecord]:
        return self._fetch()

    def fetch_all_expense_like(self, type: str = EXPENSE) -> List[TransactionRecord]:
        return self._fetch(type)

    def add(
        self,
        amount: float,
        type: str,
        date: date,
        category: Optional[str],
        description: Optional[str] = None,
    ) -> TransactionRecord:
        if amount < 0:
            raise ValueError("amount must be non-negative; use type to mark income or expense")

        db = self.session_factory()
        try:
            txn = Transaction(
                date=date,
                description=description,
                amount=amount,
                type=type,
                category=category,
            )
            db.add(txn)
            db.commit()
            db.refresh(txn)
            return txn.to_record()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Failed to save transaction: {exc}")
            raise StoreError(str(exc)) from exc
        finally:
            db.close()

    def _fetch(self, type: Optional[str] = None) -> List[TransactionRecord]:
        db = self.session_factory()
        try:
            query = db.query(Transaction)
            if type is not None:
                query = query.filter(Transaction.type == type)
            return [t.to_record() for t in query.order_by(Transaction.date.desc()).all()]
        except SQLAlchemyError as exc:
            logger.error(f"Failed to fetch transactions: {exc}")
            raise StoreError(str(exc)) from exc
        finally:
            db.close()
