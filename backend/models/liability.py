"""Liability model - loan/credit terms for a single account."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import utc_now


class Liability(Base):
    """Credit, mortgage or student-loan details, one row per account."""

    __tablename__ = "liabilities"

    account_id = Column(
        String(255), ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
    type = Column(String(50), nullable=True)  # "credit" | "mortgage" | "student"
    apr = Column(Numeric(6, 4), nullable=True)
    minimum_payment = Column(Numeric(12, 2), nullable=True)
    next_payment_due_date = Column(Date, nullable=True)
    last_statement_balance = Column(Numeric(12, 2), nullable=True)
    last_statement_date = Column(Date, nullable=True)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships
    account = relationship("Account", back_populates="liability")
