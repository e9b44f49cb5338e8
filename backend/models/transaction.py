"""Transaction model - a single posted or pending transaction."""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import utc_now


class Transaction(Base):
    """A transaction mirrored from Plaid's incremental feed.

    Plaid sign convention is kept as-is: positive ``amount`` is money
    leaving the account (spend), negative is money coming in (income).
    """

    __tablename__ = "transactions"

    id = Column(String(255), primary_key=True)  # Plaid transaction_id
    account_id = Column(
        String(255), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Numeric(12, 2), nullable=True)
    date = Column(Date, nullable=True, index=True)
    name = Column(Text, nullable=True)
    merchant_name = Column(String(255), nullable=True)
    category = Column(String(255), nullable=True)
    pending = Column(Boolean, default=False, nullable=False)
    iso_currency_code = Column(String(10), nullable=True)
    created_at = Column(DateTime, default=utc_now)

    # Relationships
    account = relationship("Account", back_populates="transactions")
