"""Account model - a bank, credit, loan or investment account under an Item."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import utc_now

ASSET_TYPES = ("depository", "investment", "brokerage")
LIABILITY_TYPES = ("credit", "loan")


class Account(Base):
    """An account mirrored from Plaid.

    The primary key is Plaid's ``account_id``. ``type`` decides how the
    balance counts toward net worth: depository/investment/brokerage are
    assets, credit/loan are liabilities.
    """

    __tablename__ = "accounts"

    id = Column(String(255), primary_key=True)
    item_id = Column(
        String(255), ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=True)
    name_user_edited = Column(Boolean, default=False, nullable=False)  # True once renamed via the API
    official_name = Column(String(255), nullable=True)
    type = Column(String(50), nullable=True)  # e.g. "depository", "credit", "loan"
    subtype = Column(String(50), nullable=True)  # e.g. "checking", "credit card"
    mask = Column(String(10), nullable=True)
    current_balance = Column(Numeric(12, 2), nullable=True)
    available_balance = Column(Numeric(12, 2), nullable=True)
    credit_limit = Column(Numeric(12, 2), nullable=True)
    iso_currency_code = Column(String(10), nullable=True)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships
    item = relationship("Item", back_populates="accounts")
    transactions = relationship(
        "Transaction", back_populates="account", cascade="all, delete-orphan"
    )
    liability = relationship(
        "Liability", back_populates="account", uselist=False, cascade="all, delete-orphan"
    )
    balance_snapshots = relationship(
        "AccountBalanceSnapshot", back_populates="account", cascade="all, delete-orphan"
    )
