"""AccountBalanceSnapshot model - one account's balance inside a net worth snapshot."""

from sqlalchemy import Column, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class AccountBalanceSnapshot(Base):
    """Balance, type and name of an account at snapshot time.

    Type and name are copied so per-account history survives later
    renames and balance changes on the live Account row.
    """

    __tablename__ = "account_balance_snapshots"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    snapshot_id = Column(
        String(36), ForeignKey("net_worth_history.id", ondelete="CASCADE"), nullable=False, index=True
    )
    account_id = Column(
        String(255), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    balance = Column(Numeric(14, 2), nullable=True)
    account_type = Column(String(50), nullable=True)
    account_name = Column(String(255), nullable=True)

    # Relationships
    snapshot = relationship("NetWorthSnapshot", back_populates="account_balances")
    account = relationship("Account", back_populates="balance_snapshots")
