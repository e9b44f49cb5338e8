"""NetWorthSnapshot model - point-in-time net worth totals."""

from datetime import date

from sqlalchemy import Column, Date, DateTime, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utc_now


class NetWorthSnapshot(Base):
    """Totals captured by ``NetWorthService.save_snapshot``.

    Several snapshots may share a ``snapshot_date``; trend queries
    collapse them per day.
    """

    __tablename__ = "net_worth_history"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    total_assets = Column(Numeric(14, 2), nullable=True)
    total_liabilities = Column(Numeric(14, 2), nullable=True)
    net_worth = Column(Numeric(14, 2), nullable=True)
    snapshot_date = Column(Date, nullable=False, default=date.today, index=True)
    created_at = Column(DateTime, default=utc_now)

    # Relationships
    account_balances = relationship(
        "AccountBalanceSnapshot", back_populates="snapshot", cascade="all, delete-orphan"
    )
