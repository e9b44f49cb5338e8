"""Net worth and trends API endpoints."""

from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas import (
    AccountTrendsResponse,
    CompositionTrendsResponse,
    NetWorthResponse,
    NetWorthSnapshotResponse,
    SnapshotSavedResponse,
)
from services.networth_service import NetWorthService

router = APIRouter(prefix="/api", tags=["networth"])


def _float_balances(row: dict) -> dict:
    """Render Decimal balances as JSON numbers."""
    return {
        key: float(value) if isinstance(value, Decimal) else value
        for key, value in row.items()
    }


@router.get("/networth", response_model=NetWorthResponse)
def get_net_worth(db: Session = Depends(get_db)):
    """Current assets, liabilities and net worth from live balances."""
    return asdict(NetWorthService.calculate_net_worth(db))


@router.post("/networth/snapshot", response_model=SnapshotSavedResponse)
def save_snapshot(db: Session = Depends(get_db)):
    """Record today's net worth and each account's balance."""
    snapshot = NetWorthService.save_snapshot(db)
    return SnapshotSavedResponse(success=True, snapshot_id=snapshot.id)


@router.get("/networth/history", response_model=list[NetWorthSnapshotResponse])
def get_history(
    days: int = Query(default=90, ge=0),
    db: Session = Depends(get_db),
):
    """Snapshots from the last ``days`` days, oldest first."""
    return NetWorthService.get_history(db, days)


@router.get("/trends/composition", response_model=CompositionTrendsResponse)
def get_composition_trends(
    days: Optional[int] = Query(default=None, ge=0),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Assets vs liabilities over time, plus the change across the range.

    An explicit date range wins over ``days``; with neither, all history is used.
    """
    trends = NetWorthService.get_composition_trends(db, days, start_date, end_date)
    return {"data": trends.data, "changes": asdict(trends.changes)}


@router.get("/trends/accounts", response_model=AccountTrendsResponse)
def get_account_trends(
    account_id: Optional[str] = Query(default=None),
    days: Optional[int] = Query(default=None, ge=0),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Per-account balance history, one row per day keyed by account id."""
    trends = NetWorthService.get_account_trends(db, account_id, days, start_date, end_date)
    return {
        "data": [_float_balances(row) for row in trends.data],
        "accounts": trends.accounts,
    }
