"""Transaction query API endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas import CategorySpending, IncomeResponse, TransactionListResponse
from services.transaction_service import DEFAULT_LIMIT, TransactionService

router = APIRouter(prefix="/api", tags=["transactions"])


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    account_id: Optional[str] = Query(default=None),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    search: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    """List transactions with optional filters, newest first.

    ``total`` counts every matching transaction, not just the returned page.
    """
    page = TransactionService.list_transactions(
        db,
        account_id=account_id,
        start_date=start_date,
        end_date=end_date,
        search=search,
        category=category,
        limit=limit,
        offset=offset,
    )
    return {
        "transactions": page.transactions,
        "total": page.total,
        "limit": page.limit,
        "offset": page.offset,
    }


@router.get("/spending_by_category", response_model=list[CategorySpending])
def spending_by_category(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Posted spending grouped by category, largest first."""
    return TransactionService.spending_by_category(db, start_date, end_date)


@router.get("/income", response_model=IncomeResponse)
def get_income(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Posted income transactions and their total."""
    summary = TransactionService.get_income(db, start_date, end_date)
    return {"transactions": summary.transactions, "total": summary.total}
