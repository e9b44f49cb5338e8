"""Transaction query service - filtering, pagination and spending rollups."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from models import Account, Item, Transaction

DEFAULT_LIMIT = 100


@dataclass
class TransactionPage:
    transactions: list[dict] = field(default_factory=list)
    total: int = 0
    limit: int = DEFAULT_LIMIT
    offset: int = 0


@dataclass
class IncomeSummary:
    transactions: list[dict] = field(default_factory=list)
    total: Decimal = Decimal("0")


def _row_dict(txn: Transaction, account_name: str | None, institution_name: str | None) -> dict:
    return {
        "id": txn.id,
        "account_id": txn.account_id,
        "amount": txn.amount,
        "date": txn.date,
        "name": txn.name,
        "merchant_name": txn.merchant_name,
        "category": txn.category,
        "pending": txn.pending,
        "iso_currency_code": txn.iso_currency_code,
        "created_at": txn.created_at,
        "account_name": account_name,
        "institution_name": institution_name,
    }


def _filter_date_range(query: Query, start_date: date | None, end_date: date | None) -> Query:
    if start_date:
        query = query.filter(Transaction.date >= start_date)
    if end_date:
        query = query.filter(Transaction.date <= end_date)
    return query


class TransactionService:
    """Read-side queries over stored transactions."""

    @staticmethod
    def _base_query(db: Session) -> Query:
        return (
            db.query(Transaction, Account.name, Item.institution_name)
            .join(Account, Transaction.account_id == Account.id)
            .join(Item, Account.item_id == Item.id)
        )

    @staticmethod
    def list_transactions(
        db: Session,
        account_id: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        search: str | None = None,
        category: str | None = None,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
    ) -> TransactionPage:
        """List transactions, newest first.

        Date bounds are inclusive. ``search`` matches name or merchant name
        case-insensitively. ``total`` counts every row matching the filters,
        regardless of ``limit`` and ``offset``.
        """
        query = TransactionService._base_query(db)

        if account_id:
            query = query.filter(Transaction.account_id == account_id)
        query = _filter_date_range(query, start_date, end_date)
        if search:
            search_term = f"%{search}%"
            query = query.filter(
                (Transaction.name.ilike(search_term))
                | (Transaction.merchant_name.ilike(search_term))
            )
        if category:
            query = query.filter(Transaction.category == category)

        total = query.count()
        rows = (
            query.order_by(Transaction.date.desc(), Transaction.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

        return TransactionPage(
            transactions=[_row_dict(txn, acct, inst) for txn, acct, inst in rows],
            total=total,
            limit=limit,
            offset=offset,
        )

    @staticmethod
    def spending_by_category(
        db: Session,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[dict]:
        """Total of posted outflows (positive amounts) per category, largest first."""
        total = func.sum(Transaction.amount).label("total")
        query = (
            db.query(Transaction.category, total)
            .filter(Transaction.amount > 0, Transaction.pending.is_(False))
        )
        query = _filter_date_range(query, start_date, end_date)
        rows = query.group_by(Transaction.category).order_by(total.desc()).all()
        return [{"category": category, "total": amount} for category, amount in rows]

    @staticmethod
    def get_income(
        db: Session,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> IncomeSummary:
        """Posted inflows (negative amounts) and their absolute total."""
        query = (
            TransactionService._base_query(db)
            .filter(Transaction.amount < 0, Transaction.pending.is_(False))
        )
        query = _filter_date_range(query, start_date, end_date)
        rows = query.order_by(Transaction.date.desc(), Transaction.created_at.desc()).all()

        summary = IncomeSummary()
        for txn, account_name, institution_name in rows:
            summary.transactions.append(_row_dict(txn, account_name, institution_name))
            summary.total += abs(txn.amount)
        return summary
