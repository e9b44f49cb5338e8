"""Net worth service - totals, snapshots and trend queries.

Net worth is derived from live account balances: depository, investment
and brokerage balances count as assets; the absolute value of credit and
loan balances counts as liabilities. Snapshots freeze those totals (and
each account's balance) so history and trends survive later changes.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import Numeric, func
from sqlalchemy.orm import Query, Session

from models import Account, AccountBalanceSnapshot, NetWorthSnapshot
from models.account import ASSET_TYPES, LIABILITY_TYPES

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class NetWorthTotals:
    """Current assets, liabilities and net worth."""

    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal


@dataclass
class TrendChanges:
    """First-to-last change over a filtered run of snapshots.

    Percentages are relative to the first snapshot and are 0 when the
    first value is 0.
    """

    asset_change: Decimal = ZERO
    asset_change_percent: Decimal = ZERO
    liability_change: Decimal = ZERO
    liability_change_percent: Decimal = ZERO
    net_worth_change: Decimal = ZERO
    net_worth_change_percent: Decimal = ZERO


@dataclass
class CompositionTrends:
    """Per-snapshot asset/liability composition plus the period change."""

    data: list[dict] = field(default_factory=list)
    changes: TrendChanges = field(default_factory=TrendChanges)


@dataclass
class BalanceSample:
    """One account's balance as recorded in one snapshot."""

    sample_date: date
    account_id: str
    balance: Decimal | None
    account_name: str | None = None
    account_type: str | None = None


@dataclass
class AccountTrends:
    """Per-day balance rows keyed by account id, plus the accounts seen."""

    data: list[dict] = field(default_factory=list)
    accounts: list[dict] = field(default_factory=list)


def _change(first: Decimal | None, last: Decimal | None) -> tuple[Decimal, Decimal]:
    """Absolute and percent change from first to last."""
    first = first or ZERO
    last = last or ZERO
    delta = last - first
    if first == 0:
        return delta, ZERO
    return delta, (delta / first * 100).quantize(Decimal("0.01"))


def reduce_balance_samples(samples: list[BalanceSample]) -> AccountTrends:
    """Group balance samples into one row per calendar day.

    Samples must be in ascending (date, capture time) order. A day's row
    is placed where its first sample appears; later samples on the same
    day overwrite earlier balances for the same account. Account name and
    type come from the most recent sample of each account.
    """
    rows: dict[str, dict] = {}
    accounts: dict[str, dict] = {}

    for sample in samples:
        day = sample.sample_date.isoformat()
        row = rows.setdefault(day, {"date": day})
        row[sample.account_id] = sample.balance
        accounts[sample.account_id] = {
            "id": sample.account_id,
            "name": sample.account_name,
            "type": sample.account_type,
        }

    return AccountTrends(data=list(rows.values()), accounts=list(accounts.values()))


class NetWorthService:
    """Service for net worth totals, snapshots and trends."""

    @staticmethod
    def calculate_net_worth(db: Session) -> NetWorthTotals:
        """Compute totals from current account balances (null counts as 0)."""
        total_assets = (
            db.query(func.coalesce(func.sum(Account.current_balance), 0))
            .filter(Account.type.in_(ASSET_TYPES))
            .scalar()
        )
        total_liabilities = (
            db.query(
                func.coalesce(
                    func.sum(func.abs(Account.current_balance, type_=Numeric(12, 2))), 0
                )
            )
            .filter(Account.type.in_(LIABILITY_TYPES))
            .scalar()
        )

        assets = Decimal(str(total_assets or 0))
        liabilities = Decimal(str(total_liabilities or 0))
        return NetWorthTotals(
            total_assets=assets,
            total_liabilities=liabilities,
            net_worth=assets - liabilities,
        )

    @staticmethod
    def save_snapshot(db: Session) -> NetWorthSnapshot:
        """Persist today's totals plus a balance row for every account.

        The snapshot is committed first. If writing the per-account rows
        fails, the snapshot is kept without a breakdown and the error is
        logged.
        """
        totals = NetWorthService.calculate_net_worth(db)
        snapshot = NetWorthSnapshot(
            total_assets=totals.total_assets,
            total_liabilities=totals.total_liabilities,
            net_worth=totals.net_worth,
            snapshot_date=date.today(),
        )
        db.add(snapshot)
        db.commit()

        try:
            accounts = db.query(Account).all()
            for account in accounts:
                db.add(AccountBalanceSnapshot(
                    snapshot_id=snapshot.id,
                    account_id=account.id,
                    balance=account.current_balance,
                    account_type=account.type,
                    account_name=account.name,
                ))
            db.commit()
            logger.info(
                "Net worth snapshot %s saved: net worth %s across %d accounts",
                snapshot.id, totals.net_worth, len(accounts),
            )
        except Exception:
            db.rollback()
            logger.warning(
                "Failed to save account balances for snapshot %s", snapshot.id, exc_info=True
            )

        return snapshot

    @staticmethod
    def get_history(db: Session, days: int = 90) -> list[NetWorthSnapshot]:
        """Snapshots from the last ``days`` days, oldest first."""
        since = date.today() - timedelta(days=days)
        return (
            db.query(NetWorthSnapshot)
            .filter(NetWorthSnapshot.snapshot_date >= since)
            .order_by(NetWorthSnapshot.snapshot_date.asc(), NetWorthSnapshot.created_at.asc())
            .all()
        )

    @staticmethod
    def _filter_dates(
        query: Query,
        days: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Query:
        """Restrict a snapshot query by date.

        Priority: explicit range, start only, end only, trailing ``days``
        window, otherwise all time.
        """
        column = NetWorthSnapshot.snapshot_date
        if start_date and end_date:
            return query.filter(column >= start_date, column <= end_date)
        if start_date:
            return query.filter(column >= start_date)
        if end_date:
            return query.filter(column <= end_date)
        if days is not None:
            return query.filter(column >= date.today() - timedelta(days=days))
        return query

    @staticmethod
    def get_composition_trends(
        db: Session,
        days: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> CompositionTrends:
        """Asset/liability composition per snapshot and the first-to-last change."""
        query = NetWorthService._filter_dates(
            db.query(NetWorthSnapshot), days, start_date, end_date
        )
        snapshots = query.order_by(
            NetWorthSnapshot.snapshot_date.asc(), NetWorthSnapshot.created_at.asc()
        ).all()

        data = [
            {
                "date": s.snapshot_date.isoformat(),
                "assets": s.total_assets or ZERO,
                "liabilities": s.total_liabilities or ZERO,
                "net_worth": s.net_worth or ZERO,
            }
            for s in snapshots
        ]

        changes = TrendChanges()
        if len(snapshots) >= 2:
            first, last = snapshots[0], snapshots[-1]
            changes.asset_change, changes.asset_change_percent = _change(
                first.total_assets, last.total_assets
            )
            changes.liability_change, changes.liability_change_percent = _change(
                first.total_liabilities, last.total_liabilities
            )
            changes.net_worth_change, changes.net_worth_change_percent = _change(
                first.net_worth, last.net_worth
            )

        return CompositionTrends(data=data, changes=changes)

    @staticmethod
    def get_account_trends(
        db: Session,
        account_id: str | None = None,
        days: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> AccountTrends:
        """Per-account balance history, one row per day."""
        query = db.query(
            NetWorthSnapshot.snapshot_date,
            AccountBalanceSnapshot.account_id,
            AccountBalanceSnapshot.balance,
            AccountBalanceSnapshot.account_name,
            AccountBalanceSnapshot.account_type,
        ).select_from(AccountBalanceSnapshot).join(
            NetWorthSnapshot, AccountBalanceSnapshot.snapshot_id == NetWorthSnapshot.id
        )
        query = NetWorthService._filter_dates(query, days, start_date, end_date)
        if account_id:
            query = query.filter(AccountBalanceSnapshot.account_id == account_id)

        rows = query.order_by(
            NetWorthSnapshot.snapshot_date.asc(), NetWorthSnapshot.created_at.asc()
        ).all()

        samples = [
            BalanceSample(
                sample_date=row.snapshot_date,
                account_id=row.account_id,
                balance=row.balance,
                account_name=row.account_name,
                account_type=row.account_type,
            )
            for row in rows
        ]
        return reduce_balance_samples(samples)
