"""Unit tests for NetWorthService."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch

from models import Account, AccountBalanceSnapshot, NetWorthSnapshot
from services.networth_service import BalanceSample, NetWorthService, reduce_balance_samples
from tests.fixtures import create_snapshot


def _balance(db, snapshot, account_id, balance, name="Account", account_type="depository"):
    db.add(AccountBalanceSnapshot(
        snapshot_id=snapshot.id,
        account_id=account_id,
        balance=Decimal(balance),
        account_name=name,
        account_type=account_type,
    ))
    db.flush()


# ---------------------------------------------------------------------------
# calculate_net_worth
# ---------------------------------------------------------------------------


class TestCalculateNetWorth:
    def test_assets_minus_absolute_liabilities(self, db, account, credit_account):
        totals = NetWorthService.calculate_net_worth(db)

        assert totals.total_assets == Decimal("1000")
        assert totals.total_liabilities == Decimal("250")
        assert totals.net_worth == Decimal("750")

    def test_all_asset_and_liability_types_count(self, db, item, account, loan_account):
        db.add(Account(id="acc-brokerage", item_id=item.id, type="brokerage",
                       current_balance=Decimal("200.00")))
        db.add(Account(id="acc-investment", item_id=item.id, type="investment",
                       current_balance=Decimal("300.00")))
        db.commit()

        totals = NetWorthService.calculate_net_worth(db)

        assert totals.total_assets == Decimal("1500")
        assert totals.total_liabilities == Decimal("5000")
        assert totals.net_worth == Decimal("-3500")

    def test_null_balances_and_other_types_ignored(self, db, item, account):
        db.add(Account(id="acc-null", item_id=item.id, type="depository", current_balance=None))
        db.add(Account(id="acc-other", item_id=item.id, type="other",
                       current_balance=Decimal("999.00")))
        db.commit()

        totals = NetWorthService.calculate_net_worth(db)

        assert totals.total_assets == Decimal("1000")
        assert totals.total_liabilities == Decimal("0")

    def test_no_accounts(self, db):
        totals = NetWorthService.calculate_net_worth(db)

        assert totals.total_assets == 0
        assert totals.total_liabilities == 0
        assert totals.net_worth == 0


# ---------------------------------------------------------------------------
# save_snapshot / get_history
# ---------------------------------------------------------------------------


class TestSaveSnapshot:
    def test_saves_totals_and_breakdown(self, db, account, credit_account):
        snapshot = NetWorthService.save_snapshot(db)

        assert snapshot.snapshot_date == date.today()
        assert snapshot.net_worth == Decimal("750")
        rows = {b.account_id: b for b in db.query(AccountBalanceSnapshot).all()}
        assert set(rows) == {account.id, credit_account.id}
        assert rows[credit_account.id].balance == Decimal("-250")
        assert rows[credit_account.id].account_type == "credit"
        assert rows[account.id].account_name == "Plaid Checking"

    def test_breakdown_failure_keeps_snapshot(self, db, account):
        with patch(
            "services.networth_service.AccountBalanceSnapshot",
            side_effect=RuntimeError("boom"),
        ):
            snapshot = NetWorthService.save_snapshot(db)

        assert db.query(NetWorthSnapshot).count() == 1
        assert db.query(AccountBalanceSnapshot).count() == 0
        assert snapshot.total_assets == Decimal("1000")


class TestGetHistory:
    def test_filters_by_days_and_sorts_ascending(self, db):
        today = date.today()
        create_snapshot(db, today, "3", "0")
        create_snapshot(db, today - timedelta(days=10), "2", "0")
        create_snapshot(db, today - timedelta(days=100), "1", "0")
        db.commit()

        history = NetWorthService.get_history(db, days=90)

        assert [s.total_assets for s in history] == [Decimal("2"), Decimal("3")]

    def test_default_window_is_90_days(self, db):
        create_snapshot(db, date.today() - timedelta(days=90), "1", "0")
        create_snapshot(db, date.today() - timedelta(days=91), "1", "0")
        db.commit()

        assert len(NetWorthService.get_history(db)) == 1


# ---------------------------------------------------------------------------
# Composition trends
# ---------------------------------------------------------------------------


class TestCompositionTrends:
    def test_changes_between_first_and_last(self, db):
        create_snapshot(db, date(2024, 1, 1), "100", "50")
        create_snapshot(db, date(2024, 2, 1), "150", "40")
        db.commit()

        trends = NetWorthService.get_composition_trends(db)

        assert [row["date"] for row in trends.data] == ["2024-01-01", "2024-02-01"]
        changes = trends.changes
        assert changes.asset_change == Decimal("50")
        assert changes.asset_change_percent == Decimal("50")
        assert changes.liability_change == Decimal("-10")
        assert changes.liability_change_percent == Decimal("-20")
        assert changes.net_worth_change == Decimal("60")
        assert changes.net_worth_change_percent == Decimal("120")

    def test_single_snapshot_has_zero_changes(self, db):
        create_snapshot(db, date(2024, 1, 1), "100", "50")
        db.commit()

        trends = NetWorthService.get_composition_trends(db)

        assert len(trends.data) == 1
        assert trends.changes.asset_change == 0
        assert trends.changes.liability_change_percent == 0

    def test_zero_first_value_gives_zero_percent(self, db):
        create_snapshot(db, date(2024, 1, 1), "100", "0")
        create_snapshot(db, date(2024, 2, 1), "100", "25")
        db.commit()

        changes = NetWorthService.get_composition_trends(db).changes

        assert changes.liability_change == Decimal("25")
        assert changes.liability_change_percent == 0

    def test_date_filter_priority(self, db):
        for day in (1, 10, 20, 30):
            create_snapshot(db, date(2024, 1, day), str(day), "0")
        db.commit()

        def days_of(**kwargs):
            data = NetWorthService.get_composition_trends(db, **kwargs).data
            return [int(row["date"][-2:]) for row in data]

        # Both bounds win over days
        assert days_of(start_date=date(2024, 1, 5), end_date=date(2024, 1, 20), days=1) == [10, 20]
        assert days_of(start_date=date(2024, 1, 15)) == [20, 30]
        assert days_of(end_date=date(2024, 1, 10)) == [1, 10]
        assert days_of() == [1, 10, 20, 30]

    def test_days_window(self, db):
        create_snapshot(db, date.today() - timedelta(days=5), "1", "0")
        create_snapshot(db, date.today() - timedelta(days=50), "2", "0")
        db.commit()

        trends = NetWorthService.get_composition_trends(db, days=30)

        assert len(trends.data) == 1


# ---------------------------------------------------------------------------
# Account trends
# ---------------------------------------------------------------------------


class TestReduceBalanceSamples:
    def test_groups_by_day_and_later_samples_win(self):
        samples = [
            BalanceSample(date(2024, 1, 1), "a", Decimal("10"), "Checking", "depository"),
            BalanceSample(date(2024, 1, 1), "b", Decimal("-5"), "Card", "credit"),
            BalanceSample(date(2024, 1, 1), "a", Decimal("12"), "Checking", "depository"),
            BalanceSample(date(2024, 1, 2), "a", Decimal("15"), "Main Checking", "depository"),
        ]

        trends = reduce_balance_samples(samples)

        assert trends.data == [
            {"date": "2024-01-01", "a": Decimal("12"), "b": Decimal("-5")},
            {"date": "2024-01-02", "a": Decimal("15")},
        ]
        assert trends.accounts == [
            {"id": "a", "name": "Main Checking", "type": "depository"},
            {"id": "b", "name": "Card", "type": "credit"},
        ]

    def test_empty(self):
        trends = reduce_balance_samples([])

        assert trends.data == []
        assert trends.accounts == []


class TestAccountTrends:
    def test_rows_per_day_from_snapshots(self, db, account, credit_account):
        early = create_snapshot(db, date(2024, 1, 1), "1000", "250",
                                created_at=datetime(2024, 1, 1, 8, tzinfo=timezone.utc))
        late = create_snapshot(db, date(2024, 1, 1), "1100", "250",
                               created_at=datetime(2024, 1, 1, 20, tzinfo=timezone.utc))
        next_day = create_snapshot(db, date(2024, 1, 2), "1200", "200")
        _balance(db, early, account.id, "1000", "Plaid Checking")
        _balance(db, early, credit_account.id, "-250", "Plaid Credit Card", "credit")
        _balance(db, late, account.id, "1100", "Plaid Checking")
        _balance(db, next_day, account.id, "1200", "Plaid Checking")
        db.commit()

        trends = NetWorthService.get_account_trends(db)

        assert trends.data == [
            {"date": "2024-01-01", account.id: Decimal("1100"), credit_account.id: Decimal("-250")},
            {"date": "2024-01-02", account.id: Decimal("1200")},
        ]
        assert {a["id"] for a in trends.accounts} == {account.id, credit_account.id}

    def test_restricted_to_one_account(self, db, account, credit_account):
        snapshot = create_snapshot(db, date(2024, 1, 1), "1000", "250")
        _balance(db, snapshot, account.id, "1000")
        _balance(db, snapshot, credit_account.id, "-250", account_type="credit")
        db.commit()

        trends = NetWorthService.get_account_trends(db, account_id=credit_account.id)

        assert trends.data == [{"date": "2024-01-01", credit_account.id: Decimal("-250")}]
        assert [a["id"] for a in trends.accounts] == [credit_account.id]

    def test_date_range(self, db, account):
        for day in (1, 15):
            snapshot = create_snapshot(db, date(2024, 3, day), "1", "0")
            _balance(db, snapshot, account.id, str(day))
        db.commit()

        trends = NetWorthService.get_account_trends(
            db, start_date=date(2024, 3, 10), end_date=date(2024, 3, 31)
        )

        assert [row["date"] for row in trends.data] == ["2024-03-15"]
