"""Unit tests for SQLAlchemy models."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from models import Account, AccountBalanceSnapshot, Item, Liability, NetWorthSnapshot, Transaction
from tests.fixtures import create_snapshot


def test_item_creation(item):
    """Test Item model creation."""
    assert item.institution_name == "First Platypus Bank"
    assert item.cursor is None
    assert item.created_at is not None


def test_item_repr_hides_access_token(item):
    assert item.access_token not in repr(item)
    assert item.id in repr(item)


def test_account_relationships(account, item):
    """Test Account relationship with Item."""
    assert account.item.id == item.id
    assert account.name_user_edited is False
    assert [a.id for a in item.accounts] == [account.id]


def test_transaction_defaults(db, account):
    txn = Transaction(id="txn-x", account_id=account.id, amount=Decimal("1.00"))
    db.add(txn)
    db.commit()
    db.refresh(txn)

    assert txn.pending is False
    assert txn.created_at is not None
    assert txn.account.name == "Plaid Checking"


def test_snapshot_defaults(db):
    snapshot = NetWorthSnapshot(total_assets=Decimal("1"), total_liabilities=Decimal("0"),
                                net_worth=Decimal("1"))
    db.add(snapshot)
    db.commit()

    assert snapshot.id is not None
    assert snapshot.snapshot_date == date.today()


def test_transaction_requires_existing_account(db, item):
    """Foreign keys are enforced on SQLite."""
    db.add(Transaction(id="orphan", account_id="missing", amount=Decimal("1.00")))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_deleting_item_cascades(db, item, account, credit_account, transaction):
    db.add(Liability(account_id=credit_account.id, type="credit"))
    snapshot = create_snapshot(db, date(2024, 1, 1), "1000", "250")
    db.add(AccountBalanceSnapshot(snapshot_id=snapshot.id, account_id=account.id,
                                  balance=Decimal("1000")))
    db.commit()

    db.delete(item)
    db.commit()

    assert db.query(Item).count() == 0
    assert db.query(Account).count() == 0
    assert db.query(Transaction).count() == 0
    assert db.query(Liability).count() == 0
    assert db.query(AccountBalanceSnapshot).count() == 0
    # Snapshot totals are history and survive
    assert db.query(NetWorthSnapshot).count() == 1


def test_deleting_item_leaves_other_items(db, item, second_item, account):
    db.add(Account(id="acc-tartan", item_id=second_item.id, type="depository"))
    db.commit()

    db.delete(item)
    db.commit()

    assert [a.id for a in db.query(Account).all()] == ["acc-tartan"]
