"""Test fixtures and sample data."""
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from models import Account, Item, NetWorthSnapshot, Transaction
from sqlalchemy.orm import Session

from tests.fixtures.mocks import SAMPLE_ACCESS_TOKEN


def create_transaction(
    db: Session,
    txn_id: str,
    account_id: str,
    amount: Decimal | str,
    txn_date: date,
    name: str = "Purchase",
    merchant_name: str | None = None,
    category: str | None = None,
    pending: bool = False,
    created_at: datetime | None = None,
) -> Transaction:
    """Create a stored Transaction row (flushed, not committed)."""
    txn = Transaction(
        id=txn_id,
        account_id=account_id,
        amount=Decimal(str(amount)),
        date=txn_date,
        name=name,
        merchant_name=merchant_name,
        category=category,
        pending=pending,
        iso_currency_code="USD",
    )
    if created_at is not None:
        txn.created_at = created_at
    db.add(txn)
    db.flush()
    return txn


def create_snapshot(
    db: Session,
    snapshot_date: date,
    total_assets: Decimal | str,
    total_liabilities: Decimal | str,
    created_at: datetime | None = None,
) -> NetWorthSnapshot:
    """Create a NetWorthSnapshot with net worth derived from the totals."""
    assets = Decimal(str(total_assets))
    liabilities = Decimal(str(total_liabilities))
    snapshot = NetWorthSnapshot(
        snapshot_date=snapshot_date,
        total_assets=assets,
        total_liabilities=liabilities,
        net_worth=assets - liabilities,
    )
    if created_at is not None:
        snapshot.created_at = created_at
    db.add(snapshot)
    db.flush()
    return snapshot


@pytest.fixture
def item(db: Session) -> Item:
    """A linked Item whose access token the mock client knows."""
    item = Item(
        id="item-1",
        access_token=SAMPLE_ACCESS_TOKEN,
        institution_id="ins_109508",
        institution_name="First Platypus Bank",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def second_item(db: Session) -> Item:
    """A second Item, linked after the first."""
    item = Item(
        id="item-2",
        access_token="access-sandbox-2",
        institution_id="ins_109511",
        institution_name="Tartan Bank",
        created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def account(db: Session, item: Item) -> Account:
    """A checking account with a 1000.00 balance."""
    account = Account(
        id="acc-checking",
        item_id=item.id,
        name="Plaid Checking",
        type="depository",
        subtype="checking",
        mask="0000",
        current_balance=Decimal("1000.00"),
        available_balance=Decimal("950.00"),
        iso_currency_code="USD",
    )
    db.add(account)
    db.commit()
    return account


@pytest.fixture
def credit_account(db: Session, item: Item) -> Account:
    """A credit card owing 250.00 (stored negative)."""
    account = Account(
        id="acc-credit",
        item_id=item.id,
        name="Plaid Credit Card",
        type="credit",
        subtype="credit card",
        mask="3333",
        current_balance=Decimal("-250.00"),
        credit_limit=Decimal("2000.00"),
        iso_currency_code="USD",
    )
    db.add(account)
    db.commit()
    return account


@pytest.fixture
def loan_account(db: Session, item: Item) -> Account:
    """A student loan with a 5000.00 balance."""
    account = Account(
        id="acc-loan",
        item_id=item.id,
        name="Plaid Student Loan",
        type="loan",
        subtype="student",
        mask="4444",
        current_balance=Decimal("5000.00"),
        iso_currency_code="USD",
    )
    db.add(account)
    db.commit()
    return account


@pytest.fixture
def transaction(db: Session, account: Account) -> Transaction:
    """A posted coffee purchase on the checking account."""
    txn = create_transaction(
        db,
        "txn-1",
        account.id,
        "4.33",
        date(2024, 1, 15),
        name="Starbucks",
        merchant_name="Starbucks",
        category="FOOD_AND_DRINK",
    )
    db.commit()
    return txn
