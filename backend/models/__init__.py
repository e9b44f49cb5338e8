"""SQLAlchemy ORM models."""

from .account import Account
from .account_balance_snapshot import AccountBalanceSnapshot
from .item import Item
from .liability import Liability
from .networth_snapshot import NetWorthSnapshot
from .transaction import Transaction
from .utils import generate_uuid, utc_now

__all__ = ["Account", "AccountBalanceSnapshot", "Item", "Liability", "NetWorthSnapshot", "Transaction", "generate_uuid", "utc_now"]
