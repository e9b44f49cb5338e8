"""Aggregator protocol definitions.

Normalized records returned by the aggregator client and the ``AggregatorClient``
protocol the services depend on. The Plaid client maps SDK responses onto
these dataclasses; tests substitute a scripted fake.
"""

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Protocol


@dataclass
class ProviderAccount:
    """Normalized account data, including balances."""

    id: str  # Plaid account_id
    name: str | None = None
    official_name: str | None = None
    type: str | None = None  # e.g. "depository", "credit", "loan"
    subtype: str | None = None
    mask: str | None = None
    current_balance: Decimal | None = None
    available_balance: Decimal | None = None
    credit_limit: Decimal | None = None
    iso_currency_code: str | None = None


@dataclass
class ProviderTransaction:
    """Normalized transaction from the incremental feed."""

    id: str  # Plaid transaction_id
    account_id: str
    amount: Decimal | None = None  # Positive = outflow, negative = inflow
    date: dt.date | None = None
    name: str | None = None
    merchant_name: str | None = None
    category: str | None = None
    pending: bool = False
    iso_currency_code: str | None = None


@dataclass
class TransactionSyncPage:
    """One page of the incremental transaction feed.

    ``added``, ``modified`` and ``removed`` are disjoint. ``removed`` only
    carries transaction ids.
    """

    added: list[ProviderTransaction] = field(default_factory=list)
    modified: list[ProviderTransaction] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    next_cursor: str = ""
    has_more: bool = False


@dataclass
class ProviderLiability:
    """Normalized credit, mortgage or student-loan record."""

    account_id: str | None
    type: str  # "credit" | "mortgage" | "student"
    apr: Decimal | None = None
    minimum_payment: Decimal | None = None
    next_payment_due_date: dt.date | None = None
    last_statement_balance: Decimal | None = None
    last_statement_date: dt.date | None = None


class ErrorCategory(str, Enum):
    """Category of a per-item sync error."""

    CONNECTION = "connection"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    DATA = "data"
    UNKNOWN = "unknown"


class AggregatorClient(Protocol):
    """Operations the services need from the aggregator.

    Every method may raise a
    :class:`~integrations.exceptions.ProviderError` subclass.
    """

    def is_configured(self) -> bool:
        """Whether credentials are available."""
        ...

    def create_link_token(self) -> str:
        """Create a short-lived Link token for the browser flow."""
        ...

    def exchange_public_token(self, public_token: str) -> dict:
        """Exchange a public token; returns ``access_token`` and ``item_id``."""
        ...

    def get_accounts(self, access_token: str) -> list[ProviderAccount]:
        """List the accounts (with cached balances) of one Item."""
        ...

    def get_balances(self, access_token: str) -> list[ProviderAccount]:
        """Fetch live balances for every account of one Item."""
        ...

    def transactions_sync(
        self, access_token: str, cursor: str | None = None
    ) -> TransactionSyncPage:
        """Fetch the next page of the transaction feed after ``cursor``."""
        ...

    def get_liabilities(self, access_token: str) -> list[ProviderLiability]:
        """List credit, mortgage and student-loan liabilities of one Item."""
        ...

    def remove_item(self, access_token: str) -> None:
        """Revoke an access token."""
        ...
