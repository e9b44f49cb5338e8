"""Plaid API client.

This module implements the AggregatorClient protocol on top of the
plaid-python SDK: Link token creation, public token exchange, account and
balance listing, the ``/transactions/sync`` incremental feed, liabilities,
and Item removal.

One client is built from settings per request (see ``api.plaid``) and
passed into the services; nothing here holds process-wide state beyond the
lazily created SDK instance of each client.
"""

import json
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

import urllib3
from plaid import ApiException, Environment
from plaid.api.plaid_api import PlaidApi
from plaid.api_client import ApiClient
from plaid.configuration import Configuration
from plaid.model.accounts_balance_get_request import AccountsBalanceGetRequest
from plaid.model.accounts_get_request import AccountsGetRequest
from plaid.model.country_code import CountryCode
from plaid.model.item_public_token_exchange_request import ItemPublicTokenExchangeRequest
from plaid.model.item_remove_request import ItemRemoveRequest
from plaid.model.liabilities_get_request import LiabilitiesGetRequest
from plaid.model.link_token_create_request import LinkTokenCreateRequest
from plaid.model.link_token_create_request_user import LinkTokenCreateRequestUser
from plaid.model.products import Products
from plaid.model.transactions_sync_request import TransactionsSyncRequest

from config import settings
from integrations.exceptions import (
    ProviderAPIError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderDataError,
)
from integrations.provider_protocol import (
    ProviderAccount,
    ProviderLiability,
    ProviderTransaction,
    TransactionSyncPage,
)

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Plaid"

# Error codes that mean the user must go back through Link for the Item
AUTH_ERROR_CODES = frozenset({"ITEM_LOGIN_REQUIRED", "INVALID_ACCESS_TOKEN"})

# Map PLAID_ENVIRONMENT setting to SDK host URLs.
# Plaid's Development environment is deprecated; only sandbox and production
# are supported.
_ENVIRONMENT_MAP: dict[str, str] = {
    "sandbox": Environment.Sandbox,
    "production": Environment.Production,
}


def _as_dict(obj) -> dict:
    """Return a plain dict for an SDK model (or pass a dict through)."""
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return obj


def resolve_category(txn: dict) -> str | None:
    """Pick a single category label for a Plaid transaction.

    Prefers ``personal_finance_category.primary``, then the first entry of
    the legacy ``category`` list.
    """
    pfc = txn.get("personal_finance_category") or {}
    primary = pfc.get("primary")
    if primary:
        return primary
    legacy = txn.get("category") or []
    if legacy:
        return legacy[0]
    return None


class PlaidClient:
    """Wrapper around the Plaid API.

    Implements the AggregatorClient protocol. All SDK failures surface as
    :class:`ProviderAPIError` (with Plaid's message, code and HTTP status)
    or :class:`ProviderConnectionError` (timeouts, network errors).
    """

    def __init__(
        self,
        client_id: str | None = None,
        secret: str | None = None,
        environment: str | None = None,
        redirect_uri: str | None = None,
        request_timeout: float | None = None,
    ):
        self._client_id = client_id or settings.PLAID_CLIENT_ID
        self._secret = secret or settings.PLAID_SECRET
        self._environment = environment or settings.PLAID_ENVIRONMENT
        self._redirect_uri = (
            redirect_uri if redirect_uri is not None else settings.PLAID_REDIRECT_URI
        )
        self._request_timeout = request_timeout or settings.PLAID_REQUEST_TIMEOUT

        # Lazily created on first use
        self._api: PlaidApi | None = None

    def _get_api(self) -> PlaidApi:
        """Return (and cache) a PlaidApi instance."""
        if self._api is None:
            env_key = self._environment.lower()
            host = _ENVIRONMENT_MAP.get(env_key)
            if host is None:
                logger.warning(
                    "Unknown PLAID_ENVIRONMENT=%r, falling back to sandbox. "
                    "Valid values: sandbox, production",
                    self._environment,
                )
                host = Environment.Sandbox
            logger.info(
                "Plaid API client: environment=%s, host=%s, client_id=<configured>",
                env_key,
                host,
            )
            configuration = Configuration(
                host=host,
                api_key={
                    "clientId": self._client_id,
                    "secret": self._secret,
                },
            )
            api_client = ApiClient(configuration)
            self._api = PlaidApi(api_client)
        return self._api

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return PROVIDER_NAME

    def is_configured(self) -> bool:
        """Check if Plaid credentials are configured."""
        return bool(self._client_id) and bool(self._secret)

    def _call(self, operation: str, request):
        """Invoke one Plaid endpoint with the per-request deadline.

        Converts SDK and transport failures into ProviderError subclasses.
        """
        endpoint = getattr(self._get_api(), operation)
        try:
            return endpoint(request, _request_timeout=self._request_timeout)
        except ApiException as e:
            raise self._map_plaid_error(e) from e
        except urllib3.exceptions.HTTPError as e:
            raise ProviderConnectionError(
                f"Plaid {operation} failed: {e}", provider_name=PROVIDER_NAME
            ) from e

    # ------------------------------------------------------------------
    # Link Token & Token Exchange
    # ------------------------------------------------------------------

    def create_link_token(self) -> str:
        """Create a Plaid Link token for the browser-based auth flow.

        Each call uses a fresh ``client_user_id``. ``redirect_uri`` is only
        sent when configured; an empty string would be rejected by Plaid.

        Returns:
            The link_token string to be passed to Plaid Link.
        """
        kwargs = {
            "user": LinkTokenCreateRequestUser(client_user_id=str(uuid.uuid4())),
            "client_name": settings.PLAID_CLIENT_NAME,
            "products": [Products("transactions")],
            "country_codes": [CountryCode("US")],
            "language": "en",
        }
        redirect_uri = (self._redirect_uri or "").strip()
        if redirect_uri:
            kwargs["redirect_uri"] = redirect_uri
            logger.info("Creating link token with redirect_uri: %s", redirect_uri.rstrip("/"))
        else:
            logger.info("Creating link token without redirect_uri (standard flow)")

        response = self._call("link_token_create", LinkTokenCreateRequest(**kwargs))
        return response["link_token"]

    def exchange_public_token(self, public_token: str) -> dict:
        """Exchange a Plaid Link public_token for a permanent access_token.

        Args:
            public_token: The public_token from Plaid Link on-success callback.

        Returns:
            Dict with ``access_token`` and ``item_id``.
        """
        request = ItemPublicTokenExchangeRequest(public_token=public_token)
        response = self._call("item_public_token_exchange", request)
        return {
            "access_token": response["access_token"],
            "item_id": response["item_id"],
        }

    def remove_item(self, access_token: str) -> None:
        """Revoke an access token by calling Plaid's /item/remove endpoint."""
        self._call("item_remove", ItemRemoveRequest(access_token=access_token))

    # ------------------------------------------------------------------
    # Accounts & balances
    # ------------------------------------------------------------------

    def get_accounts(self, access_token: str) -> list[ProviderAccount]:
        """List accounts for one Item (balances as cached by Plaid)."""
        response = _as_dict(self._call("accounts_get", AccountsGetRequest(access_token=access_token)))
        return [self._map_account(a) for a in response.get("accounts", []) or []]

    def get_balances(self, access_token: str) -> list[ProviderAccount]:
        """Fetch real-time balances for every account of one Item."""
        request = AccountsBalanceGetRequest(access_token=access_token)
        response = _as_dict(self._call("accounts_balance_get", request))
        return [self._map_account(a) for a in response.get("accounts", []) or []]

    def _map_account(self, acct: dict) -> ProviderAccount:
        """Map a Plaid account object to a ProviderAccount."""
        account_id = acct.get("account_id")
        if not account_id:
            raise ProviderDataError("Plaid account without account_id", provider_name=PROVIDER_NAME)
        balances = acct.get("balances") or {}
        return ProviderAccount(
            id=account_id,
            name=acct.get("name"),
            official_name=acct.get("official_name"),
            type=self._to_str(acct.get("type")),
            subtype=self._to_str(acct.get("subtype")),
            mask=acct.get("mask"),
            current_balance=self._to_decimal(balances.get("current")),
            available_balance=self._to_decimal(balances.get("available")),
            credit_limit=self._to_decimal(balances.get("limit")),
            iso_currency_code=balances.get("iso_currency_code"),
        )

    # ------------------------------------------------------------------
    # Transactions (incremental feed)
    # ------------------------------------------------------------------

    def transactions_sync(
        self, access_token: str, cursor: str | None = None
    ) -> TransactionSyncPage:
        """Fetch one page of ``/transactions/sync``.

        The cursor is omitted entirely on the first call.
        """
        kwargs = {"access_token": access_token}
        if cursor:
            kwargs["cursor"] = cursor
        response = _as_dict(self._call("transactions_sync", TransactionsSyncRequest(**kwargs)))

        return TransactionSyncPage(
            added=[self._map_transaction(t) for t in response.get("added", []) or []],
            modified=[self._map_transaction(t) for t in response.get("modified", []) or []],
            removed=[
                r.get("transaction_id")
                for r in response.get("removed", []) or []
                if r.get("transaction_id")
            ],
            next_cursor=response.get("next_cursor") or "",
            has_more=bool(response.get("has_more")),
        )

    def _map_transaction(self, txn: dict) -> ProviderTransaction:
        """Map a Plaid transaction to a ProviderTransaction.

        The Plaid sign convention (positive = outflow) is preserved.
        """
        transaction_id = txn.get("transaction_id")
        if not transaction_id:
            raise ProviderDataError("Plaid transaction without transaction_id", provider_name=PROVIDER_NAME)
        return ProviderTransaction(
            id=transaction_id,
            account_id=txn.get("account_id", ""),
            amount=self._to_decimal(txn.get("amount")),
            date=self._to_date(txn.get("date")),
            name=txn.get("name"),
            merchant_name=txn.get("merchant_name"),
            category=resolve_category(txn),
            pending=bool(txn.get("pending")),
            iso_currency_code=txn.get("iso_currency_code"),
        )

    # ------------------------------------------------------------------
    # Liabilities
    # ------------------------------------------------------------------

    def get_liabilities(self, access_token: str) -> list[ProviderLiability]:
        """Fetch credit, mortgage and student-loan liabilities for one Item.

        The APR lives in a different place for each liability type: the
        first ``aprs`` tier for credit cards, ``interest_rate.percentage``
        for mortgages and ``interest_rate_percentage`` for student loans.
        """
        request = LiabilitiesGetRequest(access_token=access_token)
        response = _as_dict(self._call("liabilities_get", request))
        data = response.get("liabilities") or {}

        liabilities: list[ProviderLiability] = []
        for card in data.get("credit") or []:
            aprs = card.get("aprs") or []
            liabilities.append(ProviderLiability(
                account_id=card.get("account_id"),
                type="credit",
                apr=self._to_decimal(aprs[0].get("apr_percentage")) if aprs else None,
                minimum_payment=self._to_decimal(card.get("minimum_payment_amount")),
                next_payment_due_date=self._to_date(card.get("next_payment_due_date")),
                last_statement_balance=self._to_decimal(card.get("last_statement_balance")),
                last_statement_date=self._to_date(card.get("last_statement_issue_date")),
            ))

        for loan in data.get("mortgage") or []:
            interest_rate = loan.get("interest_rate") or {}
            liabilities.append(ProviderLiability(
                account_id=loan.get("account_id"),
                type="mortgage",
                apr=self._to_decimal(interest_rate.get("percentage")),
                minimum_payment=self._to_decimal(loan.get("next_monthly_payment")),
                next_payment_due_date=self._to_date(loan.get("next_payment_due_date")),
            ))

        for loan in data.get("student") or []:
            liabilities.append(ProviderLiability(
                account_id=loan.get("account_id"),
                type="student",
                apr=self._to_decimal(loan.get("interest_rate_percentage")),
                minimum_payment=self._to_decimal(loan.get("minimum_payment_amount")),
                next_payment_due_date=self._to_date(loan.get("next_payment_due_date")),
                last_statement_balance=self._to_decimal(loan.get("last_statement_balance")),
                last_statement_date=self._to_date(loan.get("last_statement_issue_date")),
            ))

        return liabilities

    # ------------------------------------------------------------------
    # Error mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _map_plaid_error(exc: ApiException) -> ProviderAPIError:
        """Map a Plaid ApiException to a ProviderAPIError.

        Uses Plaid's ``error_message`` as the message when the response
        body carries one. Login and token errors, and bare 401/403
        responses, become ProviderAuthError.
        """
        status = exc.status or None
        message = str(exc)
        error_code = None

        try:
            body = json.loads(exc.body) if exc.body else {}
        except (TypeError, ValueError):
            body = {}
        if isinstance(body, dict):
            error_code = body.get("error_code") or None
            error_message = body.get("error_message")
            if error_message:
                message = error_message

        error_cls = ProviderAPIError
        if error_code in AUTH_ERROR_CODES or status in (401, 403):
            error_cls = ProviderAuthError
        return error_cls(
            message,
            provider_name=PROVIDER_NAME,
            status_code=status,
            error_code=error_code,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_decimal(value) -> Decimal | None:
        """Convert a value to Decimal, returning None on failure."""
        if value is None:
            return None
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None

    @staticmethod
    def _to_date(value) -> date | None:
        """Convert a date, datetime or ISO string to a date."""
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            return None

    @staticmethod
    def _to_str(value) -> str | None:
        """Render SDK enum values (or plain strings) as str."""
        if value is None:
            return None
        return str(getattr(value, "value", value))
