"""Account management service.

Mirrors Plaid accounts into the ``accounts`` table and serves the
item/account/liability read paths.
"""

import logging

from sqlalchemy.orm import Session, joinedload

from integrations.provider_protocol import AggregatorClient, ProviderAccount
from models import Account, Item, Liability

logger = logging.getLogger(__name__)


class AccountService:
    """Service for account mirroring and account CRUD operations."""

    @staticmethod
    def sync_accounts(
        db: Session,
        client: AggregatorClient,
        item_id: str,
        access_token: str,
    ) -> list[Account]:
        """Fetch the account list for one Item and upsert it locally.

        Creates new accounts or updates existing ones by Plaid account id.
        Accounts missing from the response are left alone; they only go
        away when their Item is removed. Preserves user-edited names.

        Args:
            db: Database session
            client: Aggregator client
            item_id: The owning Item's id
            access_token: The Item's access token

        Returns:
            List of upserted Account records (flushed, not committed)
        """
        remote_accounts = client.get_accounts(access_token)
        upserted = [
            AccountService._upsert_account(db, item_id, remote)
            for remote in remote_accounts
        ]
        db.flush()
        logger.info(
            "Mirrored %d accounts for item %s", len(upserted), item_id
        )
        return upserted

    @staticmethod
    def ensure_accounts(
        db: Session,
        client: AggregatorClient,
        item_id: str,
        access_token: str,
    ) -> int:
        """Mirror accounts for an Item that has none stored yet.

        An Item whose mirror failed at link time has no accounts, so its
        balances and transactions cannot be stored. Items that already have
        accounts are left alone.

        Returns:
            Number of accounts mirrored (flushed, not committed); 0 if the
            Item already had accounts.
        """
        has_accounts = db.query(Account.id).filter(Account.item_id == item_id).first()
        if has_accounts:
            return 0
        logger.info("Item %s has no accounts; mirroring them now", item_id)
        return len(AccountService.sync_accounts(db, client, item_id, access_token))

    @staticmethod
    def _upsert_account(db: Session, item_id: str, remote: ProviderAccount) -> Account:
        existing = db.query(Account).filter(Account.id == remote.id).first()
        if existing is None:
            account = Account(id=remote.id, item_id=item_id, name=remote.name)
            db.add(account)
        else:
            account = existing
            account.item_id = item_id
            if not account.name_user_edited:
                account.name = remote.name

        account.official_name = remote.official_name
        account.type = remote.type
        account.subtype = remote.subtype
        account.mask = remote.mask
        account.current_balance = remote.current_balance
        account.available_balance = remote.available_balance
        account.credit_limit = remote.credit_limit
        account.iso_currency_code = remote.iso_currency_code
        return account

    @staticmethod
    def list_items(db: Session) -> list[Item]:
        """List all Items with their accounts, newest first."""
        return (
            db.query(Item)
            .options(joinedload(Item.accounts))
            .order_by(Item.created_at.desc())
            .all()
        )

    @staticmethod
    def list_accounts(db: Session) -> list[Account]:
        """List all accounts ordered by institution then account name."""
        return (
            db.query(Account)
            .join(Item)
            .options(joinedload(Account.item))
            .order_by(Item.institution_name.asc(), Account.name.asc())
            .all()
        )

    @staticmethod
    def list_liabilities(db: Session) -> list[Liability]:
        """List liabilities with account and institution, largest balance first."""
        return (
            db.query(Liability)
            .join(Account)
            .options(joinedload(Liability.account).joinedload(Account.item))
            .order_by(Account.current_balance.desc())
            .all()
        )

    @staticmethod
    def update_account_name(db: Session, account_id: str, name: str) -> Account | None:
        """Rename an account.

        Raises:
            ValueError: If the name is empty or whitespace.

        Returns:
            The updated Account, or None if it doesn't exist.
        """
        if not name or not name.strip():
            raise ValueError("name is required and cannot be empty")

        account = db.query(Account).filter(Account.id == account_id).first()
        if not account:
            return None

        account.name = name.strip()
        account.name_user_edited = True
        db.commit()
        db.refresh(account)
        logger.info("Account renamed: %s (id=%s)", account.name, account.id)
        return account
