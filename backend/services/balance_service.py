"""Balance service - refreshes live account balances from Plaid."""

import logging

from sqlalchemy.orm import Session

from integrations.provider_protocol import AggregatorClient
from models import Account, Item
from services.account_service import AccountService
from services.item_results import ItemResult, ItemsReport

logger = logging.getLogger(__name__)


class BalanceService:
    """Service for refreshing current/available/limit balances per Item."""

    def __init__(self, client: AggregatorClient):
        self._client = client

    def refresh_balances(self, db: Session) -> ItemsReport:
        """Overwrite stored balances with Plaid's real-time values.

        Each Item is committed on its own; a failing Item is rolled back and
        reported while the rest continue. Transactions are not touched.
        Items with no stored accounts get them mirrored first.
        """
        report = ItemsReport()
        items = db.query(Item).order_by(Item.created_at.asc()).all()
        targets = [(item.id, item.access_token, item.institution_name) for item in items]

        for item_id, access_token, institution_name in targets:
            result = ItemResult(item_id=item_id, institution_name=institution_name)
            report.items.append(result)
            try:
                updated = self._refresh_item(db, item_id, access_token)
                db.commit()
                logger.info("Refreshed %d account balances for item %s", updated, item_id)
            except Exception as e:
                db.rollback()
                result.mark_failed(e)
                logger.warning(
                    "Error refreshing balances for item %s (%s)",
                    item_id, institution_name, exc_info=True,
                )

        return report

    def _refresh_item(self, db: Session, item_id: str, access_token: str) -> int:
        AccountService.ensure_accounts(db, self._client, item_id, access_token)
        updated = 0
        for remote in self._client.get_balances(access_token):
            updated += (
                db.query(Account)
                .filter(Account.id == remote.id)
                .update({
                    Account.current_balance: remote.current_balance,
                    Account.available_balance: remote.available_balance,
                    Account.credit_limit: remote.credit_limit,
                })
            )
        return updated
