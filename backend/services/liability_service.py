"""Liability service - mirrors credit, mortgage and student-loan details."""

import logging

from sqlalchemy.orm import Session

from integrations.provider_protocol import AggregatorClient, ProviderLiability
from models import Account, Item, Liability
from services.item_results import ItemResult, ItemsReport

logger = logging.getLogger(__name__)


class LiabilityService:
    """Service for syncing liabilities per Item.

    Liability is one-to-one with Account, so every sync pass upserts by
    account id instead of inserting a new row.
    """

    def __init__(self, client: AggregatorClient):
        self._client = client

    def sync_liabilities(self, db: Session) -> ItemsReport:
        """Fetch and upsert liabilities for every linked Item.

        Institutions that don't support liabilities fail just their own
        Item; the failure is logged and reported.
        """
        report = ItemsReport()
        items = db.query(Item).order_by(Item.created_at.asc()).all()
        targets = [(item.id, item.access_token, item.institution_name) for item in items]

        for item_id, access_token, institution_name in targets:
            result = ItemResult(item_id=item_id, institution_name=institution_name)
            report.items.append(result)
            try:
                stored = self._sync_item(db, access_token)
                db.commit()
                logger.info("Stored %d liabilities for item %s", stored, item_id)
            except Exception as e:
                db.rollback()
                result.mark_failed(e)
                logger.warning(
                    "Could not fetch liabilities for item %s (%s)",
                    item_id, institution_name, exc_info=True,
                )

        return report

    def _sync_item(self, db: Session, access_token: str) -> int:
        stored = 0
        for remote in self._client.get_liabilities(access_token):
            if not remote.account_id:
                # Can't be attached to an account
                continue
            if db.get(Account, remote.account_id) is None:
                logger.debug("Skipping liability for unmirrored account %s", remote.account_id)
                continue
            self._upsert_liability(db, remote)
            db.flush()
            stored += 1
        return stored

    @staticmethod
    def _upsert_liability(db: Session, remote: ProviderLiability) -> Liability:
        liability = db.query(Liability).filter(Liability.account_id == remote.account_id).first()
        if liability is None:
            liability = Liability(account_id=remote.account_id)
            db.add(liability)

        liability.type = remote.type
        liability.apr = remote.apr
        liability.minimum_payment = remote.minimum_payment
        liability.next_payment_due_date = remote.next_payment_due_date
        liability.last_statement_balance = remote.last_statement_balance
        liability.last_statement_date = remote.last_statement_date
        return liability
