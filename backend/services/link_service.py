"""Link service - connects and disconnects institutions.

Handles the server side of Plaid Link: creating link tokens, exchanging
the browser's public token for a durable access token, and unlinking.
"""

import logging

from sqlalchemy.orm import Session

from integrations.provider_protocol import AggregatorClient
from models import Item
from services.account_service import AccountService

logger = logging.getLogger(__name__)


class LinkService:
    """Service for linking and unlinking Plaid Items."""

    def __init__(self, client: AggregatorClient):
        self._client = client

    def create_link_token(self) -> str:
        """Request a Link token. Provider errors propagate unchanged."""
        return self._client.create_link_token()

    def exchange_public_token(
        self,
        db: Session,
        public_token: str | None,
        institution_id: str | None = None,
        institution_name: str | None = None,
    ) -> str:
        """Exchange a public token, persist the Item and mirror its accounts.

        The Item is committed before accounts are mirrored. If mirroring
        fails the Item stays linked with no accounts and the error
        propagates; the next sync or balance refresh mirrors them.

        Args:
            db: Database session
            public_token: The public_token from Plaid Link
            institution_id: Optional institution hint from Link metadata
            institution_name: Optional institution hint from Link metadata

        Returns:
            The Item id.

        Raises:
            ValueError: If public_token is missing or blank (no network call).
        """
        if not public_token or not public_token.strip():
            raise ValueError("public_token is required and cannot be empty")

        result = self._client.exchange_public_token(public_token)
        item_id = result["item_id"]
        access_token = result["access_token"]

        # Re-linking the same institution returns the same item_id
        item = db.query(Item).filter(Item.id == item_id).first()
        if item:
            item.access_token = access_token
            if institution_id:
                item.institution_id = institution_id
            if institution_name:
                item.institution_name = institution_name
            logger.info("Updated Item %s", item_id)
        else:
            item = Item(
                id=item_id,
                access_token=access_token,
                institution_id=institution_id or None,
                institution_name=institution_name or None,
                cursor=None,
            )
            db.add(item)
            logger.info("Created Item %s for %s", item_id, institution_name)
        db.commit()

        AccountService.sync_accounts(db, self._client, item_id, access_token)
        db.commit()
        return item_id

    def remove_item(self, db: Session, item_id: str) -> bool:
        """Unlink an Item and delete everything that hangs off it.

        Revocation with Plaid is best-effort: a failure is logged and the
        local delete proceeds.

        Returns:
            True if an Item was deleted, False if it didn't exist.
        """
        item = db.query(Item).filter(Item.id == item_id).first()
        if not item:
            logger.info("Remove requested for unknown Item %s; nothing to do", item_id)
            return False

        try:
            self._client.remove_item(item.access_token)
        except Exception as e:
            logger.warning("Failed to remove Plaid item remotely (removing locally anyway): %s", e)

        db.delete(item)
        db.commit()
        logger.info("Deleted Item %s", item_id)
        return True
