"""Transaction sync service - drives Plaid's cursor-based transaction feed.

Each Item carries an opaque cursor into ``/transactions/sync``. A sync pass
pulls pages after that cursor, applies the added/modified/removed deltas to
the ``transactions`` table, and persists the page's ``next_cursor`` in the
same commit as its deltas. A crash therefore loses at most the page that
was in flight, and the next run resumes from the last committed cursor.

Per-Item state:

    Uninitialized (cursor is None) -> Syncing -> Settled (has_more is False)

Items are processed one after another; a failure in one Item is rolled
back and recorded in the report without stopping the others.
"""

import logging
import threading

from sqlalchemy.orm import Session

from config import settings
from integrations.provider_protocol import (
    AggregatorClient,
    ProviderTransaction,
    TransactionSyncPage,
)
from models import Item, Transaction
from services.account_service import AccountService
from services.item_results import ItemError, ItemResult, ItemsReport

logger = logging.getLogger(__name__)


class SyncInProgressError(RuntimeError):
    """Another transaction sync is already running in this process."""


class TransactionsNotReadyError(ItemError):
    """Plaid kept returning an empty first page after every allowed retry."""


class SyncCancelledError(ItemError):
    """The sync was cancelled via :meth:`TransactionSyncService.cancel`."""


class TransactionSyncService:
    """Service for incremental transaction sync across all linked Items."""

    # Class-level lock shared across all instances to prevent concurrent syncs.
    # This works for a single-process deployment; multiple workers would need
    # a lock in the database instead.
    _sync_lock = threading.Lock()

    def __init__(
        self,
        client: AggregatorClient,
        retry_delay: float | None = None,
        max_empty_retries: int | None = None,
        cancel_event: threading.Event | None = None,
    ):
        """Initialize with an explicit aggregator client.

        Args:
            client: Aggregator client used for ``transactions_sync`` calls.
            retry_delay: Seconds to wait before re-requesting an empty first
                page. Defaults to ``SYNC_EMPTY_PAGE_RETRY_DELAY``.
            max_empty_retries: How many times an empty first page is
                re-requested before the Item fails. Defaults to
                ``SYNC_EMPTY_PAGE_MAX_RETRIES``.
            cancel_event: Event that aborts the sync when set. A private
                event is created if omitted; see :meth:`cancel`.
        """
        self._client = client
        self._retry_delay = (
            settings.SYNC_EMPTY_PAGE_RETRY_DELAY if retry_delay is None else retry_delay
        )
        self._max_empty_retries = (
            settings.SYNC_EMPTY_PAGE_MAX_RETRIES
            if max_empty_retries is None
            else max_empty_retries
        )
        self._cancel_event = cancel_event or threading.Event()

    @classmethod
    def is_sync_in_progress(cls) -> bool:
        """Check if a sync operation is currently in progress."""
        acquired = cls._sync_lock.acquire(blocking=False)
        if acquired:
            cls._sync_lock.release()
            return False
        return True

    def cancel(self) -> None:
        """Ask a running sync to stop at the next page boundary or wait."""
        self._cancel_event.set()

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def sync_transactions(self, db: Session) -> ItemsReport:
        """Sync transactions for every linked Item.

        Returns:
            ItemsReport with one result per Item processed. Aggregate counts
            only include Items that finished successfully.

        Raises:
            SyncInProgressError: If another sync holds the lock.
        """
        if not self._sync_lock.acquire(blocking=False):
            raise SyncInProgressError("Transaction sync already in progress")

        try:
            report = ItemsReport()
            items = db.query(Item).order_by(Item.created_at.asc()).all()
            targets = [(item.id, item.institution_name) for item in items]

            for item_id, institution_name in targets:
                result = ItemResult(item_id=item_id, institution_name=institution_name)
                report.items.append(result)
                try:
                    item = db.query(Item).filter(Item.id == item_id).one()
                    self.sync_item(db, item, result)
                except SyncCancelledError as e:
                    db.rollback()
                    result.mark_failed(e)
                    logger.warning("Transaction sync cancelled during item %s", item_id)
                    break
                except Exception as e:
                    db.rollback()
                    result.mark_failed(e)
                    logger.warning(
                        "Error syncing transactions for item %s (%s)",
                        item_id, institution_name, exc_info=True,
                    )

            logger.info(
                "Transaction sync: %d items (%d failed), %d added, %d modified, %d removed",
                len(report.items),
                len(report.failed),
                report.added,
                report.modified,
                report.removed,
            )
            return report
        finally:
            self._sync_lock.release()

    # ------------------------------------------------------------------
    # Per-item loop
    # ------------------------------------------------------------------

    def sync_item(
        self,
        db: Session,
        item: Item,
        result: ItemResult | None = None,
    ) -> ItemResult:
        """Run the cursor loop for one Item until Plaid reports no more pages.

        Each page is applied and committed together with its cursor before
        the next page is requested. Counts in the result cover committed
        pages only. An Item left without accounts by a failed link is
        mirrored first so its transactions have somewhere to go.

        Raises:
            TransactionsNotReadyError: The first page stayed empty through
                every retry. The cursor is left unset.
            SyncCancelledError: The cancel event was set.
            ProviderError: Any aggregator failure.
        """
        if result is None:
            result = ItemResult(item_id=item.id, institution_name=item.institution_name)

        access_token = item.access_token
        if AccountService.ensure_accounts(db, self._client, item.id, access_token):
            db.commit()

        cursor = item.cursor
        has_more = True
        empty_retries = 0
        pages = 0

        while has_more:
            self._raise_if_cancelled()
            page = self._client.transactions_sync(access_token, cursor)

            # A brand-new Item may not have its history ready yet
            if not cursor and not page.added and not page.modified:
                if empty_retries >= self._max_empty_retries:
                    raise TransactionsNotReadyError(
                        f"No transactions available for item {item.id} "
                        f"after {empty_retries} retries"
                    )
                empty_retries += 1
                logger.info(
                    "Item %s: first page empty, retrying in %.1fs (%d/%d)",
                    item.id, self._retry_delay, empty_retries, self._max_empty_retries,
                )
                self._wait()
                continue

            added, modified, removed = self._apply_page(db, page)

            cursor = page.next_cursor
            item.cursor = cursor
            db.commit()

            result.added += added
            result.modified += modified
            result.removed += removed
            pages += 1
            has_more = page.has_more

        logger.info(
            "Item %s settled after %d pages: %d added, %d modified, %d removed",
            item.id, pages, result.added, result.modified, result.removed,
        )
        return result

    def _wait(self) -> None:
        """Sleep for the retry delay, waking early if cancelled."""
        if self._cancel_event.wait(self._retry_delay):
            raise SyncCancelledError("Transaction sync cancelled")

    def _raise_if_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise SyncCancelledError("Transaction sync cancelled")

    # ------------------------------------------------------------------
    # Delta application
    # ------------------------------------------------------------------

    def _apply_page(self, db: Session, page: TransactionSyncPage) -> tuple[int, int, int]:
        """Apply one page of deltas in order: added, modified, removed.

        Returns:
            Number of added, modified and removed records in the page.
        """
        # Collapse duplicate deliveries of the same id; the last one wins
        added = {txn.id: txn for txn in page.added}
        for txn in added.values():
            self._upsert_transaction(db, txn)
        db.flush()

        for txn in page.modified:
            updated = (
                db.query(Transaction)
                .filter(Transaction.id == txn.id)
                .update({
                    Transaction.amount: txn.amount,
                    Transaction.name: txn.name,
                    Transaction.merchant_name: txn.merchant_name,
                    Transaction.category: txn.category,
                    Transaction.pending: txn.pending,
                })
            )
            if not updated:
                logger.debug("Modified transaction %s not stored locally; skipped", txn.id)

        for transaction_id in page.removed:
            db.query(Transaction).filter(Transaction.id == transaction_id).delete()

        return len(page.added), len(page.modified), len(page.removed)

    @staticmethod
    def _upsert_transaction(db: Session, txn: ProviderTransaction) -> Transaction:
        """Insert an added transaction, overwriting it if the id already exists."""
        existing = db.query(Transaction).filter(Transaction.id == txn.id).first()
        if existing is None:
            existing = Transaction(id=txn.id)
            db.add(existing)

        existing.account_id = txn.account_id
        existing.amount = txn.amount
        existing.date = txn.date
        existing.name = txn.name
        existing.merchant_name = txn.merchant_name
        existing.category = txn.category
        existing.pending = txn.pending
        existing.iso_currency_code = txn.iso_currency_code
        return existing
