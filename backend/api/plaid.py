"""Plaid Link and sync API endpoints.

Provides the server-side endpoints for the Plaid Link browser flow
(creating link tokens, exchanging public tokens, unlinking Items) and the
on-demand jobs that pull data for every linked Item: transaction sync,
balance refresh and liability sync.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from integrations.exceptions import ProviderAPIError, ProviderError
from integrations.plaid_client import PlaidClient
from schemas import (
    ExchangeTokenRequest,
    ExchangeTokenResponse,
    ItemResultResponse,
    ItemsOperationResponse,
    LinkTokenResponse,
    SuccessResponse,
    SyncResponse,
)
from services.balance_service import BalanceService
from services.item_results import ItemsReport
from services.liability_service import LiabilityService
from services.link_service import LinkService
from services.transaction_sync_service import SyncInProgressError, TransactionSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["plaid"])


def _get_plaid_client() -> PlaidClient:
    """Dependency for injecting the Plaid client (overridable in tests)."""
    return PlaidClient()


def _provider_http_error(e: ProviderError, fallback: str) -> HTTPException:
    """Surface Plaid's own status and message when it sent them."""
    status_code = 500
    if isinstance(e, ProviderAPIError) and e.status_code:
        status_code = e.status_code
    return HTTPException(status_code=status_code, detail=e.message or fallback)


def _item_results(report: ItemsReport) -> list[ItemResultResponse]:
    return [
        ItemResultResponse(
            item_id=r.item_id,
            institution_name=r.institution_name,
            status=r.status,
            added=r.added,
            modified=r.modified,
            removed=r.removed,
            error=r.error,
            error_category=r.error_category.value if r.error_category else None,
        )
        for r in report.items
    ]


def _require_configured(client: PlaidClient) -> None:
    if not client.is_configured():
        raise HTTPException(status_code=400, detail="Plaid is not configured")


# ------------------------------------------------------------------
# Link flow
# ------------------------------------------------------------------


@router.get("/create_link_token", response_model=LinkTokenResponse)
def create_link_token(
    client: PlaidClient = Depends(_get_plaid_client),
):
    """Create a Plaid Link token for the frontend."""
    _require_configured(client)

    try:
        link_token = LinkService(client).create_link_token()
    except ProviderError as e:
        logger.error("Failed to create Plaid link token: %s", e)
        raise _provider_http_error(e, "Failed to create link token")
    return LinkTokenResponse(link_token=link_token)


@router.post("/exchange_public_token", response_model=ExchangeTokenResponse)
def exchange_public_token(
    body: ExchangeTokenRequest,
    db: Session = Depends(get_db),
    client: PlaidClient = Depends(_get_plaid_client),
):
    """Exchange a Plaid Link public_token, store the Item and mirror its accounts."""
    _require_configured(client)

    institution = body.institution
    try:
        item_id = LinkService(client).exchange_public_token(
            db,
            body.public_token,
            institution_id=institution.institution_id if institution else None,
            institution_name=institution.name if institution else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError as e:
        logger.error("Failed to exchange Plaid token: %s", e)
        raise _provider_http_error(e, "Failed to exchange token")

    return ExchangeTokenResponse(success=True, item_id=item_id)


@router.delete("/items/{item_id}", response_model=SuccessResponse)
def remove_item(
    item_id: str,
    db: Session = Depends(get_db),
    client: PlaidClient = Depends(_get_plaid_client),
):
    """Unlink an Item. Unknown ids succeed without doing anything."""
    LinkService(client).remove_item(db, item_id)
    return SuccessResponse(success=True)


# ------------------------------------------------------------------
# Data pulls
# ------------------------------------------------------------------


@router.post("/sync", response_model=SyncResponse)
def sync_transactions(
    db: Session = Depends(get_db),
    client: PlaidClient = Depends(_get_plaid_client),
):
    """Pull new, changed and removed transactions for every linked Item.

    Always returns 200 with per-Item results once the run starts; the
    totals only count Items that synced successfully.

    Raises:
        HTTPException:
            - 409 Conflict: Sync is already in progress
            - 500 Internal Server Error: Unexpected sync error
    """
    if TransactionSyncService.is_sync_in_progress():
        raise HTTPException(
            status_code=409,
            detail="Sync already in progress. Please wait for the current sync to complete.",
        )

    try:
        report = TransactionSyncService(client).sync_transactions(db)
    except SyncInProgressError:
        raise HTTPException(
            status_code=409,
            detail="Sync already in progress. Please wait for the current sync to complete.",
        )
    except Exception:
        # Never expose str(e) for unexpected errors
        logger.error("Unexpected error during transaction sync", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred during sync.",
        )

    return SyncResponse(
        success=True,
        added=report.added,
        modified=report.modified,
        removed=report.removed,
        items=_item_results(report),
    )


@router.post("/refresh_balances", response_model=ItemsOperationResponse)
def refresh_balances(
    db: Session = Depends(get_db),
    client: PlaidClient = Depends(_get_plaid_client),
):
    """Re-fetch live balances for every linked Item."""
    try:
        report = BalanceService(client).refresh_balances(db)
    except Exception:
        logger.error("Unexpected error during balance refresh", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred while refreshing balances.",
        )
    return ItemsOperationResponse(success=True, items=_item_results(report))


@router.post("/sync_liabilities", response_model=ItemsOperationResponse)
def sync_liabilities(
    db: Session = Depends(get_db),
    client: PlaidClient = Depends(_get_plaid_client),
):
    """Fetch credit, mortgage and student-loan details for every linked Item."""
    try:
        report = LiabilityService(client).sync_liabilities(db)
    except Exception:
        logger.error("Unexpected error during liability sync", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred while syncing liabilities.",
        )
    return ItemsOperationResponse(success=True, items=_item_results(report))
