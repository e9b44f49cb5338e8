"""Items, accounts and liabilities API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.helpers import (
    account_response_dict,
    get_or_404,
    item_response_dict,
    liability_response_dict,
)
from database import get_db
from models import Account
from schemas import (
    AccountNameResponse,
    AccountResponse,
    AccountUpdate,
    ItemResponse,
    LiabilityResponse,
)
from services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["accounts"])


@router.get("/items", response_model=list[ItemResponse])
def list_items(db: Session = Depends(get_db)):
    """List linked Items with their accounts, newest first."""
    return [item_response_dict(item) for item in AccountService.list_items(db)]


@router.get("/accounts", response_model=list[AccountResponse])
def list_accounts(db: Session = Depends(get_db)):
    """List all accounts with their institution name."""
    return [account_response_dict(account) for account in AccountService.list_accounts(db)]


@router.patch("/accounts/{account_id}", response_model=AccountNameResponse)
def update_account(
    account_id: str,
    body: AccountUpdate,
    db: Session = Depends(get_db),
):
    """Rename an account. The new name survives later account syncs."""
    if not body.name or not body.name.strip():
        raise HTTPException(status_code=400, detail="Name is required")

    get_or_404(db, Account, account_id, "Account not found")
    account = AccountService.update_account_name(db, account_id, body.name)
    return AccountNameResponse(id=account.id, name=account.name)


@router.get("/liabilities", response_model=list[LiabilityResponse])
def list_liabilities(db: Session = Depends(get_db)):
    """List liabilities with account and institution details."""
    return [liability_response_dict(liability) for liability in AccountService.list_liabilities(db)]
