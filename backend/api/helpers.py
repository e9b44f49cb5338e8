"""Shared API helpers for route handlers.

Common query patterns and response builders used across multiple route files.
"""

from typing import TypeVar

from fastapi import HTTPException
from sqlalchemy.orm import Session

from database import Base
from models import Account, Item, Liability

T = TypeVar("T", bound=Base)


def get_or_404(db: Session, model: type[T], entity_id: str, detail: str = "Not found") -> T:
    """Fetch a single entity by primary key or raise 404.

    Args:
        db: Database session.
        model: SQLAlchemy model class.
        entity_id: Primary key value.
        detail: Error message for the 404 response.

    Returns:
        The entity instance.

    Raises:
        HTTPException: 404 if the entity doesn't exist.
    """
    entity = db.query(model).filter(model.id == entity_id).first()
    if not entity:
        raise HTTPException(status_code=404, detail=detail)
    return entity


def account_response_dict(account: Account, institution_name: str | None = None) -> dict:
    """Build an AccountResponse-compatible dict from an Account.

    Args:
        account: An Account instance.
        institution_name: Overrides the name looked up through ``account.item``.

    Returns:
        Dict matching the AccountResponse schema.
    """
    if institution_name is None and account.item is not None:
        institution_name = account.item.institution_name
    return {
        "id": account.id,
        "item_id": account.item_id,
        "name": account.name,
        "official_name": account.official_name,
        "type": account.type,
        "subtype": account.subtype,
        "mask": account.mask,
        "current_balance": account.current_balance,
        "available_balance": account.available_balance,
        "credit_limit": account.credit_limit,
        "iso_currency_code": account.iso_currency_code,
        "updated_at": account.updated_at,
        "institution_name": institution_name,
    }


def item_response_dict(item: Item) -> dict:
    """Build an ItemResponse-compatible dict. Never includes the access token."""
    return {
        "id": item.id,
        "institution_id": item.institution_id,
        "institution_name": item.institution_name,
        "created_at": item.created_at,
        "accounts": [
            account_response_dict(account, item.institution_name) for account in item.accounts
        ],
    }


def liability_response_dict(liability: Liability) -> dict:
    """Build a LiabilityResponse-compatible dict.

    Args:
        liability: A Liability with its account (and the account's item) loaded.

    Returns:
        Dict matching the LiabilityResponse schema.
    """
    account = liability.account
    return {
        "account_id": liability.account_id,
        "type": liability.type,
        "apr": liability.apr,
        "minimum_payment": liability.minimum_payment,
        "next_payment_due_date": liability.next_payment_due_date,
        "last_statement_balance": liability.last_statement_balance,
        "last_statement_date": liability.last_statement_date,
        "updated_at": liability.updated_at,
        "account_name": account.name,
        "account_type": account.type,
        "account_subtype": account.subtype,
        "mask": account.mask,
        "current_balance": account.current_balance,
        "credit_limit": account.credit_limit,
        "institution_name": account.item.institution_name if account.item else None,
    }
