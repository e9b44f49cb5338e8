"""Pydantic schemas for items, accounts and liabilities."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AccountResponse(BaseModel):
    """Schema for an Account in API responses."""

    id: str
    item_id: str
    name: Optional[str] = None
    official_name: Optional[str] = None
    type: Optional[str] = None
    subtype: Optional[str] = None
    mask: Optional[str] = None
    current_balance: Optional[float] = None
    available_balance: Optional[float] = None
    credit_limit: Optional[float] = None
    iso_currency_code: Optional[str] = None
    updated_at: Optional[datetime] = None
    institution_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ItemResponse(BaseModel):
    """Schema for an Item with its accounts. The access token is never exposed."""

    id: str
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None
    created_at: Optional[datetime] = None
    accounts: list[AccountResponse] = []

    model_config = ConfigDict(from_attributes=True)


class AccountUpdate(BaseModel):
    """Schema for renaming an Account."""

    name: Optional[str] = None


class AccountNameResponse(BaseModel):
    id: str
    name: str


class LiabilityResponse(BaseModel):
    """Schema for a Liability joined to its account and institution."""

    account_id: str
    type: Optional[str] = None
    apr: Optional[float] = None
    minimum_payment: Optional[float] = None
    next_payment_due_date: Optional[date] = None
    last_statement_balance: Optional[float] = None
    last_statement_date: Optional[date] = None
    updated_at: Optional[datetime] = None
    account_name: Optional[str] = None
    account_type: Optional[str] = None
    account_subtype: Optional[str] = None
    mask: Optional[str] = None
    current_balance: Optional[float] = None
    credit_limit: Optional[float] = None
    institution_name: Optional[str] = None
