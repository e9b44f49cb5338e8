"""Pydantic schemas for Plaid link and sync endpoints."""

from typing import Optional

from pydantic import BaseModel


class LinkTokenResponse(BaseModel):
    link_token: str


class InstitutionHint(BaseModel):
    """Institution metadata passed through from Plaid Link."""

    institution_id: Optional[str] = None
    name: Optional[str] = None


class ExchangeTokenRequest(BaseModel):
    """Request body for exchanging a public token.

    ``public_token`` is optional here so a missing value is reported as a
    400 with a readable message instead of a schema error.
    """

    public_token: Optional[str] = None
    institution: Optional[InstitutionHint] = None


class ExchangeTokenResponse(BaseModel):
    success: bool
    item_id: str


class ItemResultResponse(BaseModel):
    """What happened to one Item during a multi-item operation."""

    item_id: str
    institution_name: Optional[str] = None
    status: str
    added: int = 0
    modified: int = 0
    removed: int = 0
    error: Optional[str] = None
    error_category: Optional[str] = None

    model_config = {"from_attributes": True}


class ItemsOperationResponse(BaseModel):
    """Response for balance refresh and liability sync."""

    success: bool
    items: list[ItemResultResponse] = []


class SyncResponse(ItemsOperationResponse):
    """Response for transaction sync. Totals exclude failed Items."""

    added: int = 0
    modified: int = 0
    removed: int = 0


class SuccessResponse(BaseModel):
    success: bool
