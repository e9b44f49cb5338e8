"""Pydantic schemas for transaction queries."""

import datetime as dt
from typing import Optional

from pydantic import BaseModel


class TransactionResponse(BaseModel):
    """A stored transaction with its account and institution names.

    Amounts follow Plaid's sign convention: positive is money out,
    negative is money in.
    """

    id: str
    account_id: str
    amount: Optional[float] = None
    date: Optional[dt.date] = None
    name: Optional[str] = None
    merchant_name: Optional[str] = None
    category: Optional[str] = None
    pending: bool = False
    iso_currency_code: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    account_name: Optional[str] = None
    institution_name: Optional[str] = None


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    total: int
    limit: int
    offset: int


class CategorySpending(BaseModel):
    category: Optional[str] = None
    total: float


class IncomeResponse(BaseModel):
    transactions: list[TransactionResponse]
    total: float
