"""Pydantic schemas for net worth and trend endpoints."""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class NetWorthResponse(BaseModel):
    total_assets: float
    total_liabilities: float
    net_worth: float

    model_config = ConfigDict(from_attributes=True)


class NetWorthSnapshotResponse(BaseModel):
    """Schema for a saved net worth snapshot."""

    id: str
    snapshot_date: date
    total_assets: Optional[float] = None
    total_liabilities: Optional[float] = None
    net_worth: Optional[float] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SnapshotSavedResponse(BaseModel):
    success: bool
    snapshot_id: Optional[str] = None


class CompositionPoint(BaseModel):
    date: str
    assets: float
    liabilities: float
    net_worth: float


class TrendChangesResponse(BaseModel):
    """First-to-last change; percents are 0 when the first value is 0."""

    asset_change: float = 0
    asset_change_percent: float = 0
    liability_change: float = 0
    liability_change_percent: float = 0
    net_worth_change: float = 0
    net_worth_change_percent: float = 0

    model_config = ConfigDict(from_attributes=True)


class CompositionTrendsResponse(BaseModel):
    data: list[CompositionPoint]
    changes: TrendChangesResponse


class TrendAccount(BaseModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None


class AccountTrendsResponse(BaseModel):
    """One row per day: ``{"date": ..., <account_id>: balance, ...}``."""

    data: list[dict[str, Any]]
    accounts: list[TrendAccount]
