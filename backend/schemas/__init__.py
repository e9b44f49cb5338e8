"""Pydantic schemas for API request/response validation."""

from schemas.account import (
    AccountNameResponse,
    AccountResponse,
    AccountUpdate,
    ItemResponse,
    LiabilityResponse,
)
from schemas.networth import (
    AccountTrendsResponse,
    CompositionPoint,
    CompositionTrendsResponse,
    NetWorthResponse,
    NetWorthSnapshotResponse,
    SnapshotSavedResponse,
    TrendAccount,
    TrendChangesResponse,
)
from schemas.plaid import (
    ExchangeTokenRequest,
    ExchangeTokenResponse,
    InstitutionHint,
    ItemResultResponse,
    ItemsOperationResponse,
    LinkTokenResponse,
    SuccessResponse,
    SyncResponse,
)
from schemas.transaction import (
    CategorySpending,
    IncomeResponse,
    TransactionListResponse,
    TransactionResponse,
)

__all__ = [
    "AccountNameResponse",
    "AccountResponse",
    "AccountTrendsResponse",
    "AccountUpdate",
    "CategorySpending",
    "CompositionPoint",
    "CompositionTrendsResponse",
    "ExchangeTokenRequest",
    "ExchangeTokenResponse",
    "IncomeResponse",
    "InstitutionHint",
    "ItemResponse",
    "ItemResultResponse",
    "ItemsOperationResponse",
    "LiabilityResponse",
    "LinkTokenResponse",
    "NetWorthResponse",
    "NetWorthSnapshotResponse",
    "SnapshotSavedResponse",
    "SuccessResponse",
    "SyncResponse",
    "TransactionListResponse",
    "TransactionResponse",
    "TrendAccount",
    "TrendChangesResponse",
]
