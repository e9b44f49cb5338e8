"""External API integrations.

This package contains:
- Aggregator protocol: Common interface and data types for the aggregator
- Plaid client: Integration with the Plaid API
- Exceptions: Typed provider error hierarchy
"""

from integrations.provider_protocol import (
    AggregatorClient,
    ErrorCategory,
    ProviderAccount,
    ProviderLiability,
    ProviderTransaction,
    TransactionSyncPage,
)

__all__ = [
    "AggregatorClient",
    "ErrorCategory",
    "ProviderAccount",
    "ProviderLiability",
    "ProviderTransaction",
    "TransactionSyncPage",
]
