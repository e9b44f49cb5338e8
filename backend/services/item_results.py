"""Per-item results for multi-item operations.

Sync, balance refresh and liability sync each walk every linked Item and
isolate failures per Item. These dataclasses carry what happened to each
Item back to the caller instead of only logging it.
"""

from dataclasses import dataclass, field

from integrations.exceptions import (
    ProviderAPIError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderDataError,
    ProviderError,
)
from integrations.provider_protocol import ErrorCategory


class ItemError(RuntimeError):
    """A per-Item failure raised by our own services.

    Its message is written for the user and is reported as-is.
    """


def categorize_error(exc: Exception) -> ErrorCategory:
    """Classify an exception raised while processing one Item."""
    if isinstance(exc, ProviderAuthError):
        return ErrorCategory.AUTH
    if isinstance(exc, ProviderConnectionError):
        return ErrorCategory.CONNECTION
    if isinstance(exc, ProviderDataError):
        return ErrorCategory.DATA
    if isinstance(exc, ProviderAPIError):
        status = exc.status_code or 0
        if status in (401, 403):
            return ErrorCategory.AUTH
        if status == 429:
            return ErrorCategory.RATE_LIMIT
        if status >= 500:
            return ErrorCategory.CONNECTION
    return ErrorCategory.UNKNOWN


def describe_error(exc: Exception) -> str:
    """Message to report for a failed Item.

    Aggregator and service errors keep their message. Anything else (a
    database error, say) is reported by class name only, since its text
    can carry SQL and row values.
    """
    if isinstance(exc, (ProviderError, ItemError)) and str(exc):
        return str(exc)
    return exc.__class__.__name__


@dataclass
class ItemResult:
    """Outcome of one operation for one Item.

    Delta counts are only filled in by transaction sync.
    """

    item_id: str
    institution_name: str | None = None
    status: str = "success"  # "success" | "failed"
    added: int = 0
    modified: int = 0
    removed: int = 0
    error: str | None = None
    error_category: ErrorCategory | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def mark_failed(self, exc: Exception) -> None:
        """Record a failure. Counts keep whatever was committed before it."""
        self.status = "failed"
        self.error = describe_error(exc)
        self.error_category = categorize_error(exc)


@dataclass
class ItemsReport:
    """Per-item results of a multi-item operation, with aggregate counts.

    Totals only include Items that completed successfully.
    """

    items: list[ItemResult] = field(default_factory=list)

    @property
    def added(self) -> int:
        return sum(r.added for r in self.items if r.succeeded)

    @property
    def modified(self) -> int:
        return sum(r.modified for r in self.items if r.succeeded)

    @property
    def removed(self) -> int:
        return sum(r.removed for r in self.items if r.succeeded)

    @property
    def failed(self) -> list[ItemResult]:
        return [r for r in self.items if not r.succeeded]
