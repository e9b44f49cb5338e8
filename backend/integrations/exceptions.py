"""Errors raised by the aggregator client.

Callers catch ``ProviderError`` for any aggregator failure and branch on
the subclass when the remedy differs: re-link the Item for auth errors,
retry later for connection errors, report a bug for data errors.
"""


class ProviderError(Exception):
    """Any failure talking to the aggregator.

    ``message`` is safe to show to the user; the client fills it with the
    aggregator's own explanation where one was sent.
    """

    def __init__(self, message: str, provider_name: str = ""):
        self.provider_name = provider_name
        self.message = message
        super().__init__(message)


class ProviderConnectionError(ProviderError):
    """The request never got a response (timeout, reset, refused)."""

    def __init__(self, message: str, provider_name: str = "", retriable: bool = True):
        self.retriable = retriable
        super().__init__(message, provider_name)


class ProviderAPIError(ProviderError):
    """The aggregator answered with an error status.

    Attributes:
        status_code: HTTP status of the response, if known.
        error_code: Plaid's machine-readable code, e.g. ``PRODUCT_NOT_READY``.
    """

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        status_code: int | None = None,
        error_code: str | None = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message, provider_name)

    @property
    def retriable(self) -> bool:
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class ProviderAuthError(ProviderAPIError):
    """The Item's login is no longer accepted and the user must re-link it.

    Raised for ``ITEM_LOGIN_REQUIRED`` and ``INVALID_ACCESS_TOKEN`` as well
    as bare 401/403 responses.
    """


class ProviderDataError(ProviderError):
    """A response arrived but could not be mapped (missing ids, bad types)."""
