# dye_budget/models/errors.py

"""Typed errors raised by the price client and the budget calculator."""


class MarketPriceError(Exception):
    """Failure talking to the Universalis proxy.

    ``status`` mirrors an HTTP status code so callers can branch on it
    the same way regardless of which transport produced the error.
    """

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    @property
    def is_rate_limited(self) -> bool:
        """True when the upstream answered 429."""
        return self.status == 429

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class UnconfiguredError(MarketPriceError):
    """Neither a service binding nor a proxy URL is configured."""

    def __init__(self, message: str = "Universalis proxy not configured") -> None:
        super().__init__(503, message)


class MarketTimeoutError(MarketPriceError):
    """The request was cancelled after exceeding its timeout."""

    def __init__(self, message: str = "Request timeout") -> None:
        super().__init__(408, message)


class RemoteError(MarketPriceError):
    """The proxy answered with a non-success status."""


class TooManyItemsError(MarketPriceError):
    """A single batch asked for more items than the proxy accepts."""

    def __init__(self, requested: int, maximum: int) -> None:
        super().__init__(
            400,
            f"Too many items requested ({requested}). Maximum is {maximum}.",
        )
        self.requested = requested
        self.maximum = maximum


class TargetNotFoundError(LookupError):
    """The target dye id is not in the catalog."""

    def __init__(self, dye_id: int) -> None:
        super().__init__(f"Dye not found: {dye_id}")
        self.dye_id = dye_id
