"""Exception hierarchy shared by the clients and the aggregation pipeline."""


class HoldingsTrackerError(Exception):
    """Base exception for holdings tracker errors."""

    pass


class InvalidAddressError(HoldingsTrackerError):
    """Invalid wallet or contract address error."""

    pass


class ConfigurationError(HoldingsTrackerError):
    """Invalid configuration value."""

    pass


class TransportError(HoldingsTrackerError):
    """Network failure or timeout while talking to a provider."""

    pass


class RateLimitError(HoldingsTrackerError):
    """Provider answered with HTTP 429 or a rate-limit message."""

    pass


class ProviderError(HoldingsTrackerError):
    """Any other HTTP or application-level provider error."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class DecodeError(HoldingsTrackerError):
    """Malformed hex string or number in a provider response."""

    pass


class AggregationError(HoldingsTrackerError):
    """No data at all could be obtained for a wallet."""

    pass
