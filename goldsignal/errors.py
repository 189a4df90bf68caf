"""Error taxonomy for the gold signal engine."""


class GoldSignalError(Exception):
    """Base class for every error raised by the engine."""


class InsufficientDataError(GoldSignalError):
    """Too few candles or prices for the requested indicator period."""


class ExternalFetchError(GoldSignalError):
    """A price, news, classifier or economic-data source failed or returned garbage."""


class ValidationError(GoldSignalError):
    """A record violates a domain invariant and was rejected."""
