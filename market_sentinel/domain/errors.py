"""
Domain Errors
Typed failures raised across the engine
"""


class MarketSentinelError(Exception):
    """Base class for all engine errors"""


class IndicatorInputError(MarketSentinelError, ValueError):
    """Bad indicator input (non-positive period, empty series, high < low)"""


class DataUnavailableError(MarketSentinelError):
    """Market data could not be fetched or parsed"""


class PersistenceError(MarketSentinelError):
    """Fund state could not be written to or read from durable storage"""


class NotificationError(MarketSentinelError):
    """Outbound notification failed after all retries"""


class ConfigurationError(MarketSentinelError):
    """Invalid startup configuration (fatal)"""
