"""Custom exceptions for the power position service."""


class PowerPositionError(Exception):
    """Base exception for all service errors."""


class TradeProviderError(PowerPositionError):
    """Raised by a trade provider when the upstream source fails transiently."""


class ReportWriteError(PowerPositionError):
    """Raised when a normal report could not be written to disk."""


class RetentionError(PowerPositionError):
    """Raised when the report directory could not be scanned for cleanup."""
