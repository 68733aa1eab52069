"""Custom exception hierarchy for the trade journal."""


class JournalError(Exception):
    """Base exception for all trade journal errors."""


class ConfigError(JournalError):
    """Raised on configuration errors."""


class InvalidTradeError(JournalError, ValueError):
    """Raised when a raw trade record cannot be normalized (e.g. no id)."""


class InvalidFrequencyError(JournalError, ValueError):
    """Raised when an unknown bucketing frequency is requested."""
