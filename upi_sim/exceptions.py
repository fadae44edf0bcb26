"""Exceptions for unexpected conditions.

Expected failures (bad input, wrong OTP, simulated outages) are returned as
ValidationResult / ServiceResult data and never raised.
"""


class WalletError(Exception):
    """Base exception for all wallet errors."""
    pass


class RecordNotFoundError(WalletError):
    """Raised when the store is asked to update a record it does not hold."""
    pass


class SnapshotError(WalletError):
    """Raised when a persisted snapshot cannot be decoded."""
    pass
