"""
Exceptions for the Megapot SDK.
"""
from typing import Optional


class MegapotError(Exception):
    """Base exception for all Megapot SDK errors."""
    pass


class ConfigurationError(MegapotError):
    """Raised when the SDK is constructed or updated with invalid settings."""
    pass


class InvalidIntentError(MegapotError):
    """Raised when a purchase intent fails validation. Never retried."""
    pass


class ChainReadError(MegapotError):
    """Raised when a chain read still fails after the bounded retries."""

    def __init__(self, message: str, attempts: int = 1):
        self.attempts = attempts
        super().__init__(message)


class AllowanceError(MegapotError):
    """Raised when every approval strategy for a purchase has failed."""
    pass


class TransactionFailedError(MegapotError):
    """
    Raised when a transaction cannot be submitted or reverts on-chain.

    Submissions are never retried automatically, so the caller decides
    whether resubmitting is safe.
    """

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class ScanError(MegapotError):
    """Raised when a historical log scan hits a transport failure."""

    def __init__(self, message: str, from_block: Optional[int] = None, to_block: Optional[int] = None):
        self.from_block = from_block
        self.to_block = to_block
        super().__init__(message)


class SponsorUnavailableError(MegapotError):
    """
    Raised inside the sponsorship router when a sponsor request fails.

    The router always downgrades this to a normal send; it never reaches
    SDK callers.
    """
    pass
