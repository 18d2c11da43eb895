"""Custom exceptions for the arbitrage volume sizer.

All engine and sizing exceptions live here so that callers can tell a
skippable opportunity (bad inputs) from a venue pairing that must be
disabled (incompatible configuration).
"""


class ArbSizerError(Exception):
    """Base exception for all sizing errors."""


class InvalidInputError(ArbSizerError, ValueError):
    """Raised when a price, exposure, fee or scale is out of range.

    Fatal to a single computation: the caller skips the opportunity.
    """


class IncompatibleConfigurationError(ArbSizerError):
    """Raised when a venue combines client-side fee computation with a step size.

    Fee-driven widening/narrowing of the order volume and lot-step snapping
    cannot be composed, so the pairing must be disabled rather than retried.
    """


class InsufficientSizeError(ArbSizerError):
    """Raised when rounding collapses a leg's volume to zero."""


class PriceUnavailableError(ArbSizerError):
    """Raised when a price is missing from the ticker cache."""
