"""
Exception and warning types raised by the psychrometric engine.

All errors derive from ValueError so that callers (and the API layer) can keep
treating any bad-input condition as a 422.
"""


class PsychrometricError(ValueError):
    """Base class for engine errors."""


class InvalidInputError(PsychrometricError):
    """Non-finite, out-of-range or physically impossible input."""


class AmbiguousPairError(PsychrometricError):
    """The input pair does not fix a single dry-bulb temperature."""


class ConvergenceWarning(RuntimeWarning):
    """An iterative solve stopped at its iteration cap."""
