"""
Exceptions raised by the DOECLIM engine.

Both are raised where the problem is detected and are never retried inside the
engine: an unusable parameter set stays unusable.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid or degenerate run configuration (parameters, forcing, step order)."""


class NumericalInstabilityError(RuntimeError):
    """Non-finite intermediate/output value or a near-singular implicit matrix."""
