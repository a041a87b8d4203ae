"""
Exceptions raised by the headspace pCO2 calculation.

ConfigurationError: inputs the chemistry cannot be evaluated for
    (unknown constant set, salinity inconsistent with the constant set,
    non-physical volumes or temperatures, malformed table rows).
NumericalError: the charge-balance polynomial did not yield exactly one
    positive real root.

Both are fatal for the sample they were raised for. Nothing is retried:
the calculation is deterministic.
"""


class HeadspaceError(Exception):
    """Base class for headspace calculation failures."""


class ConfigurationError(HeadspaceError, ValueError):
    """Invalid or inconsistent sample configuration."""


class NumericalError(HeadspaceError, ArithmeticError):
    """Root extraction did not produce a unique physical solution."""
