# src/cyclecalc/errors.py
"""
Failures raised by the calculator.

Every failure is synchronous and deterministic: the same input always fails
the same way, and nothing is retried. Each class also derives from the builtin
exception a caller would naturally catch (ValueError / LookupError).
"""


class CalcError(Exception):
    """Base class for every calculator failure."""


class InvalidInputError(CalcError, ValueError):
    """A value violates the invariants of a configuration or cycle entry."""


class ResolutionError(CalcError, LookupError):
    """A compound, blend, frequency or transformer name did not resolve."""


class QuantizationError(CalcError, ValueError):
    """A duration is not an exact multiple of the tick duration, or is out of range."""


class EvaluationOrderError(CalcError, ValueError):
    """A transformer refers to data that the compound pass did not produce."""
