# src/cyclecalc/ticks.py
"""
Conversions between real durations and integer ticks.

A series is one contiguous array indexed by tick, so every tick count has to
fit a signed 32-bit index.
"""
from datetime import timedelta

from .errors import QuantizationError

MAX_TICKS = 2**31 - 1


def to_ticks(value: timedelta, tick: timedelta, context: str) -> int:
    """
    Convert `value` to a whole number of ticks.

    context : field name used in error messages, e.g. "start" or "freqs[1]"
    Raises QuantizationError if `value` is not an exact multiple of `tick`
    or the result is out of range.
    """
    n, rem = divmod(value, tick)
    if rem != timedelta(0):
        raise QuantizationError(f"{context}={value} not compatible with tick_duration={tick}")
    if abs(n) >= MAX_TICKS:
        raise QuantizationError(f"{context}={value} out of range for tick_duration={tick}")
    return int(n)


def to_ticks_f(value: timedelta, tick: timedelta) -> float:
    """Fractional tick count; half-lives need not be whole ticks."""
    return value / tick


def from_ticks(ticks: int, tick: timedelta) -> timedelta:
    """Inverse of to_ticks."""
    return tick * ticks
