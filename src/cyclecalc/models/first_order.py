# src/cyclecalc/models/first_order.py
import math

import numpy as np

LN2 = math.log(2.0)


def release(dose, t, half_life):
    """
    Active dose remaining `t` ticks after administering `dose` mg.

    Closed-form solution of first-order elimination dA/dt = -k*A with k = ln2 / half_life:
      A(t) = dose * exp(-k t)
    The ODE is linear, so repeated administrations superpose by addition.

    dose      : mg; positive
    t         : ticks after administration (scalar or array); nonnegative
    half_life : ticks; positive
    """
    k = LN2 / half_life
    return dose * np.exp(-np.asarray(t, dtype=float) * k)


def release_inv(dose: float, released: float, half_life: float) -> float:
    """
    Inverse of release for t: the time at which `released` mg of `dose` mg remain.
      release(dose, release_inv(dose, r, H), H) == r
    """
    k = LN2 / half_life
    return math.log(released / dose) / -k


def kernel(dose: float, half_life: float, cutoff: float) -> np.ndarray:
    """
    Decay curve of a single administration, sampled at ticks 0..N-1 where N is the
    first tick at which the remaining dose is <= cutoff.

    At least the administration tick itself is always kept, even when dose <= cutoff.
    """
    n = max(1, math.ceil(release_inv(dose, cutoff, half_life)))
    return release(dose, np.arange(n), half_life)
