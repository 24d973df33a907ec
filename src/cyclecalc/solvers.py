# src/cyclecalc/solvers.py
import logging
from typing import Sequence

import numpy as np

from .encoding import ranges_to_xy, series_to_xy
from .errors import InvalidInputError
from .models.first_order import LN2, kernel
from .reducer import reduce_by_base, reducer
from .transformers import apply_transformer
from .types import ONE_DAY, Config, CycleCalculation, DecodedCycle, OffsetSeries, XYList

logger = logging.getLogger(__name__)


def corrected_dose(dose: float, half_life: float, config: Config) -> float:
    """
    Dose to feed the decay kernel.

    With do_lambda_dose_correction the dose is scaled by min(ln2 / half_life, 1), where
    half_life is expressed in DAYS rather than ticks. This reproduces the widely
    published formula, whose lambda is day-based regardless of sampling resolution.
    """
    if not config.do_lambda_dose_correction:
        return dose
    half_life_days = half_life * (config.tick_duration / ONE_DAY)
    return dose * min(LN2 / half_life_days, 1.0)


def redose_offsets(duration: int, freqs: Sequence[int]) -> list[int]:
    """
    Administration ticks relative to the cycle start: 0, then each interval of `freqs`
    in turn (wrapping around), for as long as the offset is within `duration`.
    """
    offsets: list[int] = []
    cursor = 0
    t = 0
    while t <= duration:
        offsets.append(t)
        t += freqs[cursor % len(freqs)]
        cursor += 1
    return offsets


def compound_cycle(dose: float, half_life: float, duration: int,
                   freqs: Sequence[int], cutoff: float) -> np.ndarray:
    """
    Simulate repeated administration of one compound.

    dose      : mg per administration; positive
    half_life : ticks; positive
    duration  : ticks during which administrations are repeated
    freqs     : redosing intervals in ticks
    cutoff    : mg below which a single administration is no longer tracked

    Returns the active dose at each tick after the first administration.
    """
    # one administration, evaluated once and shifted for every redose
    one_iter = kernel(dose, half_life, cutoff)
    to_reduce = [OffsetSeries(t, one_iter) for t in redose_offsets(duration, freqs)]
    return reducer(to_reduce, to_reduce[-1].offset + len(one_iter))


def evaluate_and_reduce_compound_cycles(cycles: Sequence[DecodedCycle],
                                        config: Config) -> dict[str, np.ndarray]:
    """
    Simulate each compound cycle and sum cycles sharing an active base.

    Returns base -> series, indexed by tick since time zero, with the total active dose.
    """
    per_cycle: list[tuple[str, OffsetSeries]] = []
    for c in cycles:
        if c.dose is None or c.half_life is None:
            raise InvalidInputError(f"compound {c.compound} has no dose or half_life")
        dose = corrected_dose(c.dose, c.half_life, config)
        vals = compound_cycle(dose, c.half_life, c.duration, c.freqs, config.cutoff_milligrams)
        logger.debug("compound %s: %d ticks from tick %d", c.compound, len(vals), c.start)
        per_cycle.append((c.compound, OffsetSeries(c.start, vals)))
    if not per_cycle:
        return {}
    return reduce_by_base(per_cycle)


def evaluate_decoded_cycle(cycle: CycleCalculation, config: Config) -> dict[str, XYList]:
    """
    Evaluate all compounds of a cycle, then the transformers on the reduced compounds.

    Keys of the result are compound bases (point plots) and "<base>:<transformer>" (bar plots).
    """
    reduced = evaluate_and_reduce_compound_cycles(cycle.compounds, config)

    result: dict[str, XYList] = {base: series_to_xy(vals) for base, vals in reduced.items()}
    for t in cycle.transformers:
        ranges = apply_transformer(t.transformer, reduced, t.compound, t.start, t.duration, t.freqs)
        result[f"{t.compound}:{t.transformer}"] = ranges_to_xy(ranges)
    logger.debug("evaluated cycle: %s", list(result))
    return result
