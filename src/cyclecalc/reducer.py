# src/cyclecalc/reducer.py
from collections import defaultdict
from typing import Iterable, Sequence, Tuple

import numpy as np

from .types import OffsetSeries


def reducer(values: Sequence[OffsetSeries], size_hint: int | None = None) -> np.ndarray:
    """
    Sum offset series element-wise into one dense series.

    The result has length max(offset + len(data)); indices no series covers are 0.
    size_hint : the caller's precomputed length; must match when given
    """
    length = max(v.end for v in values)
    assert size_hint is None or size_hint == length, \
        f"size_hint has unexpected size ({size_hint} != {length})"
    out = np.zeros(length, dtype=float)
    for v in values:
        out[v.offset:v.end] += v.data
    return out


def group_by_base(series: Iterable[Tuple[str, OffsetSeries]]) -> dict[str, list[OffsetSeries]]:
    """
    Group offset series by active-ingredient base, keeping first-seen order of bases.
    """
    buckets: dict[str, list[OffsetSeries]] = defaultdict(list)
    for base, s in series:
        buckets[base].append(s)
    return dict(buckets)


def reduce_by_base(series: Iterable[Tuple[str, OffsetSeries]]) -> dict[str, np.ndarray]:
    """Group by base, then reduce each group into one series."""
    return {base: reducer(group) for base, group in group_by_base(series).items()}
