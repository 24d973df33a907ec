# src/cyclecalc/encoding.py
from datetime import timedelta
from typing import Mapping, Sequence

import numpy as np

from .ticks import from_ticks
from .types import Config, DecodedXYList, RangeValue, XYList


def series_to_xy(series: np.ndarray) -> XYList:
    """
    Point plot of a dense per-tick series, x being the tick index.
    Ticks with no active dose are omitted.
    """
    xs = np.flatnonzero(series > 0.0)
    return XYList.point_plot(xs.tolist(), series[xs].tolist())


def ranges_to_xy(ranges: Sequence[RangeValue]) -> XYList:
    """Bar plot of transformer output, x being the start tick of each window."""
    return XYList.bar_plot([r.start for r in ranges], [r.value for r in ranges])


def decode_time_tick_scaling(xy: XYList, tick: timedelta) -> DecodedXYList:
    """Re-express tick indices as durations since time zero; y is untouched."""
    return DecodedXYList(xy.type, tuple(from_ticks(x, tick) for x in xy.x), xy.y)


def decode_result(result: Mapping[str, XYList], config: Config) -> dict[str, DecodedXYList]:
    return {k: decode_time_tick_scaling(v, config.tick_duration) for k, v in result.items()}
