# src/cyclecalc/transformers.py
"""
Transformers: named aggregations applied block by block to an evaluated compound series.

A transformer entry names the compound base to read, the window start and duration,
and a frequency whose intervals give the window lengths (consumed circularly, like
redosing). Each complete window yields one RangeValue.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

import numpy as np

from . import metrics
from .errors import EvaluationOrderError, ResolutionError
from .types import RangeValue

BlockFn = Callable[[np.ndarray], float]


@dataclass(frozen=True)
class TransformerInfo:
    """Help text for a transformer: what it computes and how to reference it."""
    info: str
    usage: str


@dataclass(frozen=True)
class TransformerEntry:
    info: TransformerInfo
    block: BlockFn


TRANSFORMERS: Mapping[str, TransformerEntry] = MappingProxyType({
    "median": TransformerEntry(TransformerInfo("median of dose per use", "<compound>"), metrics.midrange),
    "max": TransformerEntry(TransformerInfo("peak dose per use", "<compound>"), metrics.peak),
    "min": TransformerEntry(TransformerInfo("trough dose per use", "<compound>"), metrics.trough),
    "mean": TransformerEntry(TransformerInfo("average dose per use", "<compound>"), metrics.mean),
})

# Frequency names reserved for transformer windows; resolved by the decoder from the config.
TRANSFORMER_FREQ_INFO: Mapping[str, str] = MappingProxyType({
    ".": "each tick_duration quantum",
})


def get_transformers_info() -> dict[str, TransformerInfo]:
    """Available transformers and their help texts."""
    return {name: entry.info for name, entry in TRANSFORMERS.items()}


def lookup(name: str) -> TransformerEntry:
    entry = TRANSFORMERS.get(name)
    if entry is None:
        raise ResolutionError(f"transformer not found: {name}")
    return entry


def apply_transformer(name: str, reduced: Mapping[str, np.ndarray], base: str,
                      start: int, duration: int, freqs: Sequence[int]) -> list[RangeValue]:
    """
    Aggregate the series of `base` over consecutive windows in [start, start + duration].

    Windows are emitted until one would run past the end of the series; the trailing
    partial window is dropped. At least one complete window is required.
    """
    block_fn = lookup(name).block
    vals = reduced.get(base)
    if vals is None:
        raise EvaluationOrderError(f"base <{base}> not evaluated prior to transformer <{name}>")

    outputs: list[RangeValue] = []
    cursor = 0
    block_index = 0
    while block_index <= duration:
        block_len = freqs[cursor % len(freqs)]
        cursor += 1
        block_start = start + block_index
        block_end = block_start + block_len
        if block_end > len(vals):
            break
        outputs.append(RangeValue(block_fn(vals[block_start:block_end]), block_start, block_end))
        block_index += block_len

    if not outputs:
        raise EvaluationOrderError(
            f"the transformer {base}:{name} is invalid because there is no data for it to transform")
    return outputs
