# src/cyclecalc/types.py
from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Mapping, Sequence

import numpy as np

from .errors import InvalidInputError
from .helpers import (
    _validate_nonempty, _validate_positive, _validate_non_negative, _validate_whole_ticks,
    _validate_positive_duration, _validate_non_negative_duration, _validate_name_chars,
)

# Durations are timedelta at the boundary and integer ticks inside the calculator.
ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class Config:
    """
    Calculator configurables.

    tick_duration             : the duration elapsed between two consecutive values of a series
    cutoff_milligrams         : stop tracking one administration once its active dose drops to this
    do_lambda_dose_correction : scale the dose by ln2 / half-life (in days), capped at 1.0;
                                the commonly published formula does this, the exact solution does not
    n_threads                 : how many evaluations may run at once in an Evaluator
    """
    tick_duration: timedelta = timedelta(hours=1.5)
    cutoff_milligrams: float = 0.01
    do_lambda_dose_correction: bool = False
    n_threads: int = field(default_factory=lambda: os.cpu_count() or 1)

    def __post_init__(self) -> None:
        _validate_positive_duration("tick_duration", self.tick_duration)
        _validate_positive("cutoff", self.cutoff_milligrams)
        if isinstance(self.n_threads, bool) or not (isinstance(self.n_threads, int) and self.n_threads > 0):
            raise InvalidInputError(f"n_threads must be a positive integer (got {self.n_threads})")

    def updated(self, overrides: Mapping[str, Any] | None) -> Config:
        """Return a copy with the given fields replaced; unknown keys are rejected."""
        if not overrides:
            return self
        known = {f.name for f in dataclasses.fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise InvalidInputError(f"unrecognized config field(s): {', '.join(unknown)}")
        return dataclasses.replace(self, **overrides)


class EntryKind(Enum):
    """What the name of a cycle entry refers to."""
    COMPOUND = "compound"
    BLEND = ".b"
    TRANSFORMER = ".t"


@dataclass(frozen=True)
class CycleDescription:
    """
    One symbolic entry of a cycle, as written by a user.

    name      : compound base name, blend name, or (for transformers) the compound base to transform
    start     : when the first administration (or first transformer window) happens
    duration  : how long administrations keep being repeated
    freq_name : name of the redosing frequency
    kind      : compound, blend or transformer
    variant   : compound variant (e.g. "enanthate") or, for transformers, the transformer name
    dose      : dose in mg per administration; ignored for transformers
    """
    name: str
    start: timedelta
    duration: timedelta
    freq_name: str
    kind: EntryKind = EntryKind.COMPOUND
    variant: str = ""
    dose: float | None = None

    def __post_init__(self) -> None:
        if self.kind is EntryKind.BLEND and self.variant:
            raise InvalidInputError("expected empty variant for blend")
        if self.kind is EntryKind.TRANSFORMER and not self.variant.strip():
            raise InvalidInputError("expected non-empty transformer")
        _validate_nonempty("name", self.name)
        if self.kind is not EntryKind.TRANSFORMER:
            if self.dose is None:
                raise InvalidInputError("nonpositive dose (got None)")
            _validate_positive("dose", self.dose)
        _validate_non_negative_duration("start", self.start)
        _validate_positive_duration("duration", self.duration)
        _validate_nonempty("freq_name", self.freq_name)

    @classmethod
    def compound(cls, name: str, dose: float, start: timedelta, duration: timedelta,
                 freq_name: str, variant: str = "") -> CycleDescription:
        """e.g. 250 mg of testosterone enanthate from day 0 for 12 weeks, every 3.5 days."""
        return cls(name=name, variant=variant, dose=dose, start=start, duration=duration,
                   freq_name=freq_name, kind=EntryKind.COMPOUND)

    @classmethod
    def blend(cls, name: str, dose: float, start: timedelta, duration: timedelta,
              freq_name: str) -> CycleDescription:
        return cls(name=name, dose=dose, start=start, duration=duration,
                   freq_name=freq_name, kind=EntryKind.BLEND)

    @classmethod
    def transformer(cls, base: str, transformer: str, start: timedelta, duration: timedelta,
                    freq_name: str) -> CycleDescription:
        """Apply `transformer` to the evaluated series of compound base `base`."""
        return cls(name=base, variant=transformer, start=start, duration=duration,
                   freq_name=freq_name, kind=EntryKind.TRANSFORMER)


@dataclass(frozen=True, order=True)
class CompoundName:
    """
    The full name of a compound.

    base    : the active ingredient shared by all variants (e.g. "testosterone")
    variant : ester or other variant (e.g. "cypionate"); empty if there is none
    """
    base: str
    variant: str = ""

    def __post_init__(self) -> None:
        _validate_nonempty("compound", self.base)
        _validate_name_chars("compound", self.base)

    def __str__(self) -> str:
        return f"{self.base}={self.variant}" if self.variant else self.base


@dataclass(frozen=True)
class CompoundInfo:
    """
    Kinetic data of one compound.

    half_life  : elimination half-life; positive
    pct_active : fraction of the administered mass that is the active ingredient, in (0, 1]
    note       : free text
    """
    half_life: timedelta
    pct_active: float = 1.0
    note: str = ""

    def __post_init__(self) -> None:
        _validate_positive_duration("half_life", self.half_life)
        if not (0.0 < self.pct_active <= 1.0):
            raise InvalidInputError(f"pct_active not in (0.0, 1.0] (got {self.pct_active})")


@dataclass(frozen=True)
class BlendValue:
    """
    A mixture of compounds.

    components : compound name -> relative dose weight (only ratios matter)
    note       : free text
    """
    components: Mapping[CompoundName, float]
    note: str = ""

    def __post_init__(self) -> None:
        if len(self.components) < 2:
            raise InvalidInputError("2+ components required")
        for k, v in self.components.items():
            if not (v > 0):
                raise InvalidInputError(f"non-positive component value {v} for key {k}")

    @property
    def total(self) -> float:
        return float(sum(self.components.values()))


def frequency(*intervals: timedelta) -> tuple[timedelta, ...]:
    """
    Build a redosing frequency: intervals between consecutive administrations,
    consumed circularly (e.g. frequency(timedelta(days=3), timedelta(days=4)) for "twice a week").
    """
    _validate_frequency("frequency", intervals)
    return tuple(intervals)


def _validate_frequency(name: str, intervals: Sequence[timedelta]) -> None:
    if not intervals:
        raise InvalidInputError(f"{name}: empty list")
    for i, v in enumerate(intervals):
        if not (v > timedelta(0)):
            raise InvalidInputError(f"{name}[{i}]: nonpositive duration {v}")


@dataclass(frozen=True)
class Data:
    """
    Entity records resolved by the caller for one decode.

    compounds   : compound name -> compound info
    blends      : blend name -> blend components
    frequencies : frequency name -> intervals
    """
    compounds: Mapping[CompoundName, CompoundInfo] = field(default_factory=dict)
    blends: Mapping[str, BlendValue] = field(default_factory=dict)
    frequencies: Mapping[str, Sequence[timedelta]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for fname, intervals in self.frequencies.items():
            _validate_frequency(fname, intervals)


@dataclass(frozen=True)
class DecodedCycle:
    """
    One compound (or transformer) of a cycle, in ticks.

    compound    : active ingredient base name; nonempty
    dose        : dose in mg, already scaled by pct_active and blend weight (None for transformers)
    half_life   : half-life in ticks (None for transformers)
    start       : first administration, in ticks
    duration    : in ticks
    freqs       : redosing intervals in ticks, consumed circularly
    transformer : transformer name; None for compounds
    """
    compound: str
    start: int
    duration: int
    freqs: Sequence[int]
    dose: float | None = None
    half_life: float | None = None
    transformer: str | None = None

    def __post_init__(self) -> None:
        _validate_nonempty("compound", self.compound)
        if self.transformer:
            if self.dose or self.half_life:
                raise InvalidInputError("dose or half_life set with transformer")
        elif not (self.dose is not None and self.dose > 0.0
                  and self.half_life is not None and self.half_life > 0.0):
            raise InvalidInputError("nonpositive dose or half_life without transformer")
        start = _validate_whole_ticks("start", self.start)
        duration = _validate_whole_ticks("duration", self.duration)
        _validate_non_negative("start", start)
        _validate_positive("duration", duration)
        if len(self.freqs) == 0:
            raise InvalidInputError("empty freqs")
        freqs = []
        for i, f in enumerate(self.freqs):
            # a fractional step would let the redose cursor advance by zero ticks
            f = _validate_whole_ticks(f"freqs[{i}]", f)
            if not (f > 0):
                raise InvalidInputError(f"freqs[{i}]: nonpositive duration")
            freqs.append(f)
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "duration", duration)
        object.__setattr__(self, "freqs", tuple(freqs))


@dataclass(frozen=True)
class CycleCalculation:
    """
    Everything needed to evaluate a cycle.

    compounds    : direct administrations; nonempty
    transformers : transformer entries, evaluated after all compounds are reduced
    """
    compounds: Sequence[DecodedCycle]
    transformers: Sequence[DecodedCycle] = ()

    def __post_init__(self) -> None:
        if len(self.compounds) == 0:
            raise InvalidInputError("empty compounds")
        object.__setattr__(self, "compounds", tuple(self.compounds))
        object.__setattr__(self, "transformers", tuple(self.transformers))


@dataclass(frozen=True)
class OffsetSeries:
    """`data` shifted right by `offset` ticks."""
    offset: int
    data: np.ndarray

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise InvalidInputError("negative offset")
        if len(self.data) == 0:
            raise InvalidInputError("empty list")

    @property
    def end(self) -> int:
        return self.offset + len(self.data)


@dataclass(frozen=True)
class RangeValue:
    """A value aggregated over the half-open tick range [start, until)."""
    value: float
    start: int
    until: int

    def __post_init__(self) -> None:
        if not (self.until > self.start):
            raise InvalidInputError(f"invalid range: from={self.start} to={self.until}")


class PlotType(Enum):
    POINT = "point"
    BAR = "bar"


@dataclass(frozen=True)
class XYList:
    """
    Tagged x/y pairs so a renderer knows whether to draw points or bars.

    x : tick indices
    y : values at those ticks
    """
    type: PlotType
    x: tuple[int, ...]
    y: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.x) != len(self.y):
            raise InvalidInputError(f"x and y lengths differ ({len(self.x)} != {len(self.y)})")

    @classmethod
    def point_plot(cls, xs: Sequence[int], ys: Sequence[float]) -> XYList:
        return cls(PlotType.POINT, tuple(int(x) for x in xs), tuple(float(y) for y in ys))

    @classmethod
    def bar_plot(cls, xs: Sequence[int], ys: Sequence[float]) -> XYList:
        return cls(PlotType.BAR, tuple(int(x) for x in xs), tuple(float(y) for y in ys))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "x": list(self.x), "y": list(self.y)}


@dataclass(frozen=True)
class DecodedXYList:
    """Same as XYList, with x re-expressed as durations since time zero."""
    type: PlotType
    x: tuple[timedelta, ...]
    y: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.x) != len(self.y):
            raise InvalidInputError(f"x and y lengths differ ({len(self.x)} != {len(self.y)})")

    def to_dict(self) -> dict[str, Any]:
        # JSON has no duration type; seconds keep full precision
        return {"type": self.type.value, "x": [d.total_seconds() for d in self.x], "y": list(self.y)}
