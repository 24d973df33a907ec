# src/cyclecalc/decoder.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, NamedTuple, Sequence

from .errors import InvalidInputError, ResolutionError
from .ticks import to_ticks, to_ticks_f
from .transformers import TRANSFORMER_FREQ_INFO, lookup
from .types import CompoundName, Config, CycleCalculation, CycleDescription, Data, DecodedCycle, EntryKind

logger = logging.getLogger(__name__)


class _PendingAdministration(NamedTuple):
    """A compound whose name has been resolved but whose durations are still real time."""
    compound: CompoundName
    dose: float
    start: timedelta
    duration: timedelta
    freq_name: str


def transformer_freqs(config: Config) -> dict[str, tuple[timedelta, ...]]:
    """Values of the reserved transformer frequency names for `config`."""
    freqs: dict[str, tuple[timedelta, ...]] = {}
    for name in TRANSFORMER_FREQ_INFO:
        if name == ".":
            freqs[name] = (config.tick_duration,)
        else:
            raise AssertionError(f"unhandled frequency {name}")
    return freqs


class Decoder:
    """
    Turns symbolic cycle entries into a CycleCalculation.

    config            : supplies the tick duration all times are quantized to
    data              : every compound, blend and frequency the entries refer to
    extra_transformer_freqs : additional frequency names usable only by transformer entries
    """

    def __init__(self, config: Config, data: Data,
                 extra_transformer_freqs: Mapping[str, Sequence[timedelta]] | None = None):
        self.tick = config.tick_duration
        self.data = data
        self._blend_sums = {name: blend.total for name, blend in data.blends.items()}
        self._transformer_freqs = {**transformer_freqs(config), **(extra_transformer_freqs or {})}

    def decode(self, cycle: Sequence[CycleDescription]) -> CycleCalculation:
        """
        Raises ResolutionError when a name is missing from `data` (or the transformer registry),
        QuantizationError when a duration does not fit the tick duration, and
        InvalidInputError when nothing but transformers is left.
        """
        transformer_entries: list[CycleDescription] = []
        pending: list[_PendingAdministration] = []

        # pass 1: expand blends and resolve compound names
        for entry in cycle:
            if entry.kind is EntryKind.TRANSFORMER:
                transformer_entries.append(entry)
            elif entry.kind is EntryKind.BLEND:
                pending.extend(self._expand_blend(entry))
            else:
                cname = CompoundName(entry.name, entry.variant)
                if cname not in self.data.compounds:
                    raise ResolutionError(f"unresolved compound {cname}")
                pending.append(_PendingAdministration(
                    cname, float(entry.dose), entry.start, entry.duration, entry.freq_name))

        # pass 2: decode compounds
        compounds = [self._decode_compound(p) for p in pending]
        if not compounds:
            raise InvalidInputError("cycle doesn't have any compounds")

        # pass 3: decode transformers
        transformers = [self._decode_transformer(e) for e in transformer_entries]

        logger.debug("decoded %d entries into %d compounds and %d transformers",
                     len(cycle), len(compounds), len(transformers))
        return CycleCalculation(compounds, transformers)

    def _expand_blend(self, entry: CycleDescription) -> list[_PendingAdministration]:
        blend = self.data.blends.get(entry.name)
        if blend is None:
            raise ResolutionError(f"unresolved blend {entry.name}")
        total = self._blend_sums[entry.name]
        out: list[_PendingAdministration] = []
        for cname, weight in blend.components.items():
            if cname not in self.data.compounds:
                raise ResolutionError(f"the blend {entry.name} contains an unresolved compound {cname}")
            out.append(_PendingAdministration(
                cname, float(entry.dose) * (weight / total), entry.start, entry.duration, entry.freq_name))
        return out

    def _decode_compound(self, p: _PendingAdministration) -> DecodedCycle:
        info = self.data.compounds.get(p.compound)
        if info is None:
            raise ResolutionError(f"unresolved compound {p.compound}")
        intervals = self.data.frequencies.get(p.freq_name)
        if intervals is None:
            raise ResolutionError(f"unresolved frequency {p.freq_name}")
        start, duration, freqs = self._transcode_times(p.start, p.duration, intervals)
        return DecodedCycle(
            compound=p.compound.base,
            dose=p.dose * info.pct_active,
            half_life=to_ticks_f(info.half_life, self.tick),
            start=start, duration=duration, freqs=freqs,
        )

    def _decode_transformer(self, entry: CycleDescription) -> DecodedCycle:
        lookup(entry.variant)
        intervals = self.data.frequencies.get(entry.freq_name)
        if intervals is None:
            intervals = self._transformer_freqs.get(entry.freq_name)
        if intervals is None:
            raise ResolutionError(f"the frequency {entry.freq_name} did not resolve to a sequence of durations")
        start, duration, freqs = self._transcode_times(entry.start, entry.duration, intervals)
        return DecodedCycle(compound=entry.name, start=start, duration=duration, freqs=freqs,
                            transformer=entry.variant)

    def _transcode_times(self, start: timedelta, duration: timedelta,
                         freqs: Sequence[timedelta]) -> tuple[int, int, list[int]]:
        return (
            to_ticks(start, self.tick, "start"),
            to_ticks(duration, self.tick, "duration"),
            [to_ticks(v, self.tick, f"freqs[{i}]") for i, v in enumerate(freqs)],
        )


@dataclass(frozen=True)
class ReferencedNames:
    """Names a cycle refers to; the caller fetches exactly these records to build a Data."""
    compounds: frozenset[CompoundName]
    blends: frozenset[str]
    frequencies: frozenset[str]


def resolve_names(cycle: Sequence[CycleDescription]) -> ReferencedNames:
    """
    Collect the compound, blend and frequency names referenced by `cycle`.
    Reserved transformer frequencies (".") are not included.
    """
    compounds: set[CompoundName] = set()
    blends: set[str] = set()
    freqs: set[str] = set()
    for entry in cycle:
        if entry.kind is EntryKind.COMPOUND:
            compounds.add(CompoundName(entry.name, entry.variant))
        elif entry.kind is EntryKind.BLEND:
            blends.add(entry.name)
        elif entry.freq_name in TRANSFORMER_FREQ_INFO:
            continue
        freqs.add(entry.freq_name)
    return ReferencedNames(frozenset(compounds), frozenset(blends), frozenset(freqs))
