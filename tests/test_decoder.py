from datetime import timedelta

import pytest

from cyclecalc.decoder import Decoder, resolve_names
from cyclecalc.errors import InvalidInputError, QuantizationError, ResolutionError
from cyclecalc.types import (
    BlendValue, CompoundInfo, CompoundName, Config, CycleCalculation, CycleDescription, Data, DecodedCycle,
)

ONE_DAY = timedelta(days=1)
HALF_DAY = ONE_DAY / 2
QUARTER_DAY = ONE_DAY / 4
HALF_WEEK = ONE_DAY * 3.5
ONE_WEEK = ONE_DAY * 7
ZERO = timedelta(0)

# quarter-day ticks: 4 ticks per day
CONFIG = Config(tick_duration=QUARTER_DAY, cutoff_milligrams=0.01, do_lambda_dose_correction=False)

C1_PCT_ACTIVE = 0.75
C2_PCT_ACTIVE = 0.9

FOO_BAR = CompoundName("foo", "bar")
BAR_BAZ = CompoundName("bar", "baz")
FOO_BAZ = CompoundName("foo", "baz")

DATA = Data(
    compounds={
        FOO_BAR: CompoundInfo(ONE_DAY * 2, C1_PCT_ACTIVE),
        BAR_BAZ: CompoundInfo(ONE_DAY, C2_PCT_ACTIVE),
        FOO_BAZ: CompoundInfo(ONE_DAY / 2, 1.0),
    },
    blends={
        "fred": BlendValue({FOO_BAR: 100.0, FOO_BAZ: 50.0}),
    },
    frequencies={
        "f1": (ONE_DAY,),
        "f2": (ONE_DAY * 2,),
        "f_1_2": (ONE_DAY, ONE_DAY * 2),
    },
)


def _decode(cycle, config=CONFIG, data=DATA, extra=None):
    return Decoder(config, data, extra).decode(cycle)


def test_decode_compounds_blends_and_transformers():
    cycle = [
        CycleDescription.compound("foo", 50.0, ZERO, ONE_WEEK, "f2", variant="bar"),
        CycleDescription.compound("bar", 100.0, ONE_DAY, HALF_WEEK, "f1", variant="baz"),
        CycleDescription.blend("fred", 300.0, HALF_DAY, ONE_WEEK, "f_1_2"),
        CycleDescription.transformer("foo", "median", ONE_DAY, ONE_WEEK - ONE_DAY, "f1"),
    ]
    expected = CycleCalculation(
        compounds=[
            DecodedCycle("foo", dose=50.0 * C1_PCT_ACTIVE, half_life=8.0, start=0, duration=28, freqs=[8]),
            DecodedCycle("bar", dose=100.0 * C2_PCT_ACTIVE, half_life=4.0, start=4, duration=14, freqs=[4]),
            # the blend splits 2:1 between its components
            DecodedCycle("foo", dose=300.0 * (100.0 / 150.0) * C1_PCT_ACTIVE, half_life=8.0,
                         start=2, duration=28, freqs=[4, 8]),
            DecodedCycle("foo", dose=300.0 * (50.0 / 150.0) * 1.0, half_life=2.0,
                         start=2, duration=28, freqs=[4, 8]),
        ],
        transformers=[
            DecodedCycle("foo", start=4, duration=24, freqs=[4], transformer="median"),
        ],
    )
    assert _decode(cycle) == expected


@pytest.mark.parametrize("cycle,message", [
    ([CycleDescription.compound("waldo", 1.0, ZERO, ONE_WEEK, "f2")], "unresolved compound waldo"),
    ([CycleDescription.compound("foo", 1.0, ZERO, ONE_WEEK, "f2", variant="qux")], "unresolved compound foo=qux"),
    ([CycleDescription.blend("waldo", 1.0, ZERO, ONE_WEEK, "f2")], "unresolved blend waldo"),
    ([CycleDescription.compound("foo", 1.0, ZERO, ONE_WEEK, "z", variant="bar")], "unresolved frequency z"),
    ([CycleDescription.compound("foo", 1.0, ZERO, ONE_WEEK, "f1", variant="bar"),
      CycleDescription.transformer("foo", "fred", ZERO, ONE_WEEK, "f1")], "transformer not found: fred"),
    ([CycleDescription.compound("foo", 1.0, ZERO, ONE_WEEK, "f1", variant="bar"),
      CycleDescription.transformer("foo", "median", ZERO, ONE_WEEK, "zz")], "the frequency zz did not resolve"),
])
def test_unresolved_names(cycle, message):
    with pytest.raises(ResolutionError, match=message):
        _decode(cycle)


def test_blend_with_unresolved_component():
    data = Data(
        compounds={FOO_BAR: CompoundInfo(ONE_DAY)},
        blends={"fred": BlendValue({FOO_BAR: 1.0, CompoundName("waldo"): 1.0})},
        frequencies={"f1": (ONE_DAY,)},
    )
    with pytest.raises(ResolutionError, match="the blend fred contains an unresolved compound waldo"):
        _decode([CycleDescription.blend("fred", 10.0, ZERO, ONE_WEEK, "f1")], data=data)


def test_only_transformers():
    with pytest.raises(InvalidInputError, match="cycle doesn't have any compounds"):
        _decode([CycleDescription.transformer("foo", "median", ZERO, ONE_WEEK, "f1")])


def test_duration_not_multiple_of_tick():
    with pytest.raises(QuantizationError, match="start=.* not compatible with tick_duration"):
        _decode([CycleDescription.compound("foo", 1.0, timedelta(hours=1), ONE_WEEK, "f1", variant="bar")])
    with pytest.raises(QuantizationError, match=r"freqs\[0\]="):
        _decode([CycleDescription.compound("foo", 1.0, ZERO, ONE_WEEK, "odd", variant="bar")],
                data=Data(compounds=DATA.compounds, frequencies={"odd": (timedelta(hours=5),)}))


def test_reserved_transformer_frequency():
    # "." is one window per tick
    calc = _decode([
        CycleDescription.compound("foo", 1.0, ZERO, ONE_WEEK, "f1", variant="bar"),
        CycleDescription.transformer("foo", "max", ZERO, ONE_DAY, "."),
    ])
    assert calc.transformers[0].freqs == (1,)
    assert calc.transformers[0].duration == 4


def test_extra_transformer_frequency():
    calc = _decode([
        CycleDescription.compound("foo", 1.0, ZERO, ONE_WEEK, "f1", variant="bar"),
        CycleDescription.transformer("foo", "mean", ZERO, ONE_WEEK, "weekly"),
    ], extra={"weekly": (ONE_WEEK,)})
    assert calc.transformers[0].freqs == (28,)


def test_resolve_names():
    names = resolve_names([
        CycleDescription.compound("foo", 50.0, ZERO, ONE_WEEK, "f2", variant="bar"),
        CycleDescription.blend("fred", 300.0, HALF_DAY, ONE_WEEK, "f_1_2"),
        CycleDescription.transformer("foo", "median", ONE_DAY, ONE_WEEK, "."),
        CycleDescription.transformer("foo", "median", ONE_DAY, ONE_WEEK, "f1"),
    ])
    assert names.compounds == {FOO_BAR}
    assert names.blends == {"fred"}
    assert names.frequencies == {"f2", "f_1_2", "f1"}
