"""
Unit tests for `Interval` and `Strand`.

Covers 1-based inclusive width arithmetic, the zero-width convention,
immutability and strand symbol parsing.
"""
import pytest
from dataclasses import FrozenInstanceError

import numpy as np

from genome_ranges.errors import InvalidWidth
from genome_ranges.structures.interval import Interval, Strand


def test_interval_width_is_inclusive():
    """
    `[5, 10]` covers six positions.
    """
    interval = Interval(5, 10)
    assert interval.width == 6
    assert interval.as_tuple() == (5, 10)
    assert not interval.is_empty


def test_zero_width_interval_is_allowed():
    """
    `end == start - 1` encodes an empty interval positioned before `start`.
    """
    interval = Interval(5, 4)
    assert interval.width == 0
    assert interval.is_empty


def test_negative_width_raises_invalid_width():
    """
    `end < start - 1` would give a negative width.
    """
    with pytest.raises(InvalidWidth):
        Interval(5, 3)
    with pytest.raises(InvalidWidth):
        Interval.from_width(5, -1)


def test_from_width_builds_matching_end():
    assert Interval.from_width(10, 3) == Interval(10, 12)
    assert Interval.from_width(10, 0) == Interval(10, 9)


def test_numpy_integers_are_coerced():
    """
    Bounds read back from numpy arrays become plain ints.
    """
    interval = Interval(np.int64(3), np.int64(7))
    assert type(interval.start) is int
    assert type(interval.end) is int


def test_interval_is_frozen_and_hashable():
    interval = Interval(1, 3)
    with pytest.raises(FrozenInstanceError):
        interval.start = 2
    assert len({Interval(1, 3), Interval(1, 3), Interval(1, 4)}) == 2


@pytest.mark.parametrize("a, b, expected", [
    ((1, 5), (5, 9), True),     # shared endpoint
    ((1, 5), (6, 9), False),    # adjacent only
    ((3, 4), (1, 10), True),    # contained
    ((1, 5), (7, 9), False),
])
def test_overlaps_uses_inclusive_bounds(a, b, expected):
    assert Interval(*a).overlaps(Interval(*b)) is expected
    assert Interval(*b).overlaps(Interval(*a)) is expected


def test_contains_and_shift():
    interval = Interval(10, 20)
    assert interval.contains(10)
    assert interval.contains(20)
    assert not interval.contains(21)
    assert interval.shift(-5) == Interval(5, 15)
    assert str(interval) == "[10, 20]"


@pytest.mark.parametrize("value, expected", [
    ("+", Strand.FORWARD),
    ("-", Strand.REVERSE),
    ("*", Strand.UNSTRANDED),
    (".", Strand.UNSTRANDED),
    (None, Strand.UNSTRANDED),
    (1, Strand.FORWARD),
    (-1, Strand.REVERSE),
    (0, Strand.UNSTRANDED),
    (np.int8(-1), Strand.REVERSE),
    (Strand.FORWARD, Strand.FORWARD),
])
def test_strand_parse_accepts_symbols_and_codes(value, expected):
    assert Strand.parse(value) is expected


@pytest.mark.parametrize("value", ["x", "++", 2, True, 1.0])
def test_strand_parse_rejects_unknown_values(value):
    with pytest.raises(ValueError):
        Strand.parse(value)


def test_strand_code_round_trip():
    for strand in Strand:
        assert Strand.from_code(strand.code) is strand
    assert str(Strand.REVERSE) == "-"
