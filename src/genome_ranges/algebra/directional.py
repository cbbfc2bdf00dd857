"""
Strand-aware range arithmetic: shift, resize, flank, promoters and trim.

Every function accepts a single `Interval` / `GenomicRange` or a whole
`IntervalSet` / `GenomicRangeSet`. Scalars keep their concrete type (an
`AnnotatedRange` keeps its name and metadata); collections keep names,
metadata and order.

For genomic ranges "start" means the 5' end: the low coordinate on the
forward strand, the high coordinate on the reverse strand. Unstranded
ranges behave as forward. Plain intervals are always coordinate-relative.
"""
from __future__ import annotations
import dataclasses
from typing import Callable, Tuple, TypeVar, Union

import numpy as np

from genome_ranges.errors import InvalidWidth
from genome_ranges.structures.genomic_range import GenomicRange
from genome_ranges.structures.genomic_range_set import GenomicRangeSet
from genome_ranges.structures.interval import Interval, Strand
from genome_ranges.structures.interval_set import IntervalSet

FIX_ANCHORS = ("start", "end", "center")

T = TypeVar("T", Interval, GenomicRange, IntervalSet, GenomicRangeSet)
Bounds = Tuple[int, int]
BoundsFunc = Callable[[int, int, bool], Bounds]


def _is_reverse(rng: Union[Interval, GenomicRange]) -> bool:
    if not isinstance(rng, GenomicRange):
        return False
    match rng.strand:
        case Strand.REVERSE:
            return True
        case Strand.FORWARD | Strand.UNSTRANDED:
            return False


def _apply(x: T, bounds: BoundsFunc) -> T:
    """Recompute `(start, end)` of a range or of every member of a collection."""
    if isinstance(x, (Interval, GenomicRange)):
        start, end = bounds(x.start, x.end, _is_reverse(x))
        return dataclasses.replace(x, start=start, end=end)

    if isinstance(x, IntervalSet):
        reverse = np.zeros(len(x), dtype=bool)
        if isinstance(x, GenomicRangeSet):
            reverse = x.strands == Strand.REVERSE.code
        new_starts = np.empty(len(x), dtype=np.int64)
        new_ends = np.empty(len(x), dtype=np.int64)
        for i, (start, end, rev) in enumerate(zip(x.starts.tolist(), x.ends.tolist(), reverse.tolist())):
            new_starts[i], new_ends[i] = bounds(start, end, rev)
        parts = x._parts()
        parts["starts"] = new_starts
        parts["ends"] = new_ends
        return type(x)(**parts)

    raise TypeError(f"Expected a range or a range collection, found {type(x).__name__}")


def shift(x: T, offset: int) -> T:
    """Move both bounds by `offset` (coordinate-relative for every strand)."""
    offset = int(offset)
    return _apply(x, lambda start, end, reverse: (start + offset, end + offset))


def resize(x: T, width: int, fix: str = "start") -> T:
    """
    Set the width of a range while holding one anchor.

    Parameters
    ----------
    x : range or collection
        Input.
    width : int
        New width, >= 0.
    fix : str, optional
        "start" (5' end for genomic ranges), "end" (3' end) or "center".
        With "center" the new start is `start + (old_width - width) // 2` on
        the forward strand, mirrored on the reverse strand.

    Raises
    ------
    InvalidWidth
        If `width` is negative.
    ValueError
        If `fix` is not one of "start", "end", "center".
    """
    width = int(width)
    if width < 0:
        raise InvalidWidth(f"Width needs to be >= 0, found {width}")
    if fix not in FIX_ANCHORS:
        raise ValueError(f"fix needs to be one of {FIX_ANCHORS}, found {fix!r}")

    def _bounds(start: int, end: int, reverse: bool) -> Bounds:
        old_width = end - start + 1
        match (fix, reverse):
            case ("start", False) | ("end", True):
                return start, start + width - 1
            case ("end", False) | ("start", True):
                return end - width + 1, end
            case ("center", False):
                new_start = start + (old_width - width) // 2
                return new_start, new_start + width - 1
            case ("center", True):
                new_end = end - (old_width - width) // 2
                return new_end - width + 1, new_end
        raise ValueError(f"Unsupported anchor: {fix!r}")

    return _apply(x, _bounds)


def flank(x: T, width: int, start: bool = True, both: bool = False) -> T:
    """
    Region adjacent to one side of a range.

    Parameters
    ----------
    x : range or collection
        Input.
    width : int
        Flank width. A negative width flanks inward, i.e. takes the first
        `abs(width)` positions inside the range.
    start : bool, optional
        Flank the start side (upstream for genomic ranges) if True, the end
        side otherwise. By default True.
    both : bool, optional
        If True the flank straddles the boundary, covering `abs(width)`
        positions on each side of it. By default False.
    """
    width = int(width)
    size = abs(width)

    def _bounds(lo: int, hi: int, reverse: bool) -> Bounds:
        low_side = start != reverse
        if both:
            if low_side:
                return lo - size, lo + size - 1
            return hi - size + 1, hi + size
        if low_side:
            if width >= 0:
                return lo - width, lo - 1
            return lo, lo + size - 1
        if width >= 0:
            return hi + 1, hi + width
        return hi - size + 1, hi

    return _apply(x, _bounds)


def promoters(x: T, upstream: int = 2000, downstream: int = 200) -> T:
    """
    Region around the 5' end of each range.

    On the forward strand this is `[start - upstream, start + downstream - 1]`;
    on the reverse strand `[end - downstream + 1, end + upstream]`.

    Raises
    ------
    InvalidWidth
        If `upstream` or `downstream` is negative.
    """
    upstream, downstream = int(upstream), int(downstream)
    if upstream < 0 or downstream < 0:
        raise InvalidWidth(f"upstream and downstream need to be >= 0, found {upstream} and {downstream}")

    def _bounds(lo: int, hi: int, reverse: bool) -> Bounds:
        if reverse:
            return hi - downstream + 1, hi + upstream
        return lo - upstream, lo + downstream - 1

    return _apply(x, _bounds)


def trim(x: T, seqlength: int) -> T:
    """
    Clip ranges to `1..seqlength`.

    A range lying entirely outside becomes zero-width, positioned at the
    nearest bound.
    """
    seqlength = int(seqlength)
    if seqlength < 0:
        raise InvalidWidth(f"seqlength needs to be >= 0, found {seqlength}")

    def _bounds(lo: int, hi: int, reverse: bool) -> Bounds:
        new_start = min(max(lo, 1), seqlength + 1)
        new_end = max(min(hi, seqlength), new_start - 1)
        return new_start, new_end

    return _apply(x, _bounds)


def five_prime(x: Union[Interval, GenomicRange]) -> int:
    """Coordinate of the 5' end (the start for forward and unstranded ranges)."""
    return x.end if _is_reverse(x) else x.start


def three_prime(x: Union[Interval, GenomicRange]) -> int:
    return x.start if _is_reverse(x) else x.end
