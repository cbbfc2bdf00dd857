from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np

from genome_ranges.algebra.kernels import merge_sorted_kernel
from genome_ranges.structures.genomic_range import GenomicRange
from genome_ranges.structures.genomic_range_set import GenomicRangeSet
from genome_ranges.structures.interval_set import IntervalSet

logger = logging.getLogger(__name__)

Arrays = Tuple[np.ndarray, np.ndarray]
RangeCollection = Union[IntervalSet, GenomicRangeSet]
GroupKey = Tuple[str, int]

# Normalised genomic output is ordered by seqname, then strand ("+", "-", "*"), then start.
_STRAND_ORDER = (1, -1, 0)

_EMPTY = np.empty(0, dtype=np.int64)


# --------------------------
# Conversion helpers
# --------------------------
def as_range_collection(ranges: Union[RangeCollection, Iterable[Any]]) -> RangeCollection:
    """
    Coerce `ranges` to an `IntervalSet` or `GenomicRangeSet`.

    Collections pass through; iterables of `GenomicRange` (or tuples starting
    with a sequence name) become a `GenomicRangeSet`, iterables of `Interval`
    or `(start, end)` tuples become an `IntervalSet`.
    """
    if isinstance(ranges, IntervalSet):
        return ranges
    items = list(ranges)
    if not items:
        return IntervalSet()
    first = items[0]
    if isinstance(first, GenomicRange) or (isinstance(first, tuple) and isinstance(first[0], str)):
        return GenomicRangeSet.from_ranges(items)
    return IntervalSet.from_intervals(items)


def _contiguous(array: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(array, dtype=np.int64)


def _non_empty(starts: np.ndarray, ends: np.ndarray) -> Arrays:
    keep = ends >= starts
    return starts[keep], ends[keep]


# --------------------------
# Array-level operators
# --------------------------
def reduce_arrays(starts: np.ndarray, ends: np.ndarray, min_gap: int = 1) -> Arrays:
    """Merge intervals closer than `min_gap`; zero-width intervals are dropped."""
    starts, ends = _non_empty(starts, ends)
    order = np.lexsort((ends, starts))
    return merge_sorted_kernel(_contiguous(starts[order]), _contiguous(ends[order]), int(min_gap))


def coverage_arrays(starts: np.ndarray, ends: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Piecewise-constant coverage of a set of intervals.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray, np.ndarray]
        Segment starts, segment ends and the number of intervals covering each
        segment. Segments tile the span from the lowest start to the highest
        end without gaps; uncovered stretches have count 0.
    """
    starts, ends = _non_empty(starts, ends)
    if starts.size == 0:
        return _EMPTY, _EMPTY, _EMPTY

    positions = np.concatenate([starts, ends + 1])
    deltas = np.concatenate([np.ones(starts.size, dtype=np.int64), -np.ones(ends.size, dtype=np.int64)])
    breakpoints, inverse = np.unique(positions, return_inverse=True)
    net = np.bincount(inverse.ravel(), weights=deltas, minlength=breakpoints.size).astype(np.int64)
    depth = np.cumsum(net)

    return breakpoints[:-1], breakpoints[1:] - 1, depth[:-1]


def disjoin_arrays(starts: np.ndarray, ends: np.ndarray) -> Arrays:
    seg_starts, seg_ends, depth = coverage_arrays(starts, ends)
    covered = depth > 0
    return seg_starts[covered], seg_ends[covered]


def gaps_arrays(starts: np.ndarray, ends: np.ndarray, lo: Optional[int] = None, hi: Optional[int] = None) -> Arrays:
    """
    Uncovered stretches inside `[lo, hi]`.

    `lo` and `hi` default to the span of the non-empty input; with no
    non-empty input and no explicit bounds the result is empty.
    """
    merged_s, merged_e = reduce_arrays(starts, ends)
    if lo is None or hi is None:
        if merged_s.size == 0:
            return _EMPTY, _EMPTY
        lo = int(merged_s[0]) if lo is None else lo
        hi = int(merged_e[-1]) if hi is None else hi
    if hi < lo:
        return _EMPTY, _EMPTY

    inside = (merged_e >= lo) & (merged_s <= hi)
    clipped_s = np.maximum(merged_s[inside], lo)
    clipped_e = np.minimum(merged_e[inside], hi)

    gap_s = np.concatenate([[lo], clipped_e + 1]).astype(np.int64)
    gap_e = np.concatenate([clipped_s - 1, [hi]]).astype(np.int64)
    keep = gap_e >= gap_s
    return gap_s[keep], gap_e[keep]


def union_arrays(a: Arrays, b: Arrays) -> Arrays:
    return reduce_arrays(np.concatenate([a[0], b[0]]), np.concatenate([a[1], b[1]]))


def intersect_arrays(a: Arrays, b: Arrays) -> Arrays:
    reduced_a = reduce_arrays(*a)
    reduced_b = reduce_arrays(*b)
    seg_s, seg_e, depth = coverage_arrays(
        np.concatenate([reduced_a[0], reduced_b[0]]),
        np.concatenate([reduced_a[1], reduced_b[1]]),
    )
    both = depth == 2
    return reduce_arrays(seg_s[both], seg_e[both])


def setdiff_arrays(a: Arrays, b: Arrays) -> Arrays:
    reduced_a = reduce_arrays(*a)
    if reduced_a[0].size == 0:
        return _EMPTY, _EMPTY
    lo, hi = int(reduced_a[0][0]), int(reduced_a[1][-1])
    uncovered_by_b = gaps_arrays(b[0], b[1], lo, hi)
    return intersect_arrays(reduced_a, uncovered_by_b)


def range_arrays(starts: np.ndarray, ends: np.ndarray) -> Arrays:
    if starts.size == 0:
        return _EMPTY, _EMPTY
    return np.array([starts.min()], dtype=np.int64), np.array([ends.max()], dtype=np.int64)


# --------------------------
# Genomic grouping
# --------------------------
def _group_indices(x: GenomicRangeSet, ignore_strand: bool) -> Dict[GroupKey, np.ndarray]:
    groups: Dict[GroupKey, np.ndarray] = {}
    for seqname in sorted(x.seqlevels()):
        on_seq = x.seqnames == seqname
        if ignore_strand:
            groups[(seqname, 0)] = np.flatnonzero(on_seq)
            continue
        for code in _STRAND_ORDER:
            idx = np.flatnonzero(on_seq & (x.strands == code))
            if idx.size:
                groups[(seqname, code)] = idx
    return groups


def _assemble(pieces: List[Tuple[GroupKey, Arrays]]) -> GenomicRangeSet:
    seqnames: List[str] = []
    strands: List[np.ndarray] = []
    starts: List[np.ndarray] = []
    ends: List[np.ndarray] = []
    for (seqname, code), (s, e) in pieces:
        seqnames.extend([seqname] * s.size)
        strands.append(np.full(s.size, code, dtype=np.int8))
        starts.append(s)
        ends.append(e)
    if not starts:
        return GenomicRangeSet()
    return GenomicRangeSet(seqnames, np.concatenate(starts), np.concatenate(ends), np.concatenate(strands))


def _unary(x: RangeCollection, func: Callable[[np.ndarray, np.ndarray], Arrays], ignore_strand: bool) -> RangeCollection:
    if isinstance(x, GenomicRangeSet):
        pieces = []
        for key, idx in _group_indices(x, ignore_strand).items():
            pieces.append((key, func(x.starts[idx], x.ends[idx])))
        return _assemble(pieces)
    if isinstance(x, IntervalSet):
        return IntervalSet(*func(x.starts, x.ends))
    raise TypeError(f"Expected IntervalSet or GenomicRangeSet, found {type(x).__name__}")


def _binary(a: RangeCollection, b: RangeCollection, func: Callable[[Arrays, Arrays], Arrays],
            ignore_strand: bool) -> RangeCollection:
    a_genomic = isinstance(a, GenomicRangeSet)
    b_genomic = isinstance(b, GenomicRangeSet)
    if a_genomic != b_genomic:
        raise TypeError("Cannot combine an IntervalSet with a GenomicRangeSet.")

    if not a_genomic:
        return IntervalSet(*func((a.starts, a.ends), (b.starts, b.ends)))

    groups_a = _group_indices(a, ignore_strand)
    groups_b = _group_indices(b, ignore_strand)
    keys = sorted(set(groups_a) | set(groups_b), key=lambda key: (key[0], _STRAND_ORDER.index(key[1])))

    pieces = []
    for key in keys:
        idx_a = groups_a.get(key, _EMPTY)
        idx_b = groups_b.get(key, _EMPTY)
        pieces.append((key, func((a.starts[idx_a], a.ends[idx_a]), (b.starts[idx_b], b.ends[idx_b]))))
    return _assemble(pieces)


# --------------------------
# Public operators
# --------------------------
def range_of(x: RangeCollection, ignore_strand: bool = True) -> RangeCollection:
    """
    Minimal spanning interval of a collection.

    For genomic collections one span is returned per sequence name (and per
    strand when `ignore_strand=False`). An empty collection gives an empty
    result.
    """
    return _unary(x, range_arrays, ignore_strand)


def reduce(x: RangeCollection, min_gap: int = 1, ignore_strand: bool = True) -> RangeCollection:
    """
    Merge overlapping and adjacent intervals into a minimal disjoint cover.

    Parameters
    ----------
    x : IntervalSet or GenomicRangeSet
        Input ranges, in any order.
    min_gap : int, optional
        Intervals separated by a gap narrower than this are merged. The
        default of 1 merges overlapping and book-ended intervals; 0 merges
        only overlapping ones.
    ignore_strand : bool, optional
        For genomic input, merge across strands (output unstranded), by
        default True. Ranges on different sequences never merge.

    Returns
    -------
    IntervalSet or GenomicRangeSet
        Sorted, non-overlapping ranges. Zero-width input ranges are dropped.

    Examples
    --------
    [5,10], [20,30], [25,40] -> [5,10], [20,40]
    """
    if min_gap < 0:
        raise ValueError(f"min_gap needs to be >= 0, found {min_gap}")
    result = _unary(x, lambda s, e: reduce_arrays(s, e, min_gap), ignore_strand)
    logger.debug(f"reduce: {len(x)} -> {len(result)} ranges")
    return result


def disjoin(x: RangeCollection, ignore_strand: bool = True) -> RangeCollection:
    """
    Partition the covered positions into pieces with a constant set of covering inputs.

    Every boundary of an input interval becomes a boundary of the output,
    and stretches covered by no input are left out.

    Examples
    --------
    [5,10], [20,30], [25,40] -> [5,10], [20,24], [25,30], [31,40]
    """
    result = _unary(x, disjoin_arrays, ignore_strand)
    logger.debug(f"disjoin: {len(x)} -> {len(result)} ranges")
    return result


def gaps(
    x: RangeCollection,
    start: Optional[int] = None,
    end: Optional[int] = None,
    seqlengths: Optional[Mapping[str, int]] = None,
    ignore_strand: bool = True,
) -> RangeCollection:
    """
    Stretches not covered by any range.

    Parameters
    ----------
    x : IntervalSet or GenomicRangeSet
        Input ranges.
    start, end : int, optional
        Bounds of the region to search. Default to the span of the input.
    seqlengths : Mapping[str, int], optional
        Genomic input only: search `1..length` of each named sequence,
        including sequences with no ranges at all.
    ignore_strand : bool, optional
        Genomic input only, by default True.
    """
    if not isinstance(x, GenomicRangeSet) or seqlengths is None:
        return _unary(x, lambda s, e: gaps_arrays(s, e, start, end), ignore_strand)

    groups = _group_indices(x, ignore_strand)
    pieces = []
    for seqname, length in sorted(seqlengths.items()):
        codes = [code for (name, code) in groups if name == seqname] or [0]
        for code in codes:
            idx = groups.get((seqname, code), _EMPTY)
            lo = 1 if start is None else start
            hi = length if end is None else min(end, length)
            pieces.append(((seqname, code), gaps_arrays(x.starts[idx], x.ends[idx], lo, hi)))
    return _assemble(pieces)


def union(a: RangeCollection, b: RangeCollection, ignore_strand: bool = True) -> RangeCollection:
    """Positions covered by `a` or `b`, as a reduced collection."""
    return _binary(a, b, union_arrays, ignore_strand)


def intersect(a: RangeCollection, b: RangeCollection, ignore_strand: bool = True) -> RangeCollection:
    """Positions covered by both `a` and `b`, as a reduced collection."""
    return _binary(a, b, intersect_arrays, ignore_strand)


def setdiff(a: RangeCollection, b: RangeCollection, ignore_strand: bool = True) -> RangeCollection:
    """Positions covered by `a` but not by `b`, as a reduced collection."""
    return _binary(a, b, setdiff_arrays, ignore_strand)


def coverage(x: RangeCollection, ignore_strand: bool = True) -> Tuple[RangeCollection, np.ndarray]:
    """
    Run-length coverage.

    Returns
    -------
    Tuple[IntervalSet or GenomicRangeSet, np.ndarray]
        Contiguous segments spanning each group's covered region and the
        number of input ranges covering each segment (0 inside gaps).
    """
    depths: List[np.ndarray] = []

    def _segments(starts: np.ndarray, ends: np.ndarray) -> Arrays:
        seg_s, seg_e, depth = coverage_arrays(starts, ends)
        depths.append(depth)
        return seg_s, seg_e

    segments = _unary(x, _segments, ignore_strand)
    counts = np.concatenate(depths) if depths else _EMPTY
    return segments, counts
