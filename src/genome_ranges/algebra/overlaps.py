from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from genome_ranges.algebra.kernels import nearest_kernel, overlap_pairs_kernel
from genome_ranges.algebra.set_ops import RangeCollection
from genome_ranges.errors import SequenceNameMismatch
from genome_ranges.structures.genomic_range import GenomicRange, strands_compatible
from genome_ranges.structures.genomic_range_set import GenomicRangeSet
from genome_ranges.structures.interval import Interval
from genome_ranges.structures.interval_set import IntervalSet

logger = logging.getLogger(__name__)

OVERLAP_TYPES = ("any", "within", "start", "end", "equal")

_EMPTY = np.empty(0, dtype=np.int64)


@dataclass(frozen=True, eq=False)
class Hits:
    """
    Many-to-many overlap result between a query and a subject collection.

    Parameters
    ----------
    query_hits : np.ndarray
        Query index of each hit.
    subject_hits : np.ndarray
        Subject index of each hit, parallel to `query_hits`.
    query_length : int
        Number of ranges in the query.
    subject_length : int
        Number of ranges in the subject.

    Notes
    -----
    Hits are ordered by query index, then subject index.
    """
    query_hits: np.ndarray
    subject_hits: np.ndarray
    query_length: int
    subject_length: int

    def __len__(self) -> int:
        return int(self.query_hits.size)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        for q, s in zip(self.query_hits.tolist(), self.subject_hits.tolist()):
            yield q, s

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hits):
            return NotImplemented
        return (
            self.query_length == other.query_length
            and self.subject_length == other.subject_length
            and np.array_equal(self.query_hits, other.query_hits)
            and np.array_equal(self.subject_hits, other.subject_hits)
        )

    __hash__ = None  # type: ignore[assignment]

    def pairs(self) -> List[Tuple[int, int]]:
        """Hits as a list of `(query, subject)` tuples."""
        return list(self)

    def count_per_query(self) -> np.ndarray:
        return np.bincount(self.query_hits, minlength=self.query_length).astype(np.int64)

    def select_first(self) -> np.ndarray:
        """Lowest overlapping subject index per query, -1 where there is none."""
        first = np.full(self.query_length, -1, dtype=np.int64)
        if len(self):
            # hits are sorted, so the first occurrence of each query is its lowest subject
            queries, positions = np.unique(self.query_hits, return_index=True)
            first[queries] = self.subject_hits[positions]
        return first


# --------------------------
# Overlap search
# --------------------------
def _pairs_for(q_starts: np.ndarray, q_ends: np.ndarray,
               s_starts: np.ndarray, s_ends: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """All inclusive-overlap pairs between two coordinate arrays (local indices)."""
    if q_starts.size == 0 or s_starts.size == 0:
        return _EMPTY, _EMPTY
    order = np.argsort(s_starts, kind="stable")
    widths = s_ends - s_starts + 1
    max_width = int(widths.max()) if widths.size else 0
    return overlap_pairs_kernel(
        np.ascontiguousarray(q_starts, dtype=np.int64),
        np.ascontiguousarray(q_ends, dtype=np.int64),
        np.ascontiguousarray(s_starts[order], dtype=np.int64),
        np.ascontiguousarray(s_ends[order], dtype=np.int64),
        np.ascontiguousarray(order, dtype=np.int64),
        max(max_width, 1),
    )


def _check_types(query: RangeCollection, subject: RangeCollection) -> bool:
    q_genomic = isinstance(query, GenomicRangeSet)
    s_genomic = isinstance(subject, GenomicRangeSet)
    if q_genomic != s_genomic:
        raise TypeError("Cannot compare an IntervalSet with a GenomicRangeSet.")
    return q_genomic


def _raw_pairs(query: RangeCollection, subject: RangeCollection,
               ignore_strand: bool, strict_seqnames: bool) -> Tuple[np.ndarray, np.ndarray]:
    if not _check_types(query, subject):
        return _pairs_for(query.starts, query.ends, subject.starts, subject.ends)

    subject_levels = subject.seqlevels()
    if strict_seqnames:
        for seqname in query.seqlevels():
            if seqname not in subject_levels:
                raise SequenceNameMismatch(seqname, ",".join(subject_levels))

    out_q: List[np.ndarray] = []
    out_s: List[np.ndarray] = []
    for seqname in query.seqlevels():
        if seqname not in subject_levels:
            continue
        q_idx = np.flatnonzero(query.seqnames == seqname)
        s_idx = np.flatnonzero(subject.seqnames == seqname)
        local_q, local_s = _pairs_for(query.starts[q_idx], query.ends[q_idx],
                                      subject.starts[s_idx], subject.ends[s_idx])
        out_q.append(q_idx[local_q])
        out_s.append(s_idx[local_s])

    if not out_q:
        return _EMPTY, _EMPTY
    q_hits = np.concatenate(out_q)
    s_hits = np.concatenate(out_s)

    if not ignore_strand:
        q_codes = query.strands[q_hits]
        s_codes = subject.strands[s_hits]
        keep = (q_codes == 0) | (s_codes == 0) | (q_codes == s_codes)
        q_hits, s_hits = q_hits[keep], s_hits[keep]
    return q_hits, s_hits


def find_overlaps(
    query: RangeCollection,
    subject: RangeCollection,
    overlap_type: str = "any",
    min_overlap: int = 0,
    ignore_strand: bool = True,
    strict_seqnames: bool = False,
) -> Hits:
    """
    Find every (query, subject) pair of overlapping ranges.

    Two ranges overlap when `s.start <= q.end and s.end >= q.start`.

    Parameters
    ----------
    query, subject : IntervalSet or GenomicRangeSet
        Collections of the same kind.
    overlap_type : str, optional
        "any" (default); "within" keeps pairs where the query lies inside the
        subject; "start" / "end" keep pairs sharing that coordinate; "equal"
        keeps identical coordinates.
    min_overlap : int, optional
        Minimum number of shared positions, by default 0.
    ignore_strand : bool, optional
        If False, "+" never overlaps "-" ("*" overlaps either), by default True.
    strict_seqnames : bool, optional
        If True, a query sequence name absent from the subject raises
        `SequenceNameMismatch`, by default False.

    Returns
    -------
    Hits
        Pairs ordered by query index, then subject index.
    """
    if overlap_type not in OVERLAP_TYPES:
        raise ValueError(f"overlap_type needs to be one of {OVERLAP_TYPES}, found {overlap_type!r}")
    if min_overlap < 0:
        raise ValueError(f"min_overlap needs to be >= 0, found {min_overlap}")

    q_hits, s_hits = _raw_pairs(query, subject, ignore_strand, strict_seqnames)

    qs, qe = query.starts[q_hits], query.ends[q_hits]
    ss, se = subject.starts[s_hits], subject.ends[s_hits]
    match overlap_type:
        case "any":
            keep = np.ones(q_hits.size, dtype=bool)
        case "within":
            keep = (ss <= qs) & (qe <= se)
        case "start":
            keep = qs == ss
        case "end":
            keep = qe == se
        case "equal":
            keep = (qs == ss) & (qe == se)
    if min_overlap > 0:
        keep &= (np.minimum(qe, se) - np.maximum(qs, ss) + 1) >= min_overlap

    q_hits, s_hits = q_hits[keep], s_hits[keep]
    order = np.lexsort((s_hits, q_hits))
    hits = Hits(
        np.ascontiguousarray(q_hits[order], dtype=np.int64),
        np.ascontiguousarray(s_hits[order], dtype=np.int64),
        len(query),
        len(subject),
    )
    logger.debug(f"find_overlaps: {len(query)} x {len(subject)} -> {len(hits)} hits")
    return hits


def count_overlaps(query: RangeCollection, subject: RangeCollection, **kwargs) -> np.ndarray:
    """Number of overlapping subject ranges per query range."""
    return find_overlaps(query, subject, **kwargs).count_per_query()


def overlaps_any(query: RangeCollection, subject: RangeCollection, **kwargs) -> np.ndarray:
    """Boolean mask of query ranges overlapping at least one subject range."""
    return count_overlaps(query, subject, **kwargs) > 0


def subset_by_overlaps(query: RangeCollection, subject: RangeCollection, invert: bool = False,
                       **kwargs) -> RangeCollection:
    """Query ranges overlapping the subject (or, with `invert=True`, those that do not)."""
    mask = overlaps_any(query, subject, **kwargs)
    return query[~mask if invert else mask]


# --------------------------
# Distance & nearest
# --------------------------
def distance(a: Union[Interval, GenomicRange], b: Union[Interval, GenomicRange],
             strict: bool = False, ignore_strand: bool = True) -> Optional[int]:
    """
    Number of positions strictly between two ranges.

    Overlapping and adjacent ranges are at distance 0. Genomic ranges on
    different sequences, or on incompatible strands when
    `ignore_strand=False`, give None.

    Raises
    ------
    SequenceNameMismatch
        If `strict=True` and the ranges are on different sequences.
    """
    if isinstance(a, GenomicRange) and isinstance(b, GenomicRange):
        if a.seqname != b.seqname:
            if strict:
                raise SequenceNameMismatch(a.seqname, b.seqname)
            return None
        if not ignore_strand and not strands_compatible(a.strand, b.strand):
            return None
    elif isinstance(a, GenomicRange) or isinstance(b, GenomicRange):
        raise TypeError("Cannot measure the distance between an Interval and a GenomicRange.")
    return max(0, max(a.start, b.start) - min(a.end, b.end) - 1)


def _nearest_for(query: RangeCollection, q_idx: np.ndarray, subject: RangeCollection, s_idx: np.ndarray,
                 self_search: bool) -> Tuple[np.ndarray, np.ndarray]:
    local, dist = nearest_kernel(
        np.ascontiguousarray(query.starts[q_idx], dtype=np.int64),
        np.ascontiguousarray(query.ends[q_idx], dtype=np.int64),
        np.ascontiguousarray(q_idx, dtype=np.int64),
        np.ascontiguousarray(subject.starts[s_idx], dtype=np.int64),
        np.ascontiguousarray(subject.ends[s_idx], dtype=np.int64),
        np.ascontiguousarray(s_idx, dtype=np.int64),
        self_search,
    )
    found = local >= 0
    best = np.full(q_idx.size, -1, dtype=np.int64)
    best[found] = s_idx[local[found]]
    return best, dist


def distance_to_nearest(
    query: RangeCollection,
    subject: Optional[RangeCollection] = None,
    ignore_strand: bool = True,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Nearest subject index and its distance for every query range.

    Parameters
    ----------
    query : IntervalSet or GenomicRangeSet
        Ranges to search from.
    subject : IntervalSet or GenomicRangeSet, optional
        Ranges to search in. When omitted the query is searched against
        itself and a range never matches itself.
    ignore_strand : bool, optional
        If False, "+" and "-" ranges are never candidates for each other.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Subject index per query and the matching distance; both are -1 when
        no candidate exists (e.g. no subject range on the query's sequence).
        Ties go to the lowest subject start, then the lowest subject index.
    """
    self_search = subject is None
    if subject is None:
        subject = query

    best = np.full(len(query), -1, dtype=np.int64)
    dist = np.full(len(query), -1, dtype=np.int64)

    if not _check_types(query, subject):
        q_idx = np.arange(len(query), dtype=np.int64)
        s_idx = np.arange(len(subject), dtype=np.int64)
        best[:], dist[:] = _nearest_for(query, q_idx, subject, s_idx, self_search)
        return best, dist

    subject_levels = set(subject.seqlevels())
    for seqname in query.seqlevels():
        if seqname not in subject_levels:
            continue
        on_q = query.seqnames == seqname
        on_s = subject.seqnames == seqname
        if ignore_strand:
            selections = [(on_q, on_s)]
        else:
            selections = [
                (on_q & (query.strands == code), on_s & ((subject.strands == code) | (subject.strands == 0)))
                for code in (1, -1)
            ]
            selections.append((on_q & (query.strands == 0), on_s))
        for q_mask, s_mask in selections:
            q_idx = np.flatnonzero(q_mask)
            s_idx = np.flatnonzero(s_mask)
            if q_idx.size == 0 or s_idx.size == 0:
                continue
            best[q_idx], dist[q_idx] = _nearest_for(query, q_idx, subject, s_idx, self_search)
    return best, dist


def nearest(
    query: RangeCollection,
    subject: Optional[RangeCollection] = None,
    ignore_strand: bool = True,
) -> np.ndarray:
    """Index of the nearest subject range per query range (-1 when there is none)."""
    return distance_to_nearest(query, subject, ignore_strand)[0]


def nearest_range(rng: Union[Interval, GenomicRange], subject: RangeCollection,
                  ignore_strand: bool = True) -> Optional[Union[Interval, GenomicRange]]:
    """The nearest subject range to a single range, or None."""
    if isinstance(rng, GenomicRange):
        query: RangeCollection = GenomicRangeSet.from_ranges([rng])
    else:
        query = IntervalSet.from_intervals([rng])
    index = int(nearest(query, subject, ignore_strand)[0])
    return None if index < 0 else subject[index]


def group_hits(hits: Hits) -> Dict[int, List[int]]:
    """Subject indices per query index, for queries with at least one hit."""
    grouped: Dict[int, List[int]] = {}
    for q, s in hits:
        grouped.setdefault(q, []).append(s)
    return grouped
