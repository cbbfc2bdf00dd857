from __future__ import annotations
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from genome_ranges.structures.genomic_range import AnnotatedRange, GenomicRange
from genome_ranges.structures.interval import Strand
from genome_ranges.structures.interval_set import IntervalSet, _as_int_array, _readonly, _resolve_ends

RangeLike = Union[GenomicRange, Tuple[str, int, int], Tuple[str, int, int, Any]]


def _seqname_array(seqnames: Any, n: int) -> np.ndarray:
    if isinstance(seqnames, str):
        names = [seqnames] * n
    else:
        names = [str(name) for name in seqnames]
    if len(names) != n:
        raise ValueError(f"Expected {n} seqnames, found {len(names)}")
    column = np.empty(n, dtype=object)
    for i, name in enumerate(names):
        column[i] = name
    return _readonly(column)


def _strand_array(strands: Any, n: int) -> np.ndarray:
    if strands is None:
        codes = np.zeros(n, dtype=np.int8)
    elif isinstance(strands, (str, Strand)):
        codes = np.full(n, Strand.parse(strands).code, dtype=np.int8)
    elif isinstance(strands, np.ndarray) and strands.dtype.kind == "i":
        codes = np.array([Strand.from_code(code).code for code in strands], dtype=np.int8)
    else:
        codes = np.array([Strand.parse(strand).code for strand in strands], dtype=np.int8)
    if codes.size != n:
        raise ValueError(f"Expected {n} strands, found {codes.size}")
    return _readonly(codes.reshape(n))


class GenomicRangeSet(IntervalSet):
    """
    Ordered collection of genomic ranges: sequence name, coordinates and strand.

    Strands are stored as int8 codes (1 forward, -1 reverse, 0 unstranded).
    Integer indexing returns a `GenomicRange`, or an `AnnotatedRange` when the
    set carries names or metadata.

    Parameters
    ----------
    seqnames : str or sequence of str
        Sequence name per range; a single string is broadcast.
    starts, ends : array-like of int
        1-based inclusive coordinates.
    strands : str, Strand or sequence, optional
        Strand per range (or one value broadcast); defaults to unstranded.
    names : sequence of str, optional
        One name per range.
    metadata : Mapping[str, array-like], optional
        Metadata columns.
    """
    __slots__ = ("_seqnames", "_strands")

    def __init__(
        self,
        seqnames: Any = (),
        starts: Any = (),
        ends: Any = (),
        strands: Any = None,
        names: Optional[Sequence[Optional[str]]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(starts, ends, names=names, metadata=metadata)
        n = len(self)
        self._seqnames = _seqname_array(seqnames, n)
        self._strands = _strand_array(strands, n)

    @classmethod
    def from_arrays(  # type: ignore[override]
        cls,
        seqnames: Any,
        starts: Any,
        ends: Any = None,
        widths: Any = None,
        strands: Any = None,
        names: Optional[Sequence[Optional[str]]] = None,
        **metadata: Any,
    ) -> GenomicRangeSet:
        """Build a set from parallel arrays; exactly one of `ends` and `widths` is required."""
        starts_arr = _as_int_array(starts)
        ends_arr = _resolve_ends(starts_arr, ends, widths)
        return cls(seqnames, starts_arr, ends_arr, strands, names=names, metadata=metadata or None)

    @classmethod
    def from_ranges(cls, ranges: Iterable[RangeLike]) -> GenomicRangeSet:
        """
        Build a set from `GenomicRange` objects or `(seqname, start, end[, strand])` tuples.

        When every element is an `AnnotatedRange`, names and the union of the
        metadata keys are carried over (missing values become None).
        """
        seqnames: List[str] = []
        starts: List[int] = []
        ends: List[int] = []
        strands: List[Strand] = []
        annotated: List[AnnotatedRange] = []
        all_annotated = True

        for item in ranges:
            if isinstance(item, GenomicRange):
                rng = item
            else:
                rng = GenomicRange(*item)
            seqnames.append(rng.seqname)
            starts.append(rng.start)
            ends.append(rng.end)
            strands.append(rng.strand)
            if isinstance(rng, AnnotatedRange):
                annotated.append(rng)
            else:
                all_annotated = False

        if not (all_annotated and annotated):
            return cls(seqnames, starts, ends, strands)

        keys: List[str] = []
        for rng in annotated:
            keys.extend(key for key in rng.metadata if key not in keys)
        metadata = {key: [rng.metadata.get(key) for rng in annotated] for key in keys}
        return cls(seqnames, starts, ends, strands, names=[rng.name for rng in annotated], metadata=metadata)

    @property
    def seqnames(self) -> np.ndarray:
        return self._seqnames

    @property
    def strands(self) -> np.ndarray:
        """Strand codes (1, -1, 0)."""
        return self._strands

    def seqlevels(self) -> List[str]:
        """Distinct sequence names in order of first appearance."""
        return list(dict.fromkeys(self._seqnames.tolist()))

    def _scalar(self, i: int) -> GenomicRange:
        seqname = self._seqnames[i]
        start, end = int(self._starts[i]), int(self._ends[i])
        strand = Strand.from_code(self._strands[i])
        if self._names is None and not self._metadata:
            return GenomicRange(seqname, start, end, strand)
        return AnnotatedRange(
            seqname, start, end, strand,
            name=None if self._names is None else self._names[i],
            metadata={key: values[i] for key, values in self._metadata.items()},
        )

    def __iter__(self) -> Iterator[GenomicRange]:
        for i in range(len(self)):
            yield self._scalar(i)

    def _parts(self) -> Dict[str, Any]:
        return {
            "seqnames": self._seqnames,
            "starts": self._starts,
            "ends": self._ends,
            "strands": self._strands,
            "names": self._names,
            "metadata": self._metadata,
        }

    def order(self) -> np.ndarray:
        """Stable permutation sorting by seqname (first appearance), start, end, then strand."""
        levels = {name: rank for rank, name in enumerate(self.seqlevels())}
        seq_rank = np.array([levels[name] for name in self._seqnames], dtype=np.int64)
        return np.lexsort((self._strands, self._ends, self._starts, seq_rank))

    def intervals(self) -> IntervalSet:
        """Coordinates only, as an `IntervalSet` in the same order."""
        return IntervalSet(self._starts, self._ends)

    def unstrand(self) -> GenomicRangeSet:
        """Copy with every strand set to unstranded."""
        parts = self._parts()
        parts["strands"] = None
        return GenomicRangeSet(**parts)
