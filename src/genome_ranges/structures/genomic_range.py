from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from genome_ranges.errors import SequenceNameMismatch
from genome_ranges.structures.interval import Interval, Strand, check_width

_RANGE_REGEX = re.compile(r"^(?P<seqname>[^:]+):(?P<start>-?\d+)-(?P<end>-?\d+)(?::(?P<strand>[+\-*.]))?$")


def strands_compatible(strand_a: Strand, strand_b: Strand) -> bool:
    """
    Return True if two strands may interact.

    "+" and "-" are incompatible; "*" is compatible with anything.
    """
    if strand_a is Strand.UNSTRANDED or strand_b is Strand.UNSTRANDED:
        return True
    return strand_a is strand_b


@dataclass(frozen=True, slots=True)
class GenomicRange:
    """
    A 1-based inclusive range on a named sequence, with a strand.

    Parameters
    ----------
    seqname : str
        Key of the sequence in a reference (e.g. "chr1").
    start : int
        First covered position.
    end : int
        Last covered position (`end >= start - 1`).
    strand : Strand
        Orientation; symbols accepted by `Strand.parse` are coerced.
    """
    seqname: str
    start: int
    end: int
    strand: Strand = Strand.UNSTRANDED

    def __post_init__(self) -> None:
        object.__setattr__(self, "seqname", str(self.seqname))
        object.__setattr__(self, "start", int(self.start))
        object.__setattr__(self, "end", int(self.end))
        object.__setattr__(self, "strand", Strand.parse(self.strand))
        check_width(self.start, self.end)

    @classmethod
    def from_str(cls, text: str) -> GenomicRange:
        """Parse `"chr1:100-200"` or `"chr1:100-200:-"`."""
        match = _RANGE_REGEX.fullmatch(text.strip())
        if match is None:
            raise ValueError(f"Invalid range string: {text!r}")
        return cls(
            match["seqname"],
            int(match["start"]),
            int(match["end"]),
            match["strand"] or Strand.UNSTRANDED,
        )

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    @property
    def interval(self) -> Interval:
        """The coordinates without sequence name and strand."""
        return Interval(self.start, self.end)

    @property
    def is_reverse(self) -> bool:
        return self.strand is Strand.REVERSE

    def as_tuple(self) -> tuple[str, int, int, str]:
        return self.seqname, self.start, self.end, str(self.strand)

    def overlaps(self, other: GenomicRange, strict: bool = False, ignore_strand: bool = True) -> bool:
        """
        Inclusive-coordinate overlap test between two genomic ranges.

        Parameters
        ----------
        other : GenomicRange
            Range to test against.
        strict : bool, optional
            If True, ranges on different sequences raise `SequenceNameMismatch`
            instead of being reported as non-overlapping, by default False.
        ignore_strand : bool, optional
            If False, "+" and "-" ranges never overlap, by default True.
        """
        if self.seqname != other.seqname:
            if strict:
                raise SequenceNameMismatch(self.seqname, other.seqname)
            return False
        if not ignore_strand and not strands_compatible(self.strand, other.strand):
            return False
        return other.start <= self.end and other.end >= self.start

    def intersection(self, other: GenomicRange) -> Optional[GenomicRange]:
        """
        The shared stretch of two ranges on the same sequence, or None when disjoint.

        Raises
        ------
        SequenceNameMismatch
            If the ranges are on different sequences.
        """
        if self.seqname != other.seqname:
            raise SequenceNameMismatch(self.seqname, other.seqname)
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if end < start:
            return None
        strand = self.strand if self.strand is other.strand else Strand.UNSTRANDED
        return GenomicRange(self.seqname, start, end, strand)

    def span_with(self, other: GenomicRange) -> GenomicRange:
        """
        The smallest range covering both ranges.

        Raises
        ------
        SequenceNameMismatch
            If the ranges are on different sequences.
        """
        if self.seqname != other.seqname:
            raise SequenceNameMismatch(self.seqname, other.seqname)
        strand = self.strand if self.strand is other.strand else Strand.UNSTRANDED
        return GenomicRange(self.seqname, min(self.start, other.start), max(self.end, other.end), strand)

    def __str__(self) -> str:
        return f"{self.seqname}:{self.start}-{self.end}:{self.strand}"


@dataclass(frozen=True, slots=True)
class AnnotatedRange(GenomicRange):
    """
    A `GenomicRange` carrying an optional name and free-form metadata.

    Metadata is compared as a mapping (insertion order is irrelevant) and is
    left out of the hash so annotated ranges stay usable as dict keys.
    """
    name: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        GenomicRange.__post_init__(self)
        object.__setattr__(self, "metadata", dict(self.metadata))

    @classmethod
    def from_range(cls, rng: GenomicRange, name: Optional[str] = None, **metadata: Any) -> AnnotatedRange:
        """Attach a name and metadata to an existing range."""
        return cls(rng.seqname, rng.start, rng.end, rng.strand, name=name, metadata=metadata)

    def to_range(self) -> GenomicRange:
        """Drop name and metadata."""
        return GenomicRange(self.seqname, self.start, self.end, self.strand)
