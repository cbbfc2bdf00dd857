"""
Grouped ranges (e.g. exons grouped by transcript).

A group collection is a plain mapping from group key to an ordered list of
`AnnotatedRange`. The helpers here are ordinary higher-order functions over
that mapping.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Sequence, TypeVar, Union

from genome_ranges.structures.genomic_range import AnnotatedRange, GenomicRange
from genome_ranges.structures.genomic_range_set import GenomicRangeSet
from genome_ranges.structures.interval import Strand

RangeGroups = Dict[Hashable, List[AnnotatedRange]]

R = TypeVar("R")


def _annotate(rng: GenomicRange) -> AnnotatedRange:
    if isinstance(rng, AnnotatedRange):
        return rng
    return AnnotatedRange.from_range(rng)


def group_by(
    ranges: Iterable[GenomicRange],
    key: Union[str, Callable[[AnnotatedRange], Hashable]],
) -> RangeGroups:
    """
    Group ranges by a metadata key, the range name, or a key function.

    Parameters
    ----------
    ranges : Iterable[GenomicRange]
        Ranges to group; plain ranges are wrapped as `AnnotatedRange`.
    key : str or callable
        `"name"` groups by `AnnotatedRange.name`; any other string groups by
        that metadata key; a callable is applied to each range.

    Returns
    -------
    RangeGroups
        Groups in order of first appearance; ranges keep their input order.

    Raises
    ------
    KeyError
        If a range is missing the requested metadata key.
    """
    groups: RangeGroups = {}
    for rng in ranges:
        annotated = _annotate(rng)
        if callable(key):
            group_key = key(annotated)
        elif key == "name":
            group_key = annotated.name
        else:
            group_key = annotated.metadata[key]
        groups.setdefault(group_key, []).append(annotated)
    return groups


def apply_groups(groups: Mapping[Hashable, Sequence[AnnotatedRange]],
                 func: Callable[[Sequence[AnnotatedRange]], R]) -> Dict[Hashable, R]:
    """Apply `func` to every group, keeping the group keys."""
    return {group_key: func(members) for group_key, members in groups.items()}


def map_groups(groups: Mapping[Hashable, Sequence[AnnotatedRange]],
               func: Callable[[AnnotatedRange], GenomicRange]) -> RangeGroups:
    """Apply `func` to every range of every group."""
    return {group_key: [_annotate(func(rng)) for rng in members] for group_key, members in groups.items()}


def flatten_groups(groups: Mapping[Hashable, Sequence[AnnotatedRange]], group_field: str = "group") -> List[AnnotatedRange]:
    """
    Concatenate all groups into one list, recording the group key in metadata.

    Parameters
    ----------
    groups : Mapping
        Group key -> ranges.
    group_field : str, optional
        Metadata key receiving the group key, by default "group".
    """
    flat: List[AnnotatedRange] = []
    for group_key, members in groups.items():
        for rng in members:
            flat.append(AnnotatedRange(
                rng.seqname, rng.start, rng.end, rng.strand,
                name=rng.name,
                metadata={**rng.metadata, group_field: group_key},
            ))
    return flat


def groups_to_range_set(groups: Mapping[Hashable, Sequence[AnnotatedRange]], group_field: str = "group") -> GenomicRangeSet:
    """Flatten groups into a `GenomicRangeSet` with a group metadata column."""
    return GenomicRangeSet.from_ranges(flatten_groups(groups, group_field))


def group_strand(members: Sequence[GenomicRange]) -> Strand:
    """
    Strand of a group: the strand of its stranded members, or unstranded if
    every member is unstranded. Unstranded members take the group's strand.

    Raises
    ------
    ValueError
        If the group mixes sequence names or forward/reverse strands.
    """
    seqnames = {rng.seqname for rng in members}
    if len(seqnames) > 1:
        raise ValueError(f"Group spans several sequences: {sorted(seqnames)}")
    stranded = {rng.strand for rng in members} - {Strand.UNSTRANDED}
    if len(stranded) > 1:
        raise ValueError("Group mixes forward and reverse strands.")
    return stranded.pop() if stranded else Strand.UNSTRANDED


def order_five_to_three(members: Sequence[GenomicRange]) -> List[GenomicRange]:
    """
    Order a group's ranges 5'->3' on the group's strand (see `group_strand`).

    Reverse-strand groups are ordered by decreasing `(start, end)`, everything
    else by increasing `(start, end)`. Unstranded members are placed by
    coordinate like any other member.

    Raises
    ------
    ValueError
        If the group mixes sequence names or forward/reverse strands.
    """
    if not members:
        return []
    reverse = group_strand(members) is Strand.REVERSE
    return sorted(members, key=lambda rng: (rng.start, rng.end), reverse=reverse)


def group_lengths(groups: Mapping[Hashable, Sequence[Any]]) -> Dict[Hashable, int]:
    """Number of ranges per group."""
    return {group_key: len(members) for group_key, members in groups.items()}
