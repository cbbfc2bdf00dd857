from genome_ranges.structures.interval import Interval, Strand
from genome_ranges.structures.genomic_range import AnnotatedRange, GenomicRange
from genome_ranges.structures.interval_set import IntervalSet
from genome_ranges.structures.genomic_range_set import GenomicRangeSet
from genome_ranges.structures.range_groups import (
    RangeGroups,
    apply_groups,
    flatten_groups,
    group_by,
    map_groups,
)

__all__ = [
    "Interval",
    "Strand",
    "GenomicRange",
    "AnnotatedRange",
    "IntervalSet",
    "GenomicRangeSet",
    "RangeGroups",
    "apply_groups",
    "flatten_groups",
    "group_by",
    "map_groups",
]
