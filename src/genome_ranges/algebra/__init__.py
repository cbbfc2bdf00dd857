from genome_ranges.algebra.set_ops import (
    as_range_collection,
    coverage,
    disjoin,
    gaps,
    intersect,
    range_of,
    reduce,
    setdiff,
    union,
)
from genome_ranges.algebra.overlaps import (
    Hits,
    count_overlaps,
    distance,
    distance_to_nearest,
    find_overlaps,
    nearest,
    overlaps_any,
    subset_by_overlaps,
)
from genome_ranges.algebra.directional import flank, promoters, resize, shift, trim

__all__ = [
    "as_range_collection",
    "coverage",
    "disjoin",
    "gaps",
    "intersect",
    "range_of",
    "reduce",
    "setdiff",
    "union",
    "Hits",
    "count_overlaps",
    "distance",
    "distance_to_nearest",
    "find_overlaps",
    "nearest",
    "overlaps_any",
    "subset_by_overlaps",
    "flank",
    "promoters",
    "resize",
    "shift",
    "trim",
]
