from genome_ranges.errors import (
    GenomeRangesError,
    InvalidSymbol,
    InvalidWidth,
    OutOfBounds,
    PartialCodon,
    SequenceNameMismatch,
    UnknownSequence,
)
from genome_ranges.structures import (
    AnnotatedRange,
    GenomicRange,
    GenomicRangeSet,
    Interval,
    IntervalSet,
    Strand,
)
from genome_ranges.config import GenomeRangesConfig, SequenceAccessConfig, TranslationConfig, load_config

__version__ = "0.1.0"

__all__ = [
    "GenomeRangesError",
    "InvalidSymbol",
    "InvalidWidth",
    "OutOfBounds",
    "PartialCodon",
    "SequenceNameMismatch",
    "UnknownSequence",
    "AnnotatedRange",
    "GenomicRange",
    "GenomicRangeSet",
    "Interval",
    "IntervalSet",
    "Strand",
    "GenomeRangesConfig",
    "SequenceAccessConfig",
    "TranslationConfig",
    "load_config",
]
