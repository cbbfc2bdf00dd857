"""
Unit tests for `GenomicRange` and `AnnotatedRange`.

Covers parsing, pairwise overlap / intersection / span with sequence name
checks, strand compatibility and the metadata equality rules of annotated
ranges.
"""
import pytest
from dataclasses import FrozenInstanceError

from genome_ranges.errors import InvalidWidth, SequenceNameMismatch
from genome_ranges.structures.genomic_range import AnnotatedRange, GenomicRange, strands_compatible
from genome_ranges.structures.interval import Interval, Strand


def test_construction_coerces_strand_symbols():
    rng = GenomicRange("chr1", 100, 200, "-")
    assert rng.strand is Strand.REVERSE
    assert rng.is_reverse
    assert rng.width == 101
    assert rng.interval == Interval(100, 200)
    assert rng.as_tuple() == ("chr1", 100, 200, "-")


def test_negative_width_raises():
    with pytest.raises(InvalidWidth):
        GenomicRange("chr1", 10, 5)


@pytest.mark.parametrize("text, expected", [
    ("chr1:100-200", GenomicRange("chr1", 100, 200)),
    ("chr1:100-200:+", GenomicRange("chr1", 100, 200, "+")),
    ("chrX:5-4:-", GenomicRange("chrX", 5, 4, "-")),
])
def test_from_str_parses_ranges(text, expected):
    assert GenomicRange.from_str(text) == expected


def test_from_str_rejects_garbage():
    with pytest.raises(ValueError):
        GenomicRange.from_str("chr1-100-200")


def test_str_round_trips_through_from_str():
    rng = GenomicRange("chr2", 7, 9, "+")
    assert str(rng) == "chr2:7-9:+"
    assert GenomicRange.from_str(str(rng)) == rng


def test_equality_includes_seqname_and_strand():
    assert GenomicRange("chr1", 1, 5, "+") == GenomicRange("chr1", 1, 5, "+")
    assert GenomicRange("chr1", 1, 5, "+") != GenomicRange("chr1", 1, 5, "-")
    assert GenomicRange("chr1", 1, 5) != GenomicRange("chr2", 1, 5)


def test_genomic_range_is_frozen():
    rng = GenomicRange("chr1", 1, 5)
    with pytest.raises(FrozenInstanceError):
        rng.start = 3


def test_strands_compatible():
    assert strands_compatible(Strand.FORWARD, Strand.FORWARD)
    assert strands_compatible(Strand.FORWARD, Strand.UNSTRANDED)
    assert strands_compatible(Strand.UNSTRANDED, Strand.REVERSE)
    assert not strands_compatible(Strand.FORWARD, Strand.REVERSE)


def test_overlaps_across_sequences_is_false_unless_strict():
    """
    Ranges on different sequences never overlap; `strict=True` reports the mismatch.
    """
    a = GenomicRange("chr1", 1, 10)
    b = GenomicRange("chr2", 1, 10)
    assert not a.overlaps(b)
    with pytest.raises(SequenceNameMismatch):
        a.overlaps(b, strict=True)


def test_overlaps_respects_strand_when_asked():
    a = GenomicRange("chr1", 1, 10, "+")
    b = GenomicRange("chr1", 5, 15, "-")
    c = GenomicRange("chr1", 5, 15, "*")
    assert a.overlaps(b)
    assert not a.overlaps(b, ignore_strand=False)
    assert a.overlaps(c, ignore_strand=False)


def test_intersection_and_span():
    a = GenomicRange("chr1", 1, 10, "+")
    b = GenomicRange("chr1", 5, 15, "+")
    assert a.intersection(b) == GenomicRange("chr1", 5, 10, "+")
    assert a.span_with(b) == GenomicRange("chr1", 1, 15, "+")
    assert a.intersection(GenomicRange("chr1", 20, 30)) is None


def test_intersection_and_span_mixed_strands_are_unstranded():
    a = GenomicRange("chr1", 1, 10, "+")
    b = GenomicRange("chr1", 5, 15, "-")
    assert a.intersection(b).strand is Strand.UNSTRANDED
    assert a.span_with(b).strand is Strand.UNSTRANDED


def test_pairwise_ops_raise_on_sequence_mismatch():
    a = GenomicRange("chr1", 1, 10)
    b = GenomicRange("chr2", 1, 10)
    with pytest.raises(SequenceNameMismatch):
        a.intersection(b)
    with pytest.raises(SequenceNameMismatch):
        a.span_with(b)


def test_annotated_range_metadata_equality_ignores_order():
    """
    Metadata compares as a mapping; the hash ignores metadata entirely.
    """
    a = AnnotatedRange("chr1", 1, 10, "+", name="exon1", metadata={"gene": "g1", "rank": 1})
    b = AnnotatedRange("chr1", 1, 10, "+", name="exon1", metadata={"rank": 1, "gene": "g1"})
    assert a == b
    assert hash(a) == hash(b)
    assert a != AnnotatedRange("chr1", 1, 10, "+", name="exon1", metadata={"rank": 2, "gene": "g1"})


def test_annotated_range_round_trip():
    rng = GenomicRange("chr1", 1, 10, "-")
    annotated = AnnotatedRange.from_range(rng, name="tx1", gene="g1")
    assert annotated.name == "tx1"
    assert annotated.metadata == {"gene": "g1"}
    assert annotated.to_range() == rng
    assert str(annotated) == "chr1:1-10:-"


def test_annotated_range_validates_width():
    with pytest.raises(InvalidWidth):
        AnnotatedRange("chr1", 10, 2, name="bad")
