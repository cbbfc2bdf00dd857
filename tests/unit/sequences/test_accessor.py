"""
Unit tests for strand-aware sequence access over ranges.
"""
import logging

import pytest

from genome_ranges.config import SequenceAccessConfig
from genome_ranges.errors import OutOfBounds, UnknownSequence
from genome_ranges.sequences.accessor import (
    AccessPolicy,
    extract_grouped_seqs,
    get_seq,
    get_seqs,
    validate_ranges,
)
from genome_ranges.sequences.store import CachedSequenceStore, InMemorySequenceStore, MappingBackend
from genome_ranges.structures import GenomicRange


@pytest.fixture
def store():
    return InMemorySequenceStore({"s": "ACGTACGTAA", "chr1": "AAACCCGGGTTT"})


@pytest.mark.parametrize("strand, expected", [
    ("+", "ACG"),
    ("-", "CGT"),
    ("*", "ACG"),
])
def test_get_seq_follows_strand(store, strand, expected):
    assert get_seq(store, GenomicRange("s", 1, 3, strand)) == expected


def test_get_seq_rna_reverse_strand():
    rna = InMemorySequenceStore({"r": "AUGC"})
    assert get_seq(rna, GenomicRange("r", 1, 4, "-"), molecule="RNA") == "GCAU"


def test_get_seq_errors(store):
    with pytest.raises(OutOfBounds):
        get_seq(store, GenomicRange("s", 8, 11, "+"))
    with pytest.raises(UnknownSequence):
        get_seq(store, GenomicRange("chrX", 1, 2, "+"))


RANGES = [
    GenomicRange("s", 1, 3, "+"),
    GenomicRange("s", 8, 11, "+"),
    GenomicRange("s", 5, 6, "-"),
]


def test_get_seqs_fail_fast_raises(store):
    with pytest.raises(OutOfBounds):
        get_seqs(store, RANGES)


def test_get_seqs_collect_keeps_going(store, caplog):
    with caplog.at_level(logging.WARNING, logger="genome_ranges.sequences.accessor"):
        batch = get_seqs(store, RANGES, policy="collect")
    assert batch.sequences == ["ACG", None, "GT"]
    assert list(batch.errors) == [1]
    assert isinstance(batch.errors[1], OutOfBounds)
    assert not batch.ok
    assert batch.successful() == {0: "ACG", 2: "GT"}
    assert "Range 1" in caplog.text


def test_get_seqs_policy_from_config_and_progress(store):
    config = SequenceAccessConfig(policy="collect", show_progress=True)
    batch = get_seqs(store, RANGES, config=config)
    assert len(batch) == 3
    batch = get_seqs(store, RANGES[:1], policy=AccessPolicy.FAIL_FAST, config=config)
    assert batch.ok


def test_get_seqs_reuses_one_session_on_cached_store():
    backend = MappingBackend({"s": "ACGTACGTAA", "t": "GGGG"})
    cached = CachedSequenceStore(backend)
    ranges = [GenomicRange("s", 1, 2, "+"), GenomicRange("t", 1, 2, "-"), GenomicRange("s", 3, 4, "+")]
    batch = get_seqs(cached, ranges)
    assert batch.sequences == ["AC", "CC", "GT"]
    assert backend.open_count == 1
    assert backend.read_count == 2


def test_validate_ranges(store):
    errors = validate_ranges(store, [
        GenomicRange("s", 1, 10, "+"),
        GenomicRange("chrX", 1, 2, "+"),
        GenomicRange("s", 0, 4, "+"),
    ])
    assert sorted(errors) == [1, 2]
    assert isinstance(errors[1], UnknownSequence)
    assert isinstance(errors[2], OutOfBounds)


def test_extract_grouped_seqs_orders_members_five_to_three(store):
    groups = {
        "t1": [GenomicRange("chr1", 7, 9, "+"), GenomicRange("chr1", 1, 3, "+")],
        "t2": [GenomicRange("chr1", 1, 3, "-"), GenomicRange("chr1", 7, 9, "-")],
    }
    assert extract_grouped_seqs(store, groups) == {"t1": "AAAGGG", "t2": "CCCTTT"}


def test_extract_grouped_seqs_rejects_mixed_strands(store):
    groups = {"bad": [GenomicRange("chr1", 1, 3, "+"), GenomicRange("chr1", 7, 9, "-")]}
    with pytest.raises(ValueError):
        extract_grouped_seqs(store, groups)


def test_extract_grouped_seqs_reads_unstranded_members_on_group_strand():
    store = InMemorySequenceStore({"c": "AAAACCCCGGGGTTTT"})
    groups = {
        "minus": [GenomicRange("c", 1, 4, "-"), GenomicRange("c", 9, 12, "*")],
        "plus": [GenomicRange("c", 9, 12, "*"), GenomicRange("c", 1, 4, "+")],
        "none": [GenomicRange("c", 5, 8, "*")],
    }
    assert extract_grouped_seqs(store, groups) == {"minus": "CCCCTTTT", "plus": "AAAAGGGG", "none": "CCCC"}
