"""
Unit tests for sequence stores, backends and cached sessions.
"""
import pytest

from genome_ranges.errors import InvalidSymbol, OutOfBounds, UnknownSequence
from genome_ranges.sequences.store import (
    CachedSequenceStore,
    InMemorySequenceStore,
    MappingBackend,
    NpySequenceBackend,
    write_npy_sequences,
)

SEQUENCES = {"chr1": "ACGTACGTAA", "chr2": "GGGCCC"}


@pytest.fixture
def backend():
    return MappingBackend(SEQUENCES)


@pytest.fixture
def cached(backend):
    return CachedSequenceStore(backend)


class TestInMemorySequenceStore:
    def test_mapping_interface(self):
        store = InMemorySequenceStore(SEQUENCES)
        assert store.names() == ["chr1", "chr2"]
        assert "chr1" in store and "chrX" not in store
        assert len(store) == 2
        assert store.seqlengths() == {"chr1": 10, "chr2": 6}

    def test_fetch_is_one_based_inclusive(self):
        store = InMemorySequenceStore(SEQUENCES)
        assert store.fetch("chr1", 1, 3) == "ACG"
        assert store.fetch("chr1", 10, 10) == "A"
        assert store.fetch("chr1", 4, 3) == ""

    @pytest.mark.parametrize("start, end", [(0, 3), (8, 11), (-2, 1)])
    def test_fetch_out_of_bounds(self, start, end):
        store = InMemorySequenceStore(SEQUENCES)
        with pytest.raises(OutOfBounds) as excinfo:
            store.fetch("chr1", start, end)
        assert excinfo.value.seq_len == 10

    def test_unknown_sequence(self):
        store = InMemorySequenceStore(SEQUENCES)
        with pytest.raises(UnknownSequence):
            store["chrX"]
        with pytest.raises(KeyError):
            store.fetch("chrX", 1, 2)

    def test_molecule_validation(self):
        with pytest.raises(InvalidSymbol):
            InMemorySequenceStore({"r": "ACGU"}, molecule="DNA")
        assert InMemorySequenceStore({"r": "ACGU"}, molecule="RNA")["r"] == "ACGU"


class TestCachedSequenceStore:
    def test_misses_outside_a_session_open_their_own_handle(self, cached, backend):
        assert cached["chr1"] == "ACGTACGTAA"
        assert cached["chr1"] == "ACGTACGTAA"
        assert backend.open_count == 1
        assert backend.read_count == 1

        cached.fetch("chr2", 1, 3)
        assert backend.open_count == 2
        assert not backend.is_open

    def test_session_shares_one_handle(self, cached, backend):
        with cached.session() as store:
            assert store is cached
            assert cached.in_session
            cached.fetch("chr1", 1, 3)
            cached.fetch("chr2", 1, 3)
            with cached.session():
                cached.fetch("chr1", 2, 4)
            assert backend.is_open
        assert backend.open_count == 1
        assert backend.read_count == 2
        assert not backend.is_open
        assert not cached.in_session

    def test_session_releases_handle_on_error(self, cached, backend):
        with pytest.raises(UnknownSequence):
            with cached.session():
                cached["chrX"]
        assert not backend.is_open
        assert not cached.in_session

    def test_invalidate(self, cached, backend):
        cached["chr1"]
        cached["chr2"]
        assert cached.cached_names() == ["chr1", "chr2"]

        cached.invalidate("chr1")
        assert cached.cached_names() == ["chr2"]
        cached["chr1"]
        assert backend.read_count == 3

        cached.invalidate()
        assert cached.cached_names() == []

    def test_names_do_not_open_the_backend(self, cached, backend):
        assert cached.names() == ["chr1", "chr2"]
        assert backend.open_count == 0


class TestNpySequenceBackend:
    def test_round_trip_through_directory(self, tmp_path):
        directory = write_npy_sequences(tmp_path / "seqs", SEQUENCES)
        store = CachedSequenceStore(NpySequenceBackend(directory))
        assert store.names() == ["chr1", "chr2"]
        with store.session():
            assert store.fetch("chr1", 2, 4) == "CGT"
            assert store["chr2"] == "GGGCCC"
        assert store.length("chr1") == 10

    def test_unknown_name(self, tmp_path):
        directory = write_npy_sequences(tmp_path, {"chr1": "ACGT"})
        store = CachedSequenceStore(NpySequenceBackend(directory))
        with pytest.raises(UnknownSequence):
            store["chr9"]

    def test_close_unmaps_and_closes_files(self, tmp_path):
        backend = NpySequenceBackend(write_npy_sequences(tmp_path, SEQUENCES))
        handle = backend.open()
        assert backend.read(handle, "chr1") == "ACGTACGTAA"
        assert backend.read(handle, "chr2") == "GGGCCC"
        mapped = list(handle.values())

        backend.close(handle)
        assert handle == {}
        assert all(entry.buffer.closed and entry.file.closed for entry in mapped)

    def test_session_exit_releases_mapped_files(self, tmp_path):
        backend = NpySequenceBackend(write_npy_sequences(tmp_path, {"chr1": "ACGT", "empty": ""}))
        store = CachedSequenceStore(backend)
        with store.session():
            assert store["empty"] == ""
            mapped = list(store._handle.values())
        assert mapped and all(entry.buffer.closed for entry in mapped)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            NpySequenceBackend(tmp_path / "absent")

    def test_names_with_separators_are_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            write_npy_sequences(tmp_path, {"a/b": "ACGT"})
