"""
Sequence stores: named nucleotide sequences addressed by 1-based ranges.

`InMemorySequenceStore` wraps a plain mapping. `CachedSequenceStore`
materialises sequences lazily from a backend, caches them per name and
scopes access to the backend handle with `session()`.
"""
from __future__ import annotations
import logging
import mmap
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Mapping, NamedTuple, Optional

import numpy as np

from genome_ranges.errors import OutOfBounds, UnknownSequence
from genome_ranges.sequences.tables import Kind, get_nucleotide_tables

logger = logging.getLogger(__name__)

NPY_SUFFIX = ".npy"


class SequenceStore(ABC):
    """Read-only mapping from sequence name to sequence string."""

    @abstractmethod
    def __getitem__(self, name: str) -> str:
        """Full sequence; raises `UnknownSequence` when absent."""

    @abstractmethod
    def names(self) -> List[str]:
        """Available sequence names."""

    def __contains__(self, name: object) -> bool:
        return name in self.names()

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self.names())

    def length(self, name: str) -> int:
        return len(self[name])

    def seqlengths(self) -> Dict[str, int]:
        """Length of every sequence, e.g. for `gaps(..., seqlengths=...)`."""
        return {name: self.length(name) for name in self.names()}

    def fetch(self, name: str, start: int, end: int) -> str:
        """
        Forward-strand slice `[start, end]` (1-based, inclusive).

        Raises
        ------
        UnknownSequence
            If `name` is not in the store.
        OutOfBounds
            If `start < 1` or `end` exceeds the sequence length.
        """
        seq = self[name]
        if start < 1 or end > len(seq):
            raise OutOfBounds(name, start, end, len(seq))
        return seq[start - 1:end]


class InMemorySequenceStore(SequenceStore):
    """
    Store backed by a dict of sequences.

    Parameters
    ----------
    sequences : Mapping[str, str]
        Sequence name -> sequence.
    molecule : {"DNA", "RNA"}, optional
        If given, every sequence is validated against that alphabet.
    """
    def __init__(self, sequences: Mapping[str, str], molecule: Optional[Kind] = None):
        self._sequences = {str(name): str(seq) for name, seq in sequences.items()}
        if molecule is not None:
            tables = get_nucleotide_tables(molecule)
            for seq in self._sequences.values():
                tables.validate(seq)

    def __getitem__(self, name: str) -> str:
        try:
            return self._sequences[name]
        except KeyError:
            raise UnknownSequence(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._sequences

    def names(self) -> List[str]:
        return list(self._sequences)


# -------------------------
# Backends
# -------------------------
class SequenceBackend(ABC):
    """Source of raw sequences, accessed through an explicitly opened handle."""

    @abstractmethod
    def open(self) -> Any:
        """Acquire a handle."""

    @abstractmethod
    def close(self, handle: Any) -> None:
        """Release a handle returned by `open`."""

    @abstractmethod
    def names(self) -> List[str]:
        """Available sequence names (without opening a handle)."""

    @abstractmethod
    def read(self, handle: Any, name: str) -> str:
        """Decode one full sequence; raises `UnknownSequence` when absent."""


class MappingBackend(SequenceBackend):
    """
    Backend over an in-memory mapping.

    `open_count` and `read_count` record handle acquisitions and reads.
    """
    def __init__(self, sequences: Mapping[str, str]):
        self._sequences = dict(sequences)
        self.open_count = 0
        self.read_count = 0
        self.is_open = False

    def open(self) -> Mapping[str, str]:
        self.open_count += 1
        self.is_open = True
        return self._sequences

    def close(self, handle: Any) -> None:
        self.is_open = False

    def names(self) -> List[str]:
        return list(self._sequences)

    def read(self, handle: Mapping[str, str], name: str) -> str:
        self.read_count += 1
        try:
            return handle[name]
        except KeyError:
            raise UnknownSequence(name) from None


class MappedSequence(NamedTuple):
    """An open `.npy` file, its read-only mapping and the data span inside it."""
    file: BinaryIO
    buffer: mmap.mmap
    offset: int
    length: int


def _map_npy(path: Path) -> MappedSequence:
    fh = open(path, "rb")
    try:
        version = np.lib.format.read_magic(fh)
        if version == (1, 0):
            shape, _, dtype = np.lib.format.read_array_header_1_0(fh)
        else:
            shape, _, dtype = np.lib.format.read_array_header_2_0(fh)
        if dtype != np.uint8 or len(shape) != 1:
            raise ValueError(f"{path} must hold a 1-D uint8 array, found {dtype} {shape}")
        offset = fh.tell()
        buffer = mmap.mmap(fh.fileno(), 0, access=mmap.ACCESS_READ)
    except BaseException:
        fh.close()
        raise
    return MappedSequence(fh, buffer, offset, shape[0])


class NpySequenceBackend(SequenceBackend):
    """
    Backend over a directory of `<name>.npy` uint8 arrays (ASCII bytes).

    Files are memory mapped on first read within a handle, so only the bytes
    of the requested sequence are read from disk. `close` unmaps and closes
    every file opened through the handle.
    """
    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise FileNotFoundError(f"Sequence directory not found: {self.directory}")

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}{NPY_SUFFIX}"

    def open(self) -> Dict[str, MappedSequence]:
        return {}

    def close(self, handle: Dict[str, MappedSequence]) -> None:
        for mapped in handle.values():
            mapped.buffer.close()
            mapped.file.close()
        handle.clear()

    def names(self) -> List[str]:
        return sorted(path.stem for path in self.directory.glob(f"*{NPY_SUFFIX}"))

    def read(self, handle: Dict[str, MappedSequence], name: str) -> str:
        if name not in handle:
            path = self._path(name)
            if not path.is_file():
                raise UnknownSequence(name)
            handle[name] = _map_npy(path)
        mapped = handle[name]
        return mapped.buffer[mapped.offset:mapped.offset + mapped.length].decode("ascii")


def write_npy_sequences(directory: str | Path, sequences: Mapping[str, str]) -> Path:
    """
    Write sequences as `<name>.npy` uint8 arrays readable by `NpySequenceBackend`.

    Returns
    -------
    Path
        The directory, created if missing.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    for name, seq in sequences.items():
        if "/" in name or "\\" in name:
            raise ValueError(f"Sequence name cannot contain path separators: {name!r}")
        np.save(directory / f"{name}{NPY_SUFFIX}", np.frombuffer(seq.encode("ascii"), dtype=np.uint8))
    logger.info(f"Wrote {len(sequences)} sequences to {directory}")
    return directory


# -------------------------
# Cached store
# -------------------------
class CachedSequenceStore(SequenceStore):
    """
    Lazily materialised store over a `SequenceBackend`.

    A sequence is read from the backend on first access and cached by name.
    Inside `session()` a single backend handle is shared by all reads;
    outside a session each cache miss opens and releases its own handle.

    Examples
    --------
    >>> store = CachedSequenceStore(MappingBackend({"chr1": "ACGT"}))
    >>> with store.session():
    ...     store.fetch("chr1", 2, 3)
    'CG'
    """
    def __init__(self, backend: SequenceBackend):
        self._backend = backend
        self._cache: Dict[str, str] = {}
        self._handle: Any = None
        self._depth = 0

    @property
    def in_session(self) -> bool:
        return self._depth > 0

    @contextmanager
    def session(self) -> Iterator[CachedSequenceStore]:
        """
        Hold one backend handle for the duration of the block.

        Nested sessions reuse the open handle; it is released when the
        outermost block exits, including on error.
        """
        if self._depth == 0:
            self._handle = self._backend.open()
            logger.debug(f"Opened handle on {type(self._backend).__name__}")
        self._depth += 1
        try:
            yield self
        finally:
            self._depth -= 1
            if self._depth == 0:
                handle, self._handle = self._handle, None
                self._backend.close(handle)
                logger.debug(f"Released handle on {type(self._backend).__name__}")

    def __getitem__(self, name: str) -> str:
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        with self.session():
            seq = self._backend.read(self._handle, name)
        self._cache[name] = seq
        logger.debug(f"Cached sequence {name!r} ({len(seq)} bp)")
        return seq

    def names(self) -> List[str]:
        return self._backend.names()

    def cached_names(self) -> List[str]:
        return list(self._cache)

    def invalidate(self, name: Optional[str] = None) -> None:
        """Drop one cached sequence, or all of them when `name` is None."""
        if name is None:
            self._cache.clear()
        else:
            self._cache.pop(name, None)
