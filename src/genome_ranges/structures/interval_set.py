from __future__ import annotations
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Union

import numpy as np

from genome_ranges.errors import InvalidWidth
from genome_ranges.structures.interval import Interval

IndexLike = Union[int, slice, Sequence[int], Sequence[bool], np.ndarray]


def _as_int_array(values: Any) -> np.ndarray:
    return np.array(values, dtype=np.int64).ravel()


def _readonly(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def _object_column(values: Any, n: int, label: str) -> np.ndarray:
    """Copy `values` into a read-only object array of length `n`."""
    values_list = list(values)
    if len(values_list) != n:
        raise ValueError(f"Expected {n} values for {label}, found {len(values_list)}")
    column = np.empty(n, dtype=object)
    for i, value in enumerate(values_list):
        column[i] = value
    return _readonly(column)


class IntervalSet:
    """
    Ordered collection of 1-based inclusive intervals backed by numpy arrays.

    The store keeps the caller's order: nothing is sorted or merged unless a
    normalising operator (see `genome_ranges.algebra`) is applied. Optional
    per-element `names` and metadata columns travel with the intervals
    through indexing.

    Parameters
    ----------
    starts : array-like of int
        Start coordinates.
    ends : array-like of int
        End coordinates, same length as `starts`, with `end >= start - 1`.
    names : sequence of str, optional
        One name per interval.
    metadata : Mapping[str, array-like], optional
        Metadata columns, each with one value per interval.
    """
    __slots__ = ("_starts", "_ends", "_names", "_metadata")

    def __init__(
        self,
        starts: Any = (),
        ends: Any = (),
        names: Optional[Sequence[Optional[str]]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ):
        starts_arr = _as_int_array(starts)
        ends_arr = _as_int_array(ends)
        if starts_arr.shape != ends_arr.shape:
            raise ValueError(f"starts and ends differ in length ({starts_arr.size} vs {ends_arr.size})")

        bad = np.flatnonzero(ends_arr < starts_arr - 1)
        if bad.size:
            i = int(bad[0])
            raise InvalidWidth(f"Interval {i} has negative width: [{starts_arr[i]}, {ends_arr[i]}]")

        n = starts_arr.size
        self._starts = _readonly(starts_arr)
        self._ends = _readonly(ends_arr)

        self._names: Optional[np.ndarray] = None
        if names is not None:
            self._names = _object_column(names, n, "names")

        self._metadata: Dict[str, np.ndarray] = {
            str(key): _object_column(values, n, f"metadata column {key!r}")
            for key, values in (metadata or {}).items()
        }

    # ---- Constructors -------------------------------------------------------

    @classmethod
    def from_arrays(
        cls,
        starts: Any,
        ends: Any = None,
        widths: Any = None,
        names: Optional[Sequence[Optional[str]]] = None,
        **metadata: Any,
    ) -> IntervalSet:
        """
        Build a set from parallel start/end or start/width arrays.

        Exactly one of `ends` and `widths` must be given.
        """
        starts_arr = _as_int_array(starts)
        ends_arr = _resolve_ends(starts_arr, ends, widths)
        return cls(starts_arr, ends_arr, names=names, metadata=metadata or None)

    @classmethod
    def from_intervals(cls, intervals: Iterable[Union[Interval, Sequence[int]]]) -> IntervalSet:
        """Build a set from `Interval` objects or `(start, end)` tuples."""
        starts, ends = [], []
        for item in intervals:
            if isinstance(item, Interval):
                starts.append(item.start)
                ends.append(item.end)
            else:
                start, end = item
                starts.append(start)
                ends.append(end)
        return cls(starts, ends)

    @classmethod
    def empty(cls) -> IntervalSet:
        return cls()

    # ---- Accessors ----------------------------------------------------------

    @property
    def starts(self) -> np.ndarray:
        return self._starts

    @property
    def ends(self) -> np.ndarray:
        return self._ends

    @property
    def widths(self) -> np.ndarray:
        return self._ends - self._starts + 1

    @property
    def names(self) -> Optional[np.ndarray]:
        return self._names

    @property
    def metadata(self) -> Dict[str, np.ndarray]:
        """Metadata columns (a shallow copy of the mapping)."""
        return dict(self._metadata)

    def __len__(self) -> int:
        return int(self._starts.size)

    def _scalar(self, i: int) -> Any:
        return Interval(int(self._starts[i]), int(self._ends[i]))

    def __iter__(self) -> Iterator[Any]:
        for i in range(len(self)):
            yield self._scalar(i)

    def _parts(self) -> Dict[str, Any]:
        """Constructor keyword arguments describing this collection."""
        return {
            "starts": self._starts,
            "ends": self._ends,
            "names": self._names,
            "metadata": self._metadata,
        }

    def _take(self, index: Any) -> Any:
        parts = {}
        for key, value in self._parts().items():
            if value is None:
                parts[key] = None
            elif isinstance(value, dict):
                parts[key] = {col: values[index] for col, values in value.items()}
            else:
                parts[key] = value[index]
        return type(self)(**parts)

    def __getitem__(self, index: IndexLike) -> Any:
        if isinstance(index, (int, np.integer)):
            n = len(self)
            i = int(index)
            if i < -n or i >= n:
                raise IndexError(f"Index {i} out of range for {n} intervals")
            return self._scalar(i % n)
        if isinstance(index, slice):
            return self._take(index)
        index = np.asarray(index)
        if index.dtype != bool:
            index = index.astype(np.int64)
        return self._take(index)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        mine, theirs = self._parts(), other._parts()
        for key, value in mine.items():
            other_value = theirs[key]
            if isinstance(value, dict):
                if value.keys() != other_value.keys():
                    return False
                if not all(np.array_equal(value[col], other_value[col]) for col in value):
                    return False
            elif value is None or other_value is None:
                if value is not other_value:
                    return False
            elif not np.array_equal(value, other_value):
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        shown = ", ".join(str(item) for item in list(self)[:5])
        more = ", ..." if len(self) > 5 else ""
        return f"{type(self).__name__}(n={len(self)}: {shown}{more})"

    # ---- Derived collections ------------------------------------------------

    def order(self) -> np.ndarray:
        """Stable permutation sorting by start, then end."""
        return np.lexsort((self._ends, self._starts))

    def sort(self) -> IntervalSet:
        """Return a copy sorted by start, then end."""
        return self._take(self.order())

    def is_sorted(self) -> bool:
        return bool(np.array_equal(self.order(), np.arange(len(self))))

    def with_names(self, names: Optional[Sequence[Optional[str]]]) -> IntervalSet:
        parts = self._parts()
        parts["names"] = names
        return type(self)(**parts)

    def with_metadata(self, **columns: Any) -> IntervalSet:
        """Return a copy with metadata columns added or replaced."""
        parts = self._parts()
        parts["metadata"] = {**self._metadata, **columns}
        return type(self)(**parts)

    def to_intervals(self) -> list:
        return list(self)


def _resolve_ends(starts: np.ndarray, ends: Any, widths: Any) -> np.ndarray:
    if (ends is None) == (widths is None):
        raise ValueError("Provide exactly one of 'ends' or 'widths'.")
    if ends is not None:
        return _as_int_array(ends)

    widths_arr = _as_int_array(widths)
    if widths_arr.shape != starts.shape:
        raise ValueError(f"starts and widths differ in length ({starts.size} vs {widths_arr.size})")
    if np.any(widths_arr < 0):
        raise InvalidWidth("Widths need to be >= 0.")
    return starts + widths_arr - 1
