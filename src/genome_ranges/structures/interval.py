from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from numbers import Integral
from typing import Any

from genome_ranges.errors import InvalidWidth


class Strand(Enum):
    """
    Orientation of a genomic feature.

    FORWARD    : "+", read 5'->3' along increasing coordinates.
    REVERSE    : "-", read 5'->3' along decreasing coordinates.
    UNSTRANDED : "*", no orientation; treated as forward by directional operators.
    """
    FORWARD = "+"
    REVERSE = "-"
    UNSTRANDED = "*"

    def __str__(self) -> str:
        return self.value

    @property
    def code(self) -> int:
        """Integer code used in array-backed collections (1, -1, 0)."""
        match self:
            case Strand.FORWARD:
                return 1
            case Strand.REVERSE:
                return -1
            case Strand.UNSTRANDED:
                return 0

    @classmethod
    def from_code(cls, code: int) -> Strand:
        match int(code):
            case 1:
                return cls.FORWARD
            case -1:
                return cls.REVERSE
            case 0:
                return cls.UNSTRANDED
            case _:
                raise ValueError(f"Invalid strand code: {code!r}")

    @classmethod
    def parse(cls, value: Any) -> Strand:
        """
        Coerce a strand symbol into a `Strand`.

        Parameters
        ----------
        value : Any
            A `Strand`, one of "+", "-", "*", ".", the integers 1, -1, 0, or None.

        Returns
        -------
        Strand
            The matching member.

        Raises
        ------
        ValueError
            If `value` is not a recognised strand symbol.
        """
        if isinstance(value, Strand):
            return value
        if value is None:
            return cls.UNSTRANDED
        if isinstance(value, str):
            match value:
                case "+":
                    return cls.FORWARD
                case "-":
                    return cls.REVERSE
                case "*" | ".":
                    return cls.UNSTRANDED
                case _:
                    raise ValueError(f"Strand needs to be one of '+', '-', '*', found {value!r}")
        if isinstance(value, Integral) and not isinstance(value, bool):
            return cls.from_code(value)

        raise ValueError(f"Strand needs to be one of '+', '-', '*', found {value!r}")


def check_width(start: int, end: int) -> None:
    """Raise `InvalidWidth` unless `end >= start - 1`."""
    if end < start - 1:
        raise InvalidWidth(f"end ({end}) < start - 1 ({start - 1}); width would be {end - start + 1}")


@dataclass(frozen=True, slots=True)
class Interval:
    """
    Immutable 1-based, inclusive integer range `[start, end]`.

    Parameters
    ----------
    start : int
        First covered position.
    end : int
        Last covered position. `end == start - 1` encodes a zero-width range
        positioned just before `start`.

    Notes
    -----
    - `width` is `end - start + 1`.
    - Equality and hashing use `(start, end)`.
    """
    start: int
    end: int

    def __post_init__(self) -> None:
        # numpy integers leak in from array-backed collections
        object.__setattr__(self, "start", int(self.start))
        object.__setattr__(self, "end", int(self.end))
        check_width(self.start, self.end)

    @classmethod
    def from_width(cls, start: int, width: int) -> Interval:
        """Build an interval from its start and width."""
        if width < 0:
            raise InvalidWidth(f"Width needs to be >= 0, found {width}")
        return cls(start, start + width - 1)

    @property
    def width(self) -> int:
        """Number of covered positions."""
        return self.end - self.start + 1

    @property
    def is_empty(self) -> bool:
        return self.width == 0

    def as_tuple(self) -> tuple[int, int]:
        """Return `(start, end)`."""
        return self.start, self.end

    def contains(self, position: int) -> bool:
        """True if `position` lies inside the range."""
        return self.start <= position <= self.end

    def overlaps(self, other: Interval) -> bool:
        """Inclusive-coordinate overlap test: `other.start <= end and other.end >= start`."""
        return other.start <= self.end and other.end >= self.start

    def shift(self, offset: int) -> Interval:
        """Move both bounds by `offset`."""
        return Interval(self.start + offset, self.end + offset)

    def __str__(self) -> str:
        return f"[{self.start}, {self.end}]"
