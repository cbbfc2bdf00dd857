from __future__ import annotations


class GenomeRangesError(Exception):
    """Base class for every error raised by `genome_ranges`."""


class InvalidWidth(GenomeRangesError, ValueError):
    """A range would end up with a negative width."""


class OutOfBounds(GenomeRangesError, IndexError):
    """
    A range falls outside the coordinates of the sequence it refers to.

    Parameters
    ----------
    seqname : str
        Name of the sequence being accessed.
    start, end : int
        The offending 1-based inclusive coordinates.
    seq_len : int
        Length of the sequence in the store.
    """
    def __init__(self, seqname: str, start: int, end: int, seq_len: int):
        self.seqname = seqname
        self.start = start
        self.end = end
        self.seq_len = seq_len
        super().__init__(f"Range {seqname}:{start}-{end} is outside 1..{seq_len}")


class UnknownSequence(GenomeRangesError, KeyError):
    """A sequence name is not present in the store."""
    def __init__(self, seqname: str):
        self.seqname = seqname
        super().__init__(seqname)

    def __str__(self) -> str:
        return f"Unknown sequence: {self.seqname!r}"


class InvalidSymbol(GenomeRangesError, ValueError):
    """
    A character lies outside the declared alphabet.

    Parameters
    ----------
    symbol : str
        The offending character.
    position : int
        0-based index of the first offending character.
    """
    def __init__(self, symbol: str, position: int):
        self.symbol = symbol
        self.position = position
        super().__init__(f"Invalid symbol {symbol!r} at position {position}")


class SequenceNameMismatch(GenomeRangesError, ValueError):
    """Two genomic ranges that must share a sequence do not."""
    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(f"Sequence names differ: {left!r} vs {right!r}")


class PartialCodon(GenomeRangesError, ValueError):
    """A sequence length is not a multiple of three and partial codons are rejected."""
