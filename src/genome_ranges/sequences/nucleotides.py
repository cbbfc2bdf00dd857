"""Complement and reverse-complement over the IUPAC nucleotide alphabet."""
from __future__ import annotations

from genome_ranges.sequences.tables import Kind, get_nucleotide_tables


def validate_sequence(seq: str, kind: Kind = "DNA") -> str:
    """Return `seq` unchanged, or raise `InvalidSymbol` at the first foreign character."""
    get_nucleotide_tables(kind).validate(seq)
    return seq


def complement(seq: str, kind: Kind = "DNA") -> str:
    """
    Base-wise complement (`A<->T` or `A<->U`, `C<->G`, IUPAC codes pair up).

    Case is preserved. Raises `InvalidSymbol` for characters outside the alphabet.
    """
    return get_nucleotide_tables(kind).complement(seq)


def reverse_complement(seq: str, kind: Kind = "DNA") -> str:
    """
    The opposite strand read 5'->3'.

    Examples
    --------
    >>> reverse_complement("ACGTn")
    'nACGT'
    """
    return get_nucleotide_tables(kind).reverse_complement(seq)
