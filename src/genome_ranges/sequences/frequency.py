from __future__ import annotations
from itertools import product
from typing import Dict, Sequence, Tuple, Union

import numpy as np

from genome_ranges.sequences.tables import Kind, get_nucleotide_tables

BASES = "ACGT"


def _encode(seq: str, letters: str) -> np.ndarray:
    """Map each character to its index in `letters` (-1 for anything else)."""
    lookup = np.full(256, -1, dtype=np.int64)
    for code, letter in enumerate(letters):
        lookup[ord(letter)] = code
    raw = np.frombuffer(seq.upper().encode("ascii", errors="replace"), dtype=np.uint8)
    return lookup[raw]


def letter_frequency(seq: str, letters: str = BASES, as_prob: bool = False,
                     molecule: Kind = "DNA") -> Dict[str, Union[int, float]]:
    """
    Count occurrences of each of `letters` (case-insensitive).

    Parameters
    ----------
    seq : str
        Nucleotide sequence; validated against the IUPAC alphabet of `molecule`.
    letters : str, optional
        Letters to count, by default "ACGT". Other symbols are ignored.
    as_prob : bool, optional
        Divide by the sequence length.

    Raises
    ------
    InvalidSymbol
        If `seq` contains a symbol outside the alphabet.
    """
    get_nucleotide_tables(molecule).validate(seq)
    letters = letters.upper()
    codes = _encode(seq, letters)
    counts = np.bincount(codes[codes >= 0], minlength=len(letters))
    if as_prob:
        total = len(seq)
        return {letter: (float(count) / total if total else 0.0) for letter, count in zip(letters, counts)}
    return {letter: int(count) for letter, count in zip(letters, counts)}


def kmer_frequency(seq: str, k: int, as_prob: bool = False) -> Dict[str, Union[int, float]]:
    """
    Count overlapping k-mers over ACGT.

    All `4**k` k-mers are present in lexicographic order, zero-filled. `U`
    is read as `T`; k-mers containing any other symbol (ambiguity codes,
    gaps) are skipped.

    Raises
    ------
    ValueError
        If `k < 1`.
    InvalidSymbol
        If `seq` contains a symbol outside the DNA/RNA IUPAC alphabet.
    """
    if k < 1:
        raise ValueError(f"k needs to be >= 1, found {k}")
    dna = seq.upper().replace("U", "T")
    get_nucleotide_tables("DNA").validate(dna)

    codes = _encode(dna, BASES)
    n_windows = codes.size - k + 1
    counts = np.zeros(4 ** k, dtype=np.int64)
    if n_windows > 0:
        windows = np.lib.stride_tricks.sliding_window_view(codes, k)
        valid = (windows >= 0).all(axis=1)
        weights = 4 ** np.arange(k - 1, -1, -1, dtype=np.int64)
        index = windows[valid] @ weights
        counts = np.bincount(index, minlength=4 ** k)

    kmers = ["".join(kmer) for kmer in product(BASES, repeat=k)]
    if as_prob:
        total = counts.sum()
        return {kmer: (float(count) / total if total else 0.0) for kmer, count in zip(kmers, counts)}
    return {kmer: int(count) for kmer, count in zip(kmers, counts)}


def consensus_matrix(seqs: Sequence[str], letters: str = BASES, as_prob: bool = False) -> Tuple[Tuple[str, ...], np.ndarray]:
    """
    Per-position letter counts over equal-length sequences.

    Returns
    -------
    Tuple[Tuple[str, ...], np.ndarray]
        Row labels and a `(len(letters), width)` matrix. Symbols outside
        `letters` are not counted.

    Raises
    ------
    ValueError
        If the sequences differ in length.
    """
    letters = letters.upper()
    if not seqs:
        return tuple(letters), np.zeros((len(letters), 0), dtype=np.int64)
    width = len(seqs[0])
    if any(len(seq) != width for seq in seqs):
        raise ValueError("consensus_matrix needs sequences of equal length.")

    matrix = np.zeros((len(letters), width), dtype=np.int64)
    positions = np.arange(width)
    for seq in seqs:
        codes = _encode(seq, letters)
        known = codes >= 0
        np.add.at(matrix, (codes[known], positions[known]), 1)

    if as_prob:
        return tuple(letters), matrix / len(seqs)
    return tuple(letters), matrix
