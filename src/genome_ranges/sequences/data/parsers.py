from __future__ import annotations
from itertools import product
from typing import Any, Dict, FrozenSet, Mapping, Tuple

ComplementMap = Dict[str, str]
AmbiguityMap = Dict[str, Tuple[str, ...]]
CodonMap = Dict[str, str]

DNA_BASES = "TCAG"


# ---------- Nucleotide tables ----------

def parse_complements(data: Mapping[str, Any], kind: str) -> ComplementMap:
    """
    Parse and normalize the base complement map of one molecule type.

    All keys and values are uppercased.

    Parameters
    ----------
    data : Mapping[str, Any]
        Parsed YAML tree containing a `complements` mapping keyed by molecule type.
    kind : str
        "DNA" or "RNA".

    Returns
    -------
    ComplementMap
        Mapping from nucleotide symbol to its complement.

    Raises
    ------
    ValueError
        If the section for `kind` is missing or empty.
    """
    complements_data = (data.get("complements") or {}).get(kind.upper())
    if not isinstance(complements_data, dict) or not complements_data:
        raise ValueError(f"YAML must contain a non-empty 'complements.{kind.upper()}' mapping.")

    return {str(k).upper(): str(v).upper() for k, v in complements_data.items()}


def validate_complements(complements: ComplementMap, kind: str) -> None:
    """
    Validate that a complement map is closed and matches its molecule type.

    Parameters
    ----------
    complements : ComplementMap
        Mapping as returned by :func: `parse_complements()`.
    kind : str
        "DNA" or "RNA".

    Raises
    ------
    ValueError
        If a complement is not itself in the alphabet, if a symbol is not a
        single character, or if RNA tables contain 'T' (DNA tables 'U').
    """
    for base, partner in complements.items():
        if len(base) != 1 or len(partner) != 1:
            raise ValueError(f"Complement entries must be single characters, found {base!r}: {partner!r}")
        if partner not in complements:
            raise ValueError(f"Complement of {base!r} ({partner!r}) is not in the alphabet.")

    own, foreign = ("U", "T") if kind.upper() == "RNA" else ("T", "U")
    if own not in complements:
        raise ValueError(f"{kind.upper()} complements must include {own!r}.")
    if foreign in complements:
        raise ValueError(f"{kind.upper()} complements must not contain {foreign!r}.")


def parse_ambiguity(data: Mapping[str, Any]) -> AmbiguityMap:
    """
    Parse the IUPAC ambiguity map, e.g. `R: AG` -> `{"R": ("A", "G")}`.

    Raises
    ------
    ValueError
        If the section is missing or resolves a code to a non-ACGT base.
    """
    ambiguity_data = data.get("ambiguity")
    if not isinstance(ambiguity_data, dict) or not ambiguity_data:
        raise ValueError("YAML must contain a non-empty 'ambiguity' mapping.")

    ambiguity: AmbiguityMap = {}
    for code, bases in ambiguity_data.items():
        resolved = tuple(str(bases).upper())
        if not resolved or any(base not in DNA_BASES for base in resolved):
            raise ValueError(f"Ambiguity code {code!r} must resolve to bases in ACGT, found {bases!r}")
        ambiguity[str(code).upper()] = resolved
    return ambiguity


# ---------- Genetic codes ----------

def get_int(value: Any, label: str) -> int:
    """Coerce a YAML scalar to int with a readable error."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} needs to be an integer, found {value!r}") from None


def codon_order(base_order: str = DNA_BASES) -> Tuple[str, ...]:
    """All 64 codons in NCBI table order (first position varies slowest)."""
    return tuple("".join(codon) for codon in product(base_order, repeat=3))


def parse_genetic_code(entry: Mapping[str, Any], base_order: str = DNA_BASES) -> Tuple[str, CodonMap, FrozenSet[str]]:
    """
    Parse one NCBI genetic code table.

    Parameters
    ----------
    entry : Mapping[str, Any]
        Mapping with `name`, `amino_acids` (64 characters) and optionally
        `starts` (64 characters, `M` marking initiation codons).
    base_order : str, optional
        Base order used to enumerate the codons, by default "TCAG".

    Returns
    -------
    Tuple[str, CodonMap, FrozenSet[str]]
        Table name, codon -> amino acid map and the set of start codons.
    """
    name = str(entry.get("name", ""))
    amino_acids = str(entry.get("amino_acids", ""))
    starts = str(entry.get("starts", "-" * 64))
    if len(amino_acids) != 64 or len(starts) != 64:
        raise ValueError(f"Genetic code {name!r} needs 64 amino acids and 64 start flags.")

    codons = codon_order(base_order)
    codon_map = dict(zip(codons, amino_acids))
    start_codons = frozenset(codon for codon, flag in zip(codons, starts) if flag == "M")
    return name, codon_map, start_codons


def parse_genetic_code_tables(data: Mapping[str, Any]) -> Dict[int, Mapping[str, Any]]:
    """Raw table entries keyed by integer table id."""
    tables = data.get("tables")
    if not isinstance(tables, dict) or not tables:
        raise ValueError("YAML must contain a non-empty 'tables' mapping.")
    return {get_int(table_id, "Genetic code id"): entry for table_id, entry in tables.items()}


def get_base_order(data: Mapping[str, Any]) -> str:
    """Codon enumeration order, from `metadata.base_order` (default "TCAG")."""
    metadata = data.get("metadata") or {}
    base_order = str(metadata.get("base_order", DNA_BASES)).upper()
    if sorted(base_order) != sorted(DNA_BASES):
        raise ValueError(f"base_order must be a permutation of TCAG, found {base_order!r}")
    return base_order
