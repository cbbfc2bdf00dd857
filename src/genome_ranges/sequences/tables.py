from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Literal, Mapping, Tuple

from genome_ranges.errors import InvalidSymbol
from genome_ranges.sequences.data.parsers import (
    get_base_order,
    parse_ambiguity,
    parse_complements,
    parse_genetic_code,
    parse_genetic_code_tables,
    validate_complements,
)
from genome_ranges.utils.yaml_io import package_data_path, read_yaml

logger = logging.getLogger(__name__)

Kind = Literal["DNA", "RNA"]

NUCLEOTIDE_TABLES_YAML = "iupac_nucleotides.yaml"
GENETIC_CODES_YAML = "genetic_codes.yaml"


@dataclass(frozen=True)
class NucleotideTables:
    """
    Complement and ambiguity tables of one molecule type.

    Attributes
    ----------
    kind : str
        "DNA" or "RNA".
    complements : Mapping[str, str]
        Uppercase symbol -> uppercase complement.
    ambiguity : Mapping[str, Tuple[str, ...]]
        Uppercase IUPAC code -> the DNA bases it stands for.
    """
    kind: str
    complements: Mapping[str, str]
    ambiguity: Mapping[str, Tuple[str, ...]]
    _translation: Dict[int, int] = field(init=False, repr=False, compare=False)
    _invalid: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pairs = {}
        for base, partner in self.complements.items():
            pairs[base] = partner
            pairs[base.lower()] = partner.lower()
        object.__setattr__(self, "_translation", str.maketrans(pairs))
        alphabet = "".join(pairs)
        object.__setattr__(self, "_invalid", re.compile(f"[^{re.escape(alphabet)}]"))

    @property
    def alphabet(self) -> FrozenSet[str]:
        """Accepted uppercase symbols."""
        return frozenset(self.complements)

    def validate(self, seq: str) -> None:
        """Raise `InvalidSymbol` for the first character outside the alphabet (either case)."""
        bad = self._invalid.search(seq)
        if bad is not None:
            raise InvalidSymbol(bad.group(), bad.start())

    def complement(self, seq: str) -> str:
        """Base-wise complement; case is preserved."""
        self.validate(seq)
        return seq.translate(self._translation)

    def reverse_complement(self, seq: str) -> str:
        """Complement read in reverse; case is preserved."""
        return self.complement(seq)[::-1]


@dataclass(frozen=True)
class GeneticCode:
    """
    One NCBI genetic code table.

    Attributes
    ----------
    table_id : int
        NCBI translation table id (1 = standard).
    name : str
        Human-readable table name.
    codons : Mapping[str, str]
        DNA codon (uppercase, T not U) -> one-letter amino acid; stops are "*".
    start_codons : FrozenSet[str]
        Codons that may initiate translation.
    """
    table_id: int
    name: str
    codons: Mapping[str, str]
    start_codons: FrozenSet[str]

    def __getitem__(self, codon: str) -> str:
        return self.codons[codon]

    def is_start_codon(self, codon: str) -> bool:
        return codon.upper().replace("U", "T") in self.start_codons

    def is_stop_codon(self, codon: str) -> bool:
        return self.codons.get(codon.upper().replace("U", "T")) == "*"


class NucleotideTableLoader:
    """
    Loads IUPAC complement and ambiguity tables from a YAML file.

    The packaged `iupac_nucleotides.yaml` is used unless another path is given.
    """
    def load(self, kind: Kind = "DNA", yaml_path: str | Path | None = None) -> NucleotideTables:
        """
        Load the tables of one molecule type.

        Parameters
        ----------
        kind : {"DNA", "RNA"}, optional
            Molecule type, by default "DNA".
        yaml_path : str | Path | None
            Alternative YAML file.

        Raises
        ------
        ValueError
            If `kind` is not DNA or RNA, or the YAML is malformed.
        """
        kind_norm = kind.upper()
        if kind_norm not in ("DNA", "RNA"):
            raise ValueError(f"kind needs to be 'DNA' or 'RNA', found {kind!r}")

        path = Path(yaml_path) if yaml_path is not None else package_data_path(NUCLEOTIDE_TABLES_YAML)
        data = read_yaml(path)

        complements = parse_complements(data, kind_norm)
        validate_complements(complements, kind_norm)
        ambiguity = parse_ambiguity(data)
        if kind_norm == "RNA":
            ambiguity["U"] = ambiguity.get("T", ("T",))

        logger.debug(f"Loaded {kind_norm} nucleotide tables ({len(complements)} symbols) from {path}")
        return NucleotideTables(kind_norm, complements, ambiguity)


class GeneticCodeLoader:
    """Loads NCBI genetic code tables from a YAML file."""
    def load(self, table_id: int = 1, yaml_path: str | Path | None = None) -> GeneticCode:
        """
        Load one genetic code table.

        Raises
        ------
        KeyError
            If `table_id` is not present in the YAML file.
        """
        path = Path(yaml_path) if yaml_path is not None else package_data_path(GENETIC_CODES_YAML)
        data = read_yaml(path)

        tables = parse_genetic_code_tables(data)
        if table_id not in tables:
            raise KeyError(f"Unknown genetic code table {table_id}; available: {sorted(tables)}")

        name, codon_map, start_codons = parse_genetic_code(tables[table_id], get_base_order(data))
        logger.debug(f"Loaded genetic code {table_id} ({name}) from {path}")
        return GeneticCode(table_id, name, codon_map, start_codons)

    def available(self, yaml_path: str | Path | None = None) -> Tuple[int, ...]:
        """Table ids defined in the YAML file."""
        path = Path(yaml_path) if yaml_path is not None else package_data_path(GENETIC_CODES_YAML)
        return tuple(sorted(parse_genetic_code_tables(read_yaml(path))))


@lru_cache(maxsize=None)
def get_nucleotide_tables(kind: Kind = "DNA") -> NucleotideTables:
    """Packaged nucleotide tables, loaded once per molecule type."""
    return NucleotideTableLoader().load(kind)


@lru_cache(maxsize=None)
def get_genetic_code(table_id: int = 1) -> GeneticCode:
    """Packaged genetic code, loaded once per table id."""
    return GeneticCodeLoader().load(table_id)
