from __future__ import annotations
import logging
from itertools import product
from typing import Optional

from genome_ranges.config import TranslationConfig
from genome_ranges.errors import InvalidSymbol, PartialCodon
from genome_ranges.sequences.tables import GeneticCode, NucleotideTables, get_genetic_code, get_nucleotide_tables

logger = logging.getLogger(__name__)


def resolve_codon(codon: str, code: GeneticCode, tables: NucleotideTables, unknown_symbol: str = "X") -> str:
    """
    Translate one uppercase DNA codon, resolving IUPAC ambiguity codes.

    Every concrete codon the ambiguous one stands for is looked up; if they
    all agree the common amino acid is returned, otherwise `unknown_symbol`.
    Codons containing a symbol with no base resolution (e.g. a gap) give
    `unknown_symbol`.
    """
    amino_acid = code.codons.get(codon)
    if amino_acid is not None:
        return amino_acid

    choices = []
    for base in codon:
        bases = tables.ambiguity.get(base)
        if bases is None:
            return unknown_symbol
        choices.append(bases)

    resolved = {code.codons["".join(bases)] for bases in product(*choices)}
    return resolved.pop() if len(resolved) == 1 else unknown_symbol


def translate(seq: str, config: Optional[TranslationConfig] = None) -> str:
    """
    Translate a nucleotide sequence into a one-letter protein sequence.

    Parameters
    ----------
    seq : str
        DNA or RNA sequence (any case, IUPAC codes allowed). `U` is read as `T`.
    config : TranslationConfig, optional
        Genetic code, partial-codon handling and output symbols. Defaults to
        the standard code with trailing partial codons dropped.

    Returns
    -------
    str
        Amino acids, uppercase, stops as `config.stop_symbol`.

    Raises
    ------
    InvalidSymbol
        If `seq` contains a character outside the IUPAC alphabet.
    PartialCodon
        If the length is not a multiple of three and `partial_codon="error"`.

    Examples
    --------
    >>> translate("ATGAAATAG")
    'MK*'
    """
    config = config or TranslationConfig()
    tables = get_nucleotide_tables("DNA")
    code = get_genetic_code(config.table_id)

    dna = seq.upper().replace("U", "T")
    for position, symbol in enumerate(dna):
        if symbol not in tables.complements:
            raise InvalidSymbol(seq[position], position)

    remainder = len(dna) % 3
    if remainder:
        match config.partial_codon:
            case "error":
                raise PartialCodon(f"Sequence length {len(dna)} is not a multiple of 3")
            case "warn":
                logger.warning(f"Dropping trailing partial codon {dna[-remainder:]!r} (length {len(dna)})")
            case "drop":
                pass
        dna = dna[:len(dna) - remainder]

    protein = []
    for i in range(0, len(dna), 3):
        amino_acid = resolve_codon(dna[i:i + 3], code, tables, config.unknown_symbol)
        if amino_acid == "*":
            if config.to_stop:
                break
            amino_acid = config.stop_symbol
        protein.append(amino_acid)
    return "".join(protein)
