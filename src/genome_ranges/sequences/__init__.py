from genome_ranges.sequences.tables import (
    GeneticCode,
    GeneticCodeLoader,
    NucleotideTableLoader,
    NucleotideTables,
    get_genetic_code,
    get_nucleotide_tables,
)
from genome_ranges.sequences.nucleotides import complement, reverse_complement, validate_sequence
from genome_ranges.sequences.translation import translate
from genome_ranges.sequences.store import (
    CachedSequenceStore,
    InMemorySequenceStore,
    MappingBackend,
    NpySequenceBackend,
    SequenceBackend,
    SequenceStore,
    write_npy_sequences,
)
from genome_ranges.sequences.accessor import (
    AccessPolicy,
    SequenceBatch,
    extract_grouped_seqs,
    get_seq,
    get_seqs,
    validate_ranges,
)
from genome_ranges.sequences.frequency import consensus_matrix, kmer_frequency, letter_frequency

__all__ = [
    "GeneticCode",
    "GeneticCodeLoader",
    "NucleotideTableLoader",
    "NucleotideTables",
    "get_genetic_code",
    "get_nucleotide_tables",
    "complement",
    "reverse_complement",
    "validate_sequence",
    "translate",
    "CachedSequenceStore",
    "InMemorySequenceStore",
    "MappingBackend",
    "NpySequenceBackend",
    "SequenceBackend",
    "SequenceStore",
    "write_npy_sequences",
    "AccessPolicy",
    "SequenceBatch",
    "extract_grouped_seqs",
    "get_seq",
    "get_seqs",
    "validate_ranges",
    "consensus_matrix",
    "kmer_frequency",
    "letter_frequency",
]
