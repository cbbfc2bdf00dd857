from __future__ import annotations
import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum
from typing import ContextManager, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Union

from tqdm import tqdm

from genome_ranges.config import SequenceAccessConfig
from genome_ranges.errors import GenomeRangesError, OutOfBounds, UnknownSequence
from genome_ranges.sequences.store import CachedSequenceStore, SequenceStore
from genome_ranges.sequences.tables import Kind, get_nucleotide_tables
from genome_ranges.structures.genomic_range import GenomicRange
from genome_ranges.structures.interval import Strand
from genome_ranges.structures.range_groups import group_strand, order_five_to_three

logger = logging.getLogger(__name__)


class AccessPolicy(Enum):
    """
    Failure handling for batch sequence access.

    FAIL_FAST : raise on the first failing range.
    COLLECT   : record the error for the failing range and continue.
    """
    FAIL_FAST = "fail_fast"
    COLLECT = "collect"


@dataclass
class SequenceBatch:
    """
    Result of `get_seqs`.

    Attributes
    ----------
    sequences : List[Optional[str]]
        One entry per input range; None where access failed.
    errors : Dict[int, GenomeRangesError]
        Input index -> error, for failed ranges only.
    """
    sequences: List[Optional[str]] = field(default_factory=list)
    errors: Dict[int, GenomeRangesError] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.sequences)

    @property
    def ok(self) -> bool:
        return not self.errors

    def successful(self) -> Dict[int, str]:
        """Input index -> sequence, for ranges that were fetched."""
        return {i: seq for i, seq in enumerate(self.sequences) if seq is not None}


def _session(store: SequenceStore) -> ContextManager:
    if isinstance(store, CachedSequenceStore):
        return store.session()
    return nullcontext(store)


def get_seq(store: SequenceStore, rng: GenomicRange, molecule: Kind = "DNA") -> str:
    """
    Sequence covered by a genomic range, read 5'->3' on the range's strand.

    Parameters
    ----------
    store : SequenceStore
        Named sequences.
    rng : GenomicRange
        1-based inclusive range. Reverse-strand ranges are reverse-complemented;
        unstranded ranges are read as forward.
    molecule : {"DNA", "RNA"}, optional
        Complement table for reverse-strand ranges, by default "DNA".

    Raises
    ------
    UnknownSequence
        If `rng.seqname` is not in the store.
    OutOfBounds
        If the range falls outside `1..length`.
    InvalidSymbol
        If a reverse-strand slice contains a symbol outside the alphabet.

    Examples
    --------
    >>> store = InMemorySequenceStore({"s": "ACGTACGTAA"})
    >>> get_seq(store, GenomicRange("s", 1, 3, "-"))
    'CGT'
    """
    seq = store.fetch(rng.seqname, rng.start, rng.end)
    match rng.strand:
        case Strand.REVERSE:
            return get_nucleotide_tables(molecule).reverse_complement(seq)
        case Strand.FORWARD | Strand.UNSTRANDED:
            return seq


def get_seqs(
    store: SequenceStore,
    ranges: Iterable[GenomicRange],
    policy: Union[AccessPolicy, str, None] = None,
    show_progress: Optional[bool] = None,
    molecule: Optional[Kind] = None,
    config: Optional[SequenceAccessConfig] = None,
) -> SequenceBatch:
    """
    Fetch the sequences of many ranges.

    Explicit arguments override `config`; `config` defaults to
    `SequenceAccessConfig()` (fail fast, no progress bar, DNA).

    Returns
    -------
    SequenceBatch
        Sequences in input order plus per-index errors (COLLECT only).

    Raises
    ------
    GenomeRangesError
        Under FAIL_FAST, the first access error.
    """
    config = config or SequenceAccessConfig()
    policy = AccessPolicy(policy if policy is not None else config.policy)
    show_progress = config.show_progress if show_progress is None else show_progress
    molecule = molecule or config.molecule

    ranges = list(ranges)
    batch = SequenceBatch()
    with _session(store):
        for i, rng in enumerate(tqdm(ranges, desc="Fetching sequences", disable=not show_progress)):
            try:
                batch.sequences.append(get_seq(store, rng, molecule))
            except GenomeRangesError as e:
                if policy is AccessPolicy.FAIL_FAST:
                    raise
                logger.warning(f"Range {i} ({rng}) failed: {e}")
                batch.sequences.append(None)
                batch.errors[i] = e

    logger.debug(f"Fetched {len(batch) - len(batch.errors)}/{len(batch)} sequences")
    return batch


def validate_ranges(store: SequenceStore, ranges: Iterable[GenomicRange]) -> Dict[int, GenomeRangesError]:
    """
    Check ranges against the store without reading sequence bytes beyond lengths.

    Returns
    -------
    Dict[int, GenomeRangesError]
        Input index -> `UnknownSequence` or `OutOfBounds`; empty when all are valid.
    """
    lengths: Dict[str, int] = {}
    errors: Dict[int, GenomeRangesError] = {}
    known = set(store.names())
    for i, rng in enumerate(ranges):
        if rng.seqname not in known:
            errors[i] = UnknownSequence(rng.seqname)
            continue
        if rng.seqname not in lengths:
            lengths[rng.seqname] = store.length(rng.seqname)
        seq_len = lengths[rng.seqname]
        if rng.start < 1 or rng.end > seq_len:
            errors[i] = OutOfBounds(rng.seqname, rng.start, rng.end, seq_len)
    return errors


def extract_grouped_seqs(
    store: SequenceStore,
    groups: Mapping[Hashable, Sequence[GenomicRange]],
    molecule: Kind = "DNA",
) -> Dict[Hashable, str]:
    """
    Concatenated 5'->3' sequence of every group (e.g. exons -> transcript).

    Members are ordered 5'->3' and every member is read on the group's
    strand (see `group_strand`), so unstranded members of a reverse-strand
    group are reverse-complemented along with the rest.

    Raises
    ------
    ValueError
        If a group mixes sequences or forward/reverse strands.
    """
    result: Dict[Hashable, str] = {}
    with _session(store):
        for group_key, members in groups.items():
            strand = group_strand(members)
            result[group_key] = "".join(
                get_seq(store, GenomicRange(rng.seqname, rng.start, rng.end, strand), molecule)
                for rng in order_five_to_three(members)
            )
    return result
