from __future__ import annotations
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from genome_ranges.utils.yaml_io import read_yaml

PARTIAL_CODON_MODES = ("drop", "warn", "error")
ACCESS_POLICIES = ("fail_fast", "collect")
MOLECULES = ("DNA", "RNA")


@dataclass(frozen=True)
class TranslationConfig:
    """
    Options for `translate`.

    Attributes
    ----------
    table_id : int
        NCBI genetic code id, by default 1 (standard).
    partial_codon : str
        Handling of a trailing incomplete codon: "drop" silently, "warn"
        (drop and log a warning) or "error" (raise `PartialCodon`).
    to_stop : bool
        Stop at the first stop codon, excluding it.
    unknown_symbol : str
        Emitted for codons that do not resolve to a single amino acid.
    stop_symbol : str
        Emitted for stop codons.
    """
    table_id: int = 1
    partial_codon: str = "drop"
    to_stop: bool = False
    unknown_symbol: str = "X"
    stop_symbol: str = "*"

    def __post_init__(self) -> None:
        if self.partial_codon not in PARTIAL_CODON_MODES:
            raise ValueError(f"partial_codon needs to be one of {PARTIAL_CODON_MODES}, found {self.partial_codon!r}")
        if len(self.unknown_symbol) != 1 or len(self.stop_symbol) != 1:
            raise ValueError("unknown_symbol and stop_symbol need to be single characters.")


@dataclass(frozen=True)
class SequenceAccessConfig:
    """
    Options for batch sequence access.

    Attributes
    ----------
    policy : str
        "fail_fast" raises on the first failing range; "collect" records the
        error and continues.
    show_progress : bool
        Display a tqdm progress bar.
    molecule : str
        "DNA" or "RNA"; selects the complement table for reverse-strand ranges.
    """
    policy: str = "fail_fast"
    show_progress: bool = False
    molecule: str = "DNA"

    def __post_init__(self) -> None:
        if self.policy not in ACCESS_POLICIES:
            raise ValueError(f"policy needs to be one of {ACCESS_POLICIES}, found {self.policy!r}")
        if self.molecule.upper() not in MOLECULES:
            raise ValueError(f"molecule needs to be one of {MOLECULES}, found {self.molecule!r}")
        object.__setattr__(self, "molecule", self.molecule.upper())


@dataclass(frozen=True)
class GenomeRangesConfig:
    """Bundle of all configuration sections."""
    translation: TranslationConfig = field(default_factory=TranslationConfig)
    access: SequenceAccessConfig = field(default_factory=SequenceAccessConfig)


def _section(cls: type, data: Any, label: str) -> Any:
    if data is None:
        return cls()
    if not isinstance(data, Mapping):
        raise ValueError(f"'{label}' section needs to be a mapping.")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{label}': {sorted(unknown)}")
    return cls(**data)


def config_from_dict(data: Mapping[str, Any]) -> GenomeRangesConfig:
    """
    Build a `GenomeRangesConfig` from a parsed mapping.

    Missing sections fall back to defaults; unknown keys raise ValueError.
    """
    return GenomeRangesConfig(
        translation=_section(TranslationConfig, data.get("translation"), "translation"),
        access=_section(SequenceAccessConfig, data.get("access"), "access"),
    )


def load_config(path: str | Path) -> GenomeRangesConfig:
    """
    Load configuration from a YAML file.

    Example
    -------
    translation:
      table_id: 11
      partial_codon: warn
    access:
      policy: collect
    """
    return config_from_dict(read_yaml(path))
