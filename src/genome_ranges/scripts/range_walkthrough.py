#!/usr/bin/env python3
"""
Walk through the interval algebra and sequence accessor on a small YAML document.

The document lists named sequences and genomic ranges (strings such as
"chr1:5-10:+" or mappings with seqname/start/end/strand/name). The script
prints reduce/disjoin/gaps/coverage/nearest results, fetches and translates
every range, and optionally saves a matplotlib figure.

Examples:
  - python -m genome_ranges
  - python -m genome_ranges ranges.yaml --kmer 3 --plot walkthrough.png
  - python -m genome_ranges -vv --json ranges.yaml
"""

# --- Standard Library Imports ---
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

# --- Third-Party Imports ---
import matplotlib.pyplot as plt
import numpy as np

# --- Local Application Imports ---
from genome_ranges.algebra import coverage, disjoin, distance_to_nearest, gaps, reduce
from genome_ranges.config import GenomeRangesConfig, config_from_dict
from genome_ranges.errors import GenomeRangesError
from genome_ranges.sequences import InMemorySequenceStore, get_seqs, kmer_frequency, translate
from genome_ranges.structures import AnnotatedRange, GenomicRange, GenomicRangeSet
from genome_ranges.utils.logging_utils import DEFAULT_LOG_DIR, configure_package_logging
from genome_ranges.utils.yaml_io import package_data_path, read_yaml

# Set up module logger
logger = logging.getLogger(__name__)

EXAMPLE_YAML = "walkthrough_example.yaml"


# --------------------------
# Logging Configuration
# --------------------------
def setup_cli_logging(verbose_level: int, log_file: Optional[str] = None) -> None:
    """
    Configure the script logger and the package logger from CLI flags.

    Parameters
    ----------
    verbose_level : int
        -1 for ERROR, 0 for WARNING, 1 for INFO, 2 for DEBUG.
    log_file : Optional[str]
        Explicit log file. A timestamped file under `var/log/` is used when
        verbosity is > 0 and no file is given.
    """
    level_map = {
        -1: logging.ERROR,
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
    }
    log_level = level_map.get(verbose_level, logging.DEBUG)
    should_log_to_file = (verbose_level > 0) or (log_file is not None)

    configure_package_logging(
        level=log_level,
        log_file=log_file,
        enable_file_logging=should_log_to_file,
        extra_loggers=(__name__,),
    )

    if should_log_to_file and log_file is None:
        logger.info(f"Logs will be saved to: {DEFAULT_LOG_DIR.resolve()}")


# --------------------------
# Input
# --------------------------
def parse_range(entry: Any) -> GenomicRange:
    """Build a range from `"chr1:5-10:+"` or a mapping with seqname/start/end[/strand/name]."""
    if isinstance(entry, str):
        return AnnotatedRange.from_range(GenomicRange.from_str(entry))
    if isinstance(entry, Mapping):
        rng = GenomicRange(entry["seqname"], entry["start"], entry["end"], entry.get("strand"))
        name = entry.get("name")
        return AnnotatedRange.from_range(rng, name=None if name is None else str(name))
    raise ValueError(f"Cannot read a range from {entry!r}")


def load_walkthrough(path: Path) -> tuple[InMemorySequenceStore, GenomicRangeSet, GenomeRangesConfig]:
    data = read_yaml(path)
    sequences = data.get("sequences") or {}
    if not sequences:
        raise ValueError(f"{path} defines no sequences.")
    store = InMemorySequenceStore(sequences)
    ranges = GenomicRangeSet.from_ranges(parse_range(entry) for entry in data.get("ranges") or [])
    config = config_from_dict(data.get("config") or {})
    logger.info(f"Loaded {len(store)} sequences and {len(ranges)} ranges from {path}")
    return store, ranges, config


# --------------------------
# Walkthrough
# --------------------------
def _range_strings(ranges: GenomicRangeSet) -> List[str]:
    return [str(rng) for rng in ranges]


def run_walkthrough(store: InMemorySequenceStore, ranges: GenomicRangeSet, config: GenomeRangesConfig,
                    k: int = 2) -> Dict[str, Any]:
    """
    Apply the operators to the loaded ranges and collect printable results.
    """
    seqlengths = store.seqlengths()
    segments, depth = coverage(ranges)
    nearest_idx, nearest_dist = distance_to_nearest(ranges)

    batch = get_seqs(store, ranges, config=config.access)
    fetched = []
    for i, (rng, seq) in enumerate(zip(ranges, batch.sequences)):
        entry: Dict[str, Any] = {"range": str(rng), "sequence": seq}
        if seq is None:
            entry["error"] = str(batch.errors[i])
        else:
            entry["protein"] = translate(seq, config.translation)
        fetched.append(entry)

    kmers = {name: kmer_frequency(store[name], k) for name in store.names()}

    return {
        "reduce": _range_strings(reduce(ranges)),
        "disjoin": _range_strings(disjoin(ranges)),
        "gaps": _range_strings(gaps(ranges, seqlengths=seqlengths)),
        "coverage": [
            {"segment": str(seg), "depth": int(d)} for seg, d in zip(segments, depth)
        ],
        "nearest": [
            {"range": str(rng), "nearest": int(j), "distance": int(d)}
            for rng, j, d in zip(ranges, nearest_idx, nearest_dist)
        ],
        "sequences": fetched,
        "kmers": kmers,
        "coverage_arrays": (segments, depth),
    }


def plot_walkthrough(result: Dict[str, Any], output: Path, k: int) -> Path:
    """
    Save a figure with the coverage profile and the k-mer counts per sequence.
    """
    segments, depth = result["coverage_arrays"]
    kmers: Dict[str, Dict[str, int]] = result["kmers"]

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))

    ax = axes[0]
    for seqname in segments.seqlevels():
        on_seq = segments.seqnames == seqname
        xs = np.column_stack([segments.starts[on_seq], segments.ends[on_seq] + 1]).ravel()
        ys = np.repeat(depth[on_seq], 2)
        ax.step(xs, ys, where="post", label=seqname, linewidth=2)
    ax.set_xlabel("Position (1-based)", fontsize=12)
    ax.set_ylabel("Coverage", fontsize=12)
    ax.set_title("Range coverage", fontsize=14, fontweight="bold")
    ax.legend()
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    labels = list(next(iter(kmers.values())).keys()) if kmers else []
    x = np.arange(len(labels))
    bar_width = 0.8 / max(len(kmers), 1)
    for offset, (seqname, counts) in enumerate(kmers.items()):
        ax.bar(x + offset * bar_width, list(counts.values()), width=bar_width, label=seqname)
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=90, fontsize=8)
    ax.set_ylabel("Count", fontsize=12)
    ax.set_title(f"{k}-mer frequency", fontsize=14, fontweight="bold")
    ax.legend()
    ax.grid(True, alpha=0.3, axis="y")

    plt.tight_layout()
    output.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Figure saved to: {output}")
    return output


def print_report(result: Dict[str, Any]) -> None:
    for label in ("reduce", "disjoin", "gaps"):
        print(f"{label:<8}: {', '.join(result[label]) or '-'}")
    print("coverage:")
    for row in result["coverage"]:
        print(f"  {row['segment']:<20} depth={row['depth']}")
    print("nearest:")
    for row in result["nearest"]:
        print(f"  {row['range']:<20} -> {row['nearest']} (distance {row['distance']})")
    print("sequences:")
    for row in result["sequences"]:
        if "error" in row:
            print(f"  {row['range']:<20} ERROR {row['error']}")
        else:
            print(f"  {row['range']:<20} {row['sequence']}  {row['protein']}")


# --------------------------
# Command-Line Interface
# --------------------------
def main(argv=None) -> int:
    """
    Parses command-line arguments and runs the walkthrough.
    """
    parser = argparse.ArgumentParser(description="Genomic interval algebra walkthrough.")
    parser.add_argument("input", nargs="?", default=None,
                        help="YAML document with 'sequences' and 'ranges' (default: bundled example).")
    parser.add_argument("--kmer", type=int, default=2,
                        help="k for the k-mer frequency table (default: 2).")
    parser.add_argument("--plot", default=None,
                        help="Save a coverage / k-mer figure to this path.")
    parser.add_argument("--json", action="store_true",
                        help="Emit JSON instead of human-readable text.")

    # Logging arguments
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase verbosity (-v=INFO, -vv=DEBUG)")
    parser.add_argument("--log-file", default=None,
                        help="Path to log file (default: var/log/<logger>_TIMESTAMP.log if verbose)")
    parser.add_argument("--quiet", action="store_true",
                        help="Only log errors")

    cli_args = parser.parse_args(argv)

    verbose_level = -1 if cli_args.quiet else cli_args.verbose
    setup_cli_logging(verbose_level, cli_args.log_file)

    input_path = Path(cli_args.input) if cli_args.input else package_data_path(EXAMPLE_YAML)
    try:
        store, ranges, config = load_walkthrough(input_path)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Failed to load {input_path}: {e}")
        print(f"Failed to load input: {e}", file=sys.stderr)
        return 2

    try:
        result = run_walkthrough(store, ranges, config, k=cli_args.kmer)
    except (GenomeRangesError, ValueError) as e:
        logger.error(f"Walkthrough failed: {e}", exc_info=True)
        print(f"Walkthrough failed: {e}", file=sys.stderr)
        return 1

    if cli_args.plot:
        plot_walkthrough(result, Path(cli_args.plot), cli_args.kmer)

    if cli_args.json:
        printable = {key: value for key, value in result.items() if key != "coverage_arrays"}
        print(json.dumps(printable, indent=2))
    else:
        print_report(result)

    return 0


if __name__ == "__main__":
    sys.exit(main())
