"""
Tests for the walkthrough command-line script.
"""
import json
import logging

import pytest

from genome_ranges.scripts.range_walkthrough import load_walkthrough, main, parse_range, run_walkthrough
from genome_ranges.structures import AnnotatedRange, Strand
from genome_ranges.utils.yaml_io import package_data_path


@pytest.fixture(autouse=True)
def reset_loggers():
    yield
    for name in ("genome_ranges", "genome_ranges.scripts.range_walkthrough"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_parse_range_accepts_strings_and_mappings():
    rng = parse_range("chr1:5-10:-")
    assert isinstance(rng, AnnotatedRange)
    assert (rng.seqname, rng.start, rng.end, rng.strand) == ("chr1", 5, 10, Strand.REVERSE)

    named = parse_range({"seqname": "chr2", "start": 1, "end": 3, "name": "orf"})
    assert named.name == "orf"
    assert named.strand is Strand.UNSTRANDED

    with pytest.raises(ValueError):
        parse_range(42)


def test_run_walkthrough_on_bundled_example():
    store, ranges, config = load_walkthrough(package_data_path("walkthrough_example.yaml"))
    assert config.access.policy == "collect"

    result = run_walkthrough(store, ranges, config, k=1)
    by_range = {row["range"]: row for row in result["sequences"]}
    assert by_range["chr1:11-19:+"]["protein"] == "MK*"
    assert "error" in by_range["chr2:30-40:+"]
    assert set(result["kmers"]) == {"chr1", "chr2"}
    assert sum(result["kmers"]["chr2"].values()) == 33


def test_main_prints_report(capsys):
    assert main(["--quiet"]) == 0
    out = capsys.readouterr().out
    assert "reduce" in out
    assert "MK*" in out


def test_main_json_output(capsys):
    assert main(["--quiet", "--json", "--kmer", "2"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert "coverage_arrays" not in payload
    assert len(payload["sequences"]) == 6
    assert len(payload["kmers"]["chr1"]) == 16


def test_main_writes_plot(tmp_path, capsys):
    output = tmp_path / "walkthrough.png"
    assert main(["--quiet", "--plot", str(output)]) == 0
    assert output.is_file()


def test_main_reports_unreadable_input(tmp_path, capsys):
    missing = tmp_path / "nope.yaml"
    assert main(["--quiet", str(missing)]) == 2
    assert "Failed to load input" in capsys.readouterr().err
