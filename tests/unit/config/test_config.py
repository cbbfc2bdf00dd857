"""
Unit tests for configuration dataclasses and YAML loading.
"""
import pytest

from genome_ranges.config import (
    GenomeRangesConfig,
    SequenceAccessConfig,
    TranslationConfig,
    config_from_dict,
    load_config,
)


def test_defaults():
    config = GenomeRangesConfig()
    assert config.translation == TranslationConfig()
    assert config.translation.table_id == 1
    assert config.translation.partial_codon == "drop"
    assert config.access.policy == "fail_fast"
    assert config.access.molecule == "DNA"


def test_molecule_is_normalised_to_uppercase():
    assert SequenceAccessConfig(molecule="rna").molecule == "RNA"


@pytest.mark.parametrize("kwargs", [
    {"policy": "retry"},
    {"molecule": "PNA"},
])
def test_invalid_access_options(kwargs):
    with pytest.raises(ValueError):
        SequenceAccessConfig(**kwargs)


@pytest.mark.parametrize("kwargs", [
    {"partial_codon": "pad"},
    {"stop_symbol": "**"},
    {"unknown_symbol": ""},
])
def test_invalid_translation_options(kwargs):
    with pytest.raises(ValueError):
        TranslationConfig(**kwargs)


def test_config_from_dict_fills_missing_sections():
    config = config_from_dict({"translation": {"table_id": 11}})
    assert config.translation.table_id == 11
    assert config.access == SequenceAccessConfig()


def test_config_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="Unknown keys"):
        config_from_dict({"access": {"policy": "collect", "retries": 3}})
    with pytest.raises(ValueError):
        config_from_dict({"access": ["collect"]})


def test_load_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "translation:\n"
        "  table_id: 2\n"
        "  partial_codon: warn\n"
        "access:\n"
        "  policy: collect\n"
        "  show_progress: true\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.translation.table_id == 2
    assert config.translation.partial_codon == "warn"
    assert config.access.policy == "collect"
    assert config.access.show_progress is True


def test_empty_config_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == GenomeRangesConfig()
