from __future__ import annotations
from pathlib import Path
from typing import Any, Dict
import yaml

# Packaged YAML tables (IUPAC codes, genetic codes, walkthrough example)
PACKAGE_DATA_DIR = Path(__file__).resolve().parents[1] / "data"


def read_yaml(path: str | Path) -> Dict[str, Any]:
    """
    Read a YAML document whose top level is a mapping.

    An empty file gives an empty dict.

    Raises
    ------
    ValueError
        If the suffix is not `.yml`/`.yaml` or the top level is not a mapping.
    """
    path_obj = Path(path)
    if path_obj.suffix.lower() not in {".yml", ".yaml"}:
        raise ValueError(f"Only YAML files are supported, found {path_obj.name!r}")

    data = yaml.safe_load(path_obj.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path_obj} must contain a mapping at the top level, found {type(data).__name__}")
    return data


def package_data_path(filename: str) -> Path:
    """Path of a YAML file shipped in `genome_ranges/data/`."""
    return PACKAGE_DATA_DIR / filename
