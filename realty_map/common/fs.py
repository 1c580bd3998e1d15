"""Filesystem helpers for config files and run artifacts."""

from __future__ import annotations

import json
import os
from pathlib import Path

import yaml

from realty_map.common.errors import ConfigError


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_yaml(path: Path) -> dict:
    """Read a YAML mapping; an empty file reads as ``{}``."""
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return payload


def write_json(path: Path, payload) -> None:
    # Written next to the target and swapped in, so readers never see half a summary.
    ensure_dir(path.parent)
    partial = path.with_name(path.name + ".partial")
    with partial.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)
        f.write("\n")
    os.replace(partial, path)
