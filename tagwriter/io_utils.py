"""Utility helpers for YAML/JSON IO and logging."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import yaml


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def read_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def read_structured(path: Path) -> Any:
    """Load a YAML or JSON file, picking the parser from the suffix."""
    if path.suffix.lower() == ".json":
        return read_json(path)
    return read_yaml(path)


def ensure_parent(path: Path) -> Path:
    if path.parent != Path(""):
        path.parent.mkdir(parents=True, exist_ok=True)
    return path


def warn(msg: str) -> None:
    print(msg, file=sys.stderr)
