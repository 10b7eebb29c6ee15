from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from dvsim.core.errors import ConfigurationError


def ensure_dir(path: str | Path) -> Path:
    run_dir = Path(path)
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def load_yaml(path: str | Path) -> Dict[str, Any]:
    """Read a YAML document whose top level is a mapping; an empty file is ``{}``."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def dump_json(path: str | Path, obj: Any) -> Path:
    out = Path(path)
    ensure_dir(out.parent)
    with out.open("w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2, sort_keys=True)
    return out


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def now_tag() -> str:
    # microseconds keep back-to-back runs of one config in separate folders
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
