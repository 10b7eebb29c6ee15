from __future__ import annotations

import json
from pathlib import Path

import pytest

from dvsim.core.errors import ConfigurationError
from dvsim.utils.io import deep_merge, dump_json, ensure_dir, load_yaml, now_tag


def test_deep_merge_does_not_mutate_inputs() -> None:
    base = {"engine": {"static_threshold": 5, "max_steps": 500}}
    override = {"engine": {"max_steps": 10}, "seed": 3}

    merged = deep_merge(base, override)

    assert merged == {"engine": {"static_threshold": 5, "max_steps": 10}, "seed": 3}
    assert base == {"engine": {"static_threshold": 5, "max_steps": 500}}


def test_dump_json_creates_parent_dirs(tmp_path: Path) -> None:
    out = dump_json(tmp_path / "a" / "b" / "result.json", {"b": 2, "a": [1, None]})

    assert out.parent.is_dir()
    text = out.read_text(encoding="utf-8")
    assert json.loads(text) == {"a": [1, None], "b": 2}
    assert text.index('"a"') < text.index('"b"')


def test_ensure_dir_is_idempotent(tmp_path: Path) -> None:
    first = ensure_dir(tmp_path / "runs" / "x")
    second = ensure_dir(str(tmp_path / "runs" / "x"))

    assert first == second
    assert first.is_dir()


def test_load_yaml_empty_file_is_empty_mapping(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_yaml(path) == {}


def test_load_yaml_rejects_non_mapping_document(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="mapping"):
        load_yaml(path)


def test_now_tag_is_utc_timestamp() -> None:
    tag = now_tag()
    assert tag.endswith("Z")
    assert tag[8] == "T"
