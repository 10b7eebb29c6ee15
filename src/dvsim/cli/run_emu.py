from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from dvsim.backends.emu import EmuBackend
from dvsim.cli.validate import validate_config
from dvsim.runtime.config import load_effective_config


def run_emu(config_path: str | Path, overrides: Dict[str, Any] | None = None) -> Dict[str, Any]:
    cfg = load_effective_config(config_path)
    cfg.update(overrides or {})
    errors = validate_config(cfg)
    if errors:
        raise ValueError("Invalid config: " + "; ".join(errors))
    return EmuBackend().run(cfg)
