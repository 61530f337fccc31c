from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict


def write_run_config(*, out_dir: Path, run_config: Dict[str, Any], name: str = "run_config.json") -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / name
    path.write_text(json.dumps(run_config, indent=2, sort_keys=True, default=str), encoding="utf-8")
    return path
