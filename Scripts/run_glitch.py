from __future__ import annotations

import sys
from pathlib import Path

# Allow running as `python Scripts/run_glitch.py` from the repo root.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from Glitch_Art.runner import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
