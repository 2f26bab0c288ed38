from __future__ import annotations

from pathlib import Path

here = Path(__file__).parent
root_path = here.parent
