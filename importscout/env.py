from __future__ import annotations

import os
from pathlib import Path


def load_dotenv(path: str | Path = ".env") -> list[str]:
    """Load KEY=VALUE pairs from a .env file into os.environ.

    Rules:
    - Blank lines and lines starting with '#' are ignored.
    - An optional leading ``export`` is accepted.
    - VALUE may be wrapped in single or double quotes.
    - Variables already present in the environment win.

    Returns the keys that were set.
    """
    p = Path(path)
    if not p.is_file():
        return []
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError:
        return []

    loaded: list[str] = []
    for line in raw.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export "):].lstrip()
        key, value = stripped.split("=", 1)
        key = key.strip()
        if not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
            value = value[1:-1]
        if key in os.environ:
            continue
        os.environ[key] = value
        loaded.append(key)
    return loaded
