"""Schema loading utility for inbound socket payloads."""

import json
from functools import lru_cache
from pathlib import Path

SCHEMA_DIR = Path(__file__).parent / "schemas"


def load_schema(path: Path) -> dict:
    """Load a JSON Schema file and return as dict."""
    with open(path) as f:
        return json.load(f)


@lru_cache(maxsize=None)
def schema_for(event: str) -> dict | None:
    """Packaged schema for a socket event name, or None when it has none."""
    path = SCHEMA_DIR / f"{event}.json"
    if not path.exists():
        return None
    return load_schema(path)
