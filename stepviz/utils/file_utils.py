"""File utilities."""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any


def ensure_dir(path: str | Path) -> Path:
    """Ensure directory exists and return Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_json_file(path: str | Path) -> Any:
    """Read a UTF-8 JSON document.

    - Raises FileNotFoundError for a missing path so callers can report it.
    - A leading BOM is tolerated (hand-edited specs are often saved with one).
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing file: {path}")
    text = p.read_text(encoding="utf-8-sig")
    return json.loads(text)


def safe_file_stem(name: str) -> str:
    """Turn an arbitrary step/spec name into something usable as a file stem."""
    stem = re.sub(r"[^0-9a-zA-Z_.-]+", "_", name or "").strip("._")
    return stem or "diagram"


def write_text_file(path: str | Path, text: str) -> Path:
    p = Path(path)
    ensure_dir(p.parent)
    p.write_text(text, encoding="utf-8")
    return p
