"""Utility helpers for annocurate."""
from __future__ import annotations

import hashlib
import json
import os
import uuid
from datetime import datetime
from pathlib import Path


def ensure_dir(path: os.PathLike[str] | str) -> Path:
    """Ensure directory exists and return its :class:`Path`."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def canonical_json(data: object) -> str:
    """Return a deterministic JSON representation."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def hash_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def utcnow() -> str:
    return datetime.utcnow().isoformat()


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def validate_file_exists(path: os.PathLike[str] | str) -> Path:
    """Raise ``FileNotFoundError`` if file missing."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)
    return p
