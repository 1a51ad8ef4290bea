"""SHA-256 content hashing for post change detection"""

import hashlib
import json
from typing import Any


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars, matches String(64) column)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def content_hash(value: Any) -> str:
    """Hash a JSON-serialisable value in canonical form (sorted keys, no whitespace)."""
    return sha256(json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
