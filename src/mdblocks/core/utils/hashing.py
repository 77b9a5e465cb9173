"""Content hashing for page change detection"""

import hashlib


def sha256(content: str) -> str:
    """Hex SHA-256 of the UTF-8 encoded content; 64 chars to fit the hash columns."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
