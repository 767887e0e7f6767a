"""
Hashing utilities.

Provides the stable identity hash used for page ids and cache artifact names.
"""

from __future__ import annotations

import hashlib


def compute_text_hash(
    text: str,
    algorithm: str = "md5",
    prefix: bool = False,
) -> str:
    """Compute a hex digest of a text string.

    Args:
        text: Text to hash (encoded as UTF-8)
        algorithm: Hash algorithm (md5, sha1, sha256, etc.)
        prefix: Include algorithm prefix (e.g., "md5:abc123...")

    Returns:
        Hash string, optionally prefixed with algorithm name

    Raises:
        ValueError: If algorithm is not supported
    """
    try:
        hasher = hashlib.new(algorithm)
    except ValueError as e:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}") from e

    hasher.update(text.encode("utf-8"))
    digest = hasher.hexdigest()
    return f"{algorithm}:{digest}" if prefix else digest
