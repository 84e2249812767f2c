"""Deterministic percentage bucketing.

An identifier is hashed with CRC32 and compared against a threshold scaled
from the rollout percentage. No per-user assignment is stored: any process
computes the same answer for the same identifier.
"""

from __future__ import annotations

import zlib
from typing import Optional, Union

RAND_BASE = (2**32 - 1) / 100.0


def bucket_threshold(percentage: Union[int, float]) -> float:
    """Checksum threshold for a percentage. Out-of-range values are not clamped."""
    return RAND_BASE * percentage


def checksum(identifier: str, salt: Optional[str] = None) -> int:
    """Unsigned CRC32 of ``identifier`` (optionally suffixed with ``salt``)."""
    value = identifier if salt is None else identifier + salt
    return zlib.crc32(value.encode("utf-8")) & 0xFFFFFFFF


def is_in_bucket(
    identifier: str,
    percentage: Union[int, float],
    salt: Optional[str] = None,
) -> bool:
    """Return True if ``identifier`` falls inside the rollout percentage.

    The comparison is strict: at 0% nothing qualifies, including an
    identifier whose checksum is exactly 0.
    """
    return checksum(identifier, salt) < bucket_threshold(percentage)


__all__ = ["RAND_BASE", "bucket_threshold", "checksum", "is_in_bucket"]
