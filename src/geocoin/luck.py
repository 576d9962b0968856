"""Deterministic seed-string to unit-interval generator.

The same seed string always maps to the same value in ``[0, 1)``, across runs
and machines, so anything derived from it (cache placement, initial token
counts) is reproducible without storing it.
"""

from __future__ import annotations

import hashlib
from typing import Callable

Generator = Callable[[str], float]

# 53 bits fit a float mantissa exactly, keeping the result strictly below 1.0.
_MANTISSA_BITS = 53
_SCALE = float(1 << _MANTISSA_BITS)


def luck(seed: str) -> float:
    """Map ``seed`` to a stable pseudo-random float in ``[0, 1)``.

    The value is taken from the leading bits of the SHA256 digest of ``seed``.
    """
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    value = int.from_bytes(digest[:8], byteorder="big") >> (64 - _MANTISSA_BITS)
    return value / _SCALE


def seed_of(*components: object) -> str:
    """Join seed components with commas, e.g. ``seed_of(3, -4) == "3,-4"``."""
    return ",".join(str(component) for component in components)
