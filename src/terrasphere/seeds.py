"""Canonical seed type.

A seed is a plain ``int`` in ``[0, SEED_MAX]``.  The same value drives
the noise permutation *and* the raw elevation distribution, so a flat
map opened for a seed reproduces the globe built from it.
"""

from __future__ import annotations

import operator
import re
import secrets

SEED_MIN = 0
SEED_MAX = 2_147_483_647

_DIGITS = re.compile(r"^[0-9]+$")


def random_seed() -> int:
    """Return a cryptographically random seed in ``[0, SEED_MAX]``."""
    return secrets.randbits(31)


def is_valid_seed(text: str) -> bool:
    if not _DIGITS.match(text):
        return False
    return SEED_MIN <= int(text) <= SEED_MAX


def parse_seed(text: str) -> int:
    """Parse a user-supplied seed string, raising ``ValueError`` if invalid."""
    text = text.strip()
    if not is_valid_seed(text):
        raise ValueError(f"Seed must be an integer between {SEED_MIN} and {SEED_MAX}, got {text!r}")
    return int(text)


def check_seed(seed: int) -> int:
    """Return *seed* as a plain ``int``, raising ``ValueError`` if out of range."""
    if isinstance(seed, bool):
        raise ValueError(f"Seed must be an integer, got {seed!r}")
    try:
        value = operator.index(seed)
    except TypeError:
        raise ValueError(f"Seed must be an integer, got {seed!r}") from None
    if not SEED_MIN <= value <= SEED_MAX:
        raise ValueError(f"Seed must be an integer between {SEED_MIN} and {SEED_MAX}, got {value}")
    return value
