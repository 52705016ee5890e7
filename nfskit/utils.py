"""Small helpers shared across the package."""

import os


def rand_uint32() -> int:
    """Return a cryptographically random unsigned 32-bit integer."""
    return int.from_bytes(os.urandom(4), "big")