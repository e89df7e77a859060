"""
Hashing utilities for catalog lookups.

Catalog names (index names, field names, terms) carry a 32-bit xxh32 hash.
The hash narrows a lookup; the literal name is always compared afterwards, so
two names sharing a hash still get distinct catalog entries.
"""

import xxhash


def name_hash(name: str) -> int:
    """
    Hash a catalog name with xxh32.

    Args:
        name: Index name, field name or normalized term

    Returns:
        Unsigned 32-bit hash (fits a UInt32 column)
    """
    return xxhash.xxh32(name.encode("utf-8")).intdigest()


def next_id(current_max: int | None) -> int:
    """Return the next 1-based surrogate id after ``current_max``."""
    if current_max is None:
        return 1
    return current_max + 1
