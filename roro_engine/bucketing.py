"""
Deterministic hash bucketing for experiment assignment.

The same seed always lands in the same bucket, so concurrent first-time
assignments for one subject compute the same variant.
"""

import hashlib

SEED_SEPARATOR = "|"


def stable_hash(seed: str) -> int:
    """First 8 hex chars of the MD5 digest as an unsigned 32-bit int."""
    return int(hashlib.md5(seed.encode("utf-8")).hexdigest()[:8], 16)


def build_seed(subject_key: str, experiment: str) -> str:
    return f"{subject_key}{SEED_SEPARATOR}{experiment}"


def clamp_split(split_for_first: int) -> int:
    return max(1, min(99, int(split_for_first)))


def bucket(seed: str, variant_count: int, split_for_first: int = 50) -> int:
    """
    Index of the variant for seed.

    Two variants: index 0 when hash % 100 < split (clamped to 1..99).
    Otherwise: hash % variant_count.
    """
    if variant_count < 1:
        raise ValueError(f"variant_count must be >= 1, got {variant_count}")
    h = stable_hash(seed)
    if variant_count == 2:
        return 0 if h % 100 < clamp_split(split_for_first) else 1
    return h % variant_count
