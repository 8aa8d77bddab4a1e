"""Free-ID allocation for record stores."""

from collections.abc import Collection


def lowest_free(used: Collection[int]) -> int:
    """Return the smallest non-negative integer not in `used`."""
    return lowest_free_at_or_above(used, 0)


def lowest_free_at_or_above(used: Collection[int], floor: int) -> int:
    """Return the smallest integer >= `floor` not in `used`.

    Python integers do not overflow, so there is no exhaustion path.
    """
    if floor < 0:
        raise ValueError(f"floor must be non-negative, got {floor}")

    candidate = floor
    while candidate in used:
        candidate += 1
    return candidate
