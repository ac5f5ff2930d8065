"""Counters over multi-dimensional indices.

The ``increment_*`` functions advance a mutable list of integers in place,
like an odometer whose last position moves fastest, and report whether the
counter wrapped around.
"""

from __future__ import annotations

from collections.abc import Iterator, MutableSequence, Sequence
from itertools import product


def increment_index(
    ind: MutableSequence[int], bounds: Sequence[int], add: int = 1
) -> int:
    """Add ``add`` to the index ``ind`` where position ``i`` counts modulo ``bounds[i]``.

    Returns the carry out of the leftmost position (0 while the counter has
    not wrapped around).
    """
    if not ind:
        return 0
    if len(ind) != len(bounds):
        raise ValueError("index and bounds must have the same length")
    carry = add
    i = len(ind)
    while i > 0 and carry > 0:
        i -= 1
        ind[i] += carry
        carry, ind[i] = divmod(ind[i], bounds[i])
    return carry


def increment_modulo(ind: MutableSequence[int], modulo: int, add: int = 1) -> int:
    """Add ``add`` to ``ind`` read as a number in base ``modulo``; return the carry."""
    if not ind:
        return 0
    carry = add
    i = len(ind)
    while i > 0 and carry > 0:
        i -= 1
        ind[i] += carry
        carry, ind[i] = divmod(ind[i], modulo)
    return carry


def increment_increasing(v: MutableSequence[int], upper: int) -> bool:
    """Advance a strictly increasing sequence of values below ``upper``.

    Returns True, leaving ``v`` untouched, when ``v`` was already the last
    such sequence.
    """
    size = len(v)
    i = size - 1
    while i > -1 and v[i] == upper - size + i:
        i -= 1
    if i == -1:
        return True
    v[i] += 1
    for j in range(i + 1, size):
        v[j] = v[j - 1] + 1
    return False


def is_distinct(v: Sequence[int]) -> bool:
    """Tell whether all entries of ``v`` differ."""
    return len(set(v)) == len(v)


def increment_distinct(v: MutableSequence[int], upper: int) -> bool:
    """Advance ``v`` to the next sequence of distinct values below ``upper``.

    Returns True when the counter wrapped around before finding one.
    """
    while increment_modulo(v, upper) == 0:
        if is_distinct(v):
            return False
    return True


def iter_multi_index(bounds: Sequence[int]) -> Iterator[tuple[int, ...]]:
    """Yield every index below ``bounds`` in odometer order, last position fastest."""
    yield from product(*(range(b) for b in bounds))