"""Environments, helpfulness indicators and the split of the environment set.

An environment is a tuple of 0/1 entries: 0 stands for a passage time ``a``
and 1 for a passage time ``b``.  Environments are ordered first by length and
then by their entries read from the right, which is the order every sorted
collection of environments in this package follows.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import total_ordering

from envbounds.algebra import parse_tagged_map

MAX_M = 10
ONLY_ACCEPTABLE_M = 4
ONLY_ACCEPTABLE_NUM_AS = 2
V_SEP_OPEN_TAG = "("
V_SEP_CLOSE_TAG = ")"
V_ENTRY_SEP = ""

Env = tuple[int, ...]


def env_key(v: Sequence) -> tuple:
    """Sort key: shorter first, then by entries compared from the last position."""
    return (len(v), tuple(reversed(tuple(v))))


def sorted_envs(envs: Iterable[Sequence]) -> list:
    """Environments sorted by :func:`env_key`."""
    return sorted(envs, key=env_key)


def env_to_string(
    v: Sequence,
    open_tag: str = V_SEP_OPEN_TAG,
    close_tag: str = V_SEP_CLOSE_TAG,
    separator: str = V_ENTRY_SEP,
) -> str:
    """Entries of ``v`` joined by ``separator`` between the tags; empty for an empty ``v``."""
    if not v:
        return ""
    return open_tag + separator.join(str(x) for x in v) + close_tag


def env_sum(v: Sequence[int], start: int = 0, end: int | None = None) -> int:
    """Sum of ``v[start:end]`` with out-of-range bounds clamped."""
    if end is None or end < 0 or end > len(v):
        end = len(v)
    start = max(start, 0)
    return sum(v[start:end])


def two_to_power(n: int) -> int:
    """``2 ** |n|``."""
    return 2 ** abs(n)


def to_bits(x: int, n_bits: int) -> Env:
    """The lowest ``n_bits`` binary digits of ``x``, most significant first."""
    bits = []
    for _ in range(n_bits):
        bits.append(x % 2)
        x //= 2
    return tuple(reversed(bits))


def base_environment(m: int = ONLY_ACCEPTABLE_M) -> Env:
    """The environment of ``m`` a's."""
    return (0,) * m


def is_number_of_zeroes_odd(v: Sequence[int]) -> bool:
    """Tell whether ``v`` holds an odd number of a's."""
    return (len(v) - sum(v)) % 2 == 1


@total_ordering
@dataclass(frozen=True)
class HelpfulnessIndicators:
    """An environment ``r`` together with a 0/1 marker for each of its positions."""

    r: Env
    h_indicators: Env

    def __post_init__(self) -> None:
        object.__setattr__(self, "r", tuple(self.r))
        object.__setattr__(self, "h_indicators", tuple(self.h_indicators))

    def __lt__(self, other: HelpfulnessIndicators) -> bool:
        if not isinstance(other, HelpfulnessIndicators):
            return NotImplemented
        return (env_key(self.r), env_key(self.h_indicators)) < (
            env_key(other.r),
            env_key(other.h_indicators),
        )

    def __str__(self) -> str:
        if not self.r or len(self.r) != len(self.h_indicators):
            return "Invalid indicators"
        letters = "".join({0: "a", 1: "b"}.get(x, "") for x in self.r)
        return letters + "->" + "".join(str(x) for x in self.h_indicators)

    def reversed(self) -> HelpfulnessIndicators:
        """The indicators with both sequences read backwards."""
        return HelpfulnessIndicators(self.r[::-1], self.h_indicators[::-1])


def first_helpful_index(h: HelpfulnessIndicators) -> int | None:
    """Position of the first nonzero indicator, or None when there is none."""
    if not h.r or len(h.r) != len(h.h_indicators):
        raise ValueError("malformed helpfulness indicators")
    return next((i for i, x in enumerate(h.h_indicators) if x != 0), None)


def negatively_helpful_associate(h: HelpfulnessIndicators) -> Env | None:
    """``h.r`` with its first helpful position flipped.

    None when the indicators do not have the accepted length or none is set.
    """
    if len(h.r) != ONLY_ACCEPTABLE_M or len(h.h_indicators) != ONLY_ACCEPTABLE_M:
        return None
    index = next((i for i, x in enumerate(h.h_indicators) if x != 0), None)
    if index is None:
        return None
    flipped = list(h.r)
    flipped[index] = 1 - flipped[index]
    return tuple(flipped)


def find_flip_to_target(v: Sequence[int], target: Sequence[int]) -> int:
    """First position whose flip turns ``v`` into ``target``, or -1 when none does."""
    if not v or len(v) != len(target):
        raise ValueError("environments must be non-empty and of equal length")
    target = tuple(target)
    for i in range(len(v)):
        flipped = list(v)
        flipped[i] = 1 - flipped[i]
        if tuple(flipped) == target:
            return i
    return -1


def is_repairable_pair(v: Sequence[int], h_indicator: int, i: int) -> bool:
    """Tell whether position ``i`` of ``v`` can serve to repair a broken inclusion."""
    if i == 0:
        return v[2] == 0 and h_indicator not in (0, 1)
    if i == len(v) - 1:
        return v[i - 1] == 0 and h_indicator not in (i - 1, i)
    return v[i - 1] == 0 and v[i + 1] == 0 and h_indicator not in (i - 1, i, i + 1)


def repair_information(split: Mapping[Env, int]) -> set[tuple[int, int]]:
    """Pairs ``(i, alpha)`` such that a triple around ``i`` is repairable when ``r[i] == alpha``."""
    return {
        (i, v[i])
        for v, h_indicator in split.items()
        for i in range(len(v))
        if is_repairable_pair(v, h_indicator, i)
    }


def _repaired_index(v: Env, broken: int, info: set[tuple[int, int]]) -> int:
    if broken == 0:
        neighbours_clear = v[1] == 0
    elif broken == len(v) - 1:
        neighbours_clear = v[-2] == 0
    else:
        neighbours_clear = v[broken - 1] == 0 and v[broken + 1] == 0
    if neighbours_clear and (broken, v[broken]) in info:
        return -1
    return broken


def repair_environments(split: Mapping[Env, int]) -> dict[Env, int]:
    """A copy of ``split`` in which every repairable broken inclusion is set to -1."""
    info = repair_information(split)
    return {
        v: (_repaired_index(v, broken, info) if broken > -1 else broken)
        for v, broken in split.items()
    }


def split_environments(h: HelpfulnessIndicators, repair: bool = True) -> dict[Env, int]:
    """Map each environment of the split to the index of its broken inclusion (-1 for none).

    The environments are those with the accepted number of b's other than
    ``h.r``, and the base environment; keys come in :func:`env_key` order.
    """
    if len(h.r) != ONLY_ACCEPTABLE_M or len(h.h_indicators) != ONLY_ACCEPTABLE_M:
        return {}
    nha = negatively_helpful_associate(h)
    if nha is None or nha == h.r:
        return {}
    size = len(h.r)
    result: dict[Env, int] = {}
    for i in range(two_to_power(size)):
        candidate = to_bits(i, size)
        if candidate != h.r and sum(candidate) == ONLY_ACCEPTABLE_NUM_AS:
            result[candidate] = find_flip_to_target(candidate, nha)
    result[base_environment(size)] = -1
    if repair:
        result = repair_environments(result)
    return {v: result[v] for v in sorted_envs(result)}


def all_environments(m: int) -> list[list[Env]]:
    """Environments of length ``m`` grouped by their number of b's, each group sorted."""
    if m < 1:
        return []
    levels: list[set[Env]] = [set() for _ in range(m + 1)]
    for i in range(two_to_power(m) + 1):
        v = to_bits(i, m)
        levels[sum(v)].add(v)
    return [sorted_envs(level) for level in levels]


def generate_helpfulness_indicators(m: int = ONLY_ACCEPTABLE_M) -> list[HelpfulnessIndicators]:
    """All indicators with a single helpful position, up to reversal, in sorted order.

    Only the accepted length is supported; ``m`` is ignored.
    """
    m = ONLY_ACCEPTABLE_M
    found: set[HelpfulnessIndicators] = set()
    for i in range(two_to_power(m)):
        r = to_bits(i, m)
        if sum(r) != ONLY_ACCEPTABLE_NUM_AS:
            continue
        for j in range(m):
            indicators = tuple(1 if k == j else 0 for k in range(m))
            candidate = HelpfulnessIndicators(r, indicators)
            if candidate.reversed() not in found:
                found.add(candidate)
    return sorted(found)


def indicators_from_string(text: str) -> HelpfulnessIndicators:
    """Read letters a/b as the environment and digits 0/1 as indicators, padded with 0."""
    r = [0 if ch in "aA" else 1 for ch in text if ch in "aAbB"]
    digits = [int(ch) for ch in text if ch in "01"]
    digits = (digits + [0] * len(r))[: len(r)]
    return HelpfulnessIndicators(tuple(r), tuple(digits))


def indicators_map_from_string(text: str) -> dict[str, HelpfulnessIndicators]:
    """Map each key of a tagged map to the indicators its value describes."""
    return {key: indicators_from_string(value) for key, value in parse_tagged_map(text).items()}