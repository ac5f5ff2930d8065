"""Integer linear combinations of named monomials and their text form."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from functools import total_ordering

KEY_OPEN, KEY_CLOSE = "_k_", "_/k_"
VALUE_OPEN, VALUE_CLOSE = "_v_", "_/v_"
ITEM_OPEN, ITEM_CLOSE = "_n_", "_/n_"


def _matching_close(text: str, start: int, open_tag: str, close_tag: str) -> int:
    """Position of the close tag that balances an open tag ending at ``start``, or -1."""
    depth = 1
    pos = start
    while True:
        close = text.find(close_tag, pos)
        if close < 0:
            return -1
        nested = text.find(open_tag, pos)
        if 0 <= nested < close:
            depth += 1
            pos = nested + len(open_tag)
            continue
        depth -= 1
        if depth == 0:
            return close
        pos = close + len(close_tag)


def _enclosed(text: str, pos: int, open_tag: str, close_tag: str) -> tuple[str, int] | None:
    """Content of the next tagged section at or after ``pos`` and the position after it."""
    begin = text.find(open_tag, pos)
    if begin < 0:
        return None
    begin += len(open_tag)
    end = _matching_close(text, begin, open_tag, close_tag)
    if end < 0:
        return None
    return text[begin:end], end + len(close_tag)


def parse_tagged_map(text: str) -> dict[str, str]:
    """Read ``_k_key_/k__v_value_/v_`` pairs; keys come back sorted."""
    result: dict[str, str] = {}
    pos = 0
    while True:
        key_part = _enclosed(text, pos, KEY_OPEN, KEY_CLOSE)
        if key_part is None:
            break
        key, pos = key_part
        value_part = _enclosed(text, pos, VALUE_OPEN, VALUE_CLOSE)
        if value_part is None:
            break
        value, pos = value_part
        result[key] = value
    return dict(sorted(result.items()))


def parse_tagged_list(text: str) -> list[str]:
    """Read the contents of successive ``_n_..._/n_`` sections."""
    items: list[str] = []
    pos = 0
    while (part := _enclosed(text, pos, ITEM_OPEN, ITEM_CLOSE)) is not None:
        item, pos = part
        items.append(item)
    return items


@total_ordering
class LinCombination:
    """A finite sum of integer multiples of named monomials."""

    __slots__ = ("_terms",)

    def __init__(self, terms: Mapping[str, int] | Iterable[tuple[str, int]] | None = None):
        self._terms: dict[str, int] = {}
        if terms is None:
            return
        items = terms.items() if isinstance(terms, Mapping) else terms
        for name, coefficient in items:
            self._terms[name] = coefficient

    def _items(self) -> list[tuple[str, int]]:
        return sorted(self._terms.items())

    def copy(self) -> LinCombination:
        return LinCombination(self._terms)

    def __iadd__(self, other: LinCombination) -> LinCombination:
        for name, coefficient in other._items():
            if name not in self._terms:
                self._terms[name] = coefficient
                continue
            total = self._terms[name] + coefficient
            if total != 0:
                self._terms[name] = total
            else:
                del self._terms[name]
        return self

    def __add__(self, other: LinCombination) -> LinCombination:
        result = self.copy()
        result += other
        return result

    def __isub__(self, other: LinCombination) -> LinCombination:
        self += other * -1
        return self

    def __sub__(self, other: LinCombination) -> LinCombination:
        result = self.copy()
        result -= other
        return result

    def __imul__(self, factor: int) -> LinCombination:
        if factor == 0:
            self._terms.clear()
        else:
            self._terms = {name: c * factor for name, c in self._terms.items()}
        return self

    def __mul__(self, factor: int) -> LinCombination:
        result = self.copy()
        result *= factor
        return result

    __rmul__ = __mul__

    def __neg__(self) -> LinCombination:
        return self * -1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinCombination):
            return NotImplemented
        return self._terms == other._terms

    def __lt__(self, other: LinCombination) -> bool:
        """Total order: fewer terms first, then lexicographic by (name, coefficient)."""
        if not isinstance(other, LinCombination):
            return NotImplemented
        return (len(self._terms), self._items()) < (len(other._terms), other._items())

    def __hash__(self) -> int:
        return hash(frozenset(self._terms.items()))

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[tuple[str, int]]:
        """Yield ``(name, coefficient)`` pairs in order of name."""
        return iter(self._items())

    def __contains__(self, name: object) -> bool:
        return name in self._terms

    def __str__(self) -> str:
        parts = []
        for position, (name, coefficient) in enumerate(self._items()):
            if position and coefficient > 0:
                parts.append("+")
            parts.append(f"{coefficient}*{name}")
        return "".join(parts)

    def __repr__(self) -> str:
        return f"LinCombination({dict(self._items())!r})"

    def component(self, name: str) -> int:
        """Coefficient of ``name``, or 0 when absent."""
        return self._terms.get(name, 0)

    def leq(self, other: LinCombination) -> bool:
        """Partial order: ``other - self`` has no negative coefficient."""
        if any(c > other.component(name) for name, c in self._terms.items()):
            return False
        return all(c >= 0 for name, c in other._terms.items() if name not in self._terms)

    def lneq(self, other: LinCombination) -> bool:
        """Strict partial order."""
        return self != other and self.leq(other)

    def update_from_string(self, text: str) -> None:
        """Set coefficients from ``_k_name_/k__v_coefficient_/v_`` pairs."""
        for name, value in parse_tagged_map(text).items():
            self._terms[name] = int(value.strip())


def count_as(text: str) -> int:
    """Number of letters ``a`` or ``A`` in ``text``."""
    return sum(ch in "aA" for ch in text)


def simple_lin_comb(text: str) -> LinCombination:
    """Read one signed term given by ``termName`` and ``linComb`` entries.

    The combination is negated when the term name holds an odd number of a's.
    """
    fields = parse_tagged_map(text)
    result = LinCombination()
    if "termName" not in fields or "linComb" not in fields:
        return result
    result.update_from_string(fields["linComb"])
    if count_as(fields["termName"]) % 2 == 1:
        result *= -1
    return result


def lin_comb_from_string(text: str) -> LinCombination:
    """Sum of the signed terms in the ``_n_`` sections of ``text``."""
    result = LinCombination()
    for item in parse_tagged_list(text):
        result += simple_lin_comb(item)
    return result


def lin_combs_from_string(text: str) -> dict[str, LinCombination]:
    """Map each key of ``text`` to the combination described by its value."""
    return {key: lin_comb_from_string(value) for key, value in parse_tagged_map(text).items()}