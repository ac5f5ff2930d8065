"""LaTeX fragments for monomials, environments and the sets they belong to."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import total_ordering

from envbounds.environments import (
    ONLY_ACCEPTABLE_M,
    Env,
    HelpfulnessIndicators,
    env_key,
    first_helpful_index,
)


def _digit(ch: str) -> int:
    return ord(ch) - ord("0")


@total_ordering
@dataclass(frozen=True)
class NameComponents:
    """The parts of a monomial name: kind, segment ends, environment and restriction."""

    name: str = ""
    start: int = 0
    end: int = 0
    env: Env = (-1,) * ONLY_ACCEPTABLE_M
    restricted: bool = False

    @classmethod
    def from_string(cls, text: str) -> NameComponents:
        """Split an edge (``e``), environment (``d``) or theta (``t``) monomial name.

        A name of an unknown kind or of the wrong length gives the empty components.
        """
        m = ONLY_ACCEPTABLE_M
        if not text:
            return cls()
        kind = text[0]
        if kind == "e":
            if len(text) != 5:
                return cls()
            return cls("e", _digit(text[2]), _digit(text[4]))
        if kind == "d":
            if len(text) != m + 3:
                return cls()
            return cls("d", env=tuple(_digit(text[i + 2]) for i in range(m)))
        if kind == "t":
            acceptable = m + 7
            if len(text) not in (acceptable, acceptable + 1):
                return cls()
            return cls(
                "t",
                _digit(text[2]),
                _digit(text[4]),
                tuple(_digit(text[i + 6]) for i in range(m)),
                len(text) == acceptable + 1,
            )
        return cls()

    def _sort_key(self) -> tuple:
        return (self.name, self.start, self.end, env_key(self.env), self.restricted)

    def __lt__(self, other: NameComponents) -> bool:
        if not isinstance(other, NameComponents):
            return NotImplemented
        return self._sort_key() < other._sort_key()


def ab_string(
    r: Sequence[int], open_tag: str = "(", close_tag: str = ")", separator: str = ","
) -> str:
    """The environment written with letters a and b; empty for an empty environment."""
    if not r:
        return ""
    return open_tag + separator.join("a" if x == 0 else "b" for x in r) + close_tag


def sigma_string(r: Sequence[int]) -> str:
    """The operator ``sigma`` for the environment ``r``."""
    return "\\sigma^{" + ab_string(r) + "}"


def sigma_omega(r: Sequence[int]) -> str:
    """``sigma`` for ``r`` applied to ``omega``."""
    return sigma_string(r) + "(\\omega)"


def f_sigma_omega(r: Sequence[int]) -> str:
    """The value of ``f`` at ``sigma`` for ``r`` applied to ``omega``."""
    return "f(" + sigma_omega(r) + ")"


def make_theta(start: int, end: int, env: Sequence[int], restricted: bool = False) -> str:
    """The theta of the segment from ``start`` to ``end`` in ``env``, hatted if restricted."""
    text = "\\theta_{" + str(start) + str(end) + "}" + ab_string(env)
    if restricted:
        text = "\\hat" + text
    return text


def ineq_sign(num_bs: int, omega_on_right: bool) -> str:
    """Relation between ``f`` at an environment with ``num_bs`` b's and its evaluation."""
    if num_bs == 2 and not omega_on_right:
        return "="
    if num_bs % 2 == 0:
        return "\\geq"
    return "\\leq"


def correct_set(alpha: int, i: int, complement: bool = False) -> str:
    """The event for position ``i`` having passage time ``alpha``, or its complement."""
    plain_suffix, hat_suffix = ("^C", "") if complement else ("", "^C")
    text = "E_{" + str(i + 1) + "}"
    if alpha == 1:
        return "\\hat " + text + hat_suffix
    return text + plain_suffix


def correct_subset(h: HelpfulnessIndicators) -> str:
    """Intersection of the events at the positions that are not helpful."""
    return " \\cap ".join(
        correct_set(alpha, i)
        for i, (alpha, indicator) in enumerate(zip(h.r, h.h_indicators))
        if indicator == 0
    )


def bad_subset(h: HelpfulnessIndicators) -> str:
    """Complement event at the first helpful position; empty when there is none."""
    if not h.r or len(h.r) != len(h.h_indicators):
        return ""
    index = first_helpful_index(h)
    if index is None or index >= len(h.r):
        return ""
    return correct_set(h.r[index], index, True)


def conclusion(h: HelpfulnessIndicators, eqn_array: bool = False) -> str:
    """The statement that ``sigma(omega)`` lies in the intersection of the correct events."""
    add = "&" if eqn_array else ""
    return sigma_omega(h.r) + add + "\\in " + add + correct_subset(h)


def case_description(h: HelpfulnessIndicators, eqn_array: bool = False) -> str:
    """The statement that ``sigma(omega)`` lies in the bad event of the case."""
    add = "&" if eqn_array else ""
    return sigma_omega(h.r) + add + "\\in " + add + bad_subset(h)


def geodesic_section_name(start: int, end: int) -> str:
    """Where the geodesic section from ``start`` to ``end`` lies relative to the edges."""
    if start == 0:
        return f" before the edge $v_{{{end}}}$. "
    if end == 5:
        return f" after the edge $v_{{{start}}}$. "
    return f" between the edges $v_{{{start}}}$ and $v_{{{end}}}$. "


def e_strings(start: int, end: int) -> str:
    """The sum of the unit edges from ``start`` to ``end``."""
    return "+".join(f"e_{{{i}{i + 1}}}" for i in range(start, end))