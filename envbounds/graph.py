"""The graph of direct path segments between vertices and the paths through it.

Vertices are numbered ``0 .. m + 1``; the edge ``v_i`` of an environment joins
vertices ``i - 1`` and ``i``.  Each key ``(i, j)`` of :attr:`MainGraph.edges`
holds the direct path segments from vertex ``i`` to vertex ``j``, keyed by the
environment whose analysis produced them (or by a one-entry counter for
segments assembled while searching for paths).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from envbounds.algebra import LinCombination
from envbounds.environments import (
    MAX_M,
    ONLY_ACCEPTABLE_M,
    Env,
    base_environment,
    env_to_string,
    sorted_envs,
)

POWER_OF_TEN_FOR_PADDING = 10
SEP_OPEN_TAG = ""
SEP_CLOSE_TAG = ""

Edge = tuple[int, int]


@dataclass
class DirectPathSegment:
    """A cost together with the passage times some edges must have for it to apply."""

    cost: LinCombination = field(default_factory=LinCombination)
    restrictions: dict[int, int] = field(default_factory=dict)

    def copy(self) -> DirectPathSegment:
        return DirectPathSegment(self.cost.copy(), dict(self.restrictions))

    def __str__(self) -> str:
        text = str(self.cost)
        if self.restrictions:
            pairs = "".join(f"({k},{v}) " for k, v in sorted(self.restrictions.items()))
            text += f" (restrictions: {pairs})"
        return text

    def __lt__(self, other: DirectPathSegment) -> bool:
        if not isinstance(other, DirectPathSegment):
            return NotImplemented
        if self.cost < other.cost:
            return True
        if other.cost < self.cost:
            return False
        return (len(self.restrictions), sorted(self.restrictions.items())) < (
            len(other.restrictions),
            sorted(other.restrictions.items()),
        )

    def restrictions_satisfied(self, env: Sequence[int]) -> bool:
        """Tell whether ``env`` gives every restricted edge its required passage time."""
        return all(env[k] == v for k, v in self.restrictions.items())


SegmentMap = dict[tuple[int, ...], DirectPathSegment]


def _sorted_map(segments: SegmentMap) -> SegmentMap:
    return {key: segments[key] for key in sorted_envs(segments)}


@dataclass
class MainGraph:
    """Direct path segments for each pair of vertices."""

    edges: dict[Edge, SegmentMap] = field(default_factory=dict)

    def copy(self) -> MainGraph:
        return MainGraph(
            {
                edge: {key: seg.copy() for key, seg in segments.items()}
                for edge, segments in self.edges.items()
            }
        )

    def segments(self, edge: Edge) -> list[tuple[tuple[int, ...], DirectPathSegment]]:
        """The segments of ``edge`` in key order; empty when the edge is absent."""
        return list(_sorted_map(self.edges.get(edge, {})).items())

    def __str__(self) -> str:
        lines = []
        for edge in sorted_envs(self.edges):
            body = "".join(
                f"\n\t\t({env_to_string(key)}) {seg}" for key, seg in self.segments(edge)
            )
            lines.append(f"{env_to_string(edge)}: {body}\n")
        return "".join(lines)

    def neighbors(self) -> dict[int, list[int]]:
        """Map each vertex to the sorted vertices its edges lead to."""
        found: dict[int, set[int]] = {}
        for start, end in self.edges:
            found.setdefault(start, set()).add(end)
        return {start: sorted(found[start]) for start in sorted(found)}


def vertex_name(i: int) -> str:
    """The zero-padded name of vertex ``i``."""
    return str(i).zfill(len(str(POWER_OF_TEN_FOR_PADDING)))


def _tagged(text: str) -> str:
    return SEP_OPEN_TAG + text + SEP_CLOSE_TAG


def edge_monomial_name(i: int, j: int) -> str:
    """Name of the monomial for the edge from vertex ``i`` to vertex ``j``."""
    return "e" + _tagged(vertex_name(i)) + _tagged(vertex_name(j))


def theta_monomial(i: int, j: int, suffix: str, env: Sequence[int]) -> tuple[str, int]:
    """Name and coefficient of the theta monomial of the segment from ``i`` to ``j``."""
    name = "t" + _tagged(vertex_name(i)) + _tagged(vertex_name(j)) + _tagged(suffix)
    return name, sum(env[max(i, 0):min(j, len(env))])


def basic_edge(start: int, end: int) -> LinCombination:
    """Sum of the unit edge monomials from ``start`` to ``end``."""
    return LinCombination({edge_monomial_name(i, i + 1): 1 for i in range(start, end)})


def simple_segment(
    start: int,
    end: int,
    env: Sequence[int],
    restriction_index: int = -1,
    restricted: dict[Env, set[str]] | None = None,
) -> DirectPathSegment:
    """The direct segment from ``start`` to ``end`` for ``env``.

    When the restricted edge lies strictly inside the segment, the segment
    requires that edge to keep its passage time from ``env``, and the name of
    its theta monomial is recorded in ``restricted`` under ``env``.
    """
    env = tuple(env)
    terms = dict(basic_edge(start, end))
    if end > start + 1:
        terms["a"] = end - start - 1
    restrictions: dict[int, int] = {}
    if start < restriction_index + 1 < end:
        name, coefficient = theta_monomial(start, end, env_to_string(env) + "R", env)
        terms[name] = coefficient
        restrictions[restriction_index] = env[restriction_index]
        if restricted is not None:
            restricted.setdefault(env, set()).add(name)
    elif end > start + 1:
        name, coefficient = theta_monomial(start, end, env_to_string(env), env)
        terms[name] = coefficient
    return DirectPathSegment(LinCombination(terms), restrictions)


def initial_graph(m: int = ONLY_ACCEPTABLE_M) -> MainGraph:
    """The graph of unit edges for the environment of ``m`` a's.

    A length outside ``1 .. MAX_M`` falls back to the accepted length.
    """
    if m < 1 or m > MAX_M:
        m = ONLY_ACCEPTABLE_M
    base = base_environment(m)
    return MainGraph({(i, i + 1): {base: simple_segment(i, i + 1, base)} for i in range(m + 1)})


def _first_acceptable(segments: SegmentMap, env: Sequence[int]) -> LinCombination | None:
    for _, seg in _sorted_map(segments).items():
        if seg.restrictions_satisfied(env):
            return seg.cost
    return None


def straightforward_evaluation(env: Sequence[int], graph: MainGraph) -> LinCombination:
    """Cost of the path that jumps over every b of ``env``; empty when the graph lacks it."""
    destination = len(env) + 1
    result = LinCombination()
    segments_used = 0
    start, end = 0, 1
    while start < destination:
        while end < destination and env[end - 1] == 1:
            end += 1
        segments = graph.edges.get((start, end))
        if segments is None:
            return LinCombination()
        cost = _first_acceptable(segments, env)
        if cost is None:
            return LinCombination()
        segments_used += 1
        result += cost
        start, end = end, end + 1
    result += LinCombination({"a": segments_used - 1})
    return result


def _is_a(vertex: int, env: Sequence[int]) -> bool:
    return vertex == 0 or vertex > len(env) or env[vertex - 1] == 0


def subgraph_of_as(graph: MainGraph, env: Sequence[int]) -> MainGraph:
    """A copy of the edges of ``graph`` whose both ends are a-vertices of ``env``."""
    return MainGraph(
        {
            edge: {key: seg.copy() for key, seg in segments.items()}
            for edge, segments in graph.edges.items()
            if _is_a(edge[0], env) and _is_a(edge[1], env)
        }
    )


def remove_double_edges(graph: MainGraph, env: Sequence[int]) -> None:
    """Where an edge holds several segments, one of them from ``env``, keep only that one."""
    env = tuple(env)
    for edge, segments in list(graph.edges.items()):
        if len(segments) > 1 and env in segments:
            graph.edges[edge] = {env: segments[env]}


def passage_times(
    graph: MainGraph, start: int, end: int, env: Sequence[int]
) -> list[DirectPathSegment]:
    """Segments from ``start`` to ``end`` whose restrictions ``env`` satisfies, in key order."""
    return [seg for _, seg in graph.segments((start, end)) if seg.restrictions_satisfied(env)]


def _record_passage(segments: SegmentMap, candidate: DirectPathSegment) -> None:
    for key in sorted_envs(segments):
        existing = segments[key]
        if existing.cost.leq(candidate.cost):
            return
        if candidate.cost.lneq(existing.cost):
            existing.cost = candidate.cost.copy()
            return
    segments[(len(segments),)] = candidate


def _combine(first: DirectPathSegment, second: DirectPathSegment) -> DirectPathSegment | None:
    cost = LinCombination({"a": 1})
    cost += first.cost
    cost += second.cost
    restrictions = dict(first.restrictions)
    for index, value in sorted(second.restrictions.items()):
        if restrictions.setdefault(index, value) != value:
            return None
    return DirectPathSegment(cost, restrictions)


def _extend_through(graph: MainGraph, stop: int, destination: int, env: Sequence[int]) -> None:
    first_pieces = passage_times(graph, 0, stop, env)
    if not first_pieces:
        return
    second_pieces = passage_times(graph, stop, destination, env)
    if not second_pieces:
        return
    for first in first_pieces:
        for second in second_pieces:
            combined = _combine(first, second)
            if combined is None:
                continue
            edge = (0, destination)
            if edge not in graph.edges:
                graph.edges[edge] = {(0,): combined}
            else:
                _record_passage(graph.edges[edge], combined)


def shortest_paths_through_as(graph: MainGraph, env: Sequence[int]) -> SegmentMap:
    """Minimal costs of paths through the a-vertices of ``env`` from start to finish.

    ``graph`` is left unchanged.
    """
    env = tuple(env)
    sub = subgraph_of_as(graph, env)
    remove_double_edges(sub, env)
    adjacency = sub.neighbors()
    pending = {0}
    while pending:
        rho = min(pending)
        for nxt in adjacency.get(rho, []):
            _extend_through(sub, rho, nxt, env)
            pending.add(nxt)
        pending.discard(rho)
    return _sorted_map(sub.edges.get((0, len(env) + 1), {}))


def graph_update(
    graph: MainGraph,
    env: Sequence[int],
    restriction_index: int = -1,
    restricted: dict[Env, set[str]] | None = None,
) -> None:
    """Add to ``graph`` the segments that jump over the b's of ``env`` and the restricted edge."""
    env = tuple(env)
    destination = len(env) + 1
    start, end = 0, 1
    while start < destination:
        while end < destination and (env[end - 1] == 1 or end - 1 == restriction_index):
            end += 1
        if end - start > 1:
            edge = (start, end)
            if edge not in graph.edges:
                graph.edges[edge] = {
                    env: simple_segment(start, end, env, restriction_index, restricted)
                }
            elif start < restriction_index + 1 < end:
                graph.edges[edge][env] = simple_segment(
                    start, end, env, restriction_index, restricted
                )
        start, end = end, end + 1