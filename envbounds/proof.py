"""Evaluations of every environment and the search for a lower-bound proof.

Each environment of length four is given a small sorted list of candidate
evaluations (linear combinations of passage times, thetas and the values of
``f`` in other environments).  A proof is a choice of one evaluation per
environment whose signed sum, the environment derivative, is bounded below
by the requested value for every choice of the thetas.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from envbounds.algebra import LinCombination
from envbounds.environments import (
    ONLY_ACCEPTABLE_M,
    Env,
    HelpfulnessIndicators,
    all_environments,
    base_environment,
    env_key,
    env_to_string,
    is_number_of_zeroes_odd,
    negatively_helpful_associate,
    sorted_envs,
    split_environments,
)
from envbounds.graph import (
    MainGraph,
    SegmentMap,
    graph_update,
    initial_graph,
    shortest_paths_through_as,
    straightforward_evaluation,
)
from envbounds.indices import iter_multi_index

ENV_ABBREVIATION = "d"

Evaluations = dict[Env, list[LinCombination]]


def _env_name(env: Sequence[int]) -> str:
    return ENV_ABBREVIATION + env_to_string(env)


def _sorted_unique(combinations: Iterable[LinCombination]) -> list[LinCombination]:
    return sorted(set(combinations))


def _remaining_to_string(remaining: Sequence[Sequence[Env]]) -> str:
    parts = ["Remaining environments: \n"]
    for level, envs in enumerate(remaining):
        parts.append(f"***** N(b)={level}\n")
        parts.append("".join(env_to_string(env) + " " for env in envs))
        parts.append("\n")
    return "".join(parts)


def evaluations_to_string(evaluations: Mapping[Env, Sequence[LinCombination]]) -> str:
    """Text listing of the evaluations of every environment, in environment order."""
    parts = []
    for env in sorted_envs(evaluations):
        body = "".join(f"{i}->{c},\n" for i, c in enumerate(evaluations[env]))
        parts.append(f"{env_to_string(env)}:\n{body}\n")
    return "".join(parts)


@dataclass
class MainEvaluator:
    """The graph, the evaluations found so far and the environments still open."""

    graph: MainGraph = field(default_factory=MainGraph)
    evaluations: Evaluations = field(default_factory=dict)
    remaining: list[list[Env]] = field(default_factory=list)
    critical_errors: int = 0
    error_messages: str = ""

    def __str__(self) -> str:
        text = "\n***** Main graph *****\n" + str(self.graph)
        text += "\n***** All environment evaluations *****\n"
        text += evaluations_to_string(self.evaluations)
        if self.error_messages:
            text += "\n***** Error messages: *****\n" + self.error_messages
        else:
            text += "\n***** No error messages *****\n"
        text += f"Number of critical errors: {self.critical_errors}\n"
        return text + _remaining_to_string(self.remaining)


@dataclass
class BacktrackingState:
    """Evaluations and open environments that the proof search changes and restores."""

    evaluations: Evaluations = field(default_factory=dict)
    remaining: list[list[Env]] = field(default_factory=list)

    def copy(self) -> BacktrackingState:
        return BacktrackingState(
            {env: list(evs) for env, evs in self.evaluations.items()},
            [list(level) for level in self.remaining],
        )

    def __str__(self) -> str:
        text = "\n***** Backgracking - all environment evaluations *****\n"
        text += evaluations_to_string(self.evaluations)
        return text + _remaining_to_string(self.remaining)


@dataclass
class ProofData:
    """Outcome of a proof search: the derivative and the evaluations chosen."""

    proof_found: bool = False
    derivative: LinCombination = field(default_factory=LinCombination)
    evaluations: Evaluations = field(default_factory=dict)


def b_minus_a() -> LinCombination:
    """The combination ``b - a``."""
    return LinCombination({"b": 1, "a": -1})


def simple_evaluation(name: str, n_b_minus_a: int = 0) -> list[LinCombination]:
    """The single evaluation ``name + n_b_minus_a * (b - a)``."""
    combination = LinCombination({name: 1})
    if n_b_minus_a != 0:
        combination += b_minus_a() * n_b_minus_a
    return [combination]


def _costs_in_order(paths: SegmentMap) -> list[LinCombination]:
    return [paths[key].cost.copy() for key in sorted_envs(paths)]


def choose_first_evaluation(paths: SegmentMap) -> tuple[list[LinCombination], str]:
    """The cost of the first path and a message about ambiguity or absence."""
    costs = _costs_in_order(paths)
    if not costs:
        return [], "Error: No paths"
    message = "Warning: Multiple paths. Chosen the first one" if len(costs) > 1 else ""
    return [costs[0]], message


def choose_evaluation_with_monomial(
    paths: SegmentMap, name: str
) -> tuple[list[LinCombination], str]:
    """The cost of the first path containing the monomial ``name``, with a message."""
    costs = _costs_in_order(paths)
    if not costs:
        return [], "Error: No paths"
    matching = [cost for cost in costs if name in cost]
    if not matching:
        return [costs[0]], "Warning: No path that contains restricted environment."
    if len(matching) > 1:
        return [matching[0]], (
            "Warning: Multiple paths that contain restricted environment. "
            "Chosen the first one."
        )
    return [matching[0]], ""


def choose_best_evaluation(
    paths: SegmentMap, restricted: Mapping[Env, set[str]], env: Sequence[int]
) -> tuple[list[LinCombination], str]:
    """Prefer a path through the restricted theta recorded for ``env``, if any."""
    names = restricted.get(tuple(env))
    if not names:
        return choose_first_evaluation(paths)
    return choose_evaluation_with_monomial(paths, min(names))


def update_helpful_pair(evaluations: Evaluations, h: HelpfulnessIndicators) -> None:
    """Evaluate ``h.r`` and its negatively helpful associate by the value at ``h.r``."""
    name = _env_name(h.r)
    evaluations[h.r] = simple_evaluation(name)
    nha = negatively_helpful_associate(h)
    if nha is None or nha == h.r:
        return
    if sum(nha) > sum(h.r):
        evaluations[nha] = simple_evaluation(name)
    else:
        evaluations[nha] = simple_evaluation(name, -1)


def best_segment_costs(paths: SegmentMap, count: int) -> list[LinCombination]:
    """Sorted distinct costs of the first ``count`` paths; a negative count takes all."""
    costs = _costs_in_order(paths)
    if count < 0 or count > len(costs):
        count = len(costs)
    return _sorted_unique(costs[:count])


def _remove_evaluated(remaining: list[list[Env]], evaluations: Evaluations) -> None:
    for env in evaluations:
        level = remaining[sum(env)]
        if env in level:
            level.remove(env)


def _attempt_obvious(evaluator: MainEvaluator, level_index: int, count: int) -> None:
    level = evaluator.remaining[level_index]
    solved = set()
    for env in level:
        paths = shortest_paths_through_as(evaluator.graph, env)
        if paths:
            evaluator.evaluations[env] = best_segment_costs(paths, count)
            solved.add(env)
    level[:] = [env for env in level if env not in solved]


def create_evaluator(h: HelpfulnessIndicators) -> MainEvaluator:
    """Build the graph and evaluate every environment that the graph allows."""
    if len(h.r) != ONLY_ACCEPTABLE_M or len(h.h_indicators) != ONLY_ACCEPTABLE_M:
        raise ValueError(f"indicators must have length {ONLY_ACCEPTABLE_M}")
    size = len(h.r)
    restricted: dict[Env, set[str]] = {}
    evaluator = MainEvaluator(graph=initial_graph(size))
    base = base_environment(size)
    evaluator.evaluations[base] = [straightforward_evaluation(base, evaluator.graph)]
    split = split_environments(h)
    for env, broken in split.items():
        if broken == -1:
            graph_update(evaluator.graph, env, broken, restricted)
            evaluator.evaluations[env] = [straightforward_evaluation(env, evaluator.graph)]
    for env, broken in split.items():
        if broken != -1:
            graph_update(evaluator.graph, env, broken, restricted)
    for env, broken in split.items():
        if broken != -1:
            paths = shortest_paths_through_as(evaluator.graph, env)
            best, message = choose_best_evaluation(paths, restricted, env)
            evaluator.evaluations[env] = best
            if message:
                evaluator.error_messages += message + "\n"
    update_helpful_pair(evaluator.evaluations, h)
    evaluator.remaining = all_environments(size)
    _remove_evaluated(evaluator.remaining, evaluator.evaluations)
    _attempt_obvious(evaluator, 3, 1)
    _attempt_obvious(evaluator, 1, -1)
    evaluator.critical_errors = 0
    for level in range(len(evaluator.remaining) - 2):
        if evaluator.remaining[level]:
            evaluator.error_messages += (
                "Error: Was not able to find suitable paths in environments "
                f"where N(b)={level}\n"
            )
            evaluator.critical_errors += 1
    return evaluator


def lower_bound_for_all_t(x: LinCombination) -> int:
    """Sum of the negative coefficients of monomials other than ``a`` and ``b``."""
    return sum(c for name, c in x if name not in ("a", "b") and c < 0)


def bound_holds(derivative: LinCombination, lower_bound: int) -> bool:
    """Tell whether ``derivative`` is at least ``lower_bound`` for every theta."""
    return lower_bound_for_all_t(derivative) + derivative.component("b") >= lower_bound


def derivative_if_bound_holds(
    evaluations: Mapping[Env, Sequence[LinCombination]],
    lower_bound: int,
    choices: Sequence[int],
) -> LinCombination | None:
    """The signed sum of the chosen evaluations, or None when it misses the bound.

    ``choices[i]`` picks the evaluation of the ``i``-th environment in order.
    """
    derivative = LinCombination()
    for env, choice in zip(sorted_envs(evaluations), choices, strict=True):
        value = evaluations[env][choice].copy()
        if is_number_of_zeroes_odd(env):
            value *= -1
        derivative += value
    return derivative if bound_holds(derivative, lower_bound) else None


def _select(
    evaluations: Evaluations, envs: Sequence[Env], choices: Sequence[int]
) -> Evaluations:
    return {
        env: (list(evaluations[env]) if len(evaluations[env]) <= 1 else [evaluations[env][c]])
        for env, c in zip(envs, choices)
    }


def search_ready_graph(state: BacktrackingState, lower_bound: int) -> ProofData:
    """Try every choice of one evaluation per environment, first in odometer order."""
    envs = sorted_envs(state.evaluations)
    bounds = [len(state.evaluations[env]) for env in envs]
    for choices in iter_multi_index(bounds):
        derivative = derivative_if_bound_holds(state.evaluations, lower_bound, choices)
        if derivative is not None:
            return ProofData(True, derivative, _select(state.evaluations, envs, choices))
    return ProofData()


def _backtrack(state: BacktrackingState, lower_bound: int) -> ProofData:
    level = state.remaining[3]
    if not level:
        return search_ready_graph(state, lower_bound)
    proof = ProofData()
    attempt = level[0]
    level.remove(attempt)
    name = _env_name(attempt)
    state.evaluations[attempt] = simple_evaluation(name)
    unhelpful_match = simple_evaluation(name, -1)
    for i, value in enumerate(attempt):
        if proof.proof_found:
            break
        if value != 1:
            continue
        unhelpful = attempt[:i] + (0,) + attempt[i + 1:]
        saved = state.evaluations.setdefault(unhelpful, [])
        if saved and len(saved[0]) > 4:
            state.evaluations[unhelpful] = list(unhelpful_match)
            proof = _backtrack(state, lower_bound)
            state.evaluations[unhelpful] = saved
    del state.evaluations[attempt]
    level.append(attempt)
    level.sort(key=env_key)
    return proof


def _search_with_all_b(
    state: BacktrackingState, env_to_all_b: Env, lower_bound: int
) -> ProofData:
    state = state.copy()
    if not state.remaining[4]:
        raise ValueError("no open environment with every passage time b")
    all_b = state.remaining[4][0]
    state.remaining[4].clear()
    if env_to_all_b in state.remaining[3]:
        state.remaining[3].remove(env_to_all_b)
    state.evaluations[all_b] = simple_evaluation(_env_name(all_b))
    state.evaluations[env_to_all_b] = list(state.evaluations[all_b])
    return _backtrack(state, lower_bound)


def search_for_proof(h: HelpfulnessIndicators, lower_bound: int) -> ProofData:
    """Search for a proof that the environment derivative is at least ``lower_bound``."""
    evaluator = create_evaluator(h)
    state = BacktrackingState(
        {env: list(evs) for env, evs in evaluator.evaluations.items()},
        [list(level) for level in evaluator.remaining],
    )
    proof = ProofData()
    for env in list(state.remaining[3]):
        proof = _search_with_all_b(state, env, lower_bound)
        if proof.proof_found:
            break
    return proof