import pytest

from envbounds.algebra import LinCombination
from envbounds.environments import (
    HelpfulnessIndicators,
    all_environments,
    generate_helpfulness_indicators,
)
from envbounds.graph import DirectPathSegment
from envbounds.proof import (
    BacktrackingState,
    MainEvaluator,
    ProofData,
    b_minus_a,
    best_segment_costs,
    bound_holds,
    choose_best_evaluation,
    choose_evaluation_with_monomial,
    choose_first_evaluation,
    create_evaluator,
    derivative_if_bound_holds,
    evaluations_to_string,
    lower_bound_for_all_t,
    search_for_proof,
    search_ready_graph,
    simple_evaluation,
    update_helpful_pair,
)


def _paths(*costs):
    return {(i,): DirectPathSegment(LinCombination(c)) for i, c in enumerate(costs)}


def test_b_minus_a():
    combination = b_minus_a()
    assert combination.component("b") == 1
    assert combination.component("a") == -1
    assert len(combination) == 2


def test_simple_evaluation_plain():
    assert simple_evaluation("d(0011)") == [LinCombination({"d(0011)": 1})]


def test_simple_evaluation_with_b_minus_a():
    [combination] = simple_evaluation("d(0011)", -1)
    assert combination == LinCombination({"d(0011)": 1}) + b_minus_a() * -1


def test_evaluations_to_string_format():
    text = evaluations_to_string({(0, 1): [LinCombination({"a": 2})]})
    assert text == "(01):\n0->2*a,\n\n"


def test_choose_first_evaluation_empty():
    assert choose_first_evaluation({}) == ([], "Error: No paths")


def test_choose_first_evaluation_multiple():
    best, message = choose_first_evaluation(_paths({"x": 1}, {"y": 2}))
    assert best == [LinCombination({"x": 1})]
    assert message == "Warning: Multiple paths. Chosen the first one"


def test_choose_first_evaluation_single_has_no_message():
    best, message = choose_first_evaluation(_paths({"x": 1}))
    assert best == [LinCombination({"x": 1})]
    assert message == ""


def test_choose_with_monomial_missing():
    best, message = choose_evaluation_with_monomial(_paths({"x": 1}, {"y": 2}), "t")
    assert best == [LinCombination({"x": 1})]
    assert message == "Warning: No path that contains restricted environment."


def test_choose_with_monomial_found():
    best, message = choose_evaluation_with_monomial(_paths({"x": 1}, {"t": 2}), "t")
    assert best == [LinCombination({"t": 2})]
    assert message == ""


def test_choose_with_monomial_several():
    best, message = choose_evaluation_with_monomial(
        _paths({"t": 1}, {"t": 2, "x": 1}), "t"
    )
    assert best == [LinCombination({"t": 1})]
    assert message.startswith("Warning: Multiple paths that contain")


def test_choose_best_prefers_smallest_restricted_name():
    paths = _paths({"x": 1}, {"tA": 1}, {"tB": 1})
    restricted = {(0, 0, 1, 1): {"tB", "tA"}}
    best, message = choose_best_evaluation(paths, restricted, (0, 0, 1, 1))
    assert best == [LinCombination({"tA": 1})]
    assert message == ""


def test_choose_best_without_restriction_takes_first():
    paths = _paths({"x": 1}, {"tA": 1})
    assert choose_best_evaluation(paths, {}, (0, 0, 1, 1)) == choose_first_evaluation(paths)


def test_best_segment_costs_counts():
    paths = _paths({"x": 1, "y": 1}, {"z": 1})
    everything = best_segment_costs(paths, -1)
    assert sorted(everything) == everything
    assert set(everything) == {LinCombination({"x": 1, "y": 1}), LinCombination({"z": 1})}
    assert best_segment_costs(paths, 1) == [LinCombination({"x": 1, "y": 1})]
    assert best_segment_costs(paths, 10) == everything
    assert best_segment_costs({}, 3) == []


def test_lower_bound_ignores_a_b_and_positive_terms():
    x = LinCombination({"a": -5, "b": -3, "y": 4})
    assert lower_bound_for_all_t(x) == 0


def test_bound_holds_is_tight():
    x = LinCombination({"a": -1, "b": 2, "t": -1, "u": 3})
    exact = lower_bound_for_all_t(x) + x.component("b")
    assert bound_holds(x, exact)
    assert not bound_holds(x, exact + 1)


def test_derivative_signs_follow_number_of_as():
    x = LinCombination({"p": 1, "b": 5})
    y = LinCombination({"q": 1})
    evaluations = {(0, 0, 0, 0): [x], (1, 0, 0, 0): [y]}
    derivative = derivative_if_bound_holds(evaluations, -100, [0, 0])
    assert derivative == x - y
    assert derivative_if_bound_holds(evaluations, 100, [0, 0]) is None


def test_search_ready_graph_picks_working_choice():
    failing = LinCombination({"x": -5})
    working = LinCombination({"x": 1, "b": 2})
    state = BacktrackingState({(0, 0): sorted([failing, working])}, [])
    proof = search_ready_graph(state, 0)
    assert proof.proof_found
    assert proof.derivative == working
    assert proof.evaluations == {(0, 0): [working]}


def test_search_ready_graph_reports_failure():
    state = BacktrackingState({(0, 0): [LinCombination({"x": -5})]}, [])
    proof = search_ready_graph(state, 100)
    assert proof.proof_found is False
    assert proof == ProofData()


def test_update_helpful_pair_towards_more_bs():
    h = HelpfulnessIndicators((0, 0, 1, 1), (1, 0, 0, 0))
    evaluations = {}
    update_helpful_pair(evaluations, h)
    assert evaluations[(0, 0, 1, 1)] == simple_evaluation("d(0011)")
    assert evaluations[(1, 0, 1, 1)] == simple_evaluation("d(0011)")


def test_update_helpful_pair_towards_fewer_bs():
    h = HelpfulnessIndicators((0, 0, 1, 1), (0, 0, 1, 0))
    evaluations = {}
    update_helpful_pair(evaluations, h)
    assert evaluations[(0, 0, 0, 1)] == simple_evaluation("d(0011)", -1)


def test_create_evaluator_rejects_wrong_length():
    with pytest.raises(ValueError):
        create_evaluator(HelpfulnessIndicators((0, 1), (1, 0)))


def test_create_evaluator_covers_every_environment():
    h = generate_helpfulness_indicators()[0]
    evaluator = create_evaluator(h)
    assert isinstance(evaluator, MainEvaluator)
    assert (0, 0, 0, 0) in evaluator.evaluations
    open_envs = {env for level in evaluator.remaining for env in level}
    assert not open_envs & set(evaluator.evaluations)
    every_env = {env for level in all_environments(4) for env in level}
    assert open_envs | set(evaluator.evaluations) == every_env
    assert evaluator.critical_errors == evaluator.error_messages.count("Error: Was not able")
    text = str(evaluator)
    assert f"Number of critical errors: {evaluator.critical_errors}\n" in text
    assert "Remaining environments: \n" in text


@pytest.mark.parametrize("h", generate_helpfulness_indicators(), ids=str)
def test_search_for_proof_succeeds_in_special_cases(h):
    proof = search_for_proof(h, -2)
    assert proof.proof_found
    assert bound_holds(proof.derivative, -2)
    assert all(len(evs) <= 1 for evs in proof.evaluations.values())