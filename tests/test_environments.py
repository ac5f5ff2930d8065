import pytest

from envbounds.environments import (
    HelpfulnessIndicators,
    all_environments,
    base_environment,
    env_key,
    env_sum,
    env_to_string,
    find_flip_to_target,
    first_helpful_index,
    generate_helpfulness_indicators,
    indicators_from_string,
    indicators_map_from_string,
    is_number_of_zeroes_odd,
    is_repairable_pair,
    negatively_helpful_associate,
    repair_environments,
    repair_information,
    sorted_envs,
    split_environments,
    to_bits,
    two_to_power,
)


def test_env_key_shorter_first():
    assert env_key((1, 1)) < env_key((0, 0, 0))


def test_sorted_envs_compares_from_the_right():
    assert sorted_envs([(0, 1), (1, 0)]) == [(1, 0), (0, 1)]


def test_env_to_string_formats():
    assert env_to_string((0, 1, 1, 0)) == "(0110)"
    assert env_to_string((0, 1), "[", "]", ",") == "[0,1]"
    assert env_to_string(()) == ""


def test_env_sum_clamps_bounds():
    v = (1, 1, 0, 1)
    assert env_sum(v) == sum(v)
    assert env_sum(v, -5, 100) == sum(v)
    assert env_sum(v, 1, 3) == v[1] + v[2]


def test_two_to_power_ignores_sign():
    assert two_to_power(-3) == two_to_power(3) == 2**3


@pytest.mark.parametrize("x", range(16))
def test_to_bits_round_trip(x):
    bits = to_bits(x, 4)
    assert len(bits) == 4
    assert int("".join(map(str, bits)), 2) == x


def test_base_environment():
    assert base_environment(4) == (0, 0, 0, 0)


def test_is_number_of_zeroes_odd():
    assert is_number_of_zeroes_odd((0, 1, 1, 1))
    assert not is_number_of_zeroes_odd((0, 0, 1, 1))


def test_indicators_str_and_invalid():
    assert str(HelpfulnessIndicators((0, 1, 0, 1), (0, 1, 0, 0))) == "abab->0100"
    assert str(HelpfulnessIndicators((0, 1), (0,))) == "Invalid indicators"


def test_indicators_reversed_twice_is_identity():
    h = HelpfulnessIndicators((0, 0, 1, 1), (1, 0, 0, 0))
    assert h.reversed().r == (1, 1, 0, 0)
    assert h.reversed().reversed() == h


def test_indicators_order_by_r_first():
    a = HelpfulnessIndicators((1, 0, 1, 0), (0, 0, 0, 1))
    b = HelpfulnessIndicators((0, 1, 0, 1), (1, 0, 0, 0))
    assert a < b
    assert not b < a


def test_first_helpful_index():
    assert first_helpful_index(HelpfulnessIndicators((0, 1, 0, 1), (0, 0, 1, 0))) == 2
    assert first_helpful_index(HelpfulnessIndicators((0, 1), (0, 0))) is None
    with pytest.raises(ValueError):
        first_helpful_index(HelpfulnessIndicators((0, 1), (0,)))


def test_negatively_helpful_associate_flips_first_helpful():
    h = HelpfulnessIndicators((0, 1, 0, 1), (0, 1, 0, 0))
    nha = negatively_helpful_associate(h)
    assert nha == (0, 0, 0, 1)
    assert negatively_helpful_associate(HelpfulnessIndicators((0, 1, 0, 1), (0, 0, 0, 0))) is None
    assert negatively_helpful_associate(HelpfulnessIndicators((0, 1), (1, 0))) is None


def test_find_flip_to_target():
    assert find_flip_to_target((0, 1, 1, 0), (0, 1, 1, 1)) == 3
    assert find_flip_to_target((0, 1, 1, 0), (1, 0, 1, 0)) == -1
    with pytest.raises(ValueError):
        find_flip_to_target((0, 1), (0, 1, 1))


def test_is_repairable_pair_middle():
    assert is_repairable_pair((0, 1, 0, 1), 3, 1)
    assert not is_repairable_pair((0, 1, 0, 1), 1, 1)
    assert not is_repairable_pair((1, 1, 0, 1), 3, 1)


def test_repair_information_matches_pair_predicate():
    split = {(0, 1, 0, 1): 3, (1, 1, 0, 0): 0}
    info = repair_information(split)
    for v, h in split.items():
        for i in range(len(v)):
            assert ((i, v[i]) in info) or not is_repairable_pair(v, h, i)


@pytest.mark.parametrize("h", generate_helpfulness_indicators())
def test_split_environments_structure(h):
    split = split_environments(h, repair=False)
    nha = negatively_helpful_associate(h)
    assert split[base_environment(4)] == -1
    assert h.r not in split
    assert list(split) == sorted_envs(split)
    for v, broken in split.items():
        if v == base_environment(4):
            continue
        assert sum(v) == 2
        if broken >= 0:
            flipped = list(v)
            flipped[broken] = 1 - flipped[broken]
            assert tuple(flipped) == nha


@pytest.mark.parametrize("h", generate_helpfulness_indicators())
def test_repair_only_clears_indices(h):
    raw = split_environments(h, repair=False)
    repaired = repair_environments(raw)
    assert set(repaired) == set(raw)
    for v in raw:
        assert repaired[v] in (raw[v], -1)
    assert split_environments(h) == repaired


def test_split_environments_rejects_wrong_length():
    assert split_environments(HelpfulnessIndicators((0, 1), (1, 0))) == {}


def test_all_environments_levels():
    levels = all_environments(4)
    assert len(levels) == 5
    assert sum(len(level) for level in levels) == 2**4
    for n_bs, level in enumerate(levels):
        assert all(sum(v) == n_bs for v in level)
        assert level == sorted_envs(level)
    assert all_environments(0) == []


def test_generate_helpfulness_indicators_invariants():
    found = generate_helpfulness_indicators()
    assert found == sorted(found)
    for h in found:
        assert sum(h.r) == 2
        assert sum(h.h_indicators) == 1
        if h.reversed() != h:
            assert h.reversed() not in found
    for i in range(16):
        r = to_bits(i, 4)
        if sum(r) != 2:
            continue
        for j in range(4):
            candidate = HelpfulnessIndicators(r, tuple(int(k == j) for k in range(4)))
            assert candidate in found or candidate.reversed() in found


def test_indicators_from_string():
    h = indicators_from_string("abAB 0100")
    assert h.r == (0, 1, 0, 1)
    assert h.h_indicators == (0, 1, 0, 0)
    padded = indicators_from_string("ab1")
    assert padded.h_indicators == (1, 0)


def test_indicators_map_from_string():
    parsed = indicators_map_from_string("_k_x_/k__v_abba0010_/v__k_w_/k__v_ba_/v_")
    assert list(parsed) == ["w", "x"]
    assert parsed["x"] == HelpfulnessIndicators((0, 1, 1, 0), (0, 0, 1, 0))
    assert parsed["w"].h_indicators == (0, 0)