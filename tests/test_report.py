import pytest

from envbounds.algebra import LinCombination
from envbounds.environments import HelpfulnessIndicators
from envbounds.latex import NameComponents, f_sigma_omega, ineq_sign, make_theta
from envbounds.proof import ProofData
from envbounds.report import (
    ReportWriter,
    WritingData,
    lin_comb_to_latex,
    list_of_all_thetas,
    monomial_to_latex,
)


def test_translate_found_and_missing():
    data = WritingData(translations={"intro": "Hello"})
    assert data.translate("intro") == "Hello"
    assert data.translate("other") == "Translation not found for other"


def test_monomial_signs_and_scalars():
    data = WritingData()
    assert monomial_to_latex(data, "a", -3, False) == "-3a"
    assert monomial_to_latex(data, "b", 1, True) == "+b"
    assert monomial_to_latex(data, "b", 1, False) == "b"


def test_monomial_edge_and_environment():
    data = WritingData()
    assert monomial_to_latex(data, "e0001", 1, False) == "e_{01}"
    env = (0, 1, 0, 1)
    assert monomial_to_latex(data, "d(0101)", 1, True) == "+" + f_sigma_omega(env)


def test_monomial_theta_is_recorded():
    data = WritingData()
    plain = monomial_to_latex(data, "t0002(0101)", 1, False)
    hatted = monomial_to_latex(data, "t0103(0101)R", 2, True)
    assert plain == make_theta(0, 2, (0, 1, 0, 1))
    assert hatted == "+2" + make_theta(1, 3, (0, 1, 0, 1), True)
    assert data.parameters == {plain}
    assert data.parameters_h == {make_theta(1, 3, (0, 1, 0, 1), True)}
    assert data.raw_thetas[(0, 2)] == {NameComponents.from_string("t0002(0101)")}


def test_unknown_monomial_is_dropped():
    assert monomial_to_latex(WritingData(), "zzz", 5, True) == ""


def test_lin_comb_to_latex_orders_by_name():
    data = WritingData()
    assert lin_comb_to_latex(data, LinCombination({"b": -1, "a": 4})) == "4a-b"


def test_add_equation_skips_identity():
    data = WritingData()
    data.add_equation((0, 1, 0, 1), [LinCombination({"d(0101)": 1})])
    assert data.inequalities == {}


def test_add_equation_records_relation():
    data = WritingData()
    env = (1, 1, 0, 0)
    data.add_equation(env, [LinCombination({"a": 2})])
    assert data.inequalities == {2: {f_sigma_omega(env) + " & " + ineq_sign(2, False) + " & 2a"}}


def test_add_equation_requires_evaluation():
    with pytest.raises(ValueError):
        WritingData().add_equation((0, 0, 0, 0), [])


def test_collect_builds_derivative_inequality():
    data = WritingData()
    proof = ProofData(True, LinCombination({"b": 1}), {(0, 0, 1, 1): [LinCombination({"a": 1})]})
    data.collect(proof)
    assert data.der_inequality == "\\partial_Sf(\\omega)&\\geq&b"
    assert 2 in data.inequalities


def _proof():
    names = {f"e0{i}0{i + 1}": 1 for i in range(5)}
    derivative = LinCombination({"a": 4, **names, "t0002(0011)": 1})
    evaluations = {
        (0, 0, 0, 0): [LinCombination({"a": 4})],
        (0, 0, 1, 1): [LinCombination({"t0002(0011)": 1, "a": 1})],
    }
    return ProofData(True, derivative, evaluations)


def test_write_without_translations_labels_sections():
    writer = ReportWriter()
    h = HelpfulnessIndicators((0, 0, 1, 1), (1, 0, 0, 0))
    first = writer.write(h, _proof())
    second = writer.write(h, _proof())
    assert "Translation not found for sectionName" in first
    assert "{eqn|cb0000ce" in first
    assert "{eqn|cb0001ce" in second
    assert writer.section_counter == 2


def test_write_uses_translations_and_rho():
    translations = {
        "thetaIn0bma": "<THETA NOTE>",
        "envAnalysis07": "[*gName*|*theta*|*eStrs*]",
        "sectionName": "<SECTION>",
    }
    h = HelpfulnessIndicators((0, 0, 1, 1), (1, 0, 0, 0))
    report = ReportWriter(translations).write(h, _proof())
    assert report.startswith("<SECTION>$")
    assert "\\rho+" in report
    assert "<THETA NOTE>" in report
    assert "[\\gamma_{02}(a,a,b,b)|\\theta_{02}(a,a,b,b)|e_{01}+e_{12}]" in report


def test_write_rejects_indicators_without_helpful_position():
    h = HelpfulnessIndicators((0, 0, 1, 1), (0, 0, 0, 0))
    with pytest.raises(ValueError):
        ReportWriter().write(h, _proof())