"""LaTeX reports of the lower-bound proofs."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from envbounds.algebra import LinCombination
from envbounds.environments import (
    Env,
    HelpfulnessIndicators,
    env_sum,
    first_helpful_index,
    repair_environments,
    sorted_envs,
    split_environments,
)
from envbounds.latex import (
    NameComponents,
    ab_string,
    case_description,
    conclusion,
    correct_set,
    f_sigma_omega,
    geodesic_section_name,
    e_strings,
    ineq_sign,
    make_theta,
    sigma_omega,
)
from envbounds.proof import ProofData

LABEL_PADDING = 1000
RHO_EXPANSION = "4a+e_{01}+e_{12}+e_{23}+e_{34}+e_{45}+"

_ARCS = (
    (0, 2),
    (0, 3),
    (0, 4),
    (1, 3),
    (1, 4),
    (1, 5),
    (2, 4),
    (2, 5),
    (3, 5),
)


def _replace_all(text: str, mapping: Mapping[str, str]) -> str:
    """Replace every key of ``mapping`` in ``text`` in a single pass."""
    if not mapping:
        return text
    pattern = re.compile(
        "|".join(re.escape(k) for k in sorted(mapping, key=len, reverse=True))
    )
    return pattern.sub(lambda match: mapping[match.group(0)], text)


@dataclass
class WritingData:
    """Translations and the pieces of LaTeX gathered while writing one report."""

    translations: dict[str, str] = field(default_factory=dict)
    unique_label: str = ""
    parameters: set[str] = field(default_factory=set)
    parameters_h: set[str] = field(default_factory=set)
    vp2_repaired: dict[Env, int] = field(default_factory=dict)
    inequalities: dict[int, set[str]] = field(default_factory=dict)
    raw_thetas: dict[tuple[int, int], set[NameComponents]] = field(default_factory=dict)
    der_inequality: str = ""

    def translate(self, key: str) -> str:
        """The text stored under ``key``, or a note that it is missing."""
        return self.translations.get(key, "Translation not found for " + key)

    def label(self, name: str) -> str:
        return "{eqn|" + self.unique_label + name + "}"

    def add_equation(self, env: Sequence[int], evaluations: Sequence[LinCombination]) -> None:
        """Record the relation between ``f`` at ``env`` and its first evaluation."""
        if not evaluations:
            raise ValueError("an environment needs at least one evaluation")
        num_bs = sum(env)
        left = f_sigma_omega(env)
        right = lin_comb_to_latex(self, evaluations[0])
        if left != right:
            sign = ineq_sign(num_bs, "omega" in right)
            self.inequalities.setdefault(num_bs, set()).add(f"{left} & {sign} & {right}")

    def collect(self, proof: ProofData) -> None:
        """Gather the derivative inequality and the relation for every environment."""
        self.der_inequality = "\\partial_Sf(\\omega)&\\geq&" + lin_comb_to_latex(
            self, proof.derivative
        )
        for env in sorted_envs(proof.evaluations):
            self.add_equation(env, proof.evaluations[env])


def _name_to_latex(data: WritingData, name: str) -> str:
    if name in ("a", "b"):
        return name
    nc = NameComponents.from_string(name)
    if nc.name == "e":
        return f"e_{{{nc.start}{nc.end}}}"
    if nc.name == "d":
        return f_sigma_omega(nc.env)
    if nc.name == "t":
        theta = make_theta(nc.start, nc.end, nc.env, nc.restricted)
        data.raw_thetas.setdefault((nc.start, nc.end), set()).add(nc)
        (data.parameters_h if nc.restricted else data.parameters).add(theta)
        return theta
    return ""


def monomial_to_latex(
    data: WritingData, name: str, coefficient: int, printed_already: bool
) -> str:
    """One signed monomial in LaTeX; thetas met on the way are recorded in ``data``."""
    if coefficient < 0:
        sign = "-"
    else:
        sign = "+" if printed_already else ""
    magnitude = abs(coefficient)
    scalar = str(magnitude) if magnitude > 1 else ""
    latex_name = _name_to_latex(data, name)
    if not latex_name:
        return ""
    return sign + scalar + latex_name


def lin_comb_to_latex(data: WritingData, combination: LinCombination) -> str:
    """The combination in LaTeX, monomials in order of name."""
    return "".join(
        monomial_to_latex(data, name, c, position != 0)
        for position, (name, c) in enumerate(combination)
    )


def list_of_all_thetas(data: WritingData) -> str:
    """An eqnarray listing every theta, plain ones first, then hatted ones."""
    total = len(data.parameters) + len(data.parameters_h)
    parts = ["\\begin{eqnarray*}&& "]
    i = 0
    for theta in sorted(data.parameters):
        if i == total - 1:
            parts.append(", \\mbox{ and }")
        parts.append(theta)
        if i < total - 2:
            parts.append(", ")
        if i == 2:
            parts.append("\\\\&&")
        i += 1
    for theta in sorted(data.parameters_h):
        if i == total - 1:
            parts.append(", \\mbox{ and }")
        parts.append(theta)
        if i < total - 2:
            parts.append(", ")
        i += 1
    parts.append("\\end{eqnarray*}")
    return "".join(parts)


def _conclusion_for(r: Sequence[int], j: int, eqn_array: bool = False) -> str:
    indicators = tuple(1 if i == j else 0 for i in range(len(r)))
    return conclusion(HelpfulnessIndicators(tuple(r), indicators), eqn_array)


def _repair_comment(data: WritingData, env: Env, repaired: int, printed_already: bool) -> str:
    key = "openingAdditionalRepair" if printed_already else "openingFirstRepair"
    text = data.translate(key)
    text += "$" + sigma_omega(env) + " \\in " + correct_set(env[repaired], repaired) + "$."
    plain = HelpfulnessIndicators(env, (0,) * len(env))
    text += data.translate("closeRepair") + "$" + conclusion(plain) + "$.\n"
    return text


def _repair_comments(
    data: WritingData, before: Mapping[Env, int], after: Mapping[Env, int]
) -> str:
    text = ""
    for env in sorted_envs(before):
        broken = before[env]
        if broken > -1 and after.get(env) == -1:
            text += _repair_comment(data, env, broken, bool(text))
    return text


def _summarize_split(data: WritingData, split: Mapping[Env, int], numbered: int) -> str:
    text = data.translate(f"openingEnvSummary{numbered}")
    last = ".\\label" + data.label("environments") + "\n" if numbered else ".\\nonumber \n"
    envs = sorted_envs(split)
    for position, env in enumerate(envs):
        text += _conclusion_for(env, split[env], True)
        text += last if position == len(envs) - 1 else ";\\nonumber \\\\ \n"
    return text + data.translate(f"closingEnvSummary{numbered}")


def _summarize_environment(data: WritingData, h: HelpfulnessIndicators) -> str:
    split = split_environments(h, repair=False)
    data.vp2_repaired = repair_environments(split)
    comments = _repair_comments(data, split, data.vp2_repaired)
    if not comments:
        return _summarize_split(data, split, 1)
    return (
        _summarize_split(data, split, 0)
        + comments
        + _summarize_split(data, data.vp2_repaired, 1)
    )


def _proposition_conclusion(data: WritingData, h: HelpfulnessIndicators) -> str:
    index = first_helpful_index(h)
    if index is None:
        raise ValueError("the indicators mark no helpful position")
    text = f_sigma_omega(h.r) + "="
    if h.r[index] == 1:
        text += "(b-a)+"
    flipped = list(h.r)
    flipped[index] = 1 - flipped[index]
    text += f_sigma_omega(flipped)
    return text + ". \\label" + data.label("theoremForComputer")


def _list_of_eqs_at_level(data: WritingData, level: int) -> str:
    equations = sorted(data.inequalities.get(level, ()))
    if not equations:
        return ""
    text = "\\begin{eqnarray}\n"
    for counter, equation in enumerate(equations):
        text += equation
        if counter == len(equations) - 1:
            text += ". \\label" + data.label(f"l{level}Last")
        else:
            text += ", \\label" + data.label(f"l{level}c{counter}") + "\\\\"
    return text + "\\end{eqnarray}\n"


def _gamma_theta_equation(
    data: WritingData, nc: NameComponents, geodesic: str, theta: str
) -> str:
    replacements = {
        "*gName*": geodesic,
        "*enName*": sigma_omega(nc.env),
        "*eStrs*": e_strings(nc.start, nc.end),
        "*thScalar*": "",
        "*aScalar*": "",
        "*theta*": theta,
    }
    if nc.end - nc.start > 2:
        scalar = str(env_sum(nc.env, nc.start, nc.end))
        replacements["*thScalar*"] = "" if scalar == "1" else scalar
        scalar = str(nc.end - nc.start - 1)
        replacements["*aScalar*"] = "" if scalar == "1" else scalar
    return _replace_all(data.translate("envAnalysis07"), replacements)


def _gamma_theta_intro(data: WritingData, nc: NameComponents) -> str:
    hat = "\\hat" if nc.restricted else ""
    env_ab = ab_string(nc.env)
    span = f"{nc.start}{nc.end}"
    geodesic = f"{hat}\\gamma_{{{span}}}{env_ab}"
    theta = f"{hat}\\theta_{{{span}}}{env_ab}"
    text = data.translate("envAnalysis02")
    text += f"{hat}\\gamma{env_ab}$"
    text += data.translate("envAnalysis03")
    text += "$" + sigma_omega(nc.env) + "$. "
    text += data.translate("envAnalysis04")
    text += "$" + geodesic + "$ "
    text += data.translate("envAnalysis05")
    text += geodesic_section_name(nc.start, nc.end)
    text += data.translate("envAnalysis06")
    text += "$" + theta
    text += _gamma_theta_equation(data, nc, geodesic, theta)
    if not nc.restricted:
        return text + data.translate("envAnalysis08Reg")
    text += data.translate("envAnalysis08HatB")
    broken = data.vp2_repaired.get(nc.env)
    if broken is None or broken < 0:
        return text + " error}$."
    letter = "a" if nc.env[broken] == 0 else "b"
    return text + f"{broken + 1}}} = {letter}$. "


@dataclass
class _Picture:
    drawing: str = ""
    gamma_intro: set[str] = field(default_factory=set)
    hat_gamma_intro: set[str] = field(default_factory=set)

    def add_intro(self, data: WritingData, nc: NameComponents) -> None:
        target = self.hat_gamma_intro if nc.restricted else self.gamma_intro
        target.add(_gamma_theta_intro(data, nc))


def _arc(data: WritingData, key: str, start: int, end: int, nc: NameComponents) -> str:
    hat = "\\hat" if nc.restricted else ""
    return data.translate(key) + f"{hat}\\gamma_{{{start}{end}}}" + ab_string(nc.env) + "$};\n"


def _add_arcs(picture: _Picture, data: WritingData, start: int, end: int, key: str) -> None:
    thetas = data.raw_thetas.get((start, end))
    if not thetas:
        return
    ordered = sorted(thetas)
    if len(ordered) > 1:
        keys = [f"{key}a{i}" for i in range(len(ordered))]
    else:
        keys = [key]
    for arc_key, nc in zip(keys, ordered):
        picture.drawing += _arc(data, arc_key, start, end, nc)
        picture.add_intro(data, nc)


def _draw_picture(data: WritingData) -> str:
    picture = _Picture()
    for start, end in _ARCS:
        _add_arcs(picture, data, start, end, f"pictureGamma{start}{end}B")
    text = data.translate("pictureBegin") + picture.drawing + data.translate("pictureEnd")
    text += "".join(sorted(picture.gamma_intro))
    return text + "".join(sorted(picture.hat_gamma_intro))


class ReportWriter:
    """Writes numbered report sections, one per proved case."""

    def __init__(self, translations: Mapping[str, str] | None = None):
        self.translations = dict(translations or {})
        self.section_counter = 0

    def write(self, h: HelpfulnessIndicators, proof: ProofData) -> str:
        """The LaTeX section proving the case ``h`` from ``proof``."""
        data = WritingData(
            translations=self.translations,
            unique_label="cb"
            + str(self.section_counter).zfill(len(str(LABEL_PADDING)))
            + "ce",
        )
        case = case_description(h)
        text = data.translate("sectionName") + "$" + case + "$}\n"
        text += data.translate("introduction01")
        text += _proposition_conclusion(data, h)
        text += data.translate("introduction02")
        data.collect(proof)
        text += _summarize_environment(data, h)
        text += data.translate("level0Open")
        text += "\\label" + data.label("env0")
        text += data.translate("level0Close")
        text += _draw_picture(data)
        text += data.translate("level2P01") + data.label("environments")
        text += data.translate("level2P02")
        text += list_of_all_thetas(data)
        text += data.translate("level2P03")
        text += _list_of_eqs_at_level(data, 2)
        text += data.translate("level1P01")
        text += _list_of_eqs_at_level(data, 1)
        text += data.translate("level3P01")
        text += _list_of_eqs_at_level(data, 3)
        text += data.translate("concludingSentence01")
        text += "(\\ref" + data.label("env0") + "--\\ref" + data.label("l3Last") + ")"
        text += data.translate("concludingSentence02")
        text += "\\begin{eqnarray}" + data.der_inequality + ".\\nonumber\\end{eqnarray}\n"
        if "theta" in data.der_inequality:
            text += data.translate("thetaIn0bma")
        text += data.translate("finalParagraph01") + "$" + case + "$"
        text += data.translate("finalParagraph02")
        text = text.replace(RHO_EXPANSION, "\\rho+")
        self.section_counter += 1
        return text