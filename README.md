# envbounds

`envbounds` searches for computer-assisted proofs of lower bounds on
higher-order environment derivatives of a passage-time function. It works on
environments of length four that hold two `a` values and two `b` values.
For each such case, given by its helpfulness indicators, it does three things:

1. It builds a graph of direct path segments over the environments.
2. It evaluates each environment by shortest paths through the `a` vertices.
3. It backtracks over the remaining choices until the alternating sum of the
   evaluations (the environment derivative) is at least the desired bound.

When every case succeeds, it writes a LaTeX report of the proofs.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Command line

```
envbounds [--output FILE] [--setup FILE]
```

The command runs the proof search with lower bound `-2` over every case
returned by `generate_helpfulness_indicators()`.

- If all proofs are found, it writes the report to `--output`, which
  defaults to `proofsEnvBounds.txt`. It then prints
  `Proofs successful. The report is in <file>`.
- Otherwise it writes nothing and prints `Proofs failed.`

The phrases of the report come from the `--setup` file, which defaults to
`setupForProofWriting.txt`. This file maps keys to text fragments in the
tagged form `_k_key_/k__v_text_/v_`.

## Library use

```python
from envbounds.environments import generate_helpfulness_indicators
from envbounds.proof import search_for_proof
from envbounds.report import ReportWriter

writer = ReportWriter({})  # phrases keyed as in the setup file
for h in generate_helpfulness_indicators():
    proof = search_for_proof(h, -2)
    print(h, proof.proof_found)
    if proof.proof_found:
        section = writer.write(h, proof)
```

### Modules

- `envbounds.algebra`: `LinCombination`, integer linear combinations of
  named monomials.
  - It supports addition, scaling, a total order, and a partial order
    (`leq`, `lneq`).
  - It parses the tagged string format with `parse_tagged_map`,
    `parse_tagged_list` and `lin_combs_from_string`.
- `envbounds.environments`: environments as tuples of 0 (`a`) and 1 (`b`),
  and `HelpfulnessIndicators`.
  - `split_environments` and `repair_environments` build the split of the
    environment set.
  - `all_environments` groups environments by their number of `b`'s.
  - `generate_helpfulness_indicators` lists the cases, up to reversal.
- `envbounds.graph`: `DirectPathSegment`, `MainGraph`, `graph_update`,
  `straightforward_evaluation` and `shortest_paths_through_as`.
- `envbounds.proof`:
  - `create_evaluator` returns a `MainEvaluator` with the graph, the
    evaluations and any error messages.
  - `search_for_proof` returns a `ProofData` with `proof_found`, the
    `derivative` and the chosen `evaluations`.
- `envbounds.latex`: LaTeX fragments for environments, thetas and events,
  such as `sigma_omega`, `make_theta`, `correct_set` and `case_description`.
- `envbounds.report`:
  - `ReportWriter.write` produces one numbered LaTeX section per proved case.
  - `WritingData` gathers the inequalities and thetas for a section.
- `envbounds.indices`: odometer-style counters over multi-dimensional
  indices, and `iter_multi_index`.

## What it does not do

- The package does not ship a setup file of report phrases.
  - If the setup file is missing, the command still runs.
  - Each phrase in the report then reads `Translation not found for <key>`.
- Only environments of length four with two `b`'s are supported.
  `create_evaluator` raises `ValueError` for indicators of any other length.