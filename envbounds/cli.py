"""Command that proves the lower bound in every special case and writes the report."""

from __future__ import annotations

import argparse
from pathlib import Path

from envbounds.algebra import parse_tagged_map
from envbounds.environments import generate_helpfulness_indicators
from envbounds.proof import search_for_proof
from envbounds.report import ReportWriter

DEFAULT_OUTPUT = "proofsEnvBounds.txt"
DEFAULT_SETUP = "setupForProofWriting.txt"
DESIRED_LOWER_BOUND = -2


def prove_special_cases(
    output_file: str | Path = DEFAULT_OUTPUT, setup_file: str | Path = DEFAULT_SETUP
) -> str:
    """Search for a proof in every case; write the report when all succeed.

    Returns a one-line summary of the outcome.
    """
    setup = Path(setup_file)
    setup_text = setup.read_text() if setup.is_file() else ""
    writer = ReportWriter(parse_tagged_map(setup_text))
    cases = generate_helpfulness_indicators()
    proofs = ""
    found = 0
    for h in cases:
        proof = search_for_proof(h, DESIRED_LOWER_BOUND)
        found += proof.proof_found
        proofs = writer.write(h, proof) + proofs
    if found == len(cases):
        Path(output_file).write_text(proofs)
        return f"Proofs successful. The report is in {output_file}\n"
    return "Proofs failed.\n"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Prove lower bounds on environment derivatives."
    )
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help="report file to write")
    parser.add_argument("--setup", default=DEFAULT_SETUP, help="file of report phrases")
    args = parser.parse_args(argv)
    print(prove_special_cases(args.output, args.setup), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())