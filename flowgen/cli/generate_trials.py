"""CLI for generating trial tables from a YAML sampling spec."""

import argparse
from pathlib import Path

from flowgen.generators import TrialCSVGenerator


def main():
    parser = argparse.ArgumentParser(description="Generate a CSV table of self-motion trials")
    parser.add_argument("config", type=Path, help="Path to YAML configuration file")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output CSV file")
    parser.add_argument("--seed", type=int, default=None, help="Override generation seed")
    parser.add_argument("-n", "--num-trials", type=int, default=None, help="Override number of trials")

    args = parser.parse_args()

    gen = TrialCSVGenerator(args.config)
    if args.seed is not None:
        gen.seed = args.seed
    if args.num_trials is not None:
        gen.num_trials = args.num_trials

    n = gen.generate(args.output)
    print(f"Generated {n} trials -> {args.output}")


if __name__ == "__main__":
    main()
