"""The Command Line Interface for the utility.

Generates a single key pair and prints it, optionally drawing entropy from random.org.

Typical usage example:

    toyrsa
    OR
    python -m toyrsa --source random.org --verbose
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import sys
import typing

import toyrsa
from toyrsa import entropy
from toyrsa import keygen


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "source":
        HelpData(
            description="Entropy provider used to pick primes.",
            choices=["system", "random.org"],
            default="system",
        ),
    "seed":
        HelpData(
            description="Seed for reproducible output. Only applies to the system source.",
            format=int,
        ),
    "timeout":
        HelpData(
            description="Seconds to wait for random.org.",
            format=float,
            default=10.0,
        ),
    "pool_min":
        HelpData(
            description="Lowest prime factor candidate.",
            format=int,
            default=keygen.DEFAULT_POOL_MIN,
        ),
    "pool_max":
        HelpData(
            description=f"Highest prime factor candidate, at most {keygen.MAX_POOL_MAX}.",
            format=int,
            default=keygen.DEFAULT_POOL_MAX,
        ),
    "factor_attempts":
        HelpData(
            description="Draws allowed to find two distinct prime factors.",
            format=int,
            default=keygen.DEFAULT_FACTOR_ATTEMPTS,
        ),
    "exponent_attempts":
        HelpData(
            description="Draws allowed to find a public exponent coprime to phi.",
            format=int,
            default=keygen.DEFAULT_EXPONENT_ATTEMPTS,
        ),
}

corep = argparse.ArgumentParser(prog="toyrsa", description="Generate a small, academic RSA-style key pair.")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {toyrsa.__version__}")
corep.add_argument("--verbose", "-V", action="store_true", help="Log generation steps to stderr")
corep.add_argument("--quiet", "-q", action="store_true", help="Only print the public and private key lines")
for arg, helper in help_dict.items():
    flag = "--" + arg.replace("_", "-")
    if helper.choices is not None:
        corep.add_argument(flag, choices=helper.choices, default=helper.default, help=helper.description)
    else:
        corep.add_argument(flag, type=helper.format, default=helper.default, help=helper.description)


def build_source(args: argparse.Namespace) -> entropy.RandomSource:
    match args.source:
        case "random.org":
            return entropy.RandomOrgSource(timeout=args.timeout)
        case _:
            return entropy.SystemRandomSource(args.seed)


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, generate a key pair and print it.

    Returns:
        The process exit status.
    """
    args = corep.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        kp = keygen.generate_key_pair(build_source(args),
                                      pool_min=args.pool_min,
                                      pool_max=args.pool_max,
                                      factor_attempts=args.factor_attempts,
                                      exponent_attempts=args.exponent_attempts)
    except (toyrsa.KeyGenerationError, ValueError) as exc:
        print(f"Key generation failed: {exc}", file=sys.stderr)
        return 1
    if not args.quiet:
        print(kp.as_pairs())
    print(f"Public Key: {tuple(kp.public)}")
    print(f"Private Key: {tuple(kp.private)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
