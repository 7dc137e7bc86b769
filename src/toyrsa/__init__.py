"""Small RSA-style key pair generation in an Academic Sense.

Builds toy key pairs from sieved prime pools: two distinct factors, a public exponent coprime to the totient and
its modular inverse. Entropy providers are pluggable, including a random.org adapter.

Typical usage example:

    kp = generate_key_pair()
    print(kp.public, kp.private)
    kp = generate_key_pair(SequenceRandomSource([0.1, 0.2, 0.3]))
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from toyrsa.entropy import RandomOrgSource
from toyrsa.entropy import RandomSource
from toyrsa.entropy import SequenceRandomSource
from toyrsa.entropy import SystemRandomSource
from toyrsa.errors import DuplicateFactors
from toyrsa.errors import EmptyPrimePool
from toyrsa.errors import ExponentSearchExhausted
from toyrsa.errors import InvalidRange
from toyrsa.errors import KeyGenerationError
from toyrsa.errors import RandomSourceUnavailable
from toyrsa.keygen import generate_key_pair
from toyrsa.keygen import KeyPair
from toyrsa.numtheory import gcd
from toyrsa.numtheory import mod_inverse
from toyrsa.numtheory import sieve

__version__ = "0.1.0"
__all__ = [
    "KeyPair",
    "generate_key_pair",
    "sieve",
    "gcd",
    "mod_inverse",
    "RandomSource",
    "SystemRandomSource",
    "SequenceRandomSource",
    "RandomOrgSource",
    "KeyGenerationError",
    "InvalidRange",
    "EmptyPrimePool",
    "DuplicateFactors",
    "ExponentSearchExhausted",
    "RandomSourceUnavailable",
]
