"""Exceptions raised while generating a key pair.

Everything `toyrsa.keygen.generate_key_pair` can fail with derives from `KeyGenerationError`, so callers can either
catch the whole family or single out the stage that went wrong.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class KeyGenerationError(RuntimeError):
    """Base class for all key generation failures."""


class InvalidRange(KeyGenerationError, ValueError):
    """A sieve or pool range is negative or inverted."""


class EmptyPrimePool(KeyGenerationError):
    """A prime pool holds too few primes to draw from."""


class DuplicateFactors(KeyGenerationError):
    """Could not draw two distinct prime factors within the retry bound."""


class ExponentSearchExhausted(KeyGenerationError):
    """No public exponent coprime to the totient was drawn within the retry bound."""


class RandomSourceUnavailable(KeyGenerationError):
    """The entropy provider failed, timed out or returned something unusable."""
