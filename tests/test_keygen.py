# pylint: disable=missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from concurrent.futures import ThreadPoolExecutor
import dataclasses
import math

import pytest
import sympy

from toyrsa import keygen
from toyrsa import numtheory
from toyrsa.entropy import SequenceRandomSource
from toyrsa.entropy import SystemRandomSource
from toyrsa.errors import DuplicateFactors
from toyrsa.errors import EmptyPrimePool
from toyrsa.errors import ExponentSearchExhausted
from toyrsa.errors import InvalidRange
from toyrsa.errors import KeyGenerationError
from toyrsa.errors import RandomSourceUnavailable

# Textbook example: p=61, q=53, e=17.
TEXTBOOK_POOL = numtheory.sieve(70)
TEXTBOOK_EXPONENTS = numtheory.sieve(3119)


def pick(pool, value):
    """Fraction that lands on `value` in `pool`."""
    return (pool.index(value) + 0.5) / len(pool)


def textbook_source(*extra):
    return SequenceRandomSource([pick(TEXTBOOK_POOL, 61), pick(TEXTBOOK_POOL, 53), *extra])


def test_textbook_key_pair():
    src = textbook_source(pick(TEXTBOOK_EXPONENTS, 17))
    kp = keygen.generate_key_pair(src, pool_min=2, pool_max=70)
    assert (kp.p, kp.q, kp.n, kp.phi) == (61, 53, 3233, 3120)
    assert kp.public == (17, 3233)
    assert kp.private == (2753, 3233)
    assert kp.as_pairs() == ((17, 3233), (2753, 3233))
    assert src.remaining == 0


def test_textbook_exponent_retry():
    # 3 and 5 both divide 3120.
    src = textbook_source(pick(TEXTBOOK_EXPONENTS, 3), pick(TEXTBOOK_EXPONENTS, 5), pick(TEXTBOOK_EXPONENTS, 17))
    kp = keygen.generate_key_pair(src, pool_min=2, pool_max=70)
    assert kp.public == (17, 3233)
    assert src.remaining == 0


def test_duplicate_factor_redrawn():
    src = SequenceRandomSource([
        pick(TEXTBOOK_POOL, 61),
        pick(TEXTBOOK_POOL, 61),
        pick(TEXTBOOK_POOL, 61),
        pick(TEXTBOOK_POOL, 53),
        pick(TEXTBOOK_EXPONENTS, 17),
    ])
    kp = keygen.generate_key_pair(src, pool_min=2, pool_max=70)
    assert (kp.p, kp.q) == (61, 53)


def test_duplicate_factor_exhausted():
    src = SequenceRandomSource([pick(TEXTBOOK_POOL, 61)] * 4)
    with pytest.raises(DuplicateFactors):
        keygen.generate_key_pair(src, pool_min=2, pool_max=70, factor_attempts=3)


def test_exponent_search_exhausted():
    src = textbook_source(*[pick(TEXTBOOK_EXPONENTS, 13)] * 5)
    with pytest.raises(ExponentSearchExhausted):
        keygen.generate_key_pair(src, pool_min=2, pool_max=70, exponent_attempts=5)


def test_source_exhausted():
    with pytest.raises(RandomSourceUnavailable):
        keygen.generate_key_pair(SequenceRandomSource([0.5]))


def test_source_failure_propagates(mocker):
    src = SystemRandomSource()
    mocker.patch.object(src, "next_fractions", side_effect=RandomSourceUnavailable("down"))
    with pytest.raises(RandomSourceUnavailable):
        keygen.generate_key_pair(src)


@pytest.mark.parametrize("pool_min,pool_max", [(100, 50), (-5, 100), (0, -1)])
def test_invalid_pool_range(pool_min, pool_max):
    with pytest.raises(InvalidRange):
        keygen.generate_key_pair(SystemRandomSource(1), pool_min=pool_min, pool_max=pool_max)


@pytest.mark.parametrize("pool_min,pool_max", [(24, 28), (0, 1), (8, 12), (2, 2)])
def test_empty_pool(pool_min, pool_max):
    with pytest.raises(EmptyPrimePool):
        keygen.generate_key_pair(SystemRandomSource(1), pool_min=pool_min, pool_max=pool_max)


def test_errors_share_base():
    with pytest.raises(KeyGenerationError):
        keygen.generate_key_pair(SystemRandomSource(1), pool_min=24, pool_max=28)


@pytest.mark.parametrize("factor_attempts,exponent_attempts", [(0, 10), (10, 0)])
def test_attempt_bounds_validated(factor_attempts, exponent_attempts):
    with pytest.raises(ValueError):
        keygen.generate_key_pair(factor_attempts=factor_attempts, exponent_attempts=exponent_attempts)


def test_exponent_pool_bounds():
    pool = keygen.exponent_pool((503, 509, 521), 521, 1000)
    assert pool[:3] == (503, 509, 521)
    assert pool[3] == 523
    assert pool[-1] == 997
    assert pool == tuple(sympy.primerange(503, 1000))


def test_exponent_pool_drops_large_factors():
    # p=3, q=5: phi=8, only primes below 8 remain.
    assert keygen.exponent_pool((2, 3, 5, 7, 11), 12, 8) == (2, 3, 5, 7)


def test_exponent_pool_empty():
    with pytest.raises(EmptyPrimePool):
        keygen.exponent_pool((3, 5), 5, 2)


def test_default_pool():
    pool = keygen.factor_pool()
    assert pool[0] == 503
    assert pool[-1] == 9973
    assert pool == tuple(sympy.primerange(500, 10001))


SMALL_POOL = dict(pool_min=500, pool_max=2000)


@pytest.mark.parametrize("seed,pool", [(seed, SMALL_POOL) for seed in range(20)] +
                         [pytest.param(seed, {}, marks=pytest.mark.slow) for seed in range(3)])
def test_generate_key_pair_invariants(seed, pool):
    kp = keygen.generate_key_pair(SystemRandomSource(seed), **pool)
    assert kp.p != kp.q
    assert sympy.isprime(kp.p) and sympy.isprime(kp.q)
    assert 500 <= kp.p <= pool.get("pool_max", 10000) and 500 <= kp.q <= pool.get("pool_max", 10000)
    assert kp.n == kp.p * kp.q
    assert kp.phi == (kp.p - 1) * (kp.q - 1)
    assert 1 < kp.e < kp.phi
    assert math.gcd(kp.e, kp.phi) == 1
    assert (kp.e * kp.d) % kp.phi == 1


@pytest.mark.parametrize("pool", [SMALL_POOL, pytest.param({}, marks=pytest.mark.slow)])
def test_generate_key_pair_roundcryption(pool):
    kp = keygen.generate_key_pair(**pool)
    (e, n), (d, _) = kp.as_pairs()
    for message in (2, 65537, 170920, 17092025, n - 2):
        if message >= n or math.gcd(message, n) != 1:
            continue
        assert pow(pow(message, e, n), d, n) == message


def test_generate_key_pair_seeded():
    first = keygen.generate_key_pair(SystemRandomSource(42), **SMALL_POOL)
    assert keygen.generate_key_pair(SystemRandomSource(42), **SMALL_POOL) == first
    assert keygen.generate_key_pair(SystemRandomSource(43), **SMALL_POOL) != first


def test_generate_key_pair_concurrent():
    seeds = range(8)
    expected = [keygen.generate_key_pair(SystemRandomSource(seed), **SMALL_POOL) for seed in seeds]
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda seed: keygen.generate_key_pair(SystemRandomSource(seed), **SMALL_POOL), seeds))
    assert results == expected


@pytest.mark.parametrize("pool_max", [keygen.MAX_POOL_MAX + 1, 10**6, 10**12])
def test_pool_max_bounded(mocker, pool_max):
    spy = mocker.spy(keygen, "sieve")
    with pytest.raises(InvalidRange, match="supported maximum"):
        keygen.generate_key_pair(SystemRandomSource(1), pool_min=2, pool_max=pool_max)
    spy.assert_not_called()


def test_pool_max_at_bound():
    pool = keygen.factor_pool(keygen.MAX_POOL_MAX - 100, keygen.MAX_POOL_MAX)
    assert pool == tuple(sympy.primerange(keygen.MAX_POOL_MAX - 100, keygen.MAX_POOL_MAX + 1))


def test_generate_key_pair_default_source(mocker):
    spy = mocker.patch("toyrsa.keygen.SystemRandomSource", return_value=SystemRandomSource(5))
    keygen.generate_key_pair(**SMALL_POOL)
    spy.assert_called_once_with()


def test_generate_key_pair_functional(mocker):
    mocker.patch("toyrsa.keygen.select_factors", return_value=(61, 53))
    mocker.patch("toyrsa.keygen.select_exponent", return_value=17)
    inverse = mocker.spy(keygen, "mod_inverse")
    kp = keygen.generate_key_pair(SystemRandomSource(1), pool_min=2, pool_max=70)
    assert kp.as_pairs() == ((17, 3233), (2753, 3233))
    inverse.assert_called_once_with(17, 3120)


textbook = dict(p=61, q=53, n=3233, phi=3120, e=17, d=2753)


@pytest.mark.parametrize("field,value", [
    ("q", 61),
    ("p", 63),
    ("n", 3234),
    ("phi", 3233),
    ("e", 3),
    ("e", 1),
    ("d", 2754),
])
def test_key_pair_validates(field, value):
    fields = dict(textbook)
    fields[field] = value
    with pytest.raises(ValueError):
        keygen.KeyPair(**fields)


def test_key_pair_frozen():
    kp = keygen.KeyPair(**textbook)
    with pytest.raises(dataclasses.FrozenInstanceError):
        kp.e = 7
