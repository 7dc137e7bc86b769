"""Number theory primitives backing the key generator.

Provides the Sieve of Eratosthenes for building prime pools, the Euclidean algorithm (plain and extended) and the
modular inverse used to derive the private exponent. All functions are pure.

Typical usage example:

    pool = sieve(10000, 500)
    gcd(48, 18)
    mod_inverse(17, 3120)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import itertools
import math
import warnings

from toyrsa.errors import InvalidRange


def sieve(n_max: int, n_min: int = 2) -> tuple[int, ...]:
    """Implements the Sieve of Eratosthenes over a closed range.

    Uses the textbook Sieve of Eratosthenes to generate all primes in `[n_min, n_max]`.
    Only odd numbers are stored, one byte each, and sieving stops at the integer square root of `n_max`.

    Args:
        n_max: The number up to which to generate primes, inclusive. Must be >= 0.
        n_min: The lowest number to report, inclusive. Defaults to 2. Must be >= 0, values below 2 are clamped to 2.

    Returns:
        An ascending tuple of primes. Empty if the range holds none.

    Raises:
        InvalidRange: If either bound is negative.
    """
    if n_max < 0 or n_min < 0:
        raise InvalidRange(f"Sieve bounds must be non-negative, got [{n_min}, {n_max}].")
    n_min = max(n_min, 2)
    if n_max < n_min:
        return ()
    # candidate[i] stands for the odd number 2 * i + 3.
    i_size = (n_max - 1) // 2
    candidate = bytearray(b"\x01") * i_size
    for i in range(math.isqrt(n_max) // 2):
        if candidate[i]:
            r = 2 * i + 3
            first = (r * r - 3) // 2
            candidate[first::r] = bytes(len(range(first, i_size, r)))
    start = max(0, (n_min - 2) // 2)
    odd = tuple(itertools.compress(range(2 * start + 3, 2 * i_size + 3, 2), candidate[start:]))
    if n_min <= 2:
        return (2,) + odd
    return odd


def is_prime(no: int) -> bool:
    """Check `no` for primality by trial division.

    Args:
        no: The number to check.

    Returns:
        True if `no` is prime, False otherwise.
    """
    if no < 2:
        return False
    if no % 2 == 0:
        return no == 2
    for divisor in range(3, math.isqrt(no) + 1, 2):
        if no % divisor == 0:
            return False
    return True


def gcd(a: int, b: int) -> int:
    """Greatest common divisor by the iterative Euclidean algorithm.

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        The greatest common divisor of `a` and `b`. `gcd(0, b)` is `b`.

    Raises:
        ValueError: If either argument is negative.
    """
    if a < 0 or b < 0:
        raise ValueError("gcd arguments must be non-negative")
    while a != 0:
        a, b = b % a, a
    return b


def eea(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common divisor of two integers.
        As well as the Bezout coefficients.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def mod_inverse(a: int, modulus: int, linear: bool = False) -> int:
    """Multiplicative inverse of `a` modulo `modulus`.

    By default solved through `eea()`. The `linear` mode tries every candidate in `[1, modulus)` and, failing that,
    returns 1 with a warning instead of raising. It is kept for comparison only and is O(modulus).

    Args:
        a: The number to invert.
        modulus: The modulus. Must be >= 2.
        linear: Whether to use the linear search. Defaults to False.

    Returns:
        The `d` in `[1, modulus)` such that `(a * d) % modulus == 1`.

    Raises:
        ValueError: If `modulus` is below 2, or `a` is not invertible (not raised in `linear` mode).
    """
    if modulus < 2:
        raise ValueError("modulus must be >= 2")
    a %= modulus
    if linear:
        for i in range(1, modulus):
            if (a * i) % modulus == 1:
                return i
        warnings.warn(f"{a} has no inverse modulo {modulus}, returning 1.", RuntimeWarning)
        return 1
    g, s, _ = eea(a, modulus)
    if g != 1:
        raise ValueError(f"{a} is not invertible modulo {modulus} (gcd {g})")
    return s % modulus
