"""Core Key Generation Utility, building small RSA-style key pairs out of sieved prime pools.

Both prime factors are drawn from a sieved pool of small primes, the pool is then extended up to the totient and the
public exponent is drawn from it until one is coprime to the totient. The result is strictly academic, the key sizes
are far too small for any real use.

Typical usage example:

    kp = generate_key_pair()
    (e, n), (d, _) = kp.as_pairs()
    kp = generate_key_pair(SystemRandomSource(seed=7), pool_min=100, pool_max=1000)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from dataclasses import dataclass
import logging
import typing

from toyrsa.entropy import RandomSource
from toyrsa.entropy import SystemRandomSource
from toyrsa.entropy import to_index
from toyrsa.errors import DuplicateFactors
from toyrsa.errors import EmptyPrimePool
from toyrsa.errors import ExponentSearchExhausted
from toyrsa.errors import InvalidRange
from toyrsa.numtheory import gcd
from toyrsa.numtheory import is_prime
from toyrsa.numtheory import mod_inverse
from toyrsa.numtheory import sieve

logger = logging.getLogger(__name__)

DEFAULT_POOL_MIN: int = 500
DEFAULT_POOL_MAX: int = 10000
DEFAULT_FACTOR_ATTEMPTS: int = 64
DEFAULT_EXPONENT_ATTEMPTS: int = 256
# The exponent pool is sieved up to phi, roughly MAX_POOL_MAX squared.
MAX_POOL_MAX: int = 10000


class PublicKey(typing.NamedTuple):
    e: int
    n: int


class PrivateKey(typing.NamedTuple):
    d: int
    n: int


@dataclass(frozen=True, slots=True)
class KeyPair:
    """A generated key pair together with the values it was derived from.

    Attributes:
        p: First prime factor.
        q: Second prime factor.
        n: The modulus, `p * q`.
        phi: The totient, `(p - 1) * (q - 1)`.
        e: The public exponent, coprime to `phi`.
        d: The private exponent, inverse of `e` modulo `phi`.

    Raises:
        ValueError: If the values do not form a consistent key pair.
    """
    p: int
    q: int
    n: int
    phi: int
    e: int
    d: int

    def __post_init__(self):
        if self.p == self.q:
            raise ValueError("Prime factors (p, q) must be distinct.")
        if not is_prime(self.p) or not is_prime(self.q):
            raise ValueError("Prime factors (p, q) must both be prime.")
        if self.n != self.p * self.q:
            raise ValueError("Modulus (n) is not the product of the prime factors.")
        if self.phi != (self.p - 1) * (self.q - 1):
            raise ValueError("Totient (phi) does not match the prime factors.")
        if not 1 < self.e < self.phi:
            raise ValueError("Public exponent (e) must lie strictly between 1 and phi.")
        if gcd(self.e, self.phi) != 1:
            raise ValueError("Public exponent (e) is not coprime to phi.")
        if (self.e * self.d) % self.phi != 1:
            raise ValueError("Private exponent (d) is not the inverse of e modulo phi.")

    @property
    def public(self) -> PublicKey:
        return PublicKey(self.e, self.n)

    @property
    def private(self) -> PrivateKey:
        return PrivateKey(self.d, self.n)

    def as_pairs(self) -> tuple[tuple[int, int], tuple[int, int]]:
        """Returns ((e, n), (d, n))."""
        return tuple(self.public), tuple(self.private)


def factor_pool(pool_min: int = DEFAULT_POOL_MIN, pool_max: int = DEFAULT_POOL_MAX) -> tuple[int, ...]:
    """Sieve the pool the prime factors are drawn from.

    Args:
        pool_min: Lowest candidate, inclusive.
        pool_max: Highest candidate, inclusive.

    Returns:
        The ascending primes in `[pool_min, pool_max]`.

    Raises:
        InvalidRange: If the bounds are negative, inverted or above `MAX_POOL_MAX`.
        EmptyPrimePool: If fewer than two primes fall in range.
    """
    if pool_max < pool_min:
        raise InvalidRange(f"Pool upper bound {pool_max} is below lower bound {pool_min}.")
    if pool_max > MAX_POOL_MAX:
        raise InvalidRange(f"Pool upper bound {pool_max} exceeds the supported maximum {MAX_POOL_MAX}.")
    primes = sieve(pool_max, pool_min)
    if len(primes) < 2:
        raise EmptyPrimePool(f"Range [{pool_min}, {pool_max}] holds {len(primes)} primes, at least 2 are required.")
    return primes


def exponent_pool(primes: tuple[int, ...], pool_max: int, phi: int) -> tuple[int, ...]:
    """Extend a factor pool with every prime above `pool_max` and below `phi`.

    Factor pool entries that are not below `phi` are dropped, so every member satisfies `1 < e < phi`.

    Args:
        primes: The factor pool.
        pool_max: Upper bound the factor pool was sieved with.
        phi: The totient.

    Returns:
        The ascending exponent candidates.

    Raises:
        EmptyPrimePool: If no candidate lies below `phi`.
    """
    pool = tuple(prime for prime in primes if prime < phi) + sieve(phi - 1, pool_max + 1)
    if not pool:
        raise EmptyPrimePool(f"No exponent candidates below phi={phi}.")
    return pool


def _draw(pool: tuple[int, ...], source: RandomSource, count: int = 1) -> list[int]:
    return [pool[to_index(value, len(pool))] for value in source.next_fractions(count)]


def select_factors(primes: tuple[int, ...],
                   source: RandomSource,
                   attempts: int = DEFAULT_FACTOR_ATTEMPTS) -> tuple[int, int]:
    """Draw two distinct primes from `primes`.

    Args:
        primes: The factor pool.
        source: Entropy provider.
        attempts: Total draws allowed for `q`, including the first. Must be >= 1.

    Returns:
        The pair (p, q).

    Raises:
        DuplicateFactors: If every draw for `q` repeated `p`.
        RandomSourceUnavailable: If the source fails.
    """
    p, q = _draw(primes, source, 2)
    for _ in range(attempts - 1):
        if p != q:
            break
        logger.debug("Drew p == q == %d, redrawing q", p)
        q = _draw(primes, source)[0]
    if p == q:
        raise DuplicateFactors(f"Could not draw two distinct primes in {attempts} attempts.")
    return p, q


def select_exponent(candidates: tuple[int, ...],
                    phi: int,
                    source: RandomSource,
                    attempts: int = DEFAULT_EXPONENT_ATTEMPTS) -> int:
    """Draw a public exponent coprime to `phi`.

    Args:
        candidates: The exponent pool.
        phi: The totient.
        source: Entropy provider.
        attempts: Draws allowed.

    Returns:
        The first drawn candidate `e` with `gcd(e, phi) == 1`.

    Raises:
        ExponentSearchExhausted: If no draw was coprime to `phi`.
        RandomSourceUnavailable: If the source fails.
    """
    for attempt in range(attempts):
        e = _draw(candidates, source)[0]
        if gcd(e, phi) == 1:
            logger.debug("Accepted e=%d after %d draws", e, attempt + 1)
            return e
    raise ExponentSearchExhausted(f"No exponent coprime to phi={phi} found in {attempts} attempts.")


def generate_key_pair(source: RandomSource | None = None,
                      pool_min: int = DEFAULT_POOL_MIN,
                      pool_max: int = DEFAULT_POOL_MAX,
                      factor_attempts: int = DEFAULT_FACTOR_ATTEMPTS,
                      exponent_attempts: int = DEFAULT_EXPONENT_ATTEMPTS) -> KeyPair:
    """Generates an RSA-style key pair from sieved prime pools.

    Fully generates a key pair, picking both prime factors, the public exponent and the private exponent.
    Calls share no state, so concurrent generation is safe as long as `source` is.

    Args:
        source: Entropy provider. Defaults to a fresh `SystemRandomSource`.
        pool_min: Lowest prime factor candidate. Defaults to 500.
        pool_max: Highest prime factor candidate. Defaults to 10000. At most `MAX_POOL_MAX`.
        factor_attempts: Draw bound for finding `q != p`.
        exponent_attempts: Draw bound for finding an `e` coprime to phi.

    Returns:
        The generated `KeyPair`.

    Raises:
        InvalidRange: If the pool bounds are negative, inverted or above `MAX_POOL_MAX`.
        EmptyPrimePool: If the factor pool holds fewer than two primes.
        DuplicateFactors: If no distinct factors were drawn.
        ExponentSearchExhausted: If no suitable public exponent was drawn.
        RandomSourceUnavailable: If the entropy provider fails.
    """
    if factor_attempts < 1 or exponent_attempts < 1:
        raise ValueError("Attempt bounds must be at least 1.")
    if source is None:
        source = SystemRandomSource()
    primes = factor_pool(pool_min, pool_max)
    logger.debug("Factor pool [%d, %d] holds %d primes", pool_min, pool_max, len(primes))
    p, q = select_factors(primes, source, factor_attempts)
    n = p * q
    phi = (p - 1) * (q - 1)
    candidates = exponent_pool(primes, pool_max, phi)
    logger.debug("Exponent pool below phi=%d holds %d primes", phi, len(candidates))
    e = select_exponent(candidates, phi, source, exponent_attempts)
    d = mod_inverse(e, phi)
    logger.info("Generated key pair with modulus %d", n)
    return KeyPair(p, q, n, phi, e, d)
