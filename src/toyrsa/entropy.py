"""Entropy providers used to pick primes out of a pool.

The key generator only ever asks for fractions in `[0, 1)` and turns them into pool indices, so any provider that
can produce those can be injected. Randomness here selects pool entries and gives no cryptographic guarantee.

Typical usage example:

    src = SystemRandomSource(seed=42)
    idx = to_index(src.next_fractions(1)[0], 1000)
    RandomOrgSource(timeout=5).next_integers(3, 100, 10000)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from abc import ABC, abstractmethod
from collections.abc import Iterable
import logging
import math
import random
import secrets
import urllib.parse
import urllib.request

from toyrsa.errors import RandomSourceUnavailable

logger = logging.getLogger(__name__)

RANDOM_ORG_URL = "https://www.random.org/integers/"
# random.org refuses bounds outside this range.
RANDOM_ORG_LIMIT = 10**9


def to_index(value: float, pool_size: int) -> int:
    """Map a fraction in `[0, 1)` onto an index of a pool.

    Args:
        value: The fraction drawn from a source.
        pool_size: The size of the pool being indexed. Must be positive.

    Returns:
        `floor(value * pool_size)`.

    Raises:
        RandomSourceUnavailable: If `value` lies outside `[0, 1)`.
    """
    if not 0 <= value < 1:
        raise RandomSourceUnavailable(f"Random value {value!r} is outside [0, 1).")
    return min(math.floor(value * pool_size), pool_size - 1)


class RandomSource(ABC):
    """Abstract entropy provider.

    Implementations must be safe to call repeatedly; every call returns fresh values.
    """

    @abstractmethod
    def next_fractions(self, count: int) -> list[float]:
        """Draw `count` real numbers in `[0, 1)`.

        Raises:
            RandomSourceUnavailable: If the provider cannot deliver.
        """


class IntegerRandomSource(RandomSource):
    """A provider that natively yields integers in a closed range.

    Fractions are derived by normalising over the configured `low`/`high` bounds.

    Attributes:
        low: Lowest integer requested when drawing fractions.
        high: Highest integer requested when drawing fractions.
    """

    def __init__(self, low: int, high: int) -> None:
        if high <= low:
            raise ValueError("high must be greater than low")
        self.low = low
        self.high = high

    @abstractmethod
    def next_integers(self, count: int, low: int, high: int) -> list[int]:
        """Draw `count` integers in `[low, high]`.

        Raises:
            RandomSourceUnavailable: If the provider cannot deliver.
        """

    def next_fractions(self, count: int) -> list[float]:
        span = self.high - self.low + 1
        return [(value - self.low) / span for value in self.next_integers(count, self.low, self.high)]


class SystemRandomSource(RandomSource):
    """Local entropy, either the OS CSPRNG or a seeded PRNG for reproducible runs."""

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            self._rng: random.Random = secrets.SystemRandom()
        else:
            self._rng = random.Random(seed)

    def next_fractions(self, count: int) -> list[float]:
        return [self._rng.random() for _ in range(count)]


class SequenceRandomSource(RandomSource):
    """Replays a fixed sequence of fractions, for deterministic generation.

    Args:
        values: Fractions to hand out, in order.
    """

    def __init__(self, values: Iterable[float]) -> None:
        self._values = list(values)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._values) - self._pos

    def next_fractions(self, count: int) -> list[float]:
        if count > self.remaining:
            raise RandomSourceUnavailable(f"Sequence exhausted: {count} values requested, {self.remaining} left.")
        chunk = self._values[self._pos:self._pos + count]
        self._pos += count
        return chunk


class RandomOrgSource(IntegerRandomSource):
    """Fetches true random integers from random.org over HTTPS.

    Attributes:
        timeout: Seconds to wait for the service before giving up.
    """

    def __init__(self, timeout: float = 10.0, low: int = 0, high: int = RANDOM_ORG_LIMIT - 1) -> None:
        super().__init__(low, high)
        self.timeout = timeout

    def build_url(self, count: int, low: int, high: int) -> str:
        query = urllib.parse.urlencode({
            "num": count,
            "min": low,
            "max": high,
            "col": 1,
            "base": 10,
            "format": "plain",
            "rnd": "new",
        })
        return f"{RANDOM_ORG_URL}?{query}"

    def next_integers(self, count: int, low: int, high: int) -> list[int]:
        """Request `count` integers in `[low, high]` from random.org.

        Args:
            count: How many integers to fetch. Must be positive.
            low: Lowest acceptable integer.
            high: Highest acceptable integer.

        Returns:
            The fetched integers, in service order.

        Raises:
            ValueError: If the request itself is malformed.
            RandomSourceUnavailable: On network failure, timeout, HTTP error or a malformed response.
        """
        if count < 1:
            raise ValueError("count must be positive")
        if not -RANDOM_ORG_LIMIT <= low < high <= RANDOM_ORG_LIMIT:
            raise ValueError(f"Bounds must satisfy -{RANDOM_ORG_LIMIT} <= low < high <= {RANDOM_ORG_LIMIT}.")
        url = self.build_url(count, low, high)
        logger.debug("Fetching %d integers from %s", count, url)
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as response:
                body = response.read().decode("ascii")
        except (OSError, UnicodeDecodeError) as exc:
            raise RandomSourceUnavailable(f"random.org request failed: {exc}") from exc
        try:
            values = [int(line) for line in body.split()]
        except ValueError as exc:
            raise RandomSourceUnavailable(f"random.org returned a malformed body: {body[:80]!r}") from exc
        if len(values) != count or not all(low <= v <= high for v in values):
            raise RandomSourceUnavailable(f"random.org returned unexpected values: {values!r}")
        return values
