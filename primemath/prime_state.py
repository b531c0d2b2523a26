"""
Incremental prime cache.

Responsibility: the growing list of known primes and nothing else. The
facade in primes.py handles signs and the int64/uint64 domain.

State:
- primes: uint64 buffer, strictly increasing, primes[0] == 2. Only the first
  `count` slots are meaningful. Append-only.
- largest_value_checked: every integer <= this value has been sieved, so
  k is prime iff k is in primes for 2 <= k <= largest_value_checked.
- next_prime_squared_index: index of the smallest prime whose square the
  sieve cursor has not reached yet. Primes below this index are the trial
  divisors for the current candidates.

Concurrency:
- Queries and enumeration steps hold the lock in shared mode.
- extend_below() holds it in exclusive mode.
- A reader that runs out of cached primes releases its shared hold, extends
  under the exclusive hold, and takes the shared hold back. Other writers can
  run in between, so after the upgrade the reader re-reads count and
  largest_value_checked instead of trusting what it saw before.
"""

import math
from typing import Iterator

import numpy as np

from .rwlock import ReadWriteLock

UINT64_MAX = 2**64 - 1

INITIAL_CAPACITY = 1024


class PrimeState:
    """
    Lazily extended prime cache shared by all queries of one facade.

    Parameters
    ----------
    chunk_size : int
        How far past largest_value_checked enumeration extends the cache
        each time it runs out of primes.
    segment_size : int
        Maximum number of candidates sieved in one numpy pass.
    block_size : int
        Maximum number of cached primes trial-divided in one numpy pass.
    verbose : bool
        Print a line for every extension.
    """

    def __init__(self, chunk_size: int = 1000, segment_size: int = 65536,
                 block_size: int = 65536, verbose: bool = False):
        for name, size in (('chunk_size', chunk_size),
                           ('segment_size', segment_size),
                           ('block_size', block_size)):
            if size < 1:
                raise ValueError(f"{name} must be positive, got {size}")

        self.chunk_size = int(chunk_size)
        self.segment_size = int(segment_size)
        self.block_size = int(block_size)
        self.verbose = verbose

        self._lock = ReadWriteLock()
        self._primes = np.zeros(INITIAL_CAPACITY, dtype=np.uint64)
        self._primes[0] = 2
        self._count = 1
        self._largest_value_checked = 2
        self._next_prime_squared_index = 0

    def __repr__(self) -> str:
        return (f"PrimeState(count={self._count}, "
                f"largest_value_checked={self._largest_value_checked})")

    # ------------------------------------------------------------------
    # Extension (exclusive)
    # ------------------------------------------------------------------

    def extend_below(self, max_value: int):
        """
        Ensure every integer <= max_value has been sieved.

        The caller must not hold the lock. Raises OverflowError when
        max_value is outside the uint64 range.
        """
        if max_value > UINT64_MAX:
            raise OverflowError(f"cannot sieve up to {max_value}: exceeds uint64 range")

        with self._lock.write_locked():
            self._extend(max_value)

    def _extend_from_read(self, max_value: int):
        """Non-atomic upgrade: drop the shared hold, extend, take it back."""
        self._lock.release_read()
        try:
            self.extend_below(max_value)
        finally:
            self._lock.acquire_read()

    def _extend(self, max_value: int):
        start_count = self._count

        while self._largest_value_checked < max_value:
            low = self._largest_value_checked + 1
            root = int(self._primes[self._next_prime_squared_index])
            boundary = root * root

            if low == boundary:
                # Square of the next trial divisor: composite, and from here on
                # that prime has to divide candidates too.
                self._next_prime_squared_index += 1
                self._largest_value_checked = low
                continue

            high = min(max_value, boundary - 1, low + self.segment_size - 1)
            divisors = self._primes[:self._next_prime_squared_index]
            self._append(_sieve_segment(low, high, divisors))
            self._largest_value_checked = high

        if self.verbose and self._count > start_count:
            print(f"    Extended prime cache to {self._largest_value_checked:,} "
                  f"({self._count:,} primes, +{self._count - start_count:,})")

    def _append(self, values: np.ndarray):
        n = len(values)
        if n == 0:
            return

        needed = self._count + n
        if needed > len(self._primes):
            capacity = max(needed, 2 * len(self._primes))
            grown = np.zeros(capacity, dtype=np.uint64)
            grown[:self._count] = self._primes[:self._count]
            self._primes = grown

        self._primes[self._count:needed] = values
        self._count = needed

    # ------------------------------------------------------------------
    # Queries (shared)
    # ------------------------------------------------------------------

    def is_prime(self, value: int) -> bool:
        """
        Test an unsigned value for primality.

        Values already covered by the sieve are looked up by binary search.
        Larger values are trial-divided by cached primes up to isqrt(value);
        the cache is only extended as far as that square root.
        """
        if value < 0 or value > UINT64_MAX:
            raise OverflowError(f"{value} is outside the uint64 range")

        self._lock.acquire_read()
        try:
            if value <= self._largest_value_checked:
                return self._contains(value)

            max_factor = math.isqrt(value)
            target = np.uint64(value)
            index = 0

            while True:
                count = self._count
                primes = self._primes[:count]
                stop = int(np.searchsorted(primes, np.uint64(max_factor), side='right'))

                while index < stop:
                    end = min(stop, index + self.block_size)
                    if np.any(target % primes[index:end] == 0):
                        return False
                    index = end

                # A cached prime above max_factor, or a sieve that already
                # covers max_factor: no divisor can be left.
                if stop < count or self._largest_value_checked >= max_factor:
                    return True

                self._extend_from_read(max_factor)
        finally:
            self._lock.release_read()

    def __contains__(self, value: int) -> bool:
        if value < 0 or value > UINT64_MAX:
            return False
        return self.is_prime(value)

    def _contains(self, value: int) -> bool:
        primes = self._primes[:self._count]
        i = int(np.searchsorted(primes, np.uint64(value)))
        return i < self._count and int(primes[i]) == value

    def enumerate_primes(self) -> Iterator[int]:
        """
        Yield every prime in ascending order, forever.

        Each call starts again at 2. The lock is held only while the cursor
        advances, never while the consumer has the value.
        """
        index = 0
        while True:
            with self._lock.read_locked():
                while index >= self._count:
                    self._extend_from_read(self._largest_value_checked + self.chunk_size)
                prime = int(self._primes[index])
            index += 1
            yield prime

    def __iter__(self) -> Iterator[int]:
        return self.enumerate_primes()

    def primes_upto(self, n: int) -> np.ndarray:
        """Return a copy of all primes <= n, extending the cache if needed."""
        if n < 2:
            return np.zeros(0, dtype=np.uint64)

        self.extend_below(n)
        with self._lock.read_locked():
            primes = self._primes[:self._count]
            stop = int(np.searchsorted(primes, np.uint64(n), side='right'))
            return primes[:stop].copy()

    def prime_count(self, n: int) -> int:
        """pi(n): number of primes <= n."""
        if n < 2:
            return 0

        self.extend_below(n)
        with self._lock.read_locked():
            primes = self._primes[:self._count]
            return int(np.searchsorted(primes, np.uint64(n), side='right'))

    def nth_prime(self, n: int) -> int:
        """Return the n-th prime, 1-based (nth_prime(1) == 2)."""
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")

        with self._lock.read_locked():
            while self._count < n:
                self._extend_from_read(self._largest_value_checked + self.chunk_size)
            return int(self._primes[n - 1])

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        with self._lock.read_locked():
            return self._count

    @property
    def count(self) -> int:
        return len(self)

    @property
    def largest_value_checked(self) -> int:
        with self._lock.read_locked():
            return self._largest_value_checked

    @property
    def next_prime_squared_index(self) -> int:
        with self._lock.read_locked():
            return self._next_prime_squared_index


def _sieve_segment(low: int, high: int, divisors: np.ndarray) -> np.ndarray:
    """
    Return the values in [low, high] with no divisor in `divisors`.

    Every divisor is below low, so striking its multiples never strikes the
    divisor itself.
    """
    flags = np.ones(high - low + 1, dtype=bool)
    for p in divisors.tolist():
        first = -(-low // p) * p
        flags[first - low::p] = False
    return np.nonzero(flags)[0].astype(np.uint64) + np.uint64(low)
