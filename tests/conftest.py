"""
Shared fixtures: an independent prime table to check the cache against.

The table is a plain odd-only Eratosthenes sieve, built in one pass and
never extended, so it shares no code path with PrimeState.
"""

import math

import numpy as np
import pytest


def _odd_sieve(n: int) -> np.ndarray:
    flags = np.zeros(max(n + 1, 0), dtype=bool)
    if n < 2:
        return flags
    flags[2] = True
    flags[3::2] = True
    for p in range(3, math.isqrt(n) + 1, 2):
        if flags[p]:
            flags[p * p::2 * p] = False
    return flags


@pytest.fixture
def reference_flags():
    """flags(n)[k] is True iff k is prime, for 0 <= k <= n."""
    return _odd_sieve


@pytest.fixture
def reference_primes():
    """primes(n) is the list of primes <= n as Python ints."""
    def primes(n):
        return np.flatnonzero(_odd_sieve(n)).tolist()
    return primes
