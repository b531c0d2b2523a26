"""
Prime predicates, enumeration and factoring.

Responsibility: the public surface. Checks that inputs lie in the combined
int64/uint64 domain, reduces them to an unsigned magnitude and delegates to
a PrimeState. Cache logic lives in prime_state.py.

The module-level functions share one process-wide Primes instance. Code that
wants its own cache (tests, isolated workloads) constructs a Primes directly.
"""

import numbers
import threading
from collections import Counter
from typing import Any, Dict, Iterator, Optional

from .config import engine_kwargs
from .prime_state import PrimeState, UINT64_MAX

INT64_MIN = -2**63
INT64_MAX = 2**63 - 1


def abs_unsigned(value: int) -> int:
    """
    Return the magnitude of a signed 64-bit or unsigned 64-bit value.

    INT64_MIN has no positive int64 counterpart; its magnitude is
    INT64_MAX + 1 == 2**63.

    Raises
    ------
    TypeError
        If value is not an integer (bool included).
    OverflowError
        If value is outside [INT64_MIN, UINT64_MAX].
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"expected an integer, got {type(value).__name__}")

    value = int(value)
    if value < INT64_MIN or value > UINT64_MAX:
        raise OverflowError(f"{value} is outside the int64/uint64 range")

    if value == INT64_MIN:
        return INT64_MAX + 1
    return abs(value)


class Primes:
    """
    Facade over one PrimeState.

    Parameters
    ----------
    state : PrimeState, optional
        Cache to use. Shared by reference, so several facades can use one.
    config : dict, optional
        Settings for a new PrimeState (see config.load_config). Ignored when
        state is given.
    """

    def __init__(self, state: Optional[PrimeState] = None,
                 config: Optional[Dict[str, Any]] = None):
        if state is None:
            state = PrimeState(**engine_kwargs(config or {}))
        self.state = state

    def __repr__(self) -> str:
        return f"Primes({self.state!r})"

    def is_prime(self, value: int) -> bool:
        return self.state.is_prime(abs_unsigned(value))

    def is_composite(self, value: int) -> bool:
        """0, 1, 2 and 3 are never composite; otherwise not is_prime."""
        value = abs_unsigned(value)
        if value <= 3:
            return False
        return not self.state.is_prime(value)

    def __contains__(self, value) -> bool:
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            return False
        if not INT64_MIN <= int(value) <= UINT64_MAX:
            return False
        return self.is_prime(value)

    def enumerate_primes(self) -> Iterator[int]:
        return self.state.enumerate_primes()

    def __iter__(self) -> Iterator[int]:
        return self.enumerate_primes()

    def factor(self, value: int) -> Iterator[int]:
        """
        Yield the prime factors of value in ascending order, with multiplicity.

        The input is validated immediately; the factors are produced lazily.
        factor(0) yields nothing.
        """
        return self._factor(abs_unsigned(value))

    def _factor(self, value: int) -> Iterator[int]:
        if value == 0:
            return

        for prime in self.state.enumerate_primes():
            while value % prime == 0:
                value //= prime
                yield prime

            if prime > value:
                break

    def factor_counts(self, value: int) -> Dict[int, int]:
        """Factorization of value as {prime: exponent}, primes ascending. Empty for 0 and 1."""
        return dict(Counter(self.factor(value)))


_default = None
_default_lock = threading.Lock()


def default_primes() -> Primes:
    """Process-wide Primes instance, created on first use."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = Primes()
    return _default


def is_prime(value: int) -> bool:
    """True if |value| is prime. Accepts any int64 or uint64 value."""
    return default_primes().is_prime(value)


def is_composite(value: int) -> bool:
    """True if |value| is composite. Accepts any int64 or uint64 value."""
    return default_primes().is_composite(value)


def enumerate_primes() -> Iterator[int]:
    """Infinite ascending iterator over all primes, starting at 2."""
    return default_primes().enumerate_primes()


def factor(value: int) -> Iterator[int]:
    """Prime factors of |value| in ascending order; empty for 0 and 1."""
    return default_primes().factor(value)


def factor_counts(value: int) -> Dict[int, int]:
    """{prime: exponent} for |value|; empty for 0 and 1."""
    return default_primes().factor_counts(value)
