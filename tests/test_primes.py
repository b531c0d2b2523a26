"""
Tests for the public prime predicates and enumeration.

Covers sign handling, the int64/uint64 domain edges, and the convention that
0, 1, 2 and 3 are never composite.
"""

from itertools import islice

import numpy as np
import pytest

from primemath.primes import (
    INT64_MAX, INT64_MIN, UINT64_MAX, Primes, abs_unsigned, default_primes,
    enumerate_primes, is_composite, is_prime,
)
from primemath.prime_state import PrimeState


KNOWN_COMPOSITES = [4, 6, 8, 9, 10, 1000, 62615533]
KNOWN_PRIMES = [2, 3, 5, 7, 11, 6833, 7919]


class TestKnownValues:
    """Module-level functions against fixed prime and composite sets."""

    @pytest.mark.parametrize("num", KNOWN_COMPOSITES)
    def test_composite_is_composite(self, num):
        assert is_composite(num), f"{num} should be composite"

    @pytest.mark.parametrize("num", KNOWN_COMPOSITES)
    def test_negative_composite_is_composite(self, num):
        assert is_composite(-num), f"{-num} should be composite"

    @pytest.mark.parametrize("num", KNOWN_COMPOSITES)
    def test_composite_is_not_prime(self, num):
        assert not is_prime(num), f"{num} should not be prime"
        assert not is_prime(-num), f"{-num} should not be prime"

    @pytest.mark.parametrize("num", KNOWN_PRIMES)
    def test_prime_is_prime(self, num):
        assert is_prime(num), f"{num} should be prime"

    @pytest.mark.parametrize("num", KNOWN_PRIMES)
    def test_negative_prime_is_prime(self, num):
        assert is_prime(-num), f"{-num} should be prime"

    @pytest.mark.parametrize("num", KNOWN_PRIMES)
    def test_prime_is_not_composite(self, num):
        assert not is_composite(num), f"{num} should not be composite"
        assert not is_composite(-num), f"{-num} should not be composite"


class TestSmallValues:
    """0, 1 and -1 are neither prime nor composite."""

    @pytest.mark.parametrize("num", [0, 1, -1])
    def test_not_prime(self, num):
        assert is_prime(num) is False

    @pytest.mark.parametrize("num", [0, 1, -1])
    def test_not_composite(self, num):
        assert is_composite(num) is False

    @pytest.mark.parametrize("num", [2, 3, -2, -3])
    def test_two_and_three_never_composite(self, num):
        assert is_composite(num) is False
        assert is_prime(num) is True


class TestDomainEdges:
    """Sign normalization and the int64/uint64 range."""

    def test_int64_min_magnitude(self):
        assert abs_unsigned(INT64_MIN) == 2**63
        assert abs_unsigned(INT64_MIN) == INT64_MAX + 1

    def test_int64_min_is_composite(self):
        assert is_prime(INT64_MIN) is False
        assert is_composite(INT64_MIN) is True

    def test_abs_of_ordinary_values(self):
        assert abs_unsigned(0) == 0
        assert abs_unsigned(-7) == 7
        assert abs_unsigned(INT64_MAX) == INT64_MAX
        assert abs_unsigned(-INT64_MAX) == INT64_MAX
        assert abs_unsigned(UINT64_MAX) == UINT64_MAX

    def test_numpy_integers_accepted(self):
        assert abs_unsigned(np.int64(-11)) == 11
        assert is_prime(np.uint64(7919))
        assert is_composite(np.int32(-9))

    @pytest.mark.parametrize("num", [UINT64_MAX + 1, INT64_MIN - 1, 2**100])
    def test_out_of_range_raises(self, num):
        with pytest.raises(OverflowError):
            is_prime(num)
        with pytest.raises(OverflowError):
            is_composite(num)

    @pytest.mark.parametrize("value", [1.5, "7", None, True])
    def test_non_integers_rejected(self, value):
        with pytest.raises(TypeError):
            is_prime(value)

    def test_large_even_values_answered_without_extension(self):
        """An even value is rejected by the seed prime alone."""
        primes = Primes()
        assert not primes.is_prime(UINT64_MAX - 1)
        assert primes.is_composite(INT64_MAX + 1)
        assert primes.state.largest_value_checked == 2


class TestEnumeration:
    """enumerate_primes is infinite, ascending and restartable."""

    def test_first_primes(self):
        assert list(islice(enumerate_primes(), 7)) == [2, 3, 5, 7, 11, 13, 17]

    def test_strictly_ascending_and_complete(self, reference_primes):
        got = list(islice(Primes().enumerate_primes(), 2000))
        assert all(a < b for a, b in zip(got, got[1:]))
        assert got == reference_primes(got[-1])

    def test_each_call_starts_at_two(self):
        primes = Primes()
        first = primes.enumerate_primes()
        assert list(islice(first, 50))[-1] == 229
        second = primes.enumerate_primes()
        assert next(second) == 2
        assert next(first) == 233, "first iterator should resume where it stopped"

    def test_iter_on_facade(self):
        assert list(islice(Primes(), 5)) == [2, 3, 5, 7, 11]

    def test_contains(self):
        primes = Primes()
        assert 7919 in primes
        assert -7919 in primes
        assert 1000 not in primes

    @pytest.mark.parametrize("value", [UINT64_MAX + 1, INT64_MIN - 1, 7.0, "7", None])
    def test_contains_outside_domain_is_false(self, value):
        assert value not in Primes()


class TestFacadeInstances:
    """Facades own or share an explicitly constructed cache."""

    def test_default_is_shared(self):
        assert default_primes() is default_primes()

    def test_injected_state_is_shared(self):
        state = PrimeState()
        a = Primes(state)
        b = Primes(state)
        assert a.is_prime(7919)
        assert b.state is a.state
        assert b.state.largest_value_checked == 88

    def test_separate_facades_have_separate_caches(self):
        a = Primes()
        b = Primes()
        a.is_prime(62615533)
        assert b.state.largest_value_checked == 2

    def test_config_builds_state(self):
        primes = Primes(config={'chunk_size': 10, 'segment_size': 3})
        assert primes.state.chunk_size == 10
        assert primes.state.segment_size == 3

    def test_idempotent_in_any_order(self):
        values = [7919, 4, 62615533, -6833, 1, 0, 97, 1000, INT64_MIN, 2]
        expected = [is_prime(v) for v in values]
        for order in (values, values[::-1], sorted(values)):
            primes = Primes()
            results = {v: primes.is_prime(v) for v in order}
            assert [results[v] for v in values] == expected


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
