"""Tests for the checked integer wrapper used by pool and ledger math."""

import pytest

from divswap.constants import INT256_MAX, INT256_MIN, UINT256_MAX
from divswap.safe_int import (
    DivisionByZero,
    Int256Overflow,
    S,
    SafeInt,
    SafeIntError,
    Uint256Overflow,
    Underflow,
)


class TestWrapping:
    def test_wraps_int_and_safeint(self):
        assert S(42).value == 42
        assert S(S(42)).value == 42
        assert S(-10).value == -10

    def test_rejects_non_integers(self):
        """Strings, floats and bools are refused."""
        for bad in ("42", 3.14, True):
            with pytest.raises(TypeError):
                SafeInt(bad)  # type: ignore[arg-type]

    def test_repr(self):
        assert repr(S(7)) == "S(7)"

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(S(1))


class TestArithmetic:
    """Tests for checked operators."""

    def test_add_mixes_ints(self):
        assert (S(10) + S(5)).value == 15
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15

    def test_sub(self):
        assert (S(10) - S(4)).value == 6
        assert (10 - S(4)).value == 6
        assert (S(4) - S(4)).value == 0

    def test_sub_below_zero_raises(self):
        with pytest.raises(Underflow):
            S(4) - S(10)
        with pytest.raises(Underflow):
            4 - S(10)

    def test_signed_sub_goes_negative(self):
        assert S(4).signed_sub(10).value == -6

    def test_mul(self):
        assert (S(6) * S(7)).value == 42
        assert (6 * S(7)).value == 42

    def test_floordiv(self):
        assert (S(10) // S(3)).value == 3
        with pytest.raises(DivisionByZero):
            S(10) // 0

    def test_div_up(self):
        assert S(10).div_up(3).value == 4
        assert S(9).div_up(S(3)).value == 3
        assert S(0).div_up(5).value == 0
        with pytest.raises(DivisionByZero):
            S(1).div_up(0)

    def test_neg(self):
        assert (-S(5)).value == -5

    def test_sqrt(self):
        assert S(144).sqrt().value == 12
        # sqrt(0.2e18 * 1e18) from the first deposit of the sample pool
        assert S(2 * 10**35).sqrt().value == 447213595499957939
        with pytest.raises(Underflow):
            S(-4).sqrt()

    def test_errors_are_arithmetic_errors(self):
        for error in (DivisionByZero, Underflow, Uint256Overflow, Int256Overflow):
            assert issubclass(error, SafeIntError)
        assert issubclass(SafeIntError, ArithmeticError)


class TestComparison:
    def test_equality(self):
        assert S(5) == 5
        assert S(5) == S(5)
        assert S(5) != S(6)
        assert S(5) != "5"

    def test_ordering(self):
        assert S(1) < S(2)
        assert S(2) <= 2
        assert S(3) > 2
        assert S(3) >= S(3)

    def test_truthiness(self):
        assert not S(0)
        assert S(1)


class TestUnwrapping:
    """Tests for range-checked unwrapping."""

    def test_uint256_range(self):
        assert S(0).to_uint256() == 0
        assert S(UINT256_MAX).to_uint256() == UINT256_MAX
        with pytest.raises(Uint256Overflow):
            S(UINT256_MAX + 1).to_uint256()
        with pytest.raises(Uint256Overflow):
            S(-1).to_uint256()

    def test_int256_range(self):
        assert S(INT256_MAX).to_int256() == INT256_MAX
        assert S(INT256_MIN).to_int256() == INT256_MIN
        with pytest.raises(Int256Overflow):
            S(INT256_MAX + 1).to_int256()
        with pytest.raises(Int256Overflow):
            S(INT256_MIN - 1).to_int256()
