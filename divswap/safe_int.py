"""Checked integer wrapper for reserve, share and dividend arithmetic.

Pool math must fail loudly instead of producing values an unsigned ledger
could never hold. Wrapping operands in S(...) gives:
- DivisionByZero on `//` and `div_up` by zero
- Underflow when `-` would go negative
- Uint256Overflow / Int256Overflow when unwrapping an out-of-range result

Example:
    from divswap.safe_int import S

    def shares_for(amount: int, total: int, reserve: int) -> int:
        return (S(total) * S(amount) // S(reserve)).to_uint256()

Dividend corrections are signed, so `signed_sub` skips the sign check.
"""

from __future__ import annotations

import functools
import math

from divswap.constants import INT256_MAX, INT256_MIN, UINT256_MAX


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""


class DivisionByZero(SafeIntError):
    pass


class Underflow(SafeIntError):
    pass


class Uint256Overflow(SafeIntError):
    pass


class Int256Overflow(SafeIntError):
    pass


def _raw(x: SafeInt | int) -> int:
    return x._value if isinstance(x, SafeInt) else x


@functools.total_ordering
class SafeInt:
    """Immutable integer whose arithmetic raises instead of misbehaving."""

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            value = value._value
        elif not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"S({self._value})"

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _raw(other))

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        return _checked_difference(self._value, _raw(other))

    def __rsub__(self, other: int) -> SafeInt:
        return _checked_difference(other, self._value)

    def signed_sub(self, other: SafeInt | int) -> SafeInt:
        """self - other, allowed to go negative."""
        return SafeInt(self._value - _raw(other))

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _raw(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        divisor = _raw(other)
        if divisor == 0:
            raise DivisionByZero(f"{self._value} // 0")
        return SafeInt(self._value // divisor)

    def div_up(self, other: SafeInt | int) -> SafeInt:
        """Division rounded towards positive infinity."""
        divisor = _raw(other)
        if divisor == 0:
            raise DivisionByZero(f"ceil({self._value} / 0)")
        return SafeInt(-(-self._value // divisor))

    def __neg__(self) -> SafeInt:
        return SafeInt(-self._value)

    def sqrt(self) -> SafeInt:
        """Integer square root, rounded down.

        Raises:
            Underflow: If the value is negative
        """
        if self._value < 0:
            raise Underflow(f"sqrt of negative value {self._value}")
        return SafeInt(math.isqrt(self._value))

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt | int):
            return self._value == _raw(other)
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _raw(other)

    __hash__ = None  # type: ignore[assignment]

    def __bool__(self) -> bool:
        return self._value != 0

    # --- Unwrapping ---

    def to_uint256(self) -> int:
        """Unwrap, enforcing 0 <= value <= 2^256 - 1.

        Raises:
            Uint256Overflow: If the value does not fit
        """
        if not 0 <= self._value <= UINT256_MAX:
            raise Uint256Overflow(f"{self._value} is outside the uint256 range")
        return self._value

    def to_int256(self) -> int:
        """Unwrap, enforcing -2^255 <= value <= 2^255 - 1.

        Raises:
            Int256Overflow: If the value does not fit
        """
        if not INT256_MIN <= self._value <= INT256_MAX:
            raise Int256Overflow(f"{self._value} is outside the int256 range")
        return self._value


def _checked_difference(minuend: int, subtrahend: int) -> SafeInt:
    if subtrahend > minuend:
        raise Underflow(f"{minuend} - {subtrahend} is negative")
    return SafeInt(minuend - subtrahend)


S = SafeInt
