"""Arbitrary-size integers and floats that store as strings in a database."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

_INT_RE = re.compile(r"[+-]?[0-9]+")
_MASK64 = (1 << 64) - 1


@dataclass(frozen=True)
class Comparison:
    """The result of comparing two numbers: negative, zero or positive."""

    r: int

    def eq(self) -> bool:
        return self.r == 0

    def gt(self) -> bool:
        return self.r > 0

    def lt(self) -> bool:
        return self.r < 0

    def geq(self) -> bool:
        return self.r >= 0

    def leq(self) -> bool:
        return self.r <= 0


def _sign(value) -> int:
    return (value > 0) - (value < 0)


def _scanned_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise TypeError(f"unsupported scan type {type(value).__name__}")


class BigInt:
    """An integer of any size."""

    def __init__(self, value: int = 0) -> None:
        self._value = int(value)

    def __int__(self) -> int:
        return self._value

    def __eq__(self, other) -> bool:
        if isinstance(other, BigInt):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"BigInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def add(self, other: BigInt) -> BigInt:
        return BigInt(self._value + other._value)

    def sub(self, other: BigInt) -> BigInt:
        return BigInt(self._value - other._value)

    def mul(self, other: BigInt) -> BigInt:
        return BigInt(self._value * other._value)

    def div(self, other: BigInt) -> BigInt:
        """Euclidean division: the remainder is never negative."""
        if other._value == 0:
            raise ZeroDivisionError("division by zero")
        rem = self._value % abs(other._value)
        return BigInt((self._value - rem) // other._value)

    def neg(self) -> BigInt:
        return BigInt(-self._value)

    def abs(self) -> BigInt:
        return BigInt(abs(self._value))

    def cmp(self, other: BigInt) -> Comparison:
        return Comparison(_sign(self._value - other._value))

    def to_int64(self) -> int:
        low = self._value & _MASK64
        return low - (1 << 64) if low >= 1 << 63 else low

    def to_uint64(self) -> int:
        return abs(self._value) & _MASK64

    def value(self) -> str:
        return str(self._value)

    def scan(self, value) -> None:
        text = _scanned_text(value)
        if not _INT_RE.fullmatch(text):
            raise ValueError(f"error converting type {type(value).__name__} into Int")
        self._value = int(text)

    def to_json(self) -> bytes:
        return str(self._value).encode()

    def from_json(self, data) -> None:
        text = data.decode() if isinstance(data, (bytes, bytearray)) else data
        if text == "null":
            return
        if not _INT_RE.fullmatch(text):
            raise ValueError(f"not a valid big integer: {text}")
        self._value = int(text)


def int_from_int64(value: int) -> BigInt:
    low = value & _MASK64
    return BigInt(low - (1 << 64) if low >= 1 << 63 else low)


def int_from_uint64(value: int) -> BigInt:
    return BigInt(value & _MASK64)


def parse_int(text: str) -> BigInt:
    """Parse a decimal integer; the empty string gives zero."""
    if text == "":
        return BigInt(0)
    if not _INT_RE.fullmatch(text):
        raise ValueError("cannot create Int from string")
    return BigInt(int(text))


def _truncate_bits(x: float, bits: int) -> float:
    if x == 0 or math.isinf(x):
        return x
    mant, exp = math.frexp(x)
    return math.ldexp(math.trunc(mant * (1 << bits)) / (1 << bits), exp)


class BigFloat:
    """A binary floating-point number with double precision."""

    def __init__(self, value: float = 0.0) -> None:
        self._value = float(value)

    def __float__(self) -> float:
        return self._value

    def __eq__(self, other) -> bool:
        if isinstance(other, BigFloat):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"BigFloat({self._value!r})"

    def __str__(self) -> str:
        if math.isinf(self._value):
            return "+Inf" if self._value > 0 else "-Inf"
        return format(self._value, ".10g")

    def add(self, other: BigFloat) -> BigFloat:
        return BigFloat(self._value + other._value)

    def sub(self, other: BigFloat) -> BigFloat:
        return BigFloat(self._value - other._value)

    def mul(self, other: BigFloat) -> BigFloat:
        return BigFloat(self._value * other._value)

    def div(self, other: BigFloat) -> BigFloat:
        if other._value == 0:
            if self._value == 0:
                raise ZeroDivisionError("zero divided by zero")
            sign = math.copysign(1.0, self._value) * math.copysign(1.0, other._value)
            return BigFloat(math.copysign(math.inf, sign))
        return BigFloat(self._value / other._value)

    def neg(self) -> BigFloat:
        return BigFloat(-self._value)

    def abs(self) -> BigFloat:
        return BigFloat(abs(self._value))

    def cmp(self, other: BigFloat) -> Comparison:
        return Comparison(_sign(self._value - other._value) if self._value != other._value else 0)

    def to_float64(self) -> tuple[float, int]:
        """Return the value and its accuracy (always exact here)."""
        return self._value, 0

    def value(self) -> str:
        return str(self)

    def scan(self, value) -> None:
        text = _scanned_text(value)
        try:
            parsed = float(text)
        except ValueError:
            raise ValueError(
                f"Error converting type {type(value).__name__} into Float"
            ) from None
        if math.isnan(parsed):
            raise ValueError(f"Error converting type {type(value).__name__} into Float")
        self._value = parsed


def parse_float(text: str) -> BigFloat:
    """Parse a decimal number, keeping 10 bits of mantissa, rounded toward zero."""
    try:
        parsed = float(text)
    except ValueError:
        raise ValueError(f"invalid float: {text!r}") from None
    if math.isnan(parsed):
        raise ValueError(f"invalid float: {text!r}")
    return BigFloat(_truncate_bits(parsed, 10))