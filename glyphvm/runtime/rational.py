"""
glyphvm Rational Arithmetic

Exact signed rationals and the two numeric backends that evaluate them.

Key classes:
- Rational: immutable value, always stored in lowest terms
- Outcome: (value, fault) pair returned by every operation that can fault
- ArbitraryBackend: unbounded numerator/denominator, only division by zero faults
- BoundedBackend: fixed-width numerator/denominator, overflow is a fault
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from functools import total_ordering
from typing import Dict, Optional, Type
import math
import operator
import re

import numpy as np

from glyphvm.errors import ConfigurationError

# Integers, fractions and plain decimals. No exponent form, so building the
# value is linear in the token length.
NUMBER_TOKEN = re.compile(r"[+-]?(\d+(/\d+)?|\d+\.\d*|\.\d+)")


@total_ordering
class Rational:
    """
    Exact signed rational number.

    Invariants: gcd(|numerator|, denominator) == 1, denominator > 0 and a zero
    numerator always has denominator 1. Comparison cross-multiplies the reduced
    pairs, so no value is ever converted to a float.
    """

    __slots__ = ("_numerator", "_denominator")

    def __init__(self, numerator: int, denominator: int = 1):
        numerator = operator.index(numerator)
        denominator = operator.index(denominator)
        if denominator == 0:
            raise ZeroDivisionError(f"Rational({numerator}, 0)")
        if denominator < 0:
            numerator, denominator = -numerator, -denominator
        g = math.gcd(numerator, denominator)
        self._numerator = numerator // g
        self._denominator = denominator // g

    @classmethod
    def from_integer(cls, value: int) -> "Rational":
        return cls(value, 1)

    @classmethod
    def parse(cls, token: str) -> Optional["Rational"]:
        """
        Parse a numeric token ("12", "-3/4", "2.5").

        Returns None when the token is not an integer, fraction or decimal
        literal. Exponent notation is rejected.
        """
        if not NUMBER_TOKEN.fullmatch(token):
            return None
        try:
            fraction = Fraction(token)
        except (ValueError, ZeroDivisionError):
            return None
        return cls(fraction.numerator, fraction.denominator)

    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    def sign(self) -> int:
        """Return -1, 0 or 1."""
        return (self._numerator > 0) - (self._numerator < 0)

    def is_integer(self) -> bool:
        return self._denominator == 1

    def to_integer(self) -> Optional[int]:
        """Return the value as an int if it is exact, else None."""
        return self._numerator if self._denominator == 1 else None

    def __add__(self, other: "Rational") -> "Rational":
        return Rational(
            self._numerator * other._denominator + other._numerator * self._denominator,
            self._denominator * other._denominator,
        )

    def __sub__(self, other: "Rational") -> "Rational":
        return Rational(
            self._numerator * other._denominator - other._numerator * self._denominator,
            self._denominator * other._denominator,
        )

    def __mul__(self, other: "Rational") -> "Rational":
        return Rational(
            self._numerator * other._numerator,
            self._denominator * other._denominator,
        )

    def __truediv__(self, other: "Rational") -> "Rational":
        if other._numerator == 0:
            raise ZeroDivisionError("division by a zero-valued Rational")
        return Rational(
            self._numerator * other._denominator,
            self._denominator * other._numerator,
        )

    def __neg__(self) -> "Rational":
        return Rational(-self._numerator, self._denominator)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rational):
            return NotImplemented
        return self._numerator * other._denominator == other._numerator * self._denominator

    def __lt__(self, other: "Rational") -> bool:
        if not isinstance(other, Rational):
            return NotImplemented
        # denominators are positive, so the inequality keeps its direction
        return self._numerator * other._denominator < other._numerator * self._denominator

    def __hash__(self) -> int:
        return hash((self._numerator, self._denominator))

    def __str__(self) -> str:
        if self._denominator == 1:
            return str(self._numerator)
        return f"{self._numerator}/{self._denominator}"

    def __repr__(self) -> str:
        return f"Rational({self._numerator}, {self._denominator})"


ZERO = Rational(0)


@dataclass(frozen=True)
class Outcome:
    """Result of an operation that may fault; value is the policy value on fault."""
    value: Rational
    fault: bool = False

    @classmethod
    def cursed(cls) -> "Outcome":
        return cls(ZERO, True)


class NumericBackend:
    """
    Evaluates Rational arithmetic and reports faults as data.

    Subclasses decide which exact results are representable through
    `_admit`; division by zero is handled here for every backend.
    """

    name = "abstract"

    def from_integer(self, value: int) -> Outcome:
        return self._admit(Rational.from_integer(value))

    def admit(self, value: Rational) -> Outcome:
        """Check an externally produced value (e.g. parsed input)."""
        return self._admit(value)

    def add(self, left: Rational, right: Rational) -> Outcome:
        return self._admit(left + right)

    def subtract(self, left: Rational, right: Rational) -> Outcome:
        return self._admit(left - right)

    def multiply(self, left: Rational, right: Rational) -> Outcome:
        return self._admit(left * right)

    def divide(self, left: Rational, right: Rational) -> Outcome:
        if right.sign() == 0:
            return Outcome.cursed()
        return self._admit(left / right)

    def negate(self, value: Rational) -> Outcome:
        return self._admit(-value)

    def _admit(self, value: Rational) -> Outcome:
        raise NotImplementedError

    def describe(self) -> Dict[str, object]:
        return {"numeric_backend": self.name}


class ArbitraryBackend(NumericBackend):
    """Arbitrary-precision backend: Python ints never overflow."""

    name = "arbitrary"

    def _admit(self, value: Rational) -> Outcome:
        return Outcome(value)


class BoundedBackend(NumericBackend):
    """
    Fixed-width backend.

    Numerator and denominator must fit a signed integer of `bits` width
    (limits from numpy.iinfo). Results are computed exactly and then checked,
    so an out-of-range result becomes a fault instead of wrapping.
    """

    name = "bounded"
    SUPPORTED_BITS = (8, 16, 32, 64)

    def __init__(self, bits: int = 64):
        if bits not in self.SUPPORTED_BITS:
            raise ConfigurationError(
                f"bounded backend width must be one of {self.SUPPORTED_BITS}, got {bits}"
            )
        info = np.iinfo(np.dtype(f"int{bits}"))
        self.bits = bits
        self.min_value = int(info.min)
        self.max_value = int(info.max)

    def fits(self, value: Rational) -> bool:
        return (self.min_value <= value.numerator <= self.max_value
                and value.denominator <= self.max_value)

    def _admit(self, value: Rational) -> Outcome:
        if not self.fits(value):
            return Outcome.cursed()
        return Outcome(value)

    def describe(self) -> Dict[str, object]:
        return {"numeric_backend": self.name, "bits": self.bits}


BACKENDS: Dict[str, Type[NumericBackend]] = {
    ArbitraryBackend.name: ArbitraryBackend,
    BoundedBackend.name: BoundedBackend,
}


def create_backend(name: str, bits: int = 64) -> NumericBackend:
    """Build the backend selected by the `numeric_backend` option."""
    if name == BoundedBackend.name:
        return BoundedBackend(bits)
    if name == ArbitraryBackend.name:
        return ArbitraryBackend()
    raise ConfigurationError(
        f"Unknown numeric backend: {name!r} (expected one of {sorted(BACKENDS)})"
    )
