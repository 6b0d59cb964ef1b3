"""
Fixed-Point Encoding into the Paillier Plaintext Ring
=====================================================
Maps signed, optionally fractional numbers onto ring elements of Z_n.

Encoding (exponent e, base b):

    encode(r) = round(r / b^e) mod n
    decode(v) = signed(v) · b^e,   signed(v) = v - n if v > n // 2 else v

A negative exponent buys decimal precision: with b = 10, e = -10 the
value 0.456 is stored as the integer 4_560_000_000. The exponent is NOT
stored in the ring element; both parties must agree on it beforehand.

Capacity:
- A single value must satisfy |round(r / b^e)| <= n // 2, otherwise it
  would alias with another representable value (EncodingOverflow)
- The roots polynomial ∏(x - r_i) has coefficients up to
  max_j C(k, j) · M^(k-j) for k roots of magnitude <= M. If that exceeds
  n // 2 the signed coefficients wrap and the scheme silently loses
  meaning (ModulusOverflow)

Scaling goes through exact rational arithmetic (``fractions.Fraction``),
so floats are never multiplied by large powers of the base in binary
floating point.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, localcontext
from enum import Enum
from fractions import Fraction
from typing import Iterable, Optional, Union

from .exceptions import EncodingOverflow, ModulusOverflow, NegativeOrOutOfRangeInput


Number = Union[int, float, Decimal, Fraction]


class NumericKind(Enum):
    """Numeric type values are decoded back into"""
    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal"
    FRACTION = "fraction"


@dataclass(frozen=True)
class Encoding:
    """
    Tagged encoding configuration shared by client and server.

    ``exponent`` is the default exponent policy; encode/decode calls can
    still pass an explicit exponent, which must then match on both ends.
    """
    kind: NumericKind = NumericKind.FLOAT
    base: int = 10
    exponent: int = -10

    def __post_init__(self):
        if not isinstance(self.base, int) or self.base < 2:
            raise ValueError(f"Encoding base must be an integer >= 2, got {self.base!r}")
        if not isinstance(self.exponent, int):
            raise ValueError(f"Encoding exponent must be an integer, got {self.exponent!r}")

    def to_dict(self) -> dict:
        return {'kind': self.kind.value, 'base': self.base, 'exponent': self.exponent}

    @classmethod
    def from_dict(cls, data: dict) -> 'Encoding':
        return cls(
            kind=NumericKind(data.get('kind', NumericKind.FLOAT.value)),
            base=int(data.get('base', 10)),
            exponent=int(data.get('exponent', -10))
        )


def max_coefficient_bound(root_count: int, max_magnitude: int) -> int:
    """
    Largest possible |coefficient| of a monic polynomial with
    ``root_count`` integer roots each bounded by ``max_magnitude``.

    The coefficient of x^j is an elementary symmetric polynomial of
    degree k - j, bounded by C(k, j) · M^(k-j).
    """
    return max(
        math.comb(root_count, j) * max_magnitude ** (root_count - j)
        for j in range(root_count + 1)
    )


class NumericEncoder:
    """
    Bidirectional mapping between application numbers and ring elements.

    Pure: holds only the modulus n.
    """

    def __init__(self, modulus: int):
        if modulus < 3:
            raise ValueError("Modulus too small for signed encoding")
        self.modulus = modulus
        self.max_int = modulus // 2

    def _scale(self, encoding: Encoding, exponent: int) -> Fraction:
        return Fraction(encoding.base) ** exponent

    def _exponent(self, encoding: Encoding, exponent: Optional[int]) -> int:
        return encoding.exponent if exponent is None else exponent

    def encode(self,
               value: Number,
               encoding: Encoding,
               exponent: Optional[int] = None) -> int:
        """
        Encode a number as a ring element in [0, n).

        Args:
            value: Finite int, float, Decimal or Fraction
            encoding: Shared encoding configuration
            exponent: Overrides ``encoding.exponent`` when given

        Raises:
            EncodingOverflow: Value not finite or too large for the ring
        """
        exponent = self._exponent(encoding, exponent)

        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, Fraction)):
            raise TypeError(f"Cannot encode value of type {type(value).__name__}")
        if isinstance(value, float) and not math.isfinite(value):
            raise EncodingOverflow(f"Cannot encode non-finite value {value}")
        if isinstance(value, Decimal) and not value.is_finite():
            raise EncodingOverflow(f"Cannot encode non-finite value {value}")

        # round() on a Fraction rounds half to even, like Python floats
        scaled = round(Fraction(value) / self._scale(encoding, exponent))

        if abs(scaled) > self.max_int:
            raise EncodingOverflow(
                f"{value} at exponent {exponent} needs {abs(scaled).bit_length()} bits, "
                f"ring holds {self.max_int.bit_length()}"
            )
        return scaled % self.modulus

    def signed(self, element: int) -> int:
        """Reinterpret a ring element as a signed integer"""
        if not isinstance(element, int) or not 0 <= element < self.modulus:
            raise NegativeOrOutOfRangeInput(f"Ring element {element!r} outside [0, n)")
        return element - self.modulus if element > self.max_int else element

    def decode(self,
               element: int,
               encoding: Encoding,
               exponent: Optional[int] = None) -> Number:
        """
        Decode a ring element back to the encoding's numeric kind.

        Must be called with the exponent used at encode time.
        """
        exponent = self._exponent(encoding, exponent)
        exact = self.signed(element) * self._scale(encoding, exponent)

        if encoding.kind is NumericKind.FLOAT:
            return float(exact)
        if encoding.kind is NumericKind.INT:
            if exact.denominator != 1:
                raise ValueError(f"Decoded value {exact} is not an integer")
            return int(exact)
        if encoding.kind is NumericKind.DECIMAL:
            # Terminating quotients need at most this many digits
            with localcontext() as ctx:
                ctx.prec = len(str(abs(exact.numerator))) + exact.denominator.bit_length() + 1
                return Decimal(exact.numerator) / Decimal(exact.denominator)
        return exact

    def encode_many(self,
                    values: Iterable[Number],
                    encoding: Encoding,
                    exponent: Optional[int] = None) -> list:
        return [self.encode(v, encoding, exponent) for v in values]

    def check_capacity(self, elements: Iterable[int]):
        """
        Verify that the roots polynomial over ``elements`` cannot wrap.

        Raises:
            ModulusOverflow: If the coefficient bound exceeds n // 2
        """
        magnitudes = [abs(self.signed(e)) for e in elements]
        if not magnitudes:
            return
        bound = max_coefficient_bound(len(magnitudes), max(magnitudes))
        if bound > self.max_int:
            raise ModulusOverflow(
                f"{len(magnitudes)} roots of magnitude up to {max(magnitudes)} give "
                f"coefficients of {bound.bit_length()} bits, ring holds "
                f"{self.max_int.bit_length()}; use a larger key, fewer elements "
                f"or a coarser exponent"
            )
