"""
Polynomial Engine
=================
Coefficient-vector polynomials over the integers or over Z_n.

Representation: coefficients[i] is the coefficient of x^i (constant term
first). Built from roots, the polynomial is the monic product

    P(x) = (x - r_1)(x - r_2)...(x - r_k)

so P(r_i) = 0 for every root. This is the property the PSI protocol
rests on: the server can evaluate P on its own inputs without learning
the roots, and a zero evaluation marks a member of the client's set.

Without a modulus the engine works on plain signed integers, which is
handy for checking textbook expansions:

    >>> Polynomial.from_roots([-5, 2, 10]).coefficients
    (100, -40, -7, 1)
"""

from typing import Iterable, Optional, Sequence, Tuple

import numpy as np


class Polynomial:
    """
    Immutable polynomial with O(1) access to coefficients by power.

    Args:
        coefficients: Constant term first
        modulus: Ring modulus n; when set, all arithmetic is mod n
    """

    def __init__(self, coefficients: Sequence[int], modulus: Optional[int] = None):
        coeffs = [int(c) for c in coefficients]
        if modulus is not None:
            coeffs = [c % modulus for c in coeffs]
        # Drop leading zeros but keep at least the constant term
        while len(coeffs) > 1 and coeffs[-1] == 0:
            coeffs.pop()
        self._coefficients: Tuple[int, ...] = tuple(coeffs) if coeffs else (0,)
        self.modulus = modulus

    @classmethod
    def from_coefficients(cls, coefficients: Sequence[int],
                          modulus: Optional[int] = None) -> 'Polynomial':
        """
        Wrap a coefficient vector, constant term first.

        Not a byte-for-byte copy of the input: coefficients are converted
        to int, reduced mod ``modulus`` when one is given, and zero
        coefficients of the highest powers are dropped (an all-zero
        vector becomes the constant 0). Evaluation is unaffected.
        """
        return cls(coefficients, modulus)

    @classmethod
    def from_roots(cls, roots: Iterable[int],
                   modulus: Optional[int] = None) -> 'Polynomial':
        """
        Expand ∏(x - r) by repeated shift-and-subtract convolution.

        Each step multiplies the running coefficient vector c by (x - r):
            new[i] = c[i - 1] - r · c[i]
        and reduces mod n when a modulus is given. O(k²) for k roots.
        """
        # object dtype keeps Python's arbitrary precision ints
        coeffs = np.array([1], dtype=object)
        for root in roots:
            root = int(root)
            shifted = np.zeros(len(coeffs) + 1, dtype=object)
            shifted[1:] = coeffs
            shifted[:-1] -= root * coeffs
            if modulus is not None:
                shifted %= modulus
            coeffs = shifted
        return cls(coeffs.tolist(), modulus)

    @property
    def coefficients(self) -> Tuple[int, ...]:
        """Read-only coefficients, index 0 = constant term"""
        return self._coefficients

    @property
    def degree(self) -> int:
        return len(self._coefficients) - 1

    def __getitem__(self, power: int) -> int:
        """Coefficient of x^power (0 beyond the degree)"""
        if power < 0:
            raise IndexError("power must be non-negative")
        if power >= len(self._coefficients):
            return 0
        return self._coefficients[power]

    def __len__(self) -> int:
        return len(self._coefficients)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self._coefficients == other._coefficients and self.modulus == other.modulus

    def __hash__(self) -> int:
        return hash((self._coefficients, self.modulus))

    def __repr__(self) -> str:
        return f"Polynomial({list(self._coefficients)}, modulus={self.modulus})"

    def evaluate(self, x: int) -> int:
        """
        Horner evaluation: acc = acc·x + c from the highest power down.

        Plaintext only; used to validate the encrypted path.
        """
        acc = 0
        for coeff in reversed(self._coefficients):
            acc = acc * x + coeff
            if self.modulus is not None:
                acc %= self.modulus
        return acc

    def __call__(self, x: int) -> int:
        return self.evaluate(x)

    def normalized(self, modulus: int) -> Tuple[int, ...]:
        """
        Coefficients reduced into [0, n).

        Required before encryption: signed coefficients from the
        expansion must map to the ring's canonical representatives.
        """
        return tuple(c % modulus for c in self._coefficients)

    def reduce(self, modulus: int) -> 'Polynomial':
        """Same polynomial viewed over Z_n"""
        return Polynomial(self._coefficients, modulus)
