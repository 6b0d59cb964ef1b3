"""
Encrypted Polynomial Evaluation
===============================
Evaluates a polynomial whose coefficients are Paillier ciphertexts at a
plaintext point, producing Enc(P(x)) without ever decrypting.

Only two homomorphic primitives are needed:
- Enc(a) ⊕ Enc(b)  (add)
- Enc(a) ⊙ k       (scalar multiply)

Algorithms:

    NAIVE:   Enc(P(x)) = ⊕_i  Enc(c_i) ⊙ (x^i mod n)
             k+1 scalar multiplications by large powers, k additions

    HORNER:  acc = Enc(c_k)
             acc = (acc ⊙ x) ⊕ Enc(c_i)   for i = k-1 .. 0
             k scalar multiplications by x itself, k additions

Both yield the same plaintext. Horner is the default: the scalars stay
the size of x instead of growing to full ring size.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union

from .cryptosystem import Ciphertext, PaillierCryptosystem, PublicKey
from .exceptions import NegativeOrOutOfRangeInput, ProtocolError
from .polynomial import Polynomial


class EvaluationMethod(Enum):
    NAIVE = "naive"
    HORNER = "horner"

    @classmethod
    def parse(cls, value: Union[str, 'EvaluationMethod']) -> 'EvaluationMethod':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown evaluation method {value!r}, expected one of "
                f"{[m.value for m in cls]}"
            ) from None


@dataclass(frozen=True)
class EncryptedPolynomial:
    """
    Polynomial with encrypted coefficients, constant term first.

    Created once by the client, read-only afterwards.
    """
    coefficients: Tuple[Ciphertext, ...]
    public_key: PublicKey

    def __post_init__(self):
        if not self.coefficients:
            raise ProtocolError("Encrypted polynomial has no coefficients")

    @property
    def degree(self) -> int:
        return len(self.coefficients) - 1

    def __len__(self) -> int:
        return len(self.coefficients)

    @classmethod
    def encrypt(cls,
                polynomial: Polynomial,
                public_key: PublicKey,
                cryptosystem: PaillierCryptosystem) -> 'EncryptedPolynomial':
        """Normalize coefficients into [0, n) and encrypt each one"""
        n = cryptosystem.modulus(public_key)
        return cls(
            coefficients=tuple(
                cryptosystem.encrypt(public_key, c) for c in polynomial.normalized(n)
            ),
            public_key=public_key
        )


def _coefficients(enc_poly: Union[EncryptedPolynomial, Sequence[Ciphertext]]) -> Sequence[Ciphertext]:
    coeffs = enc_poly.coefficients if isinstance(enc_poly, EncryptedPolynomial) else enc_poly
    if len(coeffs) == 0:
        raise ValueError("Cannot evaluate an empty polynomial")
    return coeffs


def evaluate_naive(enc_poly: Union[EncryptedPolynomial, Sequence[Ciphertext]],
                   x: int,
                   cryptosystem: PaillierCryptosystem) -> Ciphertext:
    """Sum of Enc(c_i) ⊙ x^i with every power computed in plaintext mod n"""
    coeffs = _coefficients(enc_poly)
    n = coeffs[0].public_key.n
    _check_point(x, n)

    acc = cryptosystem.scalar_multiply(coeffs[0], 1)
    for power in range(1, len(coeffs)):
        term = cryptosystem.scalar_multiply(coeffs[power], pow(x, power, n))
        acc = cryptosystem.add(acc, term)
    return acc


def evaluate_horner(enc_poly: Union[EncryptedPolynomial, Sequence[Ciphertext]],
                    x: int,
                    cryptosystem: PaillierCryptosystem) -> Ciphertext:
    """Horner's rule on ciphertexts: acc = (acc ⊙ x) ⊕ c"""
    coeffs = _coefficients(enc_poly)
    _check_point(x, coeffs[0].public_key.n)

    acc = coeffs[-1]
    for coeff in reversed(coeffs[:-1]):
        acc = cryptosystem.add(cryptosystem.scalar_multiply(acc, x), coeff)
    return acc


def evaluate_encrypted(enc_poly: Union[EncryptedPolynomial, Sequence[Ciphertext]],
                       x: int,
                       cryptosystem: PaillierCryptosystem,
                       method: Union[str, EvaluationMethod] = EvaluationMethod.HORNER) -> Ciphertext:
    """
    Evaluate an encrypted polynomial at plaintext point x.

    Args:
        enc_poly: Encrypted coefficients, constant term first
        x: Ring element in [0, n)
        cryptosystem: Homomorphic primitives
        method: 'horner' (default) or 'naive'

    Returns:
        Enc(P(x))
    """
    if EvaluationMethod.parse(method) is EvaluationMethod.NAIVE:
        return evaluate_naive(enc_poly, x, cryptosystem)
    return evaluate_horner(enc_poly, x, cryptosystem)


def _check_point(x: int, n: int):
    if not isinstance(x, int) or not 0 <= x < n:
        raise NegativeOrOutOfRangeInput(f"Evaluation point {x!r} outside [0, n)")
