"""
Encrypted Evaluation Tests
==========================
Naive and Horner evaluation of Enc(P) at plaintext points.
"""

import pytest

from psi_core import (
    EncryptedPolynomial,
    EvaluationMethod,
    NegativeOrOutOfRangeInput,
    Polynomial,
    ProtocolError,
    evaluate_encrypted,
    evaluate_horner,
    evaluate_naive
)


class TestEncryptedPolynomial:

    @pytest.fixture
    def polynomial(self, public_key):
        return Polynomial.from_roots([3, 7, 11, public_key.n - 4], public_key.n)

    @pytest.fixture
    def enc_poly(self, polynomial, public_key, cryptosystem):
        return EncryptedPolynomial.encrypt(polynomial, public_key, cryptosystem)

    def test_encrypts_every_coefficient(self, enc_poly, polynomial, cryptosystem, private_key):
        assert len(enc_poly) == len(polynomial)
        assert enc_poly.degree == 4
        decrypted = tuple(cryptosystem.decrypt(private_key, c) for c in enc_poly.coefficients)
        assert decrypted == polynomial.coefficients

    def test_signed_coefficients_normalized_before_encryption(self, public_key, cryptosystem, private_key):
        """[100, -40, -7, 1] must be encrypted as ring elements"""
        signed = Polynomial.from_roots([-5, 2, 10])
        enc_poly = EncryptedPolynomial.encrypt(signed, public_key, cryptosystem)

        decrypted = [cryptosystem.decrypt(private_key, c) for c in enc_poly.coefficients]
        assert decrypted == [100, public_key.n - 40, public_key.n - 7, 1]

    def test_empty_polynomial_rejected(self, public_key):
        with pytest.raises(ProtocolError):
            EncryptedPolynomial(coefficients=(), public_key=public_key)

    @pytest.mark.parametrize("method", [EvaluationMethod.NAIVE, EvaluationMethod.HORNER])
    def test_evaluation_matches_plaintext(self, enc_poly, polynomial, cryptosystem, private_key, method):
        for x in [0, 1, 5, 12345678901234567890]:
            enc = evaluate_encrypted(enc_poly, x, cryptosystem, method)
            assert cryptosystem.decrypt(private_key, enc) == polynomial.evaluate(x)

    @pytest.mark.parametrize("method", ["naive", "horner"])
    def test_roots_evaluate_to_zero(self, enc_poly, public_key, cryptosystem, private_key, method):
        for root in [3, 7, 11, public_key.n - 4]:
            enc = evaluate_encrypted(enc_poly, root, cryptosystem, method)
            assert cryptosystem.decrypt(private_key, enc) == 0

    def test_naive_and_horner_agree(self, enc_poly, public_key, cryptosystem, private_key):
        for x in [2, 8, public_key.n - 1, public_key.n // 3]:
            naive = evaluate_naive(enc_poly, x, cryptosystem)
            horner = evaluate_horner(enc_poly, x, cryptosystem)
            assert cryptosystem.decrypt(private_key, naive) == cryptosystem.decrypt(private_key, horner)

    def test_textbook_polynomial_encrypted(self, public_key, cryptosystem, private_key):
        """Roots [-5, 2, 10]: P(1) = 54, P(2) = P(10) = P(-5) = 0"""
        n = public_key.n
        enc_poly = EncryptedPolynomial.encrypt(Polynomial.from_roots([-5, 2, 10]), public_key, cryptosystem)

        def decrypted_at(x):
            return cryptosystem.decrypt(private_key, evaluate_encrypted(enc_poly, x % n, cryptosystem))

        assert decrypted_at(1) == 54
        assert decrypted_at(2) == 0
        assert decrypted_at(10) == 0
        assert decrypted_at(-5) == 0

    def test_constant_polynomial(self, public_key, cryptosystem, private_key):
        enc_poly = EncryptedPolynomial.encrypt(Polynomial.from_roots([]), public_key, cryptosystem)
        for method in EvaluationMethod:
            enc = evaluate_encrypted(enc_poly, 99, cryptosystem, method)
            assert cryptosystem.decrypt(private_key, enc) == 1

    def test_accepts_plain_ciphertext_sequence(self, enc_poly, polynomial, cryptosystem, private_key):
        enc = evaluate_horner(list(enc_poly.coefficients), 4, cryptosystem)
        assert cryptosystem.decrypt(private_key, enc) == polynomial.evaluate(4)

    def test_empty_sequence_rejected(self, cryptosystem):
        with pytest.raises(ValueError):
            evaluate_horner([], 1, cryptosystem)

    def test_point_out_of_range(self, enc_poly, public_key, cryptosystem):
        with pytest.raises(NegativeOrOutOfRangeInput):
            evaluate_encrypted(enc_poly, -1, cryptosystem)
        with pytest.raises(NegativeOrOutOfRangeInput):
            evaluate_encrypted(enc_poly, public_key.n, cryptosystem, "naive")


class TestEvaluationMethod:

    def test_parse(self):
        assert EvaluationMethod.parse("horner") is EvaluationMethod.HORNER
        assert EvaluationMethod.parse("NAIVE") is EvaluationMethod.NAIVE
        assert EvaluationMethod.parse(EvaluationMethod.NAIVE) is EvaluationMethod.NAIVE

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown evaluation method"):
            EvaluationMethod.parse("fft")
