"""
Blinded Response Builder (server side)
======================================
Turns each encrypted evaluation Enc(P(y)) into a response the client
can test for membership and learn nothing else from:

    response = (r ⊙ Enc(P(y))) ⊕ Enc(y)  =  Enc(r·P(y) + y)

with r a fresh random multiplier per response.

- y in the client's set:  P(y) ≡ 0 (mod n), so r·P(y) = 0 and the
  response decrypts to exactly y
- y not in the set:       P(y) ≠ 0, and r·P(y) + y is an unpredictable
  ring element unrelated to y

Without r the client would get P(y) + y and could solve for y. The fresh
Enc(y) also re-randomizes every response.
"""

import secrets
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Union

from .cryptosystem import Ciphertext, PaillierCryptosystem, PublicKey, SecureRandomSource
from .evaluator import EncryptedPolynomial, EvaluationMethod, evaluate_encrypted
from .exceptions import ConfigurationError, ProtocolError
from .security_logger import SecurityLogger


class ResponseBuilder:
    """
    Builds blinded responses for the server's encoded inputs.

    Holds only public material: the public key and a random source.
    """

    def __init__(self,
                 public_key: PublicKey,
                 cryptosystem: Optional[PaillierCryptosystem] = None,
                 blinding_bits: int = 64,
                 random_source: Optional[SecureRandomSource] = None,
                 evaluation_method: Union[str, EvaluationMethod] = EvaluationMethod.HORNER,
                 max_workers: int = 1,
                 shuffle_responses: bool = True,
                 security_logger: Optional[SecurityLogger] = None):
        """
        Args:
            public_key: Client's Paillier public key
            cryptosystem: Homomorphic primitives
            blinding_bits: Bit length of each random multiplier r
            random_source: CSPRNG for r (shared across one run)
            evaluation_method: 'horner' or 'naive'
            max_workers: Threads used to evaluate inputs in parallel
            shuffle_responses: Permute response order before returning
            security_logger: Optional audit logger
        """
        if blinding_bits >= public_key.n.bit_length():
            raise ConfigurationError(
                f"blinding_bits ({blinding_bits}) must be below the modulus size "
                f"({public_key.n.bit_length()} bits)"
            )
        self.public_key = public_key
        self.cryptosystem = cryptosystem or PaillierCryptosystem()
        self.blinding_bits = blinding_bits
        self.random_source = random_source or SecureRandomSource()
        self.evaluation_method = EvaluationMethod.parse(evaluation_method)
        self.max_workers = max_workers
        self.shuffle_responses = shuffle_responses
        self.logger = security_logger

    def build_response(self, enc_p_at_y: Ciphertext, y: int) -> Ciphertext:
        """
        Blind one encrypted evaluation.

        Args:
            enc_p_at_y: Enc(P(y))
            y: Server's encoded input (ring element)

        Returns:
            Enc(r·P(y) + y)
        """
        r = self.random_source.random_bits(self.blinding_bits)
        blinded = self.cryptosystem.scalar_multiply(enc_p_at_y, r)
        return self.cryptosystem.add(blinded, self.cryptosystem.encrypt(self.public_key, y))

    def _respond_one(self, enc_poly: EncryptedPolynomial, y: int) -> Ciphertext:
        enc_p_at_y = evaluate_encrypted(enc_poly, y, self.cryptosystem, self.evaluation_method)
        return self.build_response(enc_p_at_y, y)

    def build_responses(self,
                        enc_poly: EncryptedPolynomial,
                        elements: Sequence[int]) -> List[Ciphertext]:
        """
        One blinded response per encoded server input.

        Inputs are independent; with max_workers > 1 they are evaluated
        on a thread pool sharing the read-only polynomial and key.
        """
        if enc_poly.public_key != self.public_key:
            raise ProtocolError("Encrypted polynomial was produced under a different public key")

        if self.logger:
            self.logger.log_server_evaluate(len(elements), self.evaluation_method.value)

        if self.max_workers > 1 and len(elements) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                responses = list(pool.map(lambda y: self._respond_one(enc_poly, y), elements))
        else:
            responses = [self._respond_one(enc_poly, y) for y in elements]

        if self.shuffle_responses:
            secrets.SystemRandom().shuffle(responses)

        if self.logger:
            self.logger.log_server_blind(len(responses), self.blinding_bits)

        return responses
