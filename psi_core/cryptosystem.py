"""
Paillier Cryptosystem Adapter
=============================
Thin wrapper over python-paillier (``phe``) exposing exactly the additive
homomorphic primitives the PSI protocol needs, on raw ring elements.

Why raw ring elements:
- phe's high-level API carries its own floating point encoding and
  refuses scalars above n/3
- The protocol does its own encoding (see ``encoding.py``) and needs
  scalars anywhere in [0, n)

Primitives:
- Enc(a) ⊕ Enc(b) = Enc(a + b mod n)      (ciphertext product mod n²)
- Enc(a) ⊙ k      = Enc(a · k mod n)      (ciphertext power mod n²)

Nothing here reduces plaintexts modulo n on the caller's behalf: a value
outside [0, n) is a caller bug and raises NegativeOrOutOfRangeInput.
"""

import base64
import hashlib
import secrets
from typing import Tuple

from phe import paillier
from phe.util import powmod

from .exceptions import NegativeOrOutOfRangeInput


PublicKey = paillier.PaillierPublicKey
PrivateKey = paillier.PaillierPrivateKey
Ciphertext = paillier.EncryptedNumber


def int_to_b64(value: int) -> str:
    """Big-endian base64 encoding of a non-negative integer"""
    length = max(1, (value.bit_length() + 7) // 8)
    return base64.b64encode(value.to_bytes(length, 'big')).decode('utf-8')


def b64_to_int(data: str) -> int:
    return int.from_bytes(base64.b64decode(data), 'big')


class SecureRandomSource:
    """
    Cryptographically secure source of blinding values.

    One instance may be shared by all responses of a server run; every
    draw comes straight from the OS CSPRNG so values are never
    predictable across runs.
    """

    def random_bits(self, bits: int) -> int:
        """
        Draw a random integer of exactly ``bits`` bits.

        The top bit is forced so the value is never zero and always has
        the full requested length.
        """
        if bits < 1:
            raise ValueError("bits must be positive")
        return secrets.randbits(bits) | (1 << (bits - 1))


class PaillierCryptosystem:
    """
    Additive homomorphic operations over Paillier ciphertexts.

    Stateless: keys are passed into every call, no key material is held
    by the instance.
    """

    @staticmethod
    def generate_keypair(bits: int = 2048) -> Tuple[PublicKey, PrivateKey]:
        """Generate a Paillier key pair with an n of ``bits`` bits"""
        return paillier.generate_paillier_keypair(n_length=bits)

    @staticmethod
    def modulus(public_key: PublicKey) -> int:
        return public_key.n

    @staticmethod
    def _check_range(value: int, n: int, what: str):
        if not isinstance(value, int) or isinstance(value, bool):
            raise NegativeOrOutOfRangeInput(
                f"{what} must be an int, got {type(value).__name__}"
            )
        if not 0 <= value < n:
            raise NegativeOrOutOfRangeInput(
                f"{what} {value} outside plaintext range [0, n)"
            )

    def encrypt(self, public_key: PublicKey, value: int) -> Ciphertext:
        """
        Encrypt a ring element.

        Raises:
            NegativeOrOutOfRangeInput: If value is not in [0, n)
        """
        self._check_range(value, public_key.n, "plaintext")
        return paillier.EncryptedNumber(public_key, public_key.raw_encrypt(value), 0)

    def decrypt(self, private_key: PrivateKey, ciphertext: Ciphertext) -> int:
        """Decrypt to a ring element in [0, n)"""
        if ciphertext.public_key != private_key.public_key:
            raise ValueError("Cannot decrypt: ciphertext was produced under a different key")
        return private_key.raw_decrypt(ciphertext.ciphertext(be_secure=False))

    def add(self, enc_a: Ciphertext, enc_b: Ciphertext) -> Ciphertext:
        """Homomorphic addition: Enc(a) ⊕ Enc(b) = Enc(a + b)"""
        if enc_a.public_key != enc_b.public_key:
            raise ValueError("Cannot add ciphertexts encrypted under different keys")
        public_key = enc_a.public_key
        product = (
            enc_a.ciphertext(be_secure=False) * enc_b.ciphertext(be_secure=False)
        ) % public_key.nsquare
        return paillier.EncryptedNumber(public_key, product, 0)

    def scalar_multiply(self, encrypted: Ciphertext, scalar: int) -> Ciphertext:
        """Homomorphic plaintext multiplication: Enc(a) ⊙ k = Enc(a · k)"""
        public_key = encrypted.public_key
        self._check_range(scalar, public_key.n, "scalar")
        power = powmod(encrypted.ciphertext(be_secure=False), scalar, public_key.nsquare)
        return paillier.EncryptedNumber(public_key, power, 0)

    # ==================== SERIALIZATION ====================

    @staticmethod
    def serialize_ciphertext(ciphertext: Ciphertext) -> str:
        return int_to_b64(ciphertext.ciphertext(be_secure=False))

    @staticmethod
    def deserialize_ciphertext(public_key: PublicKey, data: str) -> Ciphertext:
        raw = b64_to_int(data)
        if not 0 < raw < public_key.nsquare:
            raise NegativeOrOutOfRangeInput("ciphertext outside [1, n²)")
        return paillier.EncryptedNumber(public_key, raw, 0)

    @staticmethod
    def serialize_public_key(public_key: PublicKey) -> str:
        return int_to_b64(public_key.n)

    @staticmethod
    def deserialize_public_key(data: str) -> PublicKey:
        return paillier.PaillierPublicKey(b64_to_int(data))

    @staticmethod
    def key_fingerprint(public_key: PublicKey) -> str:
        """Short hash of n identifying a key pair"""
        return hashlib.sha256(str(public_key.n).encode('utf-8')).hexdigest()[:16]
