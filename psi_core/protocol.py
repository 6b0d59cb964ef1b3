"""
PSI Protocol Parties
====================
Client and server roles for one run of polynomial PSI.

    Client (holds key pair, set A)          Server (public key, set B)
    ------------------------------          --------------------------
    encode A, check capacity
    P(x) = ∏(x - a) mod n
    Enc(coefficients)          ── query ──▶
                                            for y in encode(B):
                                                Enc(r·P(y) + y)
                               ◀─ responses ─
    decrypt, keep those in encode(A),
    decode → A ∩ B

Security Model (semi-honest):
- The server holds only the public key: it cannot decrypt coefficients
  or responses
- The client learns the intersection and |B|, nothing about B \\ A
- All encoding and capacity checks run on the client BEFORE anything is
  sent
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from .blinding import ResponseBuilder
from .config import PSIConfig
from .cryptosystem import Ciphertext, PaillierCryptosystem, PrivateKey, PublicKey
from .encoding import Number, NumericEncoder
from .evaluator import EncryptedPolynomial
from .exceptions import ProtocolError
from .messages import QueryMessage, ResponseMessage
from .polynomial import Polynomial
from .resolver import IntersectionResult, resolve
from .security_logger import SecurityLogger
from .transport import InMemoryTransport


class PSIClient:
    """
    Client side: owns the key pair and receives the intersection.

    Example:
        client = PSIClient([0.0, 1.0, 32, 72], PSIConfig(key_bits=1024))
        query = client.build_query()
        ...
        result = client.resolve(response)
    """

    def __init__(self,
                 elements: Iterable[Number],
                 config: Optional[PSIConfig] = None,
                 keypair: Optional[Tuple[PublicKey, PrivateKey]] = None,
                 cryptosystem: Optional[PaillierCryptosystem] = None,
                 security_logger: Optional[SecurityLogger] = None):
        """
        Args:
            elements: Client's input set A
            config: Shared protocol configuration
            keypair: Existing (public, private) keys; generated if None
            cryptosystem: Homomorphic primitives
            security_logger: Optional audit logger

        Raises:
            EncodingOverflow: An element is not representable
            ModulusOverflow: The roots polynomial would wrap around n
        """
        self.config = (config or PSIConfig()).validate()
        self.cryptosystem = cryptosystem or PaillierCryptosystem()
        self.logger = security_logger

        if keypair is None:
            keypair = self.cryptosystem.generate_keypair(self.config.key_bits)
        self.public_key, self.private_key = keypair

        self.modulus = self.cryptosystem.modulus(self.public_key)
        self.encoder = NumericEncoder(self.modulus)

        encoded = self.encoder.encode_many(elements, self.config.encoding)
        self.own_encoded = frozenset(encoded)
        self.encoder.check_capacity(self.own_encoded)

        if self.logger:
            self.logger.log_client_encode(len(self.own_encoded), self.config.encoding.exponent)

        # Sorted only for reproducibility; root order never changes P
        self.polynomial = Polynomial.from_roots(sorted(self.own_encoded), self.modulus)
        self._encrypted: Optional[EncryptedPolynomial] = None

    @property
    def key_fingerprint(self) -> str:
        return self.cryptosystem.key_fingerprint(self.public_key)

    def encrypted_polynomial(self) -> EncryptedPolynomial:
        """Encrypt the roots polynomial (once per client)"""
        if self._encrypted is None:
            self._encrypted = EncryptedPolynomial.encrypt(
                self.polynomial, self.public_key, self.cryptosystem
            )
            if self.logger:
                self.logger.log_client_encrypt(self.polynomial.degree, self.key_fingerprint)
        return self._encrypted

    def build_query(self) -> QueryMessage:
        enc_poly = self.encrypted_polynomial()
        return QueryMessage.create(
            public_key=self.cryptosystem.serialize_public_key(self.public_key),
            encoding=self.config.encoding,
            coefficients=[self.cryptosystem.serialize_ciphertext(c) for c in enc_poly.coefficients]
        )

    def resolve_ciphertexts(self,
                            responses: Sequence[Ciphertext],
                            expected_count: Optional[int] = None) -> IntersectionResult:
        return resolve(
            self.own_encoded,
            responses,
            self.private_key,
            self.config.encoding,
            expected_count=expected_count,
            cryptosystem=self.cryptosystem,
            max_workers=self.config.max_workers,
            security_logger=self.logger
        )

    def resolve(self, response: ResponseMessage) -> IntersectionResult:
        """
        Decrypt the server's responses and decode the intersection.

        Malformed ciphertexts in an otherwise intact batch are dropped and
        counted as missing, so the result reports a count mismatch.

        Raises:
            ProtocolError: Response payload failed its integrity check
        """
        if not response.verify_checksum():
            raise ProtocolError("Response integrity check failed")

        ciphertexts = []
        dropped = 0
        for r in response.responses:
            try:
                ciphertexts.append(self.cryptosystem.deserialize_ciphertext(self.public_key, r))
            except ValueError:
                # Covers bad base64 and ciphertexts outside [1, n²)
                dropped += 1

        if dropped and self.logger:
            self.logger.log_warning('client', "dropped malformed responses", dropped=dropped)

        return self.resolve_ciphertexts(ciphertexts, expected_count=response.expected_count)


class PSIServer:
    """
    Server side: evaluates the client's encrypted polynomial on its own set.

    Never holds a private key.
    """

    def __init__(self,
                 elements: Iterable[Number],
                 config: Optional[PSIConfig] = None,
                 cryptosystem: Optional[PaillierCryptosystem] = None,
                 security_logger: Optional[SecurityLogger] = None):
        self.config = (config or PSIConfig()).validate()
        self.cryptosystem = cryptosystem or PaillierCryptosystem()
        self.logger = security_logger
        self.elements: List[Number] = list(elements)

    def encode_elements(self, public_key: PublicKey) -> List[int]:
        """Encode the server set under the client's modulus, dropping duplicates"""
        encoder = NumericEncoder(self.cryptosystem.modulus(public_key))
        encoded = encoder.encode_many(self.elements, self.config.encoding)
        return list(dict.fromkeys(encoded))

    def respond(self, enc_poly: EncryptedPolynomial) -> List[Ciphertext]:
        """Blinded responses for every server element"""
        builder = ResponseBuilder(
            enc_poly.public_key,
            cryptosystem=self.cryptosystem,
            blinding_bits=self.config.blinding_bits,
            evaluation_method=self.config.evaluation_method,
            max_workers=self.config.max_workers,
            shuffle_responses=self.config.shuffle_responses,
            security_logger=self.logger
        )
        return builder.build_responses(enc_poly, self.encode_elements(enc_poly.public_key))

    def handle_query(self, query: QueryMessage) -> ResponseMessage:
        """
        Answer a client query.

        Raises:
            ProtocolError: Tampered payload or encoding that differs from ours
        """
        if not query.verify_checksum():
            raise ProtocolError("Query integrity check failed")
        if query.encoding.to_encoding() != self.config.encoding:
            raise ProtocolError(
                f"Encoding mismatch: client {query.encoding.model_dump()}, "
                f"server {self.config.encoding.to_dict()}"
            )

        public_key = self.cryptosystem.deserialize_public_key(query.public_key)
        if public_key.n.bit_length() <= self.config.blinding_bits:
            raise ProtocolError("Client public key is too small for the configured blinding")

        enc_poly = EncryptedPolynomial(
            coefficients=tuple(
                self.cryptosystem.deserialize_ciphertext(public_key, c)
                for c in query.coefficients
            ),
            public_key=public_key
        )

        if self.logger:
            self.logger.log_server_receive(len(enc_poly), round(query.get_size_kb(), 3))

        responses = self.respond(enc_poly)
        return ResponseMessage.create(
            [self.cryptosystem.serialize_ciphertext(c) for c in responses]
        )


def run_protocol(client_elements: Iterable[Number],
                 server_elements: Iterable[Number],
                 config: Optional[PSIConfig] = None,
                 keypair: Optional[Tuple[PublicKey, PrivateKey]] = None,
                 security_logger: Optional[SecurityLogger] = None) -> IntersectionResult:
    """Run both parties in-process over an in-memory transport"""
    config = config or PSIConfig()
    client = PSIClient(client_elements, config, keypair=keypair, security_logger=security_logger)
    server = PSIServer(server_elements, config, security_logger=security_logger)
    response = InMemoryTransport(server).exchange(client.build_query())
    return client.resolve(response)
