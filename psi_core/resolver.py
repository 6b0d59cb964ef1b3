"""
Intersection Resolver (client side)
===================================
Decrypts blinded responses and keeps those that land on the client's
own encoded set.

A response decrypting to one of our encoded elements is a match (the
server held that element); anything else is ring noise and is dropped.
A mismatch is ordinary control flow, never an error.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import AbstractSet, FrozenSet, Optional, Sequence

from .cryptosystem import Ciphertext, PaillierCryptosystem, PrivateKey
from .encoding import Encoding, NumericEncoder
from .security_logger import SecurityLogger


@dataclass(frozen=True)
class IntersectionResult:
    """Decoded intersection plus resolution statistics"""
    values: FrozenSet
    responses_received: int
    responses_expected: Optional[int]
    match_count: int

    @property
    def count_mismatch(self) -> bool:
        return (
            self.responses_expected is not None
            and self.responses_expected != self.responses_received
        )

    def __contains__(self, value) -> bool:
        return value in self.values

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def to_dict(self) -> dict:
        return {
            'values': sorted(self.values),
            'responses_received': self.responses_received,
            'responses_expected': self.responses_expected,
            'match_count': self.match_count,
            'count_mismatch': self.count_mismatch
        }


def resolve(own_encoded: AbstractSet[int],
            responses: Sequence[Ciphertext],
            private_key: PrivateKey,
            encoding: Encoding,
            exponent: Optional[int] = None,
            expected_count: Optional[int] = None,
            cryptosystem: Optional[PaillierCryptosystem] = None,
            max_workers: int = 1,
            security_logger: Optional[SecurityLogger] = None) -> IntersectionResult:
    """
    Resolve the intersection from blinded responses.

    Args:
        own_encoded: Client's encoded set (ring elements)
        responses: Blinded responses from the server
        private_key: Client's Paillier private key
        encoding: Shared encoding
        exponent: Exponent used at encode time (defaults to encoding's)
        expected_count: Number of responses the server announced; a
            difference is logged as a warning, not raised
        max_workers: Threads used for decryption

    Returns:
        IntersectionResult with decoded matching values
    """
    cryptosystem = cryptosystem or PaillierCryptosystem()
    encoder = NumericEncoder(private_key.public_key.n)

    if expected_count is not None and expected_count != len(responses):
        if security_logger:
            security_logger.log_warning(
                'client',
                "response count mismatch; resolving what was received",
                expected=expected_count,
                received=len(responses)
            )

    def _decrypt(ciphertext: Ciphertext) -> int:
        return cryptosystem.decrypt(private_key, ciphertext)

    if max_workers > 1 and len(responses) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            decrypted = list(pool.map(_decrypt, responses))
    else:
        decrypted = [_decrypt(c) for c in responses]

    if security_logger:
        security_logger.log_client_decrypt(len(decrypted))

    matches = set()
    match_count = 0
    for element in decrypted:
        if element in own_encoded:
            match_count += 1
            matches.add(encoder.decode(element, encoding, exponent))

    if security_logger:
        security_logger.log_client_resolve(len(matches))

    return IntersectionResult(
        values=frozenset(matches),
        responses_received=len(responses),
        responses_expected=expected_count,
        match_count=match_count
    )
