"""
Wire Messages
=============
The two messages exchanged in one PSI run:

1. QueryMessage     client → server: public key, encoding parameters,
                    encrypted coefficients of the roots polynomial
2. ResponseMessage  server → client: blinded responses

Ring elements and ciphertexts travel as base64 big-endian integers. Each
message carries a truncated SHA-256 checksum of its payload so a
corrupted round is rejected as a whole.
"""

import hashlib
from typing import List, Optional

from pydantic import BaseModel, Field

from .encoding import Encoding, NumericKind
from .exceptions import ProtocolError


def payload_checksum(*parts: str) -> str:
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part.encode('utf-8'))
        digest.update(b'|')
    return digest.hexdigest()[:12]


class EncodingParams(BaseModel):
    """Encoding both parties must share"""
    kind: str = NumericKind.FLOAT.value
    base: int = Field(10, ge=2)
    exponent: int = -10

    @classmethod
    def from_encoding(cls, encoding: Encoding) -> 'EncodingParams':
        return cls(**encoding.to_dict())

    def to_encoding(self) -> Encoding:
        try:
            return Encoding.from_dict(self.model_dump())
        except ValueError as e:
            raise ProtocolError(f"Invalid encoding parameters: {e}") from e


class QueryMessage(BaseModel):
    """Client → server: encrypted roots polynomial"""
    public_key: str
    encoding: EncodingParams
    coefficients: List[str]
    checksum: str

    @classmethod
    def create(cls, public_key: str, encoding: Encoding, coefficients: List[str]) -> 'QueryMessage':
        params = EncodingParams.from_encoding(encoding)
        return cls(
            public_key=public_key,
            encoding=params,
            coefficients=coefficients,
            checksum=payload_checksum(public_key, params.model_dump_json(), *coefficients)
        )

    def verify_checksum(self) -> bool:
        expected = payload_checksum(self.public_key, self.encoding.model_dump_json(), *self.coefficients)
        return expected == self.checksum

    def get_size_kb(self) -> float:
        return (len(self.public_key) + sum(len(c) for c in self.coefficients)) / 1024

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> 'QueryMessage':
        return cls.model_validate_json(data)


class ResponseMessage(BaseModel):
    """Server → client: blinded responses"""
    responses: List[str]
    expected_count: int = Field(ge=0)
    checksum: str

    @classmethod
    def create(cls, responses: List[str], expected_count: Optional[int] = None) -> 'ResponseMessage':
        """
        Args:
            responses: Serialized blinded responses
            expected_count: Number of inputs the server answered; defaults
                to len(responses)
        """
        return cls(
            responses=responses,
            expected_count=len(responses) if expected_count is None else expected_count,
            checksum=payload_checksum(*responses)
        )

    def verify_checksum(self) -> bool:
        return payload_checksum(*self.responses) == self.checksum

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> 'ResponseMessage':
        return cls.model_validate_json(data)
