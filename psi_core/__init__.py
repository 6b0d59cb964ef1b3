"""
PSI Core - Polynomial Private Set Intersection
===============================================
Two-party PSI over the Paillier additive homomorphic cryptosystem.
The client encrypts the polynomial whose roots are its set; the server
returns blinded evaluations; only matches decrypt to the client's own
elements.
"""

from .exceptions import (
    PSIError,
    EncodingOverflow,
    ModulusOverflow,
    NegativeOrOutOfRangeInput,
    ProtocolError,
    ConfigurationError
)
from .cryptosystem import PaillierCryptosystem, SecureRandomSource
from .encoding import Encoding, NumericKind, NumericEncoder, max_coefficient_bound
from .polynomial import Polynomial
from .evaluator import (
    EncryptedPolynomial,
    EvaluationMethod,
    evaluate_encrypted,
    evaluate_naive,
    evaluate_horner
)
from .blinding import ResponseBuilder
from .resolver import IntersectionResult, resolve
from .config import PSIConfig
from .messages import EncodingParams, QueryMessage, ResponseMessage
from .transport import InMemoryTransport
from .protocol import PSIClient, PSIServer, run_protocol
from .security_logger import SecurityLogger, DataType, OperationType
from .key_manager import KeyManager, KeyMetadata

__all__ = [
    # Errors
    'PSIError', 'EncodingOverflow', 'ModulusOverflow',
    'NegativeOrOutOfRangeInput', 'ProtocolError', 'ConfigurationError',

    # Cryptosystem
    'PaillierCryptosystem', 'SecureRandomSource',

    # Encoding & polynomials
    'Encoding', 'NumericKind', 'NumericEncoder', 'max_coefficient_bound',
    'Polynomial', 'EncryptedPolynomial', 'EvaluationMethod',
    'evaluate_encrypted', 'evaluate_naive', 'evaluate_horner',

    # Protocol
    'ResponseBuilder', 'IntersectionResult', 'resolve',
    'PSIConfig', 'PSIClient', 'PSIServer', 'run_protocol',
    'EncodingParams', 'QueryMessage', 'ResponseMessage', 'InMemoryTransport',

    # Audit & keys
    'SecurityLogger', 'DataType', 'OperationType',
    'KeyManager', 'KeyMetadata'
]

__version__ = '1.0.0'
