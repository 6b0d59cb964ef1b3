"""
PSI Error Types
===============
Every failure the protocol can raise derives from PSIError.

A failed membership test is not an error: a response that does not
decrypt to one of the client's encoded elements is simply a non-match.
"""


class PSIError(Exception):
    """Base class for all protocol errors"""


class EncodingOverflow(PSIError, OverflowError):
    """Value cannot be represented in the plaintext ring at the given exponent"""


class ModulusOverflow(PSIError, OverflowError):
    """
    Coefficients of the roots polynomial could wrap around the modulus.

    Use a larger key or a smaller set / coarser exponent.
    """


class NegativeOrOutOfRangeInput(PSIError, ValueError):
    """A raw integer outside [0, n) reached the cryptosystem layer"""


class ProtocolError(PSIError, ValueError):
    """Malformed, tampered or mismatched protocol message"""


class ConfigurationError(PSIError, ValueError):
    """Invalid PSI configuration"""
