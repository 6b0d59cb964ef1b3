"""
PSI Configuration
=================
Parameters both parties agree on before a run.

Security Parameters:
- key_bits: Paillier modulus size. 2048 → ~112-bit security; 512 is for
  tests only
- blinding_bits: size of the random multiplier r in r·P(y) + y. A
  non-member must decrypt to a value nowhere near the client's encoded
  set; 64 bits keeps the chance of r·P(y) landing on a small value
  negligible. Anything below 32 is rejected
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from .encoding import Encoding
from .evaluator import EvaluationMethod
from .exceptions import ConfigurationError


MIN_KEY_BITS = 256
MIN_BLINDING_BITS = 32


@dataclass
class PSIConfig:
    """Protocol configuration shared by client and server"""
    key_bits: int = 2048
    encoding: Encoding = field(default_factory=Encoding)
    blinding_bits: int = 64
    evaluation_method: EvaluationMethod = EvaluationMethod.HORNER
    max_workers: int = 1
    shuffle_responses: bool = True

    def __post_init__(self):
        self.evaluation_method = EvaluationMethod.parse(self.evaluation_method)

    def validate(self) -> 'PSIConfig':
        """
        Raises:
            ConfigurationError: If any parameter is out of range
        """
        if self.key_bits < MIN_KEY_BITS:
            raise ConfigurationError(f"key_bits must be >= {MIN_KEY_BITS}, got {self.key_bits}")
        if self.blinding_bits < MIN_BLINDING_BITS:
            raise ConfigurationError(
                f"blinding_bits must be >= {MIN_BLINDING_BITS}, got {self.blinding_bits}"
            )
        if self.blinding_bits >= self.key_bits:
            raise ConfigurationError("blinding_bits must be smaller than key_bits")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.encoding.base < 2:
            raise ConfigurationError("encoding base must be >= 2")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key_bits': self.key_bits,
            'encoding': self.encoding.to_dict(),
            'blinding_bits': self.blinding_bits,
            'evaluation_method': self.evaluation_method.value,
            'max_workers': self.max_workers,
            'shuffle_responses': self.shuffle_responses
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PSIConfig':
        defaults = cls()
        return cls(
            key_bits=int(data.get('key_bits', defaults.key_bits)),
            encoding=Encoding.from_dict(data['encoding']) if 'encoding' in data else defaults.encoding,
            blinding_bits=int(data.get('blinding_bits', defaults.blinding_bits)),
            evaluation_method=data.get('evaluation_method', defaults.evaluation_method),
            max_workers=int(data.get('max_workers', defaults.max_workers)),
            shuffle_responses=bool(data.get('shuffle_responses', defaults.shuffle_responses))
        )
