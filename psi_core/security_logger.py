"""
Security Audit Logger for the PSI Protocol
==========================================
Audit trail showing what each party handled during a PSI run.

Purpose:
- Log every protocol step with the kind of data it touched
- Show that the server only ever handled ciphertext, public parameters
  and its OWN plaintext inputs
- Flag any step where a party handled the PEER's plaintext
- Record warning-level protocol anomalies (e.g. short response vectors)
"""

import json
import threading
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Dict, Any, Optional


class DataType(Enum):
    """Classification of data handled in an operation"""
    CIPHERTEXT = "ciphertext"          # Encrypted data - safe
    OWN_PLAINTEXT = "own_plaintext"    # A party's own inputs - safe
    PEER_PLAINTEXT = "peer_plaintext"  # The other party's inputs - privacy violation
    PUBLIC_PARAM = "public_param"      # Public key, encoding, counts - safe
    METADATA = "metadata"              # Non-sensitive metadata - safe


class OperationType(Enum):
    """Protocol steps"""
    ENCODE = "encode"
    BUILD_POLYNOMIAL = "build_polynomial"
    ENCRYPT = "encrypt"
    TRANSMIT = "transmit"
    RECEIVE = "receive"
    EVALUATE = "evaluate"
    BLIND = "blind"
    DECRYPT = "decrypt"
    RESOLVE = "resolve"
    WARNING = "warning"


class LogLevel(Enum):
    INFO = "info"
    WARNING = "warning"


@dataclass
class SecurityLogEntry:
    """Single security audit log entry"""
    timestamp: str
    entity: str            # 'client' or 'server'
    operation: str
    data_types: List[str]
    is_safe: bool          # False if peer plaintext was exposed
    level: str
    details: Dict[str, Any]
    sequence_id: int

    def to_dict(self) -> dict:
        return asdict(self)


class SecurityLogger:
    """
    Append-only audit log for a PSI deployment.

    Thread-safe: the server may log from several evaluation workers.
    """

    def __init__(self, log_file: Optional[str] = None):
        """
        Args:
            log_file: Optional JSON-lines file to persist entries
        """
        self._entries: List[SecurityLogEntry] = []
        self._lock = threading.Lock()
        self._sequence = 0
        self.log_file = Path(log_file) if log_file else None

        if self.log_file and self.log_file.exists():
            self._load_from_file()

    def log(self,
            entity: str,
            operation: OperationType,
            data_types: List[DataType],
            details: Dict[str, Any] = None,
            level: LogLevel = LogLevel.INFO) -> SecurityLogEntry:
        """
        Log a security-relevant operation.

        Args:
            entity: Party performing the operation ('client', 'server')
            operation: Protocol step
            data_types: Kinds of data involved
            details: Additional context (never raw set elements)
            level: INFO or WARNING

        Returns:
            The created log entry
        """
        with self._lock:
            self._sequence += 1

            entry = SecurityLogEntry(
                timestamp=datetime.now().isoformat(),
                entity=entity,
                operation=operation.value,
                data_types=[dt.value for dt in data_types],
                is_safe=DataType.PEER_PLAINTEXT not in data_types,
                level=level.value,
                details=details or {},
                sequence_id=self._sequence
            )

            self._entries.append(entry)

            if self.log_file:
                self._append_to_file(entry)

            return entry

    # ==================== CLIENT STEPS ====================

    def log_client_encode(self, element_count: int, exponent: int) -> SecurityLogEntry:
        """Client encoding its own set"""
        return self.log(
            entity='client',
            operation=OperationType.ENCODE,
            data_types=[DataType.OWN_PLAINTEXT, DataType.PUBLIC_PARAM],
            details={'element_count': element_count, 'exponent': exponent}
        )

    def log_client_encrypt(self, degree: int, key_fingerprint: str) -> SecurityLogEntry:
        """Client encrypting the roots polynomial"""
        return self.log(
            entity='client',
            operation=OperationType.ENCRYPT,
            data_types=[DataType.OWN_PLAINTEXT, DataType.CIPHERTEXT],
            details={'degree': degree, 'key_fingerprint': key_fingerprint}
        )

    def log_client_decrypt(self, response_count: int) -> SecurityLogEntry:
        """Client decrypting blinded responses (only ring noise or own elements)"""
        return self.log(
            entity='client',
            operation=OperationType.DECRYPT,
            data_types=[DataType.CIPHERTEXT, DataType.OWN_PLAINTEXT],
            details={'response_count': response_count}
        )

    def log_client_resolve(self, match_count: int) -> SecurityLogEntry:
        return self.log(
            entity='client',
            operation=OperationType.RESOLVE,
            data_types=[DataType.OWN_PLAINTEXT, DataType.METADATA],
            details={'match_count': match_count}
        )

    # ==================== SERVER STEPS ====================

    def log_server_receive(self, coefficient_count: int, payload_size_kb: float) -> SecurityLogEntry:
        """Server receiving the encrypted polynomial"""
        return self.log(
            entity='server',
            operation=OperationType.RECEIVE,
            data_types=[DataType.CIPHERTEXT, DataType.PUBLIC_PARAM],
            details={'coefficient_count': coefficient_count, 'payload_size_kb': payload_size_kb}
        )

    def log_server_evaluate(self, input_count: int, method: str) -> SecurityLogEntry:
        """Server evaluating Enc(P) at its own inputs"""
        return self.log(
            entity='server',
            operation=OperationType.EVALUATE,
            data_types=[DataType.CIPHERTEXT, DataType.OWN_PLAINTEXT],
            details={'input_count': input_count, 'method': method}
        )

    def log_server_blind(self, response_count: int, blinding_bits: int) -> SecurityLogEntry:
        return self.log(
            entity='server',
            operation=OperationType.BLIND,
            data_types=[DataType.CIPHERTEXT, DataType.OWN_PLAINTEXT],
            details={'response_count': response_count, 'blinding_bits': blinding_bits}
        )

    # ==================== WARNINGS ====================

    def log_warning(self, entity: str, message: str, **details) -> SecurityLogEntry:
        """Warning-level protocol anomaly that does not compromise correctness"""
        details['message'] = message
        return self.log(
            entity=entity,
            operation=OperationType.WARNING,
            data_types=[DataType.METADATA],
            details=details,
            level=LogLevel.WARNING
        )

    # ==================== QUERIES ====================

    def get_all_entries(self) -> List[SecurityLogEntry]:
        return list(self._entries)

    def get_entries_for_entity(self, entity: str) -> List[SecurityLogEntry]:
        return [e for e in self._entries if e.entity == entity]

    def get_violations(self) -> List[SecurityLogEntry]:
        return [e for e in self._entries if not e.is_safe]

    def get_warnings(self) -> List[SecurityLogEntry]:
        return [e for e in self._entries if e.level == LogLevel.WARNING.value]

    def verify_no_violations(self) -> bool:
        return len(self.get_violations()) == 0

    def get_server_summary(self) -> Dict[str, Any]:
        """
        Summary of server operations for audit.

        Shows the server never handled the client's plaintext.
        """
        server_entries = self.get_entries_for_entity('server')

        data_types_seen = set()
        for entry in server_entries:
            data_types_seen.update(entry.data_types)

        return {
            'total_operations': len(server_entries),
            'data_types_handled': sorted(data_types_seen),
            'peer_plaintext_access': DataType.PEER_PLAINTEXT.value in data_types_seen,
            'violations': len([e for e in server_entries if not e.is_safe]),
            'privacy_preserved': DataType.PEER_PLAINTEXT.value not in data_types_seen
        }

    def generate_audit_report(self) -> Dict[str, Any]:
        server_summary = self.get_server_summary()

        return {
            'report_generated': datetime.now().isoformat(),
            'total_log_entries': len(self._entries),
            'entities': sorted(set(e.entity for e in self._entries)),
            'server_privacy_audit': server_summary,
            'security_violations': [e.to_dict() for e in self.get_violations()],
            'warnings': [e.to_dict() for e in self.get_warnings()],
            'conclusion': (
                "PRIVACY PRESERVED: no party handled its peer's plaintext."
                if self.verify_no_violations()
                else "PRIVACY VIOLATION: peer plaintext was handled!"
            )
        }

    def _append_to_file(self, entry: SecurityLogEntry):
        with open(self.log_file, 'a') as f:
            f.write(json.dumps(entry.to_dict()) + '\n')

    def _load_from_file(self):
        with open(self.log_file, 'r') as f:
            for line in f:
                if line.strip():
                    data = json.loads(line)
                    self._entries.append(SecurityLogEntry(**data))
                    self._sequence = max(self._sequence, data['sequence_id'])

    def clear(self):
        """Clear all entries (for testing)"""
        with self._lock:
            self._entries.clear()
            self._sequence = 0
            if self.log_file and self.log_file.exists():
                self.log_file.unlink()
