"""
Security Logger Tests
=====================
"""

import json

from psi_core import DataType, OperationType, SecurityLogger


class TestSecurityLogger:

    def test_sequence_ids(self, security_logger):
        a = security_logger.log_client_encode(3, -10)
        b = security_logger.log_server_receive(4, 1.5)
        assert (a.sequence_id, b.sequence_id) == (1, 2)

    def test_peer_plaintext_is_violation(self, security_logger):
        entry = security_logger.log(
            'server', OperationType.DECRYPT, [DataType.PEER_PLAINTEXT]
        )
        assert entry.is_safe is False
        assert security_logger.verify_no_violations() is False
        assert security_logger.get_server_summary()['privacy_preserved'] is False

    def test_own_plaintext_is_safe(self, security_logger):
        security_logger.log_server_evaluate(10, "horner")
        security_logger.log_client_decrypt(10)
        assert security_logger.verify_no_violations()

    def test_warnings(self, security_logger):
        security_logger.log_warning('client', "short batch", expected=5, received=3)
        warnings = security_logger.get_warnings()

        assert len(warnings) == 1
        assert warnings[0].details == {'expected': 5, 'received': 3, 'message': "short batch"}
        assert security_logger.verify_no_violations()

    def test_audit_report(self, security_logger):
        security_logger.log_client_encode(2, -10)
        security_logger.log_server_blind(2, 64)
        report = security_logger.generate_audit_report()

        assert report['total_log_entries'] == 2
        assert report['entities'] == ['client', 'server']
        assert report['conclusion'].startswith("PRIVACY PRESERVED")

    def test_persistence(self, tmp_path):
        log_file = tmp_path / "audit.jsonl"
        logger = SecurityLogger(str(log_file))
        logger.log_client_encode(1, -10)
        logger.log_warning('client', "count mismatch")

        lines = log_file.read_text().strip().splitlines()
        assert json.loads(lines[1])['level'] == 'warning'

        reloaded = SecurityLogger(str(log_file))
        assert len(reloaded.get_all_entries()) == 2
        assert reloaded.log_client_resolve(0).sequence_id == 3

    def test_clear(self, tmp_path):
        log_file = tmp_path / "audit.jsonl"
        logger = SecurityLogger(str(log_file))
        logger.log_client_encode(1, -10)
        logger.clear()

        assert logger.get_all_entries() == []
        assert not log_file.exists()
