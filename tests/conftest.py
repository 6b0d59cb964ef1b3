"""
Shared fixtures.

Paillier key generation dominates test time, so key pairs are generated
once per session at the smallest size the protocol accepts comfortably.
"""

import pytest

from psi_core import PaillierCryptosystem, PSIConfig, SecurityLogger


TEST_KEY_BITS = 512


@pytest.fixture(scope="session")
def cryptosystem():
    return PaillierCryptosystem()


@pytest.fixture(scope="session")
def keypair(cryptosystem):
    return cryptosystem.generate_keypair(TEST_KEY_BITS)


@pytest.fixture(scope="session")
def other_keypair(cryptosystem):
    return cryptosystem.generate_keypair(TEST_KEY_BITS)


@pytest.fixture
def public_key(keypair):
    return keypair[0]


@pytest.fixture
def private_key(keypair):
    return keypair[1]


@pytest.fixture
def config():
    return PSIConfig(key_bits=TEST_KEY_BITS)


@pytest.fixture
def security_logger():
    return SecurityLogger()
