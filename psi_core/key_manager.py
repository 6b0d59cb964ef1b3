"""
Key Management for the PSI Client
=================================
Generation and storage of the client's Paillier key pair.

Key Distribution Model:
1. The client generates the key pair and keeps the private key
2. Only the public key (n) ever leaves the client, inside each query
3. The server never receives private key material

Storage:
- public_key.json    n as base64, readable by anyone
- private_key.enc    p and q, Fernet-encrypted
- key_metadata.json  fingerprint, size, creation time
- The Fernet key is derived from a passphrase with PBKDF2-HMAC-SHA256
  (salt in .salt), or is a random key in .master_key (mode 0600) when no
  passphrase is given
"""

import base64
import json
import os
import secrets
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from phe import paillier

from .cryptosystem import PaillierCryptosystem, PrivateKey, PublicKey, b64_to_int, int_to_b64


PBKDF2_ITERATIONS = 390000


@dataclass
class KeyMetadata:
    """Metadata about a stored key pair"""
    fingerprint: str
    created_at: str
    key_bits: int
    purpose: str  # 'psi_client'


class KeyManager:
    """
    Stores and reloads the client's Paillier key pair.

    Security Model:
    - Private key is encrypted at rest
    - Public key and metadata are plain JSON
    """

    def __init__(self, storage_dir: str = ".keys", passphrase: Optional[str] = None):
        """
        Args:
            storage_dir: Directory for key files
            passphrase: Optional passphrase protecting the private key
        """
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        self.fernet = Fernet(self._load_or_create_fernet_key(passphrase))
        self.cryptosystem = PaillierCryptosystem()

        self._public_key: Optional[PublicKey] = None
        self._private_key: Optional[PrivateKey] = None
        self._metadata: Optional[KeyMetadata] = None

    def _load_or_create_fernet_key(self, passphrase: Optional[str]) -> bytes:
        if passphrase is not None:
            salt_file = self.storage_dir / ".salt"
            if salt_file.exists():
                salt = salt_file.read_bytes()
            else:
                salt = secrets.token_bytes(16)
                salt_file.write_bytes(salt)

            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA256(),
                length=32,
                salt=salt,
                iterations=PBKDF2_ITERATIONS,
            )
            return base64.urlsafe_b64encode(kdf.derive(passphrase.encode('utf-8')))

        key_file = self.storage_dir / ".master_key"
        if key_file.exists():
            return key_file.read_bytes()

        key = Fernet.generate_key()
        key_file.write_bytes(key)
        os.chmod(key_file, 0o600)
        return key

    def generate_keys(self, key_bits: int = 2048) -> Tuple[PublicKey, PrivateKey]:
        """
        Generate and store a new key pair.

        Returns:
            Tuple of (public_key, private_key)
        """
        public_key, private_key = self.cryptosystem.generate_keypair(key_bits)
        self.store_keys(public_key, private_key)
        return public_key, private_key

    def store_keys(self, public_key: PublicKey, private_key: PrivateKey):
        """Persist an existing key pair, replacing whatever is stored"""
        self._public_key = public_key
        self._private_key = private_key
        self._metadata = KeyMetadata(
            fingerprint=self.cryptosystem.key_fingerprint(public_key),
            created_at=datetime.now().isoformat(),
            key_bits=public_key.n.bit_length(),
            purpose="psi_client"
        )
        self._save_to_disk()

    def _save_to_disk(self):
        with open(self.storage_dir / "public_key.json", 'w') as f:
            json.dump({'n': int_to_b64(self._public_key.n)}, f, indent=2)

        secret = json.dumps({
            'p': int_to_b64(self._private_key.p),
            'q': int_to_b64(self._private_key.q)
        }).encode('utf-8')
        with open(self.storage_dir / "private_key.enc", 'wb') as f:
            f.write(self.fernet.encrypt(secret))

        with open(self.storage_dir / "key_metadata.json", 'w') as f:
            json.dump(asdict(self._metadata), f, indent=2)

    def load_keys(self) -> bool:
        """
        Load keys from disk.

        Returns:
            True if keys loaded, False if any key file is missing

        Raises:
            ValueError: Private key cannot be decrypted (wrong passphrase)
        """
        public_path = self.storage_dir / "public_key.json"
        private_path = self.storage_dir / "private_key.enc"
        meta_path = self.storage_dir / "key_metadata.json"

        if not all(p.exists() for p in [public_path, private_path, meta_path]):
            return False

        with open(public_path, 'r') as f:
            public_key = paillier.PaillierPublicKey(b64_to_int(json.load(f)['n']))

        with open(private_path, 'rb') as f:
            try:
                secret = json.loads(self.fernet.decrypt(f.read()).decode('utf-8'))
            except InvalidToken:
                raise ValueError("Cannot decrypt stored private key: wrong passphrase or key file") from None

        with open(meta_path, 'r') as f:
            self._metadata = KeyMetadata(**json.load(f))

        self._public_key = public_key
        self._private_key = paillier.PaillierPrivateKey(
            public_key, b64_to_int(secret['p']), b64_to_int(secret['q'])
        )
        return True

    def get_public_key(self) -> PublicKey:
        if self._public_key is None:
            raise ValueError("No keys loaded. Call generate_keys() or load_keys() first.")
        return self._public_key

    def get_private_key(self) -> PrivateKey:
        if self._private_key is None:
            raise ValueError("No keys loaded. Call generate_keys() or load_keys() first.")
        return self._private_key

    def get_keypair(self) -> Tuple[PublicKey, PrivateKey]:
        return self.get_public_key(), self.get_private_key()

    def get_metadata(self) -> Optional[KeyMetadata]:
        return self._metadata

    def get_key_fingerprint(self) -> Optional[str]:
        if self._metadata:
            return self._metadata.fingerprint
        return None

    def verify_public_key(self, public_key: PublicKey) -> bool:
        """Check a public key matches the stored one"""
        if self._public_key is None:
            return False
        return (self.cryptosystem.key_fingerprint(public_key)
                == self.cryptosystem.key_fingerprint(self._public_key))

    def keys_exist(self) -> bool:
        return (self.storage_dir / "private_key.enc").exists()

    def clear_keys(self):
        """Delete stored keys (for key rotation); the Fernet key material stays"""
        for name in ("public_key.json", "private_key.enc", "key_metadata.json"):
            path = self.storage_dir / name
            if path.exists():
                path.unlink()
        self._public_key = None
        self._private_key = None
        self._metadata = None
