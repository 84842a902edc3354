"""
RWA Compliance Audit Signing

Ed25519 (RFC 8032) signatures over audit trail entries.
"""

import base64
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey


ALGORITHM = "Ed25519"


@dataclass
class AuditSigner:
    """Signs audit entries with a single Ed25519 key."""
    key_id: str
    signing_key: SigningKey

    @classmethod
    def generate(cls, key_id: str = None) -> 'AuditSigner':
        key_id = key_id or f"kid:rwac-audit-{datetime.now(timezone.utc).strftime('%Y%m%d')}-001"
        return cls(key_id=key_id, signing_key=SigningKey.generate())

    @property
    def public_key_b64(self) -> str:
        return base64.b64encode(bytes(self.signing_key.verify_key)).decode('utf-8')

    def sign(self, data: bytes) -> Dict[str, Any]:
        signature = self.signing_key.sign(data).signature
        return {
            "key_id": self.key_id,
            "algorithm": ALGORITHM,
            "sig": base64.b64encode(signature).decode('utf-8')
        }

    def to_dict(self) -> Dict[str, Any]:
        """Key file contents. Contains the private key."""
        return {
            "key_id": self.key_id,
            "algorithm": ALGORITHM,
            "private_key": base64.b64encode(bytes(self.signing_key)).decode('utf-8'),
            "public_key": self.public_key_b64,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditSigner':
        seed = base64.b64decode(data["private_key"])
        return cls(key_id=data["key_id"], signing_key=SigningKey(seed))

    def save(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> 'AuditSigner':
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


def verify_signature(data: bytes, signature_b64: str, public_key_b64: str) -> bool:
    """Verify an Ed25519 signature. Malformed input verifies as False."""
    try:
        signature = base64.b64decode(signature_b64)
        verify_key = VerifyKey(base64.b64decode(public_key_b64))
        verify_key.verify(data, signature)
        return True
    except (BadSignatureError, ValueError, TypeError):
        return False
