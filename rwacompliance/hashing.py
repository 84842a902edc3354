"""
RWA Compliance Hashing

Canonical JSON encoding and SHA-256 helpers used by the audit trail.
All hashes are lowercase hexadecimal with a "sha256:" prefix.
"""

import hashlib
import json
from typing import Any, Optional, Union


def canonicalize(obj: Any) -> bytes:
    """
    Convert an object to canonical JSON bytes.

    Keys sorted lexicographically, no whitespace, UTF-8, arrays in order.
    """
    return json.dumps(
        obj, sort_keys=True, separators=(',', ':'), ensure_ascii=False
    ).encode('utf-8')


def sha256_hash(data: Union[bytes, str]) -> str:
    if isinstance(data, str):
        data = data.encode('utf-8')
    return "sha256:" + hashlib.sha256(data).hexdigest()


def content_hash(obj: Any) -> str:
    return sha256_hash(canonicalize(obj))


def chain_entry_hash(prev_entry_hash: Optional[str], payload_hash: str) -> str:
    """
    Hash linking an entry to its predecessor.

    Args:
        prev_entry_hash: Hash of the previous entry (or None for the first)
        payload_hash: Hash of the current entry body
    """
    data = (prev_entry_hash or "").encode("utf-8") + payload_hash.encode("utf-8")
    return sha256_hash(data)
