"""
RWA Compliance Audit Trail

Append-only, hash-chained record of every state-changing compliance
operation. Each event names only the affected key (an identity or an
asset id); payloads are never recorded.

When an AuditSigner is supplied every entry is signed with Ed25519, and
verify() checks both the chain links and the signatures.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .hashing import chain_entry_hash, content_hash
from .logging_config import audit_log
from .signing import AuditSigner, verify_signature


class AuditEventType(str, Enum):
    VERIFIER_ADDED = "VERIFIER_ADDED"
    VERIFIER_REMOVED = "VERIFIER_REMOVED"
    PROFILE_UPDATED = "PROFILE_UPDATED"
    REQUIREMENTS_SET = "REQUIREMENTS_SET"
    JURISDICTION_ADDED = "JURISDICTION_ADDED"
    JURISDICTION_REMOVED = "JURISDICTION_REMOVED"
    OWNERSHIP_TRANSFERRED = "OWNERSHIP_TRANSFERRED"
    ASSET_CREATED = "ASSET_CREATED"


@dataclass(frozen=True)
class AuditEvent:
    """A single entry of the audit trail."""
    sequence: int
    event_type: AuditEventType
    key: str
    emitted_at: str
    prev_hash: Optional[str]
    entry_hash: str
    detail: Optional[str] = None
    signature: Optional[Dict[str, str]] = None

    def body(self) -> Dict[str, Any]:
        """The hashed and signed portion of the entry."""
        d = {
            "sequence": self.sequence,
            "event_type": self.event_type.value,
            "key": self.key,
            "emitted_at": self.emitted_at,
        }
        if self.detail is not None:
            d["detail"] = self.detail
        return d

    def to_dict(self) -> Dict[str, Any]:
        d = self.body()
        d["prev_hash"] = self.prev_hash
        d["entry_hash"] = self.entry_hash
        if self.signature:
            d["signature"] = self.signature
        return d


@dataclass
class ChainVerification:
    valid: bool
    checked: int
    failed_sequence: Optional[int] = None
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditTrail:
    """
    Tamper-evident event log shared by the registry, catalog and asset registry.

    Usage:
        trail = AuditTrail(signer=AuditSigner.generate())
        registry = AttributeRegistry(owner="0xowner", audit_trail=trail)
        ...
        assert trail.verify()
    """

    def __init__(
        self,
        signer: Optional[AuditSigner] = None,
        max_events: int = 0,
        clock: Callable[[], datetime] = _utc_now
    ):
        self.signer = signer
        self._max_events = max_events
        self._clock = clock
        self._events: List[AuditEvent] = []
        self._sequence = 0
        self._head: Optional[str] = None
        self._anchor: Optional[str] = None  # entry hash preceding the first retained event
        self._lock = threading.Lock()

    def emit(self, event_type: AuditEventType, key: Any, detail: Optional[str] = None) -> AuditEvent:
        with self._lock:
            self._sequence += 1
            emitted_at = self._clock().isoformat().replace("+00:00", "Z")
            draft = AuditEvent(
                sequence=self._sequence,
                event_type=AuditEventType(event_type),
                key=str(key),
                emitted_at=emitted_at,
                prev_hash=self._head,
                entry_hash="",
                detail=detail,
            )
            entry_hash = chain_entry_hash(self._head, content_hash(draft.body()))
            signature = None
            if self.signer is not None:
                signature = self.signer.sign(entry_hash.encode("utf-8"))
            event = AuditEvent(
                sequence=draft.sequence,
                event_type=draft.event_type,
                key=draft.key,
                emitted_at=draft.emitted_at,
                prev_hash=draft.prev_hash,
                entry_hash=entry_hash,
                detail=detail,
                signature=signature,
            )
            self._events.append(event)
            self._head = entry_hash
            if self._max_events and len(self._events) > self._max_events:
                dropped = len(self._events) - self._max_events
                self._anchor = self._events[dropped - 1].entry_hash
                self._events = self._events[dropped:]

        audit_log.audit_event(event.event_type.value, event.key, event.sequence, entry_hash)
        return event

    def events(
        self,
        event_type: Optional[AuditEventType] = None,
        key: Optional[Any] = None
    ) -> List[AuditEvent]:
        with self._lock:
            records = self._events[:]
        if event_type:
            records = [e for e in records if e.event_type == event_type]
        if key is not None:
            records = [e for e in records if e.key == str(key)]
        return records

    @property
    def head_hash(self) -> Optional[str]:
        return self._head

    @property
    def anchor_hash(self) -> Optional[str]:
        """Entry hash preceding the first retained event, None until events are dropped."""
        return self._anchor

    def __len__(self) -> int:
        return len(self._events)

    def export(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.events()]

    def verify(self, public_key_b64: Optional[str] = None) -> ChainVerification:
        """
        Re-walk the retained chain.

        Signatures are checked against public_key_b64, or against the
        trail's own signer when no key is given.
        """
        if public_key_b64 is None and self.signer is not None:
            public_key_b64 = self.signer.public_key_b64
        with self._lock:
            entries = [e.to_dict() for e in self._events]
            anchor = self._anchor
        return verify_chain(entries, public_key_b64, expected_prev_hash=anchor)


def verify_chain(
    entries: List[Dict[str, Any]],
    public_key_b64: Optional[str] = None,
    expected_prev_hash: Optional[str] = None
) -> ChainVerification:
    """
    Verify exported audit entries (as produced by AuditTrail.export).

    The walk starts at the genesis entry: sequence 1 with no predecessor.
    A trail truncated by max_events starts later; pass the entry hash
    preceding its first retained entry as expected_prev_hash.
    """
    prev = expected_prev_hash
    next_sequence = 1 if expected_prev_hash is None else None
    for index, entry in enumerate(entries):
        sequence = entry.get("sequence")
        if isinstance(sequence, bool) or not isinstance(sequence, int):
            return ChainVerification(False, index, sequence, "bad sequence")
        if next_sequence is not None and sequence != next_sequence:
            return ChainVerification(False, index, sequence, "sequence gap")
        if entry.get("prev_hash") != prev:
            return ChainVerification(False, index, sequence, "broken link")

        body = {k: entry[k] for k in ("sequence", "event_type", "key", "emitted_at", "detail") if k in entry}
        expected = chain_entry_hash(prev, content_hash(body))
        if entry.get("entry_hash") != expected:
            return ChainVerification(False, index, sequence, "entry hash mismatch")

        if public_key_b64 is not None:
            signature = entry.get("signature") or {}
            if not verify_signature(expected.encode("utf-8"), signature.get("sig", ""), public_key_b64):
                return ChainVerification(False, index, sequence, "bad signature")

        prev = expected
        next_sequence = sequence + 1

    return ChainVerification(True, len(entries))
