"""
RWA Compliance Access Control

A single owner-or-member predicate shared by every role check, and the
Ownable base used by the registry and the catalog.
"""

import logging
import threading
from typing import AbstractSet, Optional

from .audit import AuditEventType, AuditTrail
from .errors import InvalidIdentity, Unauthorized
from .logging_config import audit_log


ZERO_ADDRESS = "0x" + "0" * 40

logger = logging.getLogger(__name__)


def is_null_identity(identity: Optional[str]) -> bool:
    """True for None, the empty string and the all-zero address."""
    if identity is None:
        return True
    if not isinstance(identity, str):
        return True
    stripped = identity.strip()
    return stripped == "" or stripped.lower() == ZERO_ADDRESS


def is_authorized(
    caller: Optional[str],
    members: AbstractSet[str],
    owner: Optional[str]
) -> bool:
    """
    Owner-or-listed-member check.

    The owner is always authorized, whether or not it appears in members.
    A null caller is never authorized.
    """
    if is_null_identity(caller):
        return False
    return caller == owner or caller in members


class Ownable:
    """
    Single distinguished owner with exclusive administrative rights.

    Subclasses mutate state under self._lock so that every call is
    serialized and validated before anything changes.
    """

    def __init__(self, owner: str, audit_trail: Optional[AuditTrail] = None):
        if is_null_identity(owner):
            raise InvalidIdentity("owner")
        self._owner = owner
        self._lock = threading.RLock()
        self.audit_trail = audit_trail if audit_trail is not None else AuditTrail()

    @property
    def owner(self) -> str:
        return self._owner

    def require_owner(self, caller: Optional[str], operation: str):
        with self._lock:
            self._require_owner(caller, operation)

    def _require_owner(self, caller: Optional[str], operation: str):
        if caller != self._owner or is_null_identity(caller):
            audit_log.unauthorized_attempt(caller=caller, operation=operation, role="owner")
            raise Unauthorized(caller, "owner")

    def transfer_ownership(self, caller: str, new_owner: str):
        with self._lock:
            self._require_owner(caller, "transfer_ownership")
            if is_null_identity(new_owner):
                raise InvalidIdentity("new_owner")
            previous = self._owner
            self._owner = new_owner
            self.audit_trail.emit(AuditEventType.OWNERSHIP_TRANSFERRED, new_owner, detail=type(self).__name__)
        logger.info("Ownership of %s moved from %s to %s", type(self).__name__, previous, new_owner)
