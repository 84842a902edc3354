"""
RWA Compliance Attribute Registry

Stores one VerificationProfile per holder, independent of any asset.

Write access:
- the owner adds and removes verifiers
- the owner and listed verifiers write profiles

Reads are unrestricted. A holder that was never written reads as the
zero-value profile; that is the unverified default, not an error.
"""

import logging
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Set, Union

from .access import Ownable, is_authorized, is_null_identity
from .attributes import VerificationProfile
from .audit import AuditEventType, AuditTrail
from .errors import InvalidHolder, InvalidIdentity, NotAVerifier, Unauthorized
from .logging_config import audit_log

logger = logging.getLogger(__name__)

UNVERIFIED = VerificationProfile()


class AttributeRegistry(Ownable):
    """
    Holder verification profiles plus the verifier set allowed to write them.

    Usage:
        registry = AttributeRegistry(owner="0xowner")
        registry.set_verifier("0xowner", "0xkyc-provider")
        registry.update_profile("0xkyc-provider", "0xholder", {
            "age_over_18": True,
            "kyc_check_passed": True,
            "jurisdiction": "US",
            "last_updated": 1767225600,
        })
        registry.get_profile("0xholder").kyc_check_passed  # True
    """

    def __init__(self, owner: str, audit_trail: Optional[AuditTrail] = None):
        super().__init__(owner, audit_trail)
        self._verifiers: Set[str] = set()
        self._profiles: Dict[str, VerificationProfile] = {}

    # Verifier management

    def set_verifier(self, caller: str, identity: str):
        """Grant verifier rights. Granting an existing verifier is a no-op."""
        with self._lock:
            self._require_owner(caller, "set_verifier")
            if is_null_identity(identity):
                raise InvalidIdentity()
            if identity in self._verifiers:
                return
            self._verifiers.add(identity)
            self.audit_trail.emit(AuditEventType.VERIFIER_ADDED, identity)
        logger.info("Verifier added: %s", identity)

    def remove_verifier(self, caller: str, identity: str):
        with self._lock:
            self._require_owner(caller, "remove_verifier")
            if is_null_identity(identity):
                raise InvalidIdentity()
            if identity not in self._verifiers:
                raise NotAVerifier(identity)
            self._verifiers.discard(identity)
            self.audit_trail.emit(AuditEventType.VERIFIER_REMOVED, identity)
        logger.info("Verifier removed: %s", identity)

    def is_verifier(self, identity: Optional[str]) -> bool:
        """True for listed verifiers and for the owner."""
        with self._lock:
            return is_authorized(identity, self._verifiers, self._owner)

    def verifiers(self) -> FrozenSet[str]:
        """Explicitly listed verifiers (the owner is implicit and not included)."""
        with self._lock:
            return frozenset(self._verifiers)

    # Profiles

    def update_profile(
        self,
        caller: str,
        holder: str,
        profile: Union[VerificationProfile, Mapping[str, Any]]
    ) -> VerificationProfile:
        """
        Replace the holder's whole profile.

        Args:
            caller: Identity performing the write (owner or verifier)
            holder: Holder whose profile is replaced
            profile: A VerificationProfile or a payload mapping of any
                supported schema version

        Raises:
            Unauthorized: caller is neither owner nor verifier
            InvalidHolder: holder is null
            InvalidPayload: payload failed validation
        """
        with self._lock:
            if not is_authorized(caller, self._verifiers, self._owner):
                audit_log.unauthorized_attempt(caller=caller, operation="update_profile", role="verifier")
                raise Unauthorized(caller, "verifier")
            if is_null_identity(holder):
                raise InvalidHolder()
            if not isinstance(profile, VerificationProfile):
                profile = VerificationProfile.from_dict(profile)

            self._profiles[holder] = profile
            self.audit_trail.emit(AuditEventType.PROFILE_UPDATED, holder)
        logger.info("Profile updated for %s by %s", holder, caller)
        return profile

    def get_profile(self, holder: Optional[str]) -> VerificationProfile:
        with self._lock:
            return self._profiles.get(holder, UNVERIFIED)

    def has_profile(self, holder: Optional[str]) -> bool:
        with self._lock:
            return holder in self._profiles

    def is_in_allowed_jurisdictions(self, holder: Optional[str], allowed: Iterable[str]) -> bool:
        """
        Exact, case-sensitive match of the holder's jurisdiction against allowed.

        A holder without a profile is never in an allowed jurisdiction.
        """
        with self._lock:
            profile = self._profiles.get(holder)
        if profile is None:
            return False
        return any(profile.jurisdiction == code for code in allowed)
