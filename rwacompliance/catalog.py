"""
RWA Compliance Requirement Catalog

One RequirementSet per asset id. Only the catalog owner configures
requirements; reads are unrestricted and an unconfigured asset reads as
the zero-value set (no requirements, no jurisdiction restriction).

Jurisdiction removal swaps the removed entry with the last one and
shrinks the list, so the order of the remaining codes is not preserved.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .access import Ownable
from .attributes import Attribute, RequirementSet
from .audit import AuditEventType, AuditTrail
from .errors import InvalidJurisdiction

logger = logging.getLogger(__name__)

NO_REQUIREMENTS = RequirementSet()


def validate_jurisdiction(code: Any) -> str:
    if not isinstance(code, str) or not code.strip():
        raise InvalidJurisdiction(code)
    return code


def _asset_order(asset_id: Any):
    # integer ids numerically, then any other identifiers by their text
    if isinstance(asset_id, int):
        return (0, asset_id, "")
    return (1, 0, str(asset_id))


class _Entry:
    """Mutable storage for one asset: attribute flags plus the allow-list."""

    __slots__ = ("flags", "jurisdictions")

    def __init__(self, requirements: RequirementSet):
        self.flags = {a: requirements.requires(a) for a in Attribute}
        self.jurisdictions: List[str] = list(requirements.allowed_jurisdictions)

    def snapshot(self) -> RequirementSet:
        return RequirementSet(
            allowed_jurisdictions=tuple(self.jurisdictions),
            **{a.requirement_field: flag for a, flag in self.flags.items()}
        )


class RequirementCatalog(Ownable):
    """
    Per-asset eligibility requirements.

    Usage:
        catalog = RequirementCatalog(owner="0xadmin")
        catalog.set_requirements("0xadmin", 2, {
            "require_age_over_21": True,
            "require_kyc_check_passed": True,
            "allowed_jurisdictions": ["US"],
        })
        catalog.add_allowed_jurisdiction("0xadmin", 2, "CA")
    """

    def __init__(self, owner: str, audit_trail: Optional[AuditTrail] = None):
        super().__init__(owner, audit_trail)
        self._entries: Dict[int, _Entry] = {}

    def set_requirements(
        self,
        caller: str,
        asset_id: int,
        requirements: Union[RequirementSet, Mapping[str, Any]]
    ) -> RequirementSet:
        """
        Replace the asset's requirement set, including its allow-list.

        Any asset id is accepted, so requirements may be configured before
        or after the asset itself is created.
        """
        with self._lock:
            self._require_owner(caller, "set_requirements")
            if not isinstance(requirements, RequirementSet):
                requirements = RequirementSet.from_dict(requirements)
            for code in requirements.allowed_jurisdictions:
                validate_jurisdiction(code)

            entry = _Entry(requirements)
            self._entries[asset_id] = entry
            self.audit_trail.emit(AuditEventType.REQUIREMENTS_SET, asset_id)
            result = entry.snapshot()
        logger.info(
            "Requirements set for asset %s: %d attributes, %d jurisdictions",
            asset_id, len(result.required_attributes()), len(result.allowed_jurisdictions)
        )
        return result

    def add_allowed_jurisdiction(self, caller: str, asset_id: int, code: str) -> bool:
        """
        Append code to the asset's allow-list.

        Returns True when the code was appended, False when it was already
        present (no event is emitted in that case).
        """
        with self._lock:
            self._require_owner(caller, "add_allowed_jurisdiction")
            validate_jurisdiction(code)
            entry = self._entries.get(asset_id)
            if entry is None:
                entry = _Entry(NO_REQUIREMENTS)
            if code in entry.jurisdictions:
                return False
            entry.jurisdictions.append(code)
            self._entries[asset_id] = entry
            self.audit_trail.emit(AuditEventType.JURISDICTION_ADDED, asset_id, detail=code)
        logger.info("Jurisdiction %s allowed for asset %s", code, asset_id)
        return True

    def remove_allowed_jurisdiction(self, caller: str, asset_id: int, code: str) -> bool:
        """
        Remove code from the asset's allow-list by swap-with-last.

        Returns True when the code was removed, False when it was absent.
        """
        with self._lock:
            self._require_owner(caller, "remove_allowed_jurisdiction")
            entry = self._entries.get(asset_id)
            if entry is None:
                return False
            codes = entry.jurisdictions
            try:
                index = codes.index(code)
            except ValueError:
                return False
            codes[index] = codes[-1]
            codes.pop()
            self.audit_trail.emit(AuditEventType.JURISDICTION_REMOVED, asset_id, detail=code)
        logger.info("Jurisdiction %s removed for asset %s", code, asset_id)
        return True

    def get_requirements(self, asset_id: int) -> RequirementSet:
        with self._lock:
            entry = self._entries.get(asset_id)
            if entry is None:
                return NO_REQUIREMENTS
            return entry.snapshot()

    def configured_assets(self) -> List[int]:
        with self._lock:
            return sorted(self._entries, key=_asset_order)
