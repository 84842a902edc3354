"""
RWA Compliance Attribute Schema

The nine verifiable holder attributes, the profile that records them and
the per-asset requirement set that mirrors them.

The attribute set is a fixed-width record rather than an open map. Adding
an attribute means bumping SCHEMA_VERSION, extending both dataclasses and
the payload models, and registering a migration for the previous version.
The evaluator iterates Attribute, so every flag is always checked.

Versions:
    0 - legacy camelCase layout (ageOver18, govIDVerified, country,
        requireAgeOver18, allowedCountries, ...)
    1 - current snake_case layout
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple, Type

from pydantic import BaseModel, ValidationError

from .errors import InvalidJurisdiction, InvalidPayload, UnsupportedSchemaVersion
from .schemas import ProfilePayload, RequirementPayload


SCHEMA_VERSION = 1


class Attribute(str, Enum):
    """A verifiable holder attribute."""
    AGE_OVER_18 = "age_over_18"
    AGE_OVER_21 = "age_over_21"
    AGE_OVER_55 = "age_over_55"
    GOV_ID_VERIFIED = "gov_id_verified"
    ADDRESS_VERIFIED = "address_verified"
    ACCREDITED_INVESTOR = "accredited_investor"
    TAX_RESIDENCY_VERIFIED = "tax_residency_verified"
    AML_CHECK_PASSED = "aml_check_passed"
    KYC_CHECK_PASSED = "kyc_check_passed"

    @property
    def requirement_field(self) -> str:
        return f"require_{self.value}"


@dataclass(frozen=True)
class VerificationProfile:
    """
    Verified attributes of a single holder.

    The zero value (every flag False, empty jurisdiction, timestamp 0) is
    what an unverified holder reads as.
    """
    age_over_18: bool = False
    age_over_21: bool = False
    age_over_55: bool = False
    gov_id_verified: bool = False
    address_verified: bool = False
    accredited_investor: bool = False
    tax_residency_verified: bool = False
    aml_check_passed: bool = False
    kyc_check_passed: bool = False
    jurisdiction: str = ""
    last_updated: int = 0

    def has(self, attribute: Attribute) -> bool:
        return getattr(self, attribute.value)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["schema_version"] = SCHEMA_VERSION
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'VerificationProfile':
        """Build a profile from a payload of any supported schema version."""
        payload = _validate(ProfilePayload, migrate_payload("profile", data))
        return cls(**payload.model_dump())


@dataclass(frozen=True)
class RequirementSet:
    """
    Attributes and jurisdictions an asset demands of its holders.

    An empty allowed_jurisdictions tuple means no jurisdiction restriction.
    Duplicate codes are collapsed to their first occurrence.
    """
    require_age_over_18: bool = False
    require_age_over_21: bool = False
    require_age_over_55: bool = False
    require_gov_id_verified: bool = False
    require_address_verified: bool = False
    require_accredited_investor: bool = False
    require_tax_residency_verified: bool = False
    require_aml_check_passed: bool = False
    require_kyc_check_passed: bool = False
    allowed_jurisdictions: Tuple[str, ...] = ()

    def __post_init__(self):
        if isinstance(self.allowed_jurisdictions, (str, bytes)):
            raise InvalidJurisdiction(self.allowed_jurisdictions)
        object.__setattr__(
            self, "allowed_jurisdictions", tuple(unique_codes(self.allowed_jurisdictions))
        )

    def requires(self, attribute: Attribute) -> bool:
        return getattr(self, attribute.requirement_field)

    def required_attributes(self) -> List[Attribute]:
        return [a for a in Attribute if self.requires(a)]

    def with_jurisdictions(self, codes: Iterable[str]) -> 'RequirementSet':
        if isinstance(codes, (str, bytes)):
            raise InvalidJurisdiction(codes)
        flags = {a.requirement_field: self.requires(a) for a in Attribute}
        return RequirementSet(allowed_jurisdictions=tuple(codes), **flags)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["allowed_jurisdictions"] = list(self.allowed_jurisdictions)
        d["schema_version"] = SCHEMA_VERSION
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'RequirementSet':
        """Build a requirement set from a payload of any supported schema version."""
        payload = _validate(RequirementPayload, migrate_payload("requirements", data))
        values = payload.model_dump()
        values["allowed_jurisdictions"] = tuple(values["allowed_jurisdictions"])
        return cls(**values)


def unique_codes(codes: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for code in codes:
        if code not in seen:
            seen.add(code)
            result.append(code)
    return result


# Schema migrations

_V0_PROFILE_KEYS = {
    "ageOver18": "age_over_18",
    "ageOver21": "age_over_21",
    "ageOver55": "age_over_55",
    "govIDVerified": "gov_id_verified",
    "addressVerified": "address_verified",
    "accreditedInvestor": "accredited_investor",
    "taxResidencyVerified": "tax_residency_verified",
    "amlCheckPassed": "aml_check_passed",
    "kycCheckPassed": "kyc_check_passed",
    "country": "jurisdiction",
    "lastUpdated": "last_updated",
}

_V0_REQUIREMENT_KEYS = {
    "requireAgeOver18": "require_age_over_18",
    "requireAgeOver21": "require_age_over_21",
    "requireAgeOver55": "require_age_over_55",
    "requireGovIDVerified": "require_gov_id_verified",
    "requireAddressVerified": "require_address_verified",
    "requireAccreditedInvestor": "require_accredited_investor",
    "requireTaxResidencyVerified": "require_tax_residency_verified",
    "requireAmlCheckPassed": "require_aml_check_passed",
    "requireAml": "require_aml_check_passed",
    "requireKycCheckPassed": "require_kyc_check_passed",
    "requireKyc": "require_kyc_check_passed",
    "allowedCountries": "allowed_jurisdictions",
    "allowedJurisdictions": "allowed_jurisdictions",
}


def _rename_keys(mapping: Dict[str, str]) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    def migrate(data: Dict[str, Any]) -> Dict[str, Any]:
        return {mapping.get(k, k): v for k, v in data.items()}
    return migrate


# kind -> from_version -> function upgrading a payload to from_version + 1
MIGRATIONS: Dict[str, Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]]] = {
    "profile": {0: _rename_keys(_V0_PROFILE_KEYS)},
    "requirements": {0: _rename_keys(_V0_REQUIREMENT_KEYS)},
}

_LEGACY_KEYS = {
    "profile": set(_V0_PROFILE_KEYS),
    "requirements": set(_V0_REQUIREMENT_KEYS),
}


def detect_version(kind: str, data: Mapping[str, Any]) -> int:
    """Return the declared schema version, or infer it from the key layout."""
    if "schema_version" in data:
        return data["schema_version"]
    if _LEGACY_KEYS[kind].intersection(data):
        return 0
    return SCHEMA_VERSION


def migrate_payload(kind: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Upgrade a raw payload to the current schema version.

    Raises:
        InvalidPayload: payload is not a mapping
        UnsupportedSchemaVersion: version is unknown or newer than this library
    """
    if not isinstance(data, Mapping):
        raise InvalidPayload(kind, "must be an object")

    version = detect_version(kind, data)
    if isinstance(version, bool) or not isinstance(version, int):
        raise UnsupportedSchemaVersion(version)
    if version < 0 or version > SCHEMA_VERSION:
        raise UnsupportedSchemaVersion(version)

    payload = {k: v for k, v in data.items() if k != "schema_version"}
    steps = MIGRATIONS[kind]
    while version < SCHEMA_VERSION:
        payload = steps[version](payload)
        version += 1
    return payload


def _validate(model: Type[BaseModel], payload: Dict[str, Any]) -> BaseModel:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or model.__name__
        raise InvalidPayload(field, first.get("msg", "invalid value")) from e
