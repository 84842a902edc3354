from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr
from typing import Any, Dict, List


class ProfilePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    age_over_18: StrictBool = False
    age_over_21: StrictBool = False
    age_over_55: StrictBool = False
    gov_id_verified: StrictBool = False
    address_verified: StrictBool = False
    accredited_investor: StrictBool = False
    tax_residency_verified: StrictBool = False
    aml_check_passed: StrictBool = False
    kyc_check_passed: StrictBool = False
    jurisdiction: StrictStr = ""
    last_updated: StrictInt = Field(default=0, ge=0)


class RequirementPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    require_age_over_18: StrictBool = False
    require_age_over_21: StrictBool = False
    require_age_over_55: StrictBool = False
    require_gov_id_verified: StrictBool = False
    require_address_verified: StrictBool = False
    require_accredited_investor: StrictBool = False
    require_tax_residency_verified: StrictBool = False
    require_aml_check_passed: StrictBool = False
    require_kyc_check_passed: StrictBool = False
    allowed_jurisdictions: List[StrictStr] = Field(default_factory=list)


class StateDocument(BaseModel):
    """Snapshot of registry and catalog state consumed by the CLI."""
    model_config = ConfigDict(extra="forbid")

    owner: StrictStr
    verifiers: List[StrictStr] = Field(default_factory=list)
    profiles: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    requirements: Dict[int, Dict[str, Any]] = Field(default_factory=dict)
