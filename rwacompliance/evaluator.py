"""
RWA Compliance Evaluator

Decides whether a holder may receive units of an asset:

    ELIGIBLE(holder, asset) ∈ { TRUE, FALSE }

Every attribute the asset requires must be present on the holder's
profile, and when the asset restricts jurisdictions the holder's
jurisdiction must be on its allow-list. Missing profiles and missing
requirement sets are never errors: an unverified holder simply has no
attributes and an unconfigured asset simply requires nothing.

The evaluator holds no state and caches nothing; every call reads the
registry and catalog as they are at that moment.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .attributes import Attribute
from .catalog import RequirementCatalog
from .logging_config import audit_log
from .registry import AttributeRegistry

logger = logging.getLogger(__name__)

JURISDICTION_CHECK = "jurisdiction"


class CheckResult(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


class FailureCode(str, Enum):
    MISSING = "MISSING"      # required attribute not verified
    MISMATCH = "MISMATCH"    # jurisdiction not on the allow-list


@dataclass
class CheckEvaluation:
    """Result of a single requirement check."""
    check_id: str
    result: CheckResult
    failure_code: Optional[FailureCode] = None
    required: Optional[str] = None
    observed: Optional[str] = None

    def passed(self) -> bool:
        return self.result == CheckResult.PASS

    def to_dict(self) -> Dict[str, Any]:
        d = {"check_id": self.check_id, "result": self.result.value}
        if self.failure_code:
            d["failure_code"] = self.failure_code.value
        if self.required:
            d["required"] = self.required
        if self.observed is not None:
            d["observed"] = self.observed
        return d


@dataclass
class EligibilityReport:
    """Full, non-short-circuit evaluation of a holder against an asset."""
    holder: str
    asset_id: int
    checks: List[CheckEvaluation] = field(default_factory=list)

    @property
    def eligible(self) -> bool:
        return all(c.passed() for c in self.checks)

    def failed_checks(self) -> List[CheckEvaluation]:
        return [c for c in self.checks if not c.passed()]

    def remediation(self) -> List[str]:
        hints = []
        for check in self.failed_checks():
            if check.failure_code == FailureCode.MISSING:
                hints.append(f"Obtain verification of {check.check_id} from an authorized verifier")
            elif check.failure_code == FailureCode.MISMATCH:
                hints.append(f"Holder jurisdiction must be one of: {check.required}")
        return hints

    def to_dict(self) -> Dict[str, Any]:
        return {
            "holder": self.holder,
            "asset_id": self.asset_id,
            "eligible": self.eligible,
            "checks": [c.to_dict() for c in self.checks],
            "remediation": self.remediation(),
        }


class ComplianceEvaluator:
    """
    Read-only decision function over a registry and a catalog.

    Usage:
        evaluator = ComplianceEvaluator(registry, catalog)
        if not evaluator.is_compliant(recipient, asset_id):
            ...  # deny the transfer
    """

    def __init__(self, registry: AttributeRegistry, catalog: RequirementCatalog):
        self.registry = registry
        self.catalog = catalog

    def is_compliant(self, holder: Optional[str], asset_id: int) -> bool:
        """
        Evaluate eligibility, stopping at the first unmet requirement.

        Never raises for an unknown holder or asset.
        """
        requirements = self.catalog.get_requirements(asset_id)
        profile = self.registry.get_profile(holder)

        eligible = True
        for attribute in Attribute:
            if requirements.requires(attribute) and not profile.has(attribute):
                eligible = False
                break
        else:
            if requirements.allowed_jurisdictions:
                eligible = self.registry.is_in_allowed_jurisdictions(
                    holder, requirements.allowed_jurisdictions
                )

        audit_log.compliance_decision(holder, asset_id, eligible)
        return eligible

    def explain(self, holder: Optional[str], asset_id: int) -> EligibilityReport:
        """
        Evaluate every requirement and report each outcome.

        report.eligible always equals is_compliant(holder, asset_id).
        """
        requirements = self.catalog.get_requirements(asset_id)
        profile = self.registry.get_profile(holder)
        report = EligibilityReport(holder=holder, asset_id=asset_id)

        for attribute in requirements.required_attributes():
            if profile.has(attribute):
                report.checks.append(CheckEvaluation(attribute.value, CheckResult.PASS))
            else:
                report.checks.append(CheckEvaluation(
                    attribute.value,
                    CheckResult.FAIL,
                    FailureCode.MISSING,
                    required="verified",
                    observed="not verified",
                ))

        if requirements.allowed_jurisdictions:
            allowed = requirements.allowed_jurisdictions
            if self.registry.is_in_allowed_jurisdictions(holder, allowed):
                report.checks.append(CheckEvaluation(JURISDICTION_CHECK, CheckResult.PASS))
            else:
                report.checks.append(CheckEvaluation(
                    JURISDICTION_CHECK,
                    CheckResult.FAIL,
                    FailureCode.MISMATCH,
                    required=", ".join(allowed),
                    observed=profile.jurisdiction,
                ))

        logger.debug(
            "Explained eligibility of %s for asset %s: %d of %d checks failed",
            holder, asset_id, len(report.failed_checks()), len(report.checks)
        )
        return report

    def eligible_assets(self, holder: Optional[str], asset_ids: Iterable[int]) -> List[int]:
        """Asset ids, in input order, that holder may currently receive."""
        return [asset_id for asset_id in asset_ids if self.is_compliant(holder, asset_id)]
