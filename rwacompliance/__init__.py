"""
RWA Compliance

Per-asset eligibility rules for transfers of tokenized real-world assets.

The library evaluates a single Boolean predicate:
    ELIGIBLE(holder, asset) ∈ { TRUE, FALSE }

Components:
- AttributeRegistry: one verification profile per holder, written only
  by the owner or listed verifiers
- RequirementCatalog: one requirement set per asset (attribute flags
  plus a jurisdiction allow-list)
- ComplianceEvaluator: pure decision function over both
- TransferGate: the check every credit of units must pass

Usage:
    from rwacompliance import (
        AttributeRegistry,
        RequirementCatalog,
        ComplianceEvaluator,
        TransferGate,
    )

    registry = AttributeRegistry(owner="0xowner")
    catalog = RequirementCatalog(owner="0xowner", audit_trail=registry.audit_trail)
    evaluator = ComplianceEvaluator(registry, catalog)

    registry.set_verifier("0xowner", "0xverifier")
    registry.update_profile("0xverifier", "0xholder", {
        "age_over_21": True,
        "kyc_check_passed": True,
        "aml_check_passed": True,
        "jurisdiction": "US",
    })
    catalog.set_requirements("0xowner", 2, {
        "require_age_over_21": True,
        "require_kyc_check_passed": True,
        "require_aml_check_passed": True,
        "allowed_jurisdictions": ["US"],
    })

    evaluator.is_compliant("0xholder", 2)  # True
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Errors
from .errors import (
    ComplianceError,
    Unauthorized,
    InvalidIdentity,
    InvalidHolder,
    NotAVerifier,
    InvalidJurisdiction,
    InvalidPayload,
    UnsupportedSchemaVersion,
    UnknownAsset,
    TransferDenied,
    InsufficientBalance,
)

# Attribute schema
from .attributes import (
    Attribute,
    VerificationProfile,
    RequirementSet,
    SCHEMA_VERSION,
    migrate_payload,
)

# Access control
from .access import (
    ZERO_ADDRESS,
    Ownable,
    is_authorized,
    is_null_identity,
)

# Audit trail
from .audit import (
    AuditTrail,
    AuditEvent,
    AuditEventType,
    ChainVerification,
    verify_chain,
)
from .signing import AuditSigner, verify_signature

# Core components
from .registry import AttributeRegistry
from .catalog import RequirementCatalog
from .evaluator import (
    ComplianceEvaluator,
    EligibilityReport,
    CheckEvaluation,
    CheckResult,
    FailureCode,
)
from .gate import TransferGate

# Collaborators
from .assets import AssetRegistry, AssetRecord, UnitLedger

# Logging
from .logging_config import configure_logging, AuditLogger


__all__ = [
    # Version
    "__version__",

    # Errors
    "ComplianceError",
    "Unauthorized",
    "InvalidIdentity",
    "InvalidHolder",
    "NotAVerifier",
    "InvalidJurisdiction",
    "InvalidPayload",
    "UnsupportedSchemaVersion",
    "UnknownAsset",
    "TransferDenied",
    "InsufficientBalance",

    # Attribute schema
    "Attribute",
    "VerificationProfile",
    "RequirementSet",
    "SCHEMA_VERSION",
    "migrate_payload",

    # Access control
    "ZERO_ADDRESS",
    "Ownable",
    "is_authorized",
    "is_null_identity",

    # Audit
    "AuditTrail",
    "AuditEvent",
    "AuditEventType",
    "ChainVerification",
    "verify_chain",
    "AuditSigner",
    "verify_signature",

    # Core
    "AttributeRegistry",
    "RequirementCatalog",
    "ComplianceEvaluator",
    "EligibilityReport",
    "CheckEvaluation",
    "CheckResult",
    "FailureCode",
    "TransferGate",

    # Collaborators
    "AssetRegistry",
    "AssetRecord",
    "UnitLedger",

    # Logging
    "configure_logging",
    "AuditLogger",
]
