#!/usr/bin/env python3
"""
RWA Compliance Command Line Interface

Usage:
    rwac check --state <file> --holder <id> --asset <id>
    rwac explain --state <file> --holder <id> --asset <id>
    rwac keygen --output <file>
    rwac verify-audit --log <file> [--public-key <b64>]
    rwac demo
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, Tuple

from pydantic import ValidationError

from . import config
from .logging_config import audit_log, configure_logging

logger = logging.getLogger(__name__)


def load_json(path: str) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json(data: Any, path: str):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def build_state(document: Dict[str, Any]) -> Tuple[Any, Any, Any]:
    """
    Build a registry, catalog and evaluator from a state document.

    The document's owner owns both the registry and the catalog and
    performs every write.
    """
    from .catalog import RequirementCatalog
    from .errors import InvalidPayload
    from .evaluator import ComplianceEvaluator
    from .registry import AttributeRegistry
    from .schemas import StateDocument

    try:
        state = StateDocument.model_validate(document)
    except ValidationError as e:
        first = e.errors()[0]
        raise InvalidPayload(".".join(str(p) for p in first["loc"]) or "state", first["msg"]) from e

    registry = AttributeRegistry(owner=state.owner)
    catalog = RequirementCatalog(owner=state.owner, audit_trail=registry.audit_trail)

    for verifier in state.verifiers:
        registry.set_verifier(state.owner, verifier)
    for holder, profile in state.profiles.items():
        registry.update_profile(state.owner, holder, profile)
    for asset_id, requirements in state.requirements.items():
        catalog.set_requirements(state.owner, asset_id, requirements)

    return registry, catalog, ComplianceEvaluator(registry, catalog)


def load_evaluator(path: str):
    """Build an evaluator from a state file, or print the error and return None."""
    from .errors import ComplianceError

    try:
        _, _, evaluator = build_state(load_json(path))
    except ComplianceError as e:
        print(f"Error: invalid state document: {e}", file=sys.stderr)
        return None
    except (OSError, ValueError) as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return None
    return evaluator


def cmd_check(args) -> int:
    """Print the eligibility verdict for a holder and asset."""
    evaluator = load_evaluator(args.state)
    if evaluator is None:
        return 1

    if evaluator.is_compliant(args.holder, args.asset):
        print(f"✓ {args.holder} is eligible for asset {args.asset}")
        return 0
    print(f"✗ {args.holder} is NOT eligible for asset {args.asset}")
    return 1


def cmd_explain(args) -> int:
    evaluator = load_evaluator(args.state)
    if evaluator is None:
        return 1
    report = evaluator.explain(args.holder, args.asset)

    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.eligible else 1


def cmd_keygen(args) -> int:
    """Generate an Ed25519 audit signing key."""
    from .signing import AuditSigner

    signer = AuditSigner.generate(args.key_id)

    if args.output:
        save_json(signer.to_dict(), args.output)
        print(f"Signing key saved to: {args.output}", file=sys.stderr)
    else:
        print(json.dumps(signer.to_dict(), indent=2))

    print(f"public_key: {signer.public_key_b64}", file=sys.stderr)
    return 0


def cmd_verify_audit(args) -> int:
    """Verify an exported audit trail."""
    from .audit import verify_chain

    entries = load_json(args.log)
    result = verify_chain(entries, args.public_key, expected_prev_hash=args.prev_hash)

    if result.valid:
        print(f"✓ VALID ({result.checked} entries)")
        return 0
    audit_log.security_event(
        "audit_chain_invalid",
        severity="high",
        sequence=result.failed_sequence,
        reason=result.reason,
    )
    print(f"✗ INVALID at sequence {result.failed_sequence}: {result.reason}")
    return 1


def cmd_demo(args) -> int:
    """Run the two-asset onboarding scenario."""
    from .assets import AssetRegistry
    from .audit import AuditTrail
    from .catalog import RequirementCatalog
    from .errors import TransferDenied
    from .evaluator import ComplianceEvaluator
    from .gate import TransferGate
    from .registry import AttributeRegistry
    from .signing import AuditSigner

    owner = "0x00000000000000000000000000000000000000a1"
    verifier = "0x00000000000000000000000000000000000000b2"
    investor = "0x00000000000000000000000000000000000000c3"

    if config.signing_key_configured():
        signer = AuditSigner.load(config.AUDIT_SIGNING_KEY_PATH)
    elif config.is_production():
        print("Error: RWAC_AUDIT_SIGNING_KEY_PATH must point to a key file in production", file=sys.stderr)
        return 1
    else:
        signer = AuditSigner.generate()
    trail = AuditTrail(signer=signer, max_events=config.AUDIT_MAX_EVENTS)

    registry = AttributeRegistry(owner=owner, audit_trail=trail)
    catalog = RequirementCatalog(owner=owner, audit_trail=trail)
    evaluator = ComplianceEvaluator(registry, catalog)
    assets = AssetRegistry(catalog, gate=TransferGate(evaluator))

    print("=" * 60)
    print("RWA Compliance Demonstration")
    print("=" * 60)

    registry.set_verifier(owner, verifier)
    registry.update_profile(verifier, investor, {
        "age_over_18": True,
        "age_over_21": False,
        "gov_id_verified": True,
        "address_verified": True,
        "accredited_investor": True,
        "tax_residency_verified": True,
        "aml_check_passed": True,
        "kyc_check_passed": True,
        "jurisdiction": "US",
        "last_updated": 1767225600,
    })

    real_estate = assets.create_asset(
        owner, "Premium Real Estate Token", "PRET",
        requirements={
            "require_age_over_18": True,
            "require_gov_id_verified": True,
            "require_address_verified": True,
            "require_accredited_investor": True,
            "require_tax_residency_verified": True,
            "require_aml_check_passed": True,
            "require_kyc_check_passed": True,
        },
        asset_type="Real Estate",
    )
    for code in ("US", "CA", "GB"):
        catalog.add_allowed_jurisdiction(owner, real_estate.asset_id, code)

    winery = assets.create_asset(
        owner, "Winery Investment Token", "WINE",
        requirements={
            "require_age_over_18": True,
            "require_age_over_21": True,
            "require_gov_id_verified": True,
            "require_address_verified": True,
            "require_tax_residency_verified": True,
            "require_aml_check_passed": True,
            "require_kyc_check_passed": True,
            "allowed_jurisdictions": ["US"],
        },
        asset_type="Business",
    )

    for record in (real_estate, winery):
        print("\n" + "-" * 60)
        print(f"Asset {record.asset_id}: {record.name} ({record.symbol})")
        print("-" * 60)
        try:
            assets.ledger(record.asset_id).mint(owner, investor, 1000)
            print(f"Minted 1000 units to {investor}")
        except TransferDenied as e:
            print(f"Mint denied: {e.message}")
            for hint in e.report.remediation():
                print(f"  - {hint}")

    verification = trail.verify()
    print("\n" + "=" * 60)
    print(f"Audit trail: {len(trail)} events, chain {'valid' if verification.valid else 'INVALID'}")
    print("=" * 60)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="rwac",
        description="RWA Compliance CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rwac demo                                    Run demonstration
  rwac check -s state.json -H 0xholder -a 2
  rwac explain -s state.json -H 0xholder -a 2
  rwac keygen -o audit_key.json
  rwac verify-audit -l audit.json -p <public key>
        """
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Log level")
    parser.add_argument("--log-format", choices=["json", "text"], default=config.LOG_FORMAT)

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    for name, help_text in (("check", "Check eligibility"), ("explain", "Explain eligibility")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("-s", "--state", required=True, help="State document JSON file")
        sub.add_argument("-H", "--holder", required=True, help="Holder identity")
        sub.add_argument("-a", "--asset", required=True, type=int, help="Asset id")

    keygen_parser = subparsers.add_parser("keygen", help="Generate audit signing key")
    keygen_parser.add_argument("-o", "--output", help="Output file for the key")
    keygen_parser.add_argument("-k", "--key-id", help="Key identifier")

    verify_parser = subparsers.add_parser("verify-audit", help="Verify an exported audit trail")
    verify_parser.add_argument("-l", "--log", required=True, help="Audit trail JSON file")
    verify_parser.add_argument("-p", "--public-key", help="Base64 Ed25519 public key")
    verify_parser.add_argument(
        "--prev-hash",
        help="Entry hash preceding the first exported entry (trails truncated by RWAC_AUDIT_MAX_EVENTS)"
    )

    subparsers.add_parser("demo", help="Run demonstration")

    args = parser.parse_args(argv)
    configure_logging(
        level="DEBUG" if config.is_debug() else args.log_level,
        json_format=args.log_format == "json",
        log_file=config.LOG_FILE or None,
    )

    commands = {
        "check": cmd_check,
        "explain": cmd_explain,
        "keygen": cmd_keygen,
        "verify-audit": cmd_verify_audit,
        "demo": cmd_demo,
    }
    if args.command not in commands:
        parser.print_help()
        return 2
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
